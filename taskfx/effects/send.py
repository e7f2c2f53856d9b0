"""Mailbox messaging."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .base import EffectBase, create_effect_with_trace


@dataclass(frozen=True)
class SendEffect(EffectBase):
    """Append ``message`` to the root invocation's mailbox."""

    tag = "send"

    message: Any


def send(message: Any) -> SendEffect:
    return create_effect_with_trace(SendEffect(message=message))


def Send(message: Any) -> SendEffect:
    return create_effect_with_trace(SendEffect(message=message))


__all__ = [
    "Send",
    "SendEffect",
    "send",
]
