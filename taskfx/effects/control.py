"""Instructions interpreted by whoever owns the driver."""

from __future__ import annotations

from dataclasses import dataclass

from .base import EffectBase, create_effect_with_trace


@dataclass(frozen=True)
class SelfEffect(EffectBase):
    """Resume synchronously with the caller's own task handle."""

    tag = "self"


@dataclass(frozen=True)
class SuspendEffect(EffectBase):
    """Park the caller until a holder of its handle resumes it.

    Nothing inside the runtime ever wakes a suspended task; call
    ``handle.resume(value)`` or ``handle.throw(error)`` from outside.
    """

    tag = "suspend"


def self_() -> SelfEffect:
    return create_effect_with_trace(SelfEffect())


def Self() -> SelfEffect:
    return create_effect_with_trace(SelfEffect())


def suspend() -> SuspendEffect:
    return create_effect_with_trace(SuspendEffect())


def Suspend() -> SuspendEffect:
    return create_effect_with_trace(SuspendEffect())


__all__ = [
    "Self",
    "SelfEffect",
    "Suspend",
    "SuspendEffect",
    "self_",
    "suspend",
]
