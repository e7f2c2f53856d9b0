"""Waiting on values and pending computations."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any

from .base import EffectBase, create_effect_with_trace


def normalize_source(source: Any) -> Any:
    """Replace a task handle by the promise of its terminal result."""
    from taskfx.task import TaskHandle

    if isinstance(source, TaskHandle):
        return source.result
    return source


def is_pending(source: Any) -> bool:
    """Return ``True`` when ``source`` must be resolved by the scheduler.

    Promises (even already settled ones) and asyncio awaitables are pending
    computations; every other value is an immediately available result.
    """
    from taskfx.promise import Promise

    return isinstance(source, Promise) or inspect.isawaitable(source)


@dataclass(frozen=True)
class WaitEffect(EffectBase):
    """Resume with ``source``, or with what it settles to when pending."""

    tag = "wait"

    source: Any

    @property
    def pending(self) -> bool:
        return is_pending(self.source)


def wait(source: Any) -> WaitEffect:
    return create_effect_with_trace(WaitEffect(source=normalize_source(source)))


def Wait(source: Any) -> WaitEffect:
    return create_effect_with_trace(WaitEffect(source=normalize_source(source)))


__all__ = [
    "Wait",
    "WaitEffect",
    "is_pending",
    "normalize_source",
    "wait",
]
