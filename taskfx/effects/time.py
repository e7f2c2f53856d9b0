"""Timed suspension.

``sleep`` is the only timed suspension the runtime offers. Its behaviour
depends on the scheduler clock:

- real clock: the task wakes once the monotonic clock passed the deadline.
- virtual clock: when nothing else is ready the clock jumps straight to the
  earliest deadline, so simulations finish instantly and deterministically.

Usage:
    def heartbeat():
        while True:
            yield sleep(5.0)
            yield send("tick")
"""

from __future__ import annotations

from dataclasses import dataclass

from ._validators import ensure_duration
from .base import EffectBase, create_effect_with_trace


@dataclass(frozen=True)
class SleepEffect(EffectBase):
    """Suspend for at least ``seconds`` of scheduler time.

    Args:
        seconds: Duration to wait in seconds. Must be finite and non-negative.
    """

    tag = "sleep"

    seconds: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "seconds", ensure_duration(self.seconds, name="seconds"))


def sleep(seconds: float) -> SleepEffect:
    """Wait for a specified duration.

    Example:
        def task():
            yield sleep(0.5)
            return "done"
    """
    return create_effect_with_trace(SleepEffect(seconds=seconds))


def Sleep(seconds: float) -> SleepEffect:
    return create_effect_with_trace(SleepEffect(seconds=seconds))


__all__ = [
    "Sleep",
    "SleepEffect",
    "sleep",
]
