"""Clocks backing ``sleep`` deadlines."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass


def _coerce_finite_float(value: float, *, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise TypeError(f"{name} must be float, got {type(value).__name__}")
    coerced = float(value)
    if math.isnan(coerced) or math.isinf(coerced):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return coerced


@dataclass
class VirtualClock:
    """Simulated time that only moves when the scheduler advances it."""

    _mut_current_time: float = 0.0
    virtual = True

    def __post_init__(self) -> None:
        self._mut_current_time = _coerce_finite_float(
            self._mut_current_time,
            name="current_time",
        )

    def now(self) -> float:
        return self._mut_current_time

    def advance_to(self, target_time: float) -> float:
        target = _coerce_finite_float(target_time, name="target_time")
        if target > self._mut_current_time:
            self._mut_current_time = target
        return self._mut_current_time


class RealClock:
    """Monotonic wall-clock time in seconds."""

    virtual = False

    def now(self) -> float:
        return time.monotonic()


def make_clock(kind: str, *, start_time: float = 0.0) -> VirtualClock | RealClock:
    if kind == "virtual":
        return VirtualClock(start_time)
    if kind == "real":
        return RealClock()
    raise ValueError(f"clock must be 'real' or 'virtual', got {kind!r}")


__all__ = [
    "RealClock",
    "VirtualClock",
    "make_clock",
]
