"""Runtime validators for instruction payloads."""

from __future__ import annotations

import inspect
import math
from typing import Any


def _type_name(value: object) -> str:
    return type(value).__name__


def is_task_like(value: object) -> bool:
    """Check if value is a generator, a Program, or a generator function."""
    from taskfx.program import Program

    if isinstance(value, Program) or inspect.isgenerator(value):
        return True
    return inspect.isgeneratorfunction(value)


def ensure_task_like(value: object, *, name: str) -> None:
    if not is_task_like(value):
        raise TypeError(
            f"{name} must be a generator, Program or generator function, got {_type_name(value)}"
        )


def ensure_duration(value: Any, *, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise TypeError(f"{name} must be float, got {_type_name(value)}")
    coerced = float(value)
    if math.isnan(coerced) or math.isinf(coerced):
        raise ValueError(f"{name} must be finite, got {value!r}")
    if coerced < 0:
        raise ValueError(f"{name} must be non-negative, got {value!r}")
    return coerced


__all__ = [
    "ensure_duration",
    "ensure_task_like",
    "is_task_like",
]
