"""
Runtime configuration.

``RuntimeConfig`` is validated by beartype at construction, so a typo such as
``RuntimeConfig(clock="simulated")`` fails at the call site. Configuration
can also be read from ``TASKFX_*`` environment variables.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, Literal

from beartype import beartype

from taskfx.errors import ConfigError

ClockKind = Literal["real", "virtual"]

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _parse_bool(raw: str, *, name: str) -> bool:
    normalized = raw.strip().lower()
    if normalized in _TRUE:
        return True
    if normalized in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean flag, got {raw!r}")


def _parse_float(raw: str, *, name: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc


def _parse_steps(raw: str, *, name: str) -> int | None:
    normalized = raw.strip().lower()
    if normalized in ("", "none", "0"):
        return None
    try:
        value = int(normalized)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ConfigError(f"{name} must be non-negative, got {raw!r}")
    return value


@beartype
@dataclass(frozen=True)
class RuntimeConfig:
    """
    Settings for one root invocation.

    Attributes:
        clock: ``"real"`` sleeps on the monotonic clock; ``"virtual"`` jumps
            to the next deadline whenever no task is ready.
        start_time: Initial virtual time in seconds (ignored by the real clock).
        max_steps: Upper bound on driver advances per root invocation, or
            ``None`` for no bound.
        warn_unjoined: Log a warning at teardown for spawned tasks that were
            never joined. Failures nobody joined or waited on are logged
            either way.
    """

    clock: ClockKind = "real"
    start_time: float | int = 0.0
    max_steps: int | None = None
    warn_unjoined: bool = True

    def __post_init__(self) -> None:
        if self.max_steps is not None and self.max_steps <= 0:
            raise ConfigError(f"max_steps must be positive, got {self.max_steps}")

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> RuntimeConfig:
        """Build a config from ``TASKFX_*`` variables, then apply overrides."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        if "TASKFX_CLOCK" in env:
            clock = env["TASKFX_CLOCK"].strip().lower()
            if clock not in ("real", "virtual"):
                raise ConfigError(f"TASKFX_CLOCK must be 'real' or 'virtual', got {clock!r}")
            values["clock"] = clock
        if "TASKFX_START_TIME" in env:
            values["start_time"] = _parse_float(env["TASKFX_START_TIME"], name="TASKFX_START_TIME")
        if "TASKFX_MAX_STEPS" in env:
            values["max_steps"] = _parse_steps(env["TASKFX_MAX_STEPS"], name="TASKFX_MAX_STEPS")
        if "TASKFX_WARN_UNJOINED" in env:
            values["warn_unjoined"] = _parse_bool(
                env["TASKFX_WARN_UNJOINED"], name="TASKFX_WARN_UNJOINED"
            )

        values.update(overrides)
        return cls(**values)

    def replace(self, **changes: Any) -> RuntimeConfig:
        return replace(self, **changes)


__all__ = ["ClockKind", "RuntimeConfig"]
