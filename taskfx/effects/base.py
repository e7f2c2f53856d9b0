"""
Base class and helpers shared by every instruction module.

Instructions are immutable requests issued by a task. They carry only the
payload their interpreter needs, plus where they were created.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, ClassVar, TypeVar

from taskfx._vendor import FrozenDict
from taskfx.utils import EffectCreationContext, capture_creation_context

E = TypeVar("E", bound="EffectBase")


@dataclass(frozen=True)
class EffectBase:
    """Base dataclass for instructions.

    Subclasses set ``tag`` to the instruction's boundary name. The driver
    dispatches on the exact subclass, so a subclass it does not know is
    rejected as an unknown instruction even when it reuses a known tag.
    """

    tag: ClassVar[str] = ""

    created_at: EffectCreationContext | None = field(
        default=None, compare=False, repr=False, kw_only=True
    )

    def with_created_at(self: E, created_at: EffectCreationContext | None) -> E:
        if created_at is self.created_at:
            return self
        return replace(self, created_at=created_at)

    def payload(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "created_at"}

    def as_record(self) -> FrozenDict:
        """Boundary shape ``{"type": tag, **payload}``."""
        return FrozenDict({"type": self.tag, **self.payload()})

    def describe(self, *, full: bool = False) -> str:
        name = self.tag or type(self).__name__
        if full and self.created_at is not None:
            return f"{name}\n{self.created_at.format_full()}"
        location = ""
        if self.created_at is not None:
            location = f" at {self.created_at.format_location()}"
        return f"{name}{location}"


def create_effect_with_trace(effect: E, skip_frames: int = 3) -> E:
    """Attach creation context metadata to an instruction instance."""

    if not isinstance(effect, EffectBase):
        raise TypeError(f"Expected EffectBase, got {type(effect)!r}")

    created_at = capture_creation_context(skip_frames=skip_frames)
    return effect.with_created_at(created_at)


__all__ = ["EffectBase", "create_effect_with_trace"]
