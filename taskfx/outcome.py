"""Terminal result of driving a root task."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from taskfx._vendor import Err, FrozenDict, Ok, Result

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Success value or error of a root task, plus everything it sent.

    Attributes:
        result: ``Ok(value)`` when the task returned, ``Err(error)`` when an
            exception escaped it.
        mail: Every message sent by the task and its descendants, in
            interpretation order.
    """

    result: Result[T]
    mail: tuple[Any, ...] = ()

    @classmethod
    def success(cls, value: T, mail: tuple[Any, ...] = ()) -> Outcome[T]:
        return cls(Ok(value), tuple(mail))

    @classmethod
    def failure(cls, error: BaseException, mail: tuple[Any, ...] = ()) -> Outcome[Any]:
        return cls(Err(error), tuple(mail))

    @property
    def ok(self) -> bool:
        return self.result.is_ok()

    @property
    def value(self) -> T | None:
        return self.result.ok()

    @property
    def error(self) -> BaseException | None:
        return self.result.err()

    def unwrap(self) -> T:
        """Return the value or raise the task's error."""
        return self.result.unwrap()

    def to_record(self) -> FrozenDict:
        """Boundary shape: ``{ok, value}`` or ``{ok, error}``, plus ``mail``."""
        if self.ok:
            return FrozenDict(ok=True, value=self.value, mail=self.mail)
        return FrozenDict(ok=False, error=self.error, mail=self.mail)


__all__ = ["Outcome"]
