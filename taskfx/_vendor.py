"""
Minimal result and mapping types used across the runtime.

``Result`` is the settled state of a task or promise: ``Ok(value)`` or
``Err(error)``. ``FrozenDict`` is the immutable mapping used for boundary
records.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar

from frozendict import frozendict

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class Result(Generic[T_co]):
    """Either a task's return value or the error that ended it."""

    __slots__ = ()

    def is_ok(self) -> bool:
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        return isinstance(self, Err)

    def ok(self) -> T_co | None:
        """Value of an ``Ok``; ``None`` for an ``Err``."""
        return self.value if isinstance(self, Ok) else None

    def err(self) -> BaseException | None:
        """Error of an ``Err``; ``None`` for an ``Ok``."""
        return self.error if isinstance(self, Err) else None

    def unwrap(self) -> T_co:
        """Return the value, raising the stored error for an ``Err``."""
        if isinstance(self, Err):
            raise self.error
        assert isinstance(self, Ok)
        return self.value


@dataclass(frozen=True)
class Ok(Result[T], Generic[T]):
    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True)
class Err(Result[NoReturn]):
    error: BaseException

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


FrozenDict = frozendict

__all__ = [
    "Err",
    "FrozenDict",
    "Ok",
    "Result",
]
