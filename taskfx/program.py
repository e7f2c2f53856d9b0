"""
Program class for the taskfx system.

A Program is a lazy, re-iterable description of a task: a generator
function plus the arguments to call it with. Every iteration builds a fresh
generator, so a Program can be run, spawned, forked or delegated to
(``yield from program``) any number of times.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")

TaskGenerator = Generator[Any, Any, T]


@dataclass(frozen=True)
class Program(Generic[T]):
    """Deferred call of a generator function."""

    factory: Callable[..., TaskGenerator[T]]
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return getattr(self.factory, "__qualname__", getattr(self.factory, "__name__", "<task>"))

    def to_generator(self) -> TaskGenerator[T]:
        gen = self.factory(*self.args, **self.kwargs)
        if not isinstance(gen, Generator):
            raise TypeError(
                f"{self.name} must return a generator, got {type(gen).__name__}"
            )
        return gen

    def __iter__(self) -> TaskGenerator[T]:
        return self.to_generator()

    def __repr__(self) -> str:
        return f"Program({self.name})"


__all__ = ["Program", "TaskGenerator"]
