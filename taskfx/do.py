"""
The do decorator for the taskfx system.

This module provides the @do decorator that turns generator functions into
callables returning lazy Programs.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from functools import update_wrapper
from typing import Any, Generic, ParamSpec, TypeVar

from taskfx.program import Program, TaskGenerator

P = ParamSpec("P")
T = TypeVar("T")


class DoFunction(Generic[P, T]):
    """Callable wrapper produced by ``@do``."""

    def __init__(self, func: Callable[P, TaskGenerator[T]]) -> None:
        if not inspect.isgeneratorfunction(func):
            raise TypeError(f"@do requires a generator function, got {func!r}")
        self.original_func = func
        update_wrapper(self, func)

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> Program[T]:
        return Program(self.original_func, tuple(args), dict(kwargs))

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return DoFunction(self.original_func.__get__(instance, owner))

    def __repr__(self) -> str:
        return f"<do {self.original_func.__qualname__}>"


def do(func: Callable[P, TaskGenerator[T]]) -> DoFunction[P, T]:
    """
    Decorator that converts a generator function into a Program factory.

    Calling the decorated function does not start anything; it returns a
    ``Program`` that the runtime starts when it is run, spawned or forked,
    or that another task runs inline with ``yield from``.

    Usage:
        @do
        def greet(name: str):
            yield send(f"hello {name}")
            return name

        @do
        def main():
            yield from greet("a")       # inline, same task
            yield spawn(greet("b"))     # concurrent child
            yield join()

    Exceptions raised at a yield (rejected waits, failed joins) propagate
    like ordinary Python exceptions, so plain try/except/finally works
    around any instruction.
    """

    return DoFunction(func)


__all__ = ["do", "DoFunction"]
