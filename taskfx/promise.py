"""Settle-once pending computations.

A ``Promise`` is the runtime's own pending computation: it settles exactly
once, with a value or an error, and tasks wait on it with ``wait(promise)``.
The scheduler uses promises for task results (``handle.result``); code outside
the runtime (threads, asyncio callbacks) can use them to hand values to
waiting tasks.

Example:
    promise = Promise()

    def consumer():
        value = yield wait(promise)
        yield send(value)

    def worker(promise):
        # Called from any thread
        promise.complete(compute())
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Generic, TypeVar
from uuid import UUID, uuid4

from taskfx._vendor import Err, Ok, Result
from taskfx.errors import PromiseAlreadySettledError

T = TypeVar("T")


@dataclass(eq=False)
class Promise(Generic[T]):
    """Pending computation that settles exactly once.

    ``complete`` and ``fail`` are thread-safe. Callbacks registered with
    ``add_done_callback`` run in the thread that settles the promise, or
    immediately when the promise is already settled.
    """

    label: str | None = None
    _id: UUID = field(default_factory=uuid4, repr=False)
    _result: Result[T] | None = field(default=None, repr=False)
    _callbacks: list[Callable[[Promise[T]], None]] = field(default_factory=list, repr=False)
    _lock: Lock = field(default_factory=Lock, repr=False)

    @classmethod
    def resolved(cls, value: T, *, label: str | None = None) -> Promise[T]:
        promise: Promise[T] = cls(label=label)
        promise.complete(value)
        return promise

    @classmethod
    def rejected(cls, error: BaseException, *, label: str | None = None) -> Promise[Any]:
        promise: Promise[Any] = cls(label=label)
        promise.fail(error)
        return promise

    @property
    def id(self) -> UUID:
        return self._id

    def done(self) -> bool:
        return self._result is not None

    def result(self) -> Result[T]:
        """Return the settled ``Ok``/``Err``; raise if still pending."""
        if self._result is None:
            raise RuntimeError(f"{self!r} has not settled yet")
        return self._result

    def complete(self, value: T) -> None:
        """Complete the promise with a value."""
        self._settle(Ok(value))

    def fail(self, error: BaseException) -> None:
        """Fail the promise with an error."""
        if not isinstance(error, BaseException):
            raise TypeError(f"error must be BaseException, got {type(error).__name__}")
        self._settle(Err(error))

    def add_done_callback(self, callback: Callable[[Promise[T]], None]) -> None:
        with self._lock:
            if self._result is None:
                self._callbacks.append(callback)
                return
        callback(self)

    def remove_done_callback(self, callback: Callable[[Promise[T]], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def _settle(self, result: Result[T]) -> None:
        with self._lock:
            if self._result is not None:
                raise PromiseAlreadySettledError(f"{self!r} already settled with {self._result!r}")
            self._result = result
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(self)

    def __repr__(self) -> str:
        state = "pending" if self._result is None else ("ok" if self._result.is_ok() else "err")
        name = f" {self.label!r}" if self.label else ""
        return f"Promise({self._id.hex[:8]}{name}, {state})"


__all__ = ["Promise"]
