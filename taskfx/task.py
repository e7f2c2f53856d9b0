"""Suspendable task abstraction.

A ``Task`` wraps a generator and exposes a single ``step`` operation that
feeds it either a value (``ResumeWithValue``) or an error to raise at the
current yield (``ResumeWithError``). Every step runs the generator up to its
next yield or to its exit and reports which one happened.

Lifecycle::

    PENDING -> RUNNING -> SUSPENDED -> RUNNING -> ... -> COMPLETED | FAILED

A suspended task is resumed at most once per suspension; stepping a running
or terminal task raises ``TaskStateError``.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
from collections.abc import Generator
from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar

from taskfx.errors import TaskStateError
from taskfx.program import Program
from taskfx.promise import Promise
from taskfx.types import TaskId, TaskStatus

T = TypeVar("T")


# ============================================
# Resumption inputs
# ============================================

@dataclass(frozen=True)
class ResumeWithValue:
    value: Any = None


@dataclass(frozen=True)
class ResumeWithError:
    error: BaseException


Resumption = ResumeWithValue | ResumeWithError


# ============================================
# Step outputs
# ============================================

@dataclass(frozen=True)
class Yielded:
    """The task stopped at a yield and issued ``instruction``."""
    instruction: Any


@dataclass(frozen=True)
class Returned:
    value: Any


@dataclass(frozen=True)
class Raised:
    error: BaseException


Step = Yielded | Returned | Raised


def to_generator(source: Any, *args: Any, **kwargs: Any) -> Generator[Any, Any, Any]:
    """Build a fresh generator from a task source."""
    if isinstance(source, Program):
        if args or kwargs:
            raise TypeError("arguments cannot be passed to an already-applied Program")
        return source.to_generator()
    if inspect.isgenerator(source):
        if args or kwargs:
            raise TypeError("arguments cannot be passed to a generator object")
        return source
    if inspect.isgeneratorfunction(source) or callable(source):
        return to_generator(Program(source, args, kwargs))
    raise TypeError(
        f"task must be a generator, Program or generator function, got {type(source).__name__}"
    )


def describe_source(source: Any) -> str:
    if isinstance(source, Program):
        return source.name
    if inspect.isgenerator(source):
        return source.__qualname__
    return getattr(source, "__qualname__", type(source).__name__)


class Task(Generic[T]):
    """A resumable computation driven one step at a time."""

    def __init__(self, gen: Generator[Any, Any, T], *, name: str | None = None) -> None:
        if not inspect.isgenerator(gen):
            raise TypeError(f"Task requires a generator, got {type(gen).__name__}")
        self.id = TaskId.new()
        self.name = name or gen.__qualname__
        self.status = TaskStatus.PENDING
        self._gen = gen

    @classmethod
    def from_source(cls, source: Any, *args: Any, name: str | None = None, **kwargs: Any) -> Task[Any]:
        return cls(to_generator(source, *args, **kwargs), name=name or describe_source(source))

    @property
    def done(self) -> bool:
        return self.status.terminal

    def step(self, resumption: Resumption) -> Step:
        if self.status is TaskStatus.RUNNING:
            raise TaskStateError(f"{self!r} is already running")
        if self.status.terminal:
            raise TaskStateError(f"{self!r} already finished; it cannot be resumed")
        if self.status is TaskStatus.PENDING and isinstance(resumption, ResumeWithValue):
            if resumption.value is not None:
                raise TaskStateError(f"{self!r} has not started; it can only be resumed with None")

        self.status = TaskStatus.RUNNING
        try:
            if isinstance(resumption, ResumeWithError):
                instruction = self._gen.throw(resumption.error)
            else:
                instruction = self._gen.send(resumption.value)
        except StopIteration as stop:
            self.status = TaskStatus.COMPLETED
            return Returned(stop.value)
        except (Exception, asyncio.CancelledError) as exc:
            self.status = TaskStatus.FAILED
            return Raised(exc)
        except BaseException:
            self.status = TaskStatus.FAILED
            raise
        self.status = TaskStatus.SUSPENDED
        return Yielded(instruction)

    def close(self) -> None:
        """Abandon a task that will never be resumed; its finally blocks run."""
        if self.status.terminal:
            return
        self.status = TaskStatus.FAILED
        self._gen.close()

    def __repr__(self) -> str:
        return f"Task({self.name}, {self.id}, {self.status.value})"


class _Resumer(Protocol):
    def resume_suspended(
        self, handle: TaskHandle[Any], resumption: Resumption
    ) -> concurrent.futures.Future[None] | None: ...

    def status_of(self, handle: TaskHandle[Any]) -> TaskStatus: ...


@dataclass(frozen=True, eq=False)
class TaskHandle(Generic[T]):
    """Addressable handle of a task running under a scheduler.

    ``result`` settles with the task's return value or its failure. ``wait``
    accepts the handle itself as a shorthand for ``wait(handle.result)``.
    """

    id: TaskId
    name: str
    forked: bool = False
    result: Promise[T] = field(default_factory=Promise, repr=False)
    _owner: _Resumer | None = field(default=None, repr=False)

    @property
    def status(self) -> TaskStatus:
        if self._owner is None:
            return TaskStatus.COMPLETED if self.result.done() else TaskStatus.RUNNING
        return self._owner.status_of(self)

    @property
    def done(self) -> bool:
        return self.result.done()

    def resume(self, value: Any = None) -> concurrent.futures.Future[None] | None:
        """Resume a task parked by ``suspend()`` with ``value``.

        On the scheduler's thread this returns ``None`` and raises
        ``TaskStateError`` straight away if the task is not suspended. From
        another thread the resume is applied on the scheduler's loop later,
        so a ``concurrent.futures.Future`` is returned instead; it settles
        once the resume was applied and carries the ``TaskStateError`` when
        the task was no longer suspended by then.
        """
        return self._wake(ResumeWithValue(value))

    def throw(self, error: BaseException) -> concurrent.futures.Future[None] | None:
        """Raise ``error`` inside a task parked by ``suspend()``.

        Returns like :meth:`resume`.
        """
        if not isinstance(error, BaseException):
            raise TypeError(f"error must be BaseException, got {type(error).__name__}")
        return self._wake(ResumeWithError(error))

    def _wake(self, resumption: Resumption) -> concurrent.futures.Future[None] | None:
        if self._owner is None:
            raise TaskStateError(f"{self!r} is not owned by a scheduler")
        return self._owner.resume_suspended(self, resumption)


__all__ = [
    "Raised",
    "ResumeWithError",
    "ResumeWithValue",
    "Resumption",
    "Returned",
    "Step",
    "Task",
    "TaskHandle",
    "Yielded",
    "describe_source",
    "to_generator",
]
