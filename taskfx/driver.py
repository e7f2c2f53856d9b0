"""Single-task instruction interpreter.

The driver resumes one task, interprets the instruction it yields and keeps
going for as long as the instruction can be resolved on the spot:

- ``send`` appends to the mailbox and resumes in the same tick.
- ``wait`` on an available value resumes in the same tick.
- ``spawn``/``fork`` hand the child to the host scheduler and resume with the
  child's handle.

Everything else stops the loop and is returned to the owner as ``Blocked``:
pending waits, ``sleep`` and ``join`` for the scheduler to resolve, and
``self``/``suspend``, which the owner interprets. Anything the driver has no
interpreter for gets an ``UnknownInstructionError`` raised at its yield.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

from taskfx._vendor import Err, Ok, Result
from taskfx.effects.base import EffectBase
from taskfx.effects.control import SelfEffect, SuspendEffect
from taskfx.effects.send import SendEffect
from taskfx.effects.spawn import ForkEffect, JoinEffect, SpawnEffect
from taskfx.effects.time import SleepEffect
from taskfx.effects.wait import WaitEffect
from taskfx.errors import MailboxClosedError, SchedulerRequiredError, UnknownInstructionError
from taskfx.mailbox import Mailbox
from taskfx.outcome import Outcome
from taskfx.task import (
    Raised,
    ResumeWithError,
    ResumeWithValue,
    Resumption,
    Returned,
    Task,
    TaskHandle,
)
from taskfx.types import TaskId

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Blocked:
    """The task stopped at an instruction its owner has to resolve."""
    instruction: EffectBase


@dataclass(frozen=True)
class Finished(Generic[T]):
    result: Result[T]


DriverStep = Blocked | Finished[Any]


class DriverHost(Protocol):
    """What a driver needs from the scheduler that owns it."""

    def spawn(self, parent: Driver[Any], source: Any, *, forked: bool) -> TaskHandle[Any]: ...


class Driver(Generic[T]):
    """Interprets the instruction stream of one task."""

    def __init__(
        self,
        task: Task[T],
        mailbox: Mailbox,
        *,
        host: DriverHost | None = None,
        handle: TaskHandle[T] | None = None,
    ) -> None:
        self.task = task
        self.mailbox = mailbox
        self.handle: TaskHandle[T] = handle or TaskHandle(id=task.id, name=task.name)
        self.blocked_on: EffectBase | None = None
        self.result: Result[T] | None = None
        self._host = host
        self._fatal: BaseException | None = None

    @property
    def id(self) -> TaskId:
        return self.task.id

    @property
    def name(self) -> str:
        return self.task.name

    @property
    def done(self) -> bool:
        return self.result is not None

    def advance(self, resumption: Resumption) -> DriverStep:
        """Resume the task and run it to its next blocking instruction or exit."""
        self.blocked_on = None
        step = self.task.step(resumption)
        while True:
            if isinstance(step, Returned):
                if self._fatal is not None:
                    return self._finish(Err(self._fatal))
                return self._finish(Ok(step.value))
            if isinstance(step, Raised):
                return self._finish(Err(step.error))

            instruction = step.instruction
            interpreter = _INTERPRETERS.get(type(instruction))
            if interpreter is None:
                logger.debug("%s yielded unknown instruction %r", self.name, instruction)
                resolved: Resumption | Blocked = self._mark_fatal(
                    UnknownInstructionError(instruction)
                )
            else:
                resolved = interpreter(self, instruction)

            if isinstance(resolved, Blocked):
                self.blocked_on = resolved.instruction
                return resolved
            step = self.task.step(resolved)

    def abort(self, error: BaseException) -> DriverStep:
        """Raise a fatal ``error`` at the current yield.

        Cleanup frames still run, but the task ends failed even if it catches
        ``error``; a new error raised while unwinding takes its place.
        """
        return self.advance(self._mark_fatal(error))

    def _mark_fatal(self, error: BaseException) -> ResumeWithError:
        if self._fatal is None:
            self._fatal = error
        return ResumeWithError(error)

    def _finish(self, result: Result[T]) -> Finished[T]:
        self.result = result
        if result.is_ok():
            logger.debug("%s completed", self.name)
            self.handle.result.complete(result.ok())
        else:
            logger.debug("%s failed: %r", self.name, result.err())
            self.handle.result.fail(result.err())
        return Finished(result)

    # ------------------------------------------------------------------
    # Interpreters
    # ------------------------------------------------------------------

    def _interpret_send(self, instruction: SendEffect) -> Resumption:
        try:
            self.mailbox.append(instruction.message)
        except MailboxClosedError as exc:
            return ResumeWithError(exc)
        return ResumeWithValue(None)

    def _interpret_wait(self, instruction: WaitEffect) -> Resumption | Blocked:
        if instruction.pending:
            return Blocked(instruction)
        return ResumeWithValue(instruction.source)

    def _interpret_spawn(self, instruction: SpawnEffect | ForkEffect) -> Resumption:
        if self._host is None:
            return self._mark_fatal(SchedulerRequiredError(instruction))
        try:
            handle = self._host.spawn(
                self, instruction.task, forked=isinstance(instruction, ForkEffect)
            )
        except TypeError as exc:
            return ResumeWithError(exc)
        return ResumeWithValue(handle)

    def _pass_to_owner(self, instruction: EffectBase) -> Blocked:
        return Blocked(instruction)

    def __repr__(self) -> str:
        return f"Driver({self.task!r})"


_INTERPRETERS: dict[type, Callable[[Driver[Any], Any], Resumption | Blocked]] = {
    SendEffect: Driver._interpret_send,
    WaitEffect: Driver._interpret_wait,
    SpawnEffect: Driver._interpret_spawn,
    ForkEffect: Driver._interpret_spawn,
    SleepEffect: Driver._pass_to_owner,
    JoinEffect: Driver._pass_to_owner,
    SelfEffect: Driver._pass_to_owner,
    SuspendEffect: Driver._pass_to_owner,
}


def evaluate(source: Any, *args: Any, **kwargs: Any) -> Outcome[Any]:
    """Drive a task with the driver alone, without a scheduler.

    ``send``, available-value ``wait`` and ``self_()`` work as usual. Any
    instruction that would need a scheduler (pending ``wait``, ``sleep``,
    ``spawn``, ``fork``, ``join``, ``suspend``) fails the task with
    ``SchedulerRequiredError``.
    """
    mailbox = Mailbox()
    driver: Driver[Any] = Driver(Task.from_source(source, *args, **kwargs), mailbox)
    step = driver.advance(ResumeWithValue(None))
    while isinstance(step, Blocked):
        if isinstance(step.instruction, SelfEffect):
            step = driver.advance(ResumeWithValue(driver.handle))
        else:
            step = driver.abort(SchedulerRequiredError(step.instruction))
    return Outcome(step.result, mailbox.freeze())


__all__ = [
    "Blocked",
    "Driver",
    "DriverHost",
    "DriverStep",
    "Finished",
    "evaluate",
]
