"""
taskfx - Cooperative task effects for Python.

Tasks are generators that yield instructions (``wait``, ``send``, ``sleep``,
``spawn``, ``fork``, ``join``, ``self_``, ``suspend``). A scheduler drives a
root task and all of its descendants on one asyncio event loop, interleaving
them at suspension points, and returns an ``Outcome`` holding the root's value
or error together with every message the task tree sent.

Example:
    >>> from taskfx import do, run, send, sleep, spawn, join
    >>>
    >>> @do
    ... def ticker(name, period, count):
    ...     for i in range(count):
    ...         yield sleep(period)
    ...         yield send(f"{name}#{i + 1}")
    >>>
    >>> @do
    ... def main():
    ...     yield spawn(ticker("a", 0.01, 2))
    ...     yield spawn(ticker("b", 0.015, 1))
    ...     yield join()
    ...     return "done"
    >>>
    >>> outcome = run(main())
    >>> outcome.value, sorted(outcome.mail)
    ('done', ['a#1', 'a#2', 'b#1'])
"""

from taskfx._vendor import Err, FrozenDict, Ok, Result
from taskfx.clock import RealClock, VirtualClock
from taskfx.config import RuntimeConfig
from taskfx.do import DoFunction, do
from taskfx.driver import Driver, evaluate
from taskfx.effects import (
    EffectBase,
    Fork,
    ForkEffect,
    Join,
    JoinEffect,
    Self,
    SelfEffect,
    Send,
    SendEffect,
    Sleep,
    SleepEffect,
    Spawn,
    SpawnEffect,
    Suspend,
    SuspendEffect,
    Wait,
    WaitEffect,
    fork,
    join,
    self_,
    send,
    sleep,
    spawn,
    suspend,
    wait,
)
from taskfx.errors import (
    ConfigError,
    DeadlockError,
    MailboxClosedError,
    PromiseAlreadySettledError,
    SchedulerRequiredError,
    SchedulerStateError,
    StepLimitExceededError,
    TaskfxError,
    TaskStateError,
    UnknownInstructionError,
)
from taskfx.mailbox import Mailbox
from taskfx.outcome import Outcome
from taskfx.program import Program
from taskfx.promise import Promise
from taskfx.runtime import Runtime, arun, run
from taskfx.scheduler import Scheduler
from taskfx.task import Task, TaskHandle
from taskfx.types import TaskId, TaskStatus

__version__ = "0.1.0"

__all__ = [  # noqa: RUF022
    # Core
    "Program",
    "do",
    "DoFunction",
    "Task",
    "TaskHandle",
    "TaskId",
    "TaskStatus",
    # Results
    "Ok",
    "Err",
    "Result",
    "FrozenDict",
    "Outcome",
    "Mailbox",
    "Promise",
    # Instructions
    "EffectBase",
    "WaitEffect",
    "SendEffect",
    "SleepEffect",
    "SpawnEffect",
    "ForkEffect",
    "JoinEffect",
    "SelfEffect",
    "SuspendEffect",
    "wait",
    "send",
    "sleep",
    "spawn",
    "fork",
    "join",
    "self_",
    "suspend",
    "Wait",
    "Send",
    "Sleep",
    "Spawn",
    "Fork",
    "Join",
    "Self",
    "Suspend",
    # Execution
    "Driver",
    "evaluate",
    "Scheduler",
    "Runtime",
    "RuntimeConfig",
    "VirtualClock",
    "RealClock",
    "run",
    "arun",
    # Errors
    "TaskfxError",
    "UnknownInstructionError",
    "SchedulerRequiredError",
    "TaskStateError",
    "SchedulerStateError",
    "DeadlockError",
    "StepLimitExceededError",
    "MailboxClosedError",
    "PromiseAlreadySettledError",
    "ConfigError",
]
