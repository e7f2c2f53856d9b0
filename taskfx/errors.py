"""Error types raised by the taskfx driver and scheduler."""

from __future__ import annotations

from typing import Any


class TaskfxError(Exception):
    """Base class for every error the runtime itself raises."""


class UnknownInstructionError(TaskfxError):
    """Raised into a task that yielded something the driver cannot interpret.

    Tasks must yield instruction values (``wait``, ``send``, ``sleep``, ...).
    Yielding anything else, including an ``EffectBase`` subclass the driver
    has no interpreter for, is a programming error and is always fatal to the
    issuing task.

    Example:
        >>> def task():
        ...     yield 5  # UnknownInstructionError at this yield
    """

    def __init__(self, instruction: Any) -> None:
        self.instruction = instruction
        hint = ""
        if hasattr(instruction, "__iter__") and hasattr(instruction, "__next__"):
            hint = "\nHint: delegate to a helper task with `yield from helper()`"
        elif type(instruction).__name__ == "Program":
            hint = "\nHint: delegate to a Program with `yield from program`"
        super().__init__(f"Unknown instruction: {instruction!r}{hint}")


class SchedulerRequiredError(TaskfxError):
    """Raised when a task driven without a scheduler needs one.

    ``evaluate`` drives a single task with the driver alone; instructions that
    suspend or create tasks have nobody to resolve them there.
    """

    def __init__(self, instruction: Any) -> None:
        self.instruction = instruction
        tag = getattr(instruction, "tag", type(instruction).__name__)
        super().__init__(
            f"Instruction {tag!r} requires a scheduler; "
            "run the task with taskfx.run() instead of evaluate()"
        )


class TaskStateError(TaskfxError):
    """Raised on an illegal task transition (double resume, resume after exit)."""


class SchedulerStateError(TaskfxError):
    """Raised when a scheduler instance is reused for a second root invocation."""


class DeadlockError(TaskfxError):
    """Raised when the root task is blocked and nothing can ever wake it."""


class StepLimitExceededError(TaskfxError):
    """Raised when a root invocation exceeds ``RuntimeConfig.max_steps``."""

    def __init__(self, max_steps: int) -> None:
        self.max_steps = max_steps
        super().__init__(f"Maximum steps exceeded: {max_steps}")


class MailboxClosedError(TaskfxError):
    """Raised when a message is sent after the mailbox was frozen."""


class PromiseAlreadySettledError(TaskfxError):
    """Raised when a promise is completed or failed a second time."""


class ConfigError(TaskfxError, ValueError):
    """Raised when runtime configuration cannot be parsed."""


__all__ = [
    "ConfigError",
    "DeadlockError",
    "MailboxClosedError",
    "PromiseAlreadySettledError",
    "SchedulerRequiredError",
    "SchedulerStateError",
    "StepLimitExceededError",
    "TaskStateError",
    "TaskfxError",
    "UnknownInstructionError",
]
