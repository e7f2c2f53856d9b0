"""
Identity and status types for tasks.

This module contains:
- TaskId: Unique identifier for tasks
- TaskStatus: Lifecycle state of a task
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID, uuid4


@dataclass(frozen=True, order=True)
class TaskId:
    """Unique identifier for a task.

    Ids are unique across scheduler instances, so handles from two root
    invocations can never be confused.
    """

    _id: UUID = field(default_factory=uuid4, compare=True)

    @classmethod
    def new(cls) -> TaskId:
        """Create a new unique TaskId."""
        return cls()

    def __str__(self) -> str:
        return f"task-{self._id.hex[:8]}"

    def __repr__(self) -> str:
        return f"TaskId({self._id.hex[:8]})"


class TaskStatus(Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUSPENDED = "suspended"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


__all__ = [
    "TaskId",
    "TaskStatus",
]
