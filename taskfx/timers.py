"""Min-heap queue of sleeping tasks ordered by deadline."""

from __future__ import annotations

import heapq
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class TimerEntry(Generic[T]):
    deadline: float
    sequence: int
    sleeper: T


class TimerQueue(Generic[T]):
    """Deadlines break ties by registration order."""

    def __init__(self) -> None:
        self._sequence = 0
        self._items: list[tuple[float, int, T]] = []

    def push(self, deadline: float, sleeper: T) -> TimerEntry[T]:
        self._sequence += 1
        heapq.heappush(self._items, (float(deadline), self._sequence, sleeper))
        return TimerEntry(deadline=float(deadline), sequence=self._sequence, sleeper=sleeper)

    def pop_due(self, now: float) -> TimerEntry[T] | None:
        if not self._items or self._items[0][0] > now:
            return None
        deadline, sequence, sleeper = heapq.heappop(self._items)
        return TimerEntry(deadline=deadline, sequence=sequence, sleeper=sleeper)

    def next_deadline(self) -> float | None:
        if not self._items:
            return None
        return self._items[0][0]

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


__all__ = ["TimerEntry", "TimerQueue"]
