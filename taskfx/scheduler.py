"""Cooperative scheduler for one root invocation.

The Scheduler owns every task started under a root task: the root itself,
everything it spawns or forks, and their descendants. It keeps

- a FIFO ready queue of drivers whose next resumption is already known,
- a registry of pending computations and the drivers waiting on each,
- a min-heap of sleeping drivers ordered by deadline,
- per-task lists of spawned children that ``join`` has not consumed yet.

Tasks only change hands at suspension points (pending ``wait``, ``sleep``,
``join``, ``suspend``); each ready driver runs to its next suspension point
before the next one starts. A scheduler drives exactly one root invocation
and is torn down when the root task finishes.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import contextlib
import itertools
import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Any

from taskfx.clock import make_clock
from taskfx.config import RuntimeConfig
from taskfx.driver import Blocked, Driver, DriverStep, Finished
from taskfx.effects.base import EffectBase
from taskfx.effects.control import SelfEffect, SuspendEffect
from taskfx.effects.spawn import JoinEffect
from taskfx.effects.time import SleepEffect
from taskfx.effects.wait import WaitEffect
from taskfx.errors import (
    DeadlockError,
    SchedulerStateError,
    StepLimitExceededError,
    TaskStateError,
)
from taskfx.mailbox import Mailbox
from taskfx.outcome import Outcome
from taskfx.promise import Promise
from taskfx.task import ResumeWithError, ResumeWithValue, Resumption, Task, TaskHandle
from taskfx.timers import TimerQueue
from taskfx.types import TaskId, TaskStatus
from taskfx.utils import DEBUG_EFFECTS

logger = logging.getLogger(__name__)


@dataclass
class JoinWait:
    driver: Driver[Any]
    children: tuple[TaskHandle[Any], ...]


class Scheduler:
    """Single coordination point for all tasks of one root invocation."""

    def __init__(self, config: RuntimeConfig | None = None) -> None:
        self.config = config or RuntimeConfig()
        self.clock = make_clock(self.config.clock, start_time=float(self.config.start_time))
        self.mailbox = Mailbox()
        self._ready: deque[tuple[Driver[Any], Resumption]] = deque()
        self._drivers: dict[TaskId, Driver[Any]] = {}
        self._pending: dict[Any, list[Driver[Any]]] = {}
        self._owned: list[asyncio.Future[Any]] = []
        self._observed: set[Promise[Any]] = set()
        self._task_results: set[Promise[Any]] = set()
        self._timers: TimerQueue[Driver[Any]] = TimerQueue()
        self._children: dict[TaskId, list[TaskHandle[Any]]] = {}
        self._parents: dict[TaskId, TaskId] = {}
        self._joins: dict[TaskId, JoinWait] = {}
        self._failure_order: dict[TaskId, int] = {}
        self._failure_sequence = itertools.count(1)
        self._steps = 0
        self._root: Driver[Any] | None = None
        self._started = False
        self._closed = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread_id: int | None = None
        self._wakeup: asyncio.Event | None = None

    # ------------------------------------------------------------------
    # Root invocation
    # ------------------------------------------------------------------

    async def run(self, source: Any, *args: Any, **kwargs: Any) -> Outcome[Any]:
        """Drive ``source`` and its descendants until the root task finishes.

        Args:
            source: Generator, Program or generator function for the root task.
            *args: Arguments for a generator function root.
            **kwargs: Keyword arguments for a generator function root.

        Returns:
            Outcome with the root's value or error and the frozen mailbox.

        Raises:
            SchedulerStateError: If this scheduler already ran a root task.
            DeadlockError: If the root is blocked and nothing can wake it.
            StepLimitExceededError: If ``config.max_steps`` is exceeded.
        """
        if self._started:
            raise SchedulerStateError(
                "a Scheduler drives exactly one root invocation; create a new one"
            )
        self._started = True
        self._loop = asyncio.get_running_loop()
        self._thread_id = threading.get_ident()
        self._wakeup = asyncio.Event()

        root = self._create(Task.from_source(source, *args, **kwargs), parent=None, forked=False)
        self._root = root
        logger.debug("starting root task %s on %s clock", root.name, self.config.clock)

        try:
            while not root.done:
                if self._ready:
                    self._drain_ready()
                    continue
                await self._idle()
        finally:
            mail = self.mailbox.freeze()
            self._teardown()
            await self._cancel_owned()

        assert root.result is not None
        return Outcome(root.result, mail)

    def _drain_ready(self) -> None:
        root = self._root
        while self._ready and not (root is not None and root.done):
            driver, resumption = self._ready.popleft()
            self._step(driver, resumption)

    async def _idle(self) -> None:
        """Nothing is ready: let pending computations land or move time forward."""
        assert self._wakeup is not None
        await asyncio.sleep(0)
        if self._ready or self._release_due_timers():
            return

        deadline = self._timers.next_deadline()
        if deadline is not None and self.clock.virtual:
            logger.debug("virtual clock advancing %s -> %s", self.clock.now(), deadline)
            self.clock.advance_to(deadline)
            self._release_due_timers()
            return

        if deadline is None and not self._has_external_pending() and not self._has_suspended():
            raise DeadlockError(self._describe_deadlock())

        timeout = None if deadline is None else max(0.0, deadline - self.clock.now())
        self._wakeup.clear()
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self._wakeup.wait(), timeout)
        self._release_due_timers()

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def _advance(self, driver: Driver[Any], resumption: Resumption) -> DriverStep:
        self._steps += 1
        max_steps = self.config.max_steps
        if max_steps is not None and self._steps > max_steps:
            raise StepLimitExceededError(max_steps)
        return driver.advance(resumption)

    def _step(self, driver: Driver[Any], resumption: Resumption) -> None:
        step = self._advance(driver, resumption)
        while isinstance(step, Blocked) and isinstance(step.instruction, SelfEffect):
            step = self._advance(driver, ResumeWithValue(driver.handle))
        if isinstance(step, Finished):
            self._on_finished(driver, step)
            return
        self._park(driver, step.instruction)

    def _park(self, driver: Driver[Any], instruction: EffectBase) -> None:
        if isinstance(instruction, WaitEffect):
            self._wait_on(driver, instruction.source)
        elif isinstance(instruction, SleepEffect):
            deadline = self.clock.now() + instruction.seconds
            self._timers.push(deadline, driver)
            logger.debug("%s sleeping until %s", driver.name, deadline)
        elif isinstance(instruction, JoinEffect):
            self._join(driver)
        elif isinstance(instruction, SuspendEffect):
            logger.debug("%s suspended until resumed through its handle", driver.name)
        else:
            raise RuntimeError(f"Unexpected blocking instruction: {instruction!r}")

    def _enqueue(self, driver: Driver[Any], resumption: Resumption) -> None:
        if driver.done or driver.blocked_on is None:
            raise TaskStateError(f"{driver.name} is not suspended; a task is resumed once per suspension")
        driver.blocked_on = None
        self._ready.append((driver, resumption))
        if self._wakeup is not None:
            self._wakeup.set()

    def _on_finished(self, driver: Driver[Any], step: Finished[Any]) -> None:
        if step.result.is_err():
            self._failure_order[driver.id] = next(self._failure_sequence)
            if driver.handle.forked:
                logger.debug("forked task %s failed; its parent is not affected", driver.name)
        parent_id = self._parents.get(driver.id)
        if parent_id is not None and parent_id in self._joins:
            self._check_join(parent_id)

    # ------------------------------------------------------------------
    # Task tree
    # ------------------------------------------------------------------

    def spawn(self, parent: Driver[Any], source: Any, *, forked: bool) -> TaskHandle[Any]:
        driver = self._create(Task.from_source(source), parent=parent, forked=forked)
        logger.debug("%s %s %s", parent.name, "forked" if forked else "spawned", driver.name)
        return driver.handle

    def _create(self, task: Task[Any], *, parent: Driver[Any] | None, forked: bool) -> Driver[Any]:
        handle: TaskHandle[Any] = TaskHandle(id=task.id, name=task.name, forked=forked, _owner=self)
        driver = Driver(task, self.mailbox, host=self, handle=handle)
        self._drivers[task.id] = driver
        self._task_results.add(handle.result)
        if parent is not None and not forked:
            self._children.setdefault(parent.id, []).append(handle)
            self._parents[task.id] = parent.id
        self._ready.append((driver, ResumeWithValue(None)))
        return driver

    def _join(self, driver: Driver[Any]) -> None:
        children = tuple(self._children.pop(driver.id, ()))
        self._joins[driver.id] = JoinWait(driver, children)
        logger.debug("%s joining %d spawned task(s)", driver.name, len(children))
        self._check_join(driver.id)

    def _check_join(self, parent_id: TaskId) -> None:
        waiting = self._joins[parent_id]
        if not all(child.done for child in waiting.children):
            return
        del self._joins[parent_id]

        failed = [child for child in waiting.children if child.id in self._failure_order]
        if failed:
            first = min(failed, key=lambda child: self._failure_order[child.id])
            error = first.result.result().err()
            assert error is not None
            self._enqueue(waiting.driver, ResumeWithError(error))
        else:
            self._enqueue(waiting.driver, ResumeWithValue(None))

    # ------------------------------------------------------------------
    # Pending computations
    # ------------------------------------------------------------------

    def _wait_on(self, driver: Driver[Any], source: Any) -> None:
        if isinstance(source, Promise):
            self._observed.add(source)
            waiters = self._pending.setdefault(source, [])
            waiters.append(driver)
            if len(waiters) == 1:
                if source.done():
                    # settled promises still yield to the loop, like done futures
                    assert self._loop is not None
                    self._loop.call_soon(self._promise_settled, source)
                else:
                    source.add_done_callback(self._promise_settled)
            logger.debug("%s waiting on %r", driver.name, source)
            return

        future = asyncio.ensure_future(source)
        if future is not source:
            self._owned.append(future)
        waiters = self._pending.setdefault(future, [])
        waiters.append(driver)
        if len(waiters) == 1:
            future.add_done_callback(self._future_settled)
        logger.debug("%s waiting on %r", driver.name, future)

    def _promise_settled(self, promise: Promise[Any]) -> None:
        if self._closed:
            return
        if threading.get_ident() != self._thread_id:
            assert self._loop is not None
            self._loop.call_soon_threadsafe(self._promise_settled, promise)
            return
        result = promise.result()
        if result.is_ok():
            self._release_waiters(promise, ResumeWithValue(result.ok()))
        else:
            error = result.err()
            assert error is not None
            self._release_waiters(promise, ResumeWithError(error))

    def _future_settled(self, future: asyncio.Future[Any]) -> None:
        if self._closed:
            return
        if future.cancelled():
            self._release_waiters(future, ResumeWithError(asyncio.CancelledError()))
            return
        error = future.exception()
        if error is not None:
            self._release_waiters(future, ResumeWithError(error))
        else:
            self._release_waiters(future, ResumeWithValue(future.result()))

    def _release_waiters(self, key: Any, resumption: Resumption) -> None:
        for driver in self._pending.pop(key, ()):
            self._enqueue(driver, resumption)

    def _release_due_timers(self) -> bool:
        now = self.clock.now()
        released = False
        while (entry := self._timers.pop_due(now)) is not None:
            self._enqueue(entry.sleeper, ResumeWithValue(None))
            released = True
        return released

    # ------------------------------------------------------------------
    # Handles
    # ------------------------------------------------------------------

    def status_of(self, handle: TaskHandle[Any]) -> TaskStatus:
        driver = self._drivers.get(handle.id)
        if driver is None:
            raise TaskStateError(f"{handle!r} does not belong to this scheduler")
        return driver.task.status

    def resume_suspended(
        self, handle: TaskHandle[Any], resumption: Resumption
    ) -> concurrent.futures.Future[None] | None:
        """Wake a task parked by ``suspend()``; callable from any thread.

        On the loop's thread the resume is applied at once and errors raise
        here. From any other thread it is applied on the loop later; the
        returned future settles then, with ``TaskStateError`` when the task
        was no longer suspended.
        """
        if self._closed:
            raise TaskStateError(f"{handle.name} cannot be resumed: its scheduler has shut down")
        if self._thread_id is not None and threading.get_ident() != self._thread_id:
            assert self._loop is not None
            applied: concurrent.futures.Future[None] = concurrent.futures.Future()
            self._loop.call_soon_threadsafe(self._resume_on_loop, handle, resumption, applied)
            return applied
        self._resume(handle, resumption)
        return None

    def _resume_on_loop(
        self,
        handle: TaskHandle[Any],
        resumption: Resumption,
        applied: concurrent.futures.Future[None],
    ) -> None:
        try:
            self._resume(handle, resumption)
        except TaskStateError as exc:
            applied.set_exception(exc)
        else:
            applied.set_result(None)

    def _resume(self, handle: TaskHandle[Any], resumption: Resumption) -> None:
        if self._closed:
            raise TaskStateError(f"{handle.name} cannot be resumed: its scheduler has shut down")
        driver = self._drivers.get(handle.id)
        if driver is None:
            raise TaskStateError(f"{handle!r} does not belong to this scheduler")
        if not isinstance(driver.blocked_on, SuspendEffect):
            raise TaskStateError(f"{handle.name} is not suspended")
        self._enqueue(driver, resumption)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def _has_external_pending(self) -> bool:
        # task results only settle when a task this scheduler owns finishes
        return any(key not in self._task_results for key in self._pending)

    def _has_suspended(self) -> bool:
        return any(
            isinstance(driver.blocked_on, SuspendEffect)
            for driver in self._drivers.values()
            if not driver.done
        )

    def _describe_deadlock(self) -> str:
        root = self._root
        if root is None or root.blocked_on is None:
            return "no task is ready and nothing can wake the root task"
        return (
            f"{root.name} is blocked on {root.blocked_on.describe(full=DEBUG_EFFECTS)} "
            "and no task, timer or pending computation can wake it"
        )

    async def _cancel_owned(self) -> None:
        owned = [future for future in self._owned if not future.done()]
        for future in owned:
            future.cancel()
        if owned:
            await asyncio.gather(*owned, return_exceptions=True)

    def _teardown(self) -> None:
        self._closed = True
        for key in list(self._pending):
            if isinstance(key, Promise):
                key.remove_done_callback(self._promise_settled)
            else:
                key.remove_done_callback(self._future_settled)
        self._pending.clear()
        self._timers.clear()
        self._ready.clear()

        if self.config.warn_unjoined:
            self._warn_unjoined()
        self._warn_lost_failures()

        for driver in self._drivers.values():
            if driver.done:
                continue
            logger.debug("closing unfinished task %s", driver.name)
            try:
                driver.task.close()
            except Exception as exc:
                logger.warning("task %s raised while being closed: %r", driver.name, exc)

    def _unjoined(self) -> list[TaskHandle[Any]]:
        return [handle for handles in self._children.values() for handle in handles]

    def _warn_unjoined(self) -> None:
        unjoined = self._unjoined()
        if unjoined:
            names = ", ".join(handle.name for handle in unjoined)
            logger.warning(
                "%d spawned task(s) were not joined before the root task finished: %s. "
                "Call join() in the spawning task to wait for them and surface their errors.",
                len(unjoined),
                names,
            )

    def _warn_lost_failures(self) -> None:
        """Log every failure no task joined or waited on."""
        unjoined = {handle.id for handle in self._unjoined()}
        for driver in self._drivers.values():
            handle = driver.handle
            if driver.result is None or driver.result.is_ok() or handle.result in self._observed:
                continue
            if handle.forked:
                logger.warning(
                    "lost failure of forked task %s: its result was never waited on: %r",
                    handle.name,
                    driver.result.err(),
                )
            elif handle.id in unjoined:
                logger.warning(
                    "lost failure of spawned task %s: it was never joined: %r",
                    handle.name,
                    driver.result.err(),
                )


__all__ = ["JoinWait", "Scheduler"]
