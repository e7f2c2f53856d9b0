"""Tests for clocks, the timer queue and sleep scheduling."""

import math
import time

import pytest

from taskfx import RealClock, Runtime, VirtualClock, join, send, sleep, spawn
from taskfx.clock import make_clock
from taskfx.timers import TimerQueue


class TestVirtualClock:
    def test_starts_at_given_time(self) -> None:
        assert VirtualClock(5).now() == 5.0

    def test_advance_never_moves_backwards(self) -> None:
        clock = VirtualClock()

        assert clock.advance_to(3.0) == 3.0
        assert clock.advance_to(1.0) == 3.0

    @pytest.mark.parametrize("value", [math.nan, math.inf])
    def test_rejects_non_finite_times(self, value: float) -> None:
        with pytest.raises(ValueError):
            VirtualClock(value)
        with pytest.raises(ValueError):
            VirtualClock().advance_to(value)

    def test_make_clock(self) -> None:
        assert isinstance(make_clock("virtual", start_time=2.0), VirtualClock)
        assert isinstance(make_clock("real"), RealClock)
        with pytest.raises(ValueError):
            make_clock("sundial")


class TestTimerQueue:
    def test_pops_in_deadline_order(self) -> None:
        queue: TimerQueue[str] = TimerQueue()
        queue.push(3.0, "late")
        queue.push(1.0, "early")
        queue.push(2.0, "middle")

        assert queue.next_deadline() == 1.0
        assert [entry.sleeper for entry in iter(lambda: queue.pop_due(10.0), None)] == [
            "early",
            "middle",
            "late",
        ]
        assert len(queue) == 0

    def test_equal_deadlines_keep_registration_order(self) -> None:
        queue: TimerQueue[str] = TimerQueue()
        queue.push(1.0, "first")
        queue.push(1.0, "second")

        assert queue.pop_due(1.0).sleeper == "first"
        assert queue.pop_due(1.0).sleeper == "second"

    def test_nothing_due_before_deadline(self) -> None:
        queue: TimerQueue[str] = TimerQueue()
        queue.push(5.0, "later")

        assert queue.pop_due(4.999) is None
        assert len(queue) == 1


class TestSleep:
    @pytest.mark.asyncio
    async def test_virtual_sleep_does_not_wait(self) -> None:
        runtime = Runtime(clock="virtual", start_time=100)

        def task():
            yield sleep(3600)
            yield send("woke")

        started = time.monotonic()
        outcome = await runtime.run(task)

        assert outcome.mail == ("woke",)
        assert time.monotonic() - started < 5

    @pytest.mark.asyncio
    async def test_real_sleep_waits_at_least_the_duration(self, real_runtime: Runtime) -> None:
        def task():
            yield sleep(0.05)
            return "done"

        started = time.monotonic()
        outcome = await real_runtime.run(task)

        assert outcome.value == "done"
        assert time.monotonic() - started >= 0.05

    @pytest.mark.asyncio
    async def test_zero_sleep_still_yields_to_other_tasks(self, runtime: Runtime) -> None:
        def other():
            yield send("other")

        def task():
            yield spawn(other)
            yield send("before")
            yield sleep(0)
            yield send("after")
            yield join()

        outcome = await runtime.run(task)

        assert outcome.mail == ("before", "other", "after")
