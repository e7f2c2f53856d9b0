"""Tests for self_ and suspend, and resuming tasks through their handles."""

import asyncio

import pytest

from taskfx import (
    Runtime,
    TaskHandle,
    TaskStateError,
    TaskStatus,
    join,
    self_,
    send,
    sleep,
    spawn,
    suspend,
)
from taskfx.types import TaskId


@pytest.mark.asyncio
async def test_self_returns_the_spawn_handle(runtime: Runtime) -> None:
    seen: list[TaskHandle] = []

    def child():
        me = yield self_()
        seen.append(me)

    def parent():
        handle = yield spawn(child)
        yield join()
        return handle

    handle = await runtime.run_and_unwrap(parent)

    assert seen == [handle]
    assert seen[0] is handle


@pytest.mark.asyncio
async def test_self_does_not_suspend(runtime: Runtime) -> None:
    def child():
        yield send("child")

    def parent():
        yield spawn(child)
        yield self_()
        yield send("parent")
        yield join()

    outcome = await runtime.run(parent)

    assert outcome.mail == ("parent", "child")


class TestSuspend:
    @pytest.mark.asyncio
    async def test_suspended_task_resumes_with_value(self, runtime: Runtime) -> None:
        def sleeper():
            value = yield suspend()
            yield send(f"resumed with {value}")
            return value

        def waker(handle: TaskHandle):
            yield sleep(1)
            assert handle.status is TaskStatus.SUSPENDED
            handle.resume("hello")

        def parent():
            handle = yield spawn(sleeper)
            yield spawn(waker(handle))
            yield join()
            return (yield self_()).name, handle.status

        outcome = await runtime.run(parent)

        assert outcome.mail == ("resumed with hello",)
        assert outcome.value[1] is TaskStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_throw_raises_inside_suspended_task(self, runtime: Runtime) -> None:
        def sleeper():
            try:
                yield suspend()
            finally:
                yield send("sleeper cleanup")

        def waker(handle: TaskHandle):
            yield sleep(1)
            handle.throw(KeyError("woken by error"))

        def parent():
            handle = yield spawn(sleeper)
            yield spawn(waker(handle))
            yield join()

        outcome = await runtime.run(parent)

        assert isinstance(outcome.error, KeyError)
        assert outcome.mail == ("sleeper cleanup",)

    @pytest.mark.asyncio
    async def test_second_resume_is_rejected(self, runtime: Runtime) -> None:
        def sleeper():
            value = yield suspend()
            yield send(f"resumed with {value}")

        def waker(handle: TaskHandle):
            handle.resume(1)
            try:
                handle.resume(2)
            except TaskStateError:
                yield send("second resume rejected")

        def parent():
            handle = yield spawn(sleeper)
            yield spawn(waker(handle))
            yield join()

        outcome = await runtime.run(parent)

        assert outcome.ok
        assert outcome.mail == ("second resume rejected", "resumed with 1")

    @pytest.mark.asyncio
    async def test_resuming_a_sleeping_task_is_rejected(self, runtime: Runtime) -> None:
        def sleeper():
            yield sleep(10)

        def waker(handle: TaskHandle):
            try:
                handle.resume("too soon")
            except TaskStateError as exc:
                yield send(str(exc))

        def parent():
            handle = yield spawn(sleeper)
            yield spawn(waker(handle))
            yield join()

        outcome = await runtime.run(parent)

        assert outcome.ok
        assert len(outcome.mail) == 1
        assert "not suspended" in outcome.mail[0]

    @pytest.mark.asyncio
    async def test_resume_from_outside_the_runtime(self, runtime: Runtime) -> None:
        handles: list[TaskHandle] = []

        def main():
            handles.append((yield self_()))
            value = yield suspend()
            return value

        running = asyncio.ensure_future(runtime.run(main))
        await asyncio.sleep(0)
        handles[0].resume("outside")
        outcome = await running

        assert outcome.value == "outside"

    @pytest.mark.asyncio
    async def test_resume_from_another_thread(self, real_runtime: Runtime) -> None:
        handles: list[TaskHandle] = []

        def main():
            handles.append((yield self_()))
            value = yield suspend()
            return value

        running = asyncio.ensure_future(real_runtime.run(main))
        await asyncio.sleep(0)
        await asyncio.get_running_loop().run_in_executor(None, handles[0].resume, "thread")
        outcome = await running

        assert outcome.value == "thread"

    @pytest.mark.asyncio
    async def test_rejected_resume_from_another_thread_is_reported(
        self, real_runtime: Runtime
    ) -> None:
        handles: list[TaskHandle] = []

        def main():
            handles.append((yield self_()))
            value = yield suspend()
            return value

        def resume_twice():
            return handles[0].resume("first"), handles[0].resume("second")

        running = asyncio.ensure_future(real_runtime.run(main))
        await asyncio.sleep(0)
        first, second = await asyncio.get_running_loop().run_in_executor(None, resume_twice)
        outcome = await running

        assert outcome.value == "first"
        assert first.result(timeout=1) is None
        with pytest.raises(TaskStateError):
            second.result(timeout=1)

    @pytest.mark.asyncio
    async def test_resume_on_the_loop_thread_returns_nothing(self, runtime: Runtime) -> None:
        returned: list[object] = []

        def main():
            handle = yield self_()
            yield spawn(waker(handle))
            value = yield suspend()
            yield join()
            return value

        def waker(handle):
            returned.append(handle.resume("woken"))
            yield send("waker")

        outcome = await runtime.run(main)

        assert outcome.value == "woken"
        assert returned == [None]

    def test_handle_without_scheduler_cannot_be_resumed(self) -> None:
        handle: TaskHandle = TaskHandle(id=TaskId.new(), name="orphan")

        with pytest.raises(TaskStateError):
            handle.resume()
