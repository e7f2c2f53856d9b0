"""
Tests for the single-task driver and the Task abstraction.

``evaluate`` drives one task without a scheduler, which makes it the
simplest way to observe driver semantics.
"""

from dataclasses import dataclass

import pytest

from taskfx import (
    Program,
    Promise,
    SchedulerRequiredError,
    SendEffect,
    Task,
    TaskHandle,
    TaskStateError,
    TaskStatus,
    UnknownInstructionError,
    do,
    evaluate,
    join,
    self_,
    send,
    sleep,
    spawn,
    suspend,
    wait,
)
from taskfx.task import Raised, ResumeWithError, ResumeWithValue, Returned, Yielded


class TestUnknownInstructions:
    def test_non_instruction_fails_the_task(self) -> None:
        def task():
            yield 5

        outcome = evaluate(task)

        assert not outcome.ok
        assert isinstance(outcome.error, UnknownInstructionError)
        assert "Unknown instruction" in str(outcome.error)

    def test_unknown_instruction_is_fatal_even_when_caught(self) -> None:
        def task():
            try:
                yield "not an instruction"
            except UnknownInstructionError:
                yield send("caught")
            return "recovered"

        outcome = evaluate(task)

        assert isinstance(outcome.error, UnknownInstructionError)
        assert outcome.mail == ("caught",)

    def test_error_raised_during_cleanup_supersedes(self) -> None:
        def task():
            try:
                yield object()
            finally:
                raise RuntimeError("cleanup failed")

        outcome = evaluate(task)

        assert isinstance(outcome.error, RuntimeError)
        assert str(outcome.error) == "cleanup failed"

    def test_unregistered_subclass_is_rejected(self) -> None:
        @dataclass(frozen=True)
        class LoudSend(SendEffect):
            pass

        def task():
            yield LoudSend(message="hi")

        outcome = evaluate(task)

        assert isinstance(outcome.error, UnknownInstructionError)
        assert outcome.mail == ()

    def test_yielding_a_generator_hints_at_yield_from(self) -> None:
        def helper():
            yield send("x")

        def task():
            yield helper()

        outcome = evaluate(task)

        assert "yield from" in str(outcome.error)


class TestStandaloneEvaluation:
    def test_self_resumes_with_a_handle(self) -> None:
        def task():
            handle = yield self_()
            return handle

        outcome = evaluate(task)

        assert isinstance(outcome.value, TaskHandle)
        assert outcome.value.name.endswith("task")

    @pytest.mark.parametrize(
        "instruction",
        [
            lambda: sleep(1),
            lambda: join(),
            lambda: suspend(),
            lambda: spawn(_child_task),
            lambda: wait(Promise()),
        ],
        ids=["sleep", "join", "suspend", "spawn", "pending-wait"],
    )
    def test_scheduler_instructions_fail_without_scheduler(self, instruction) -> None:
        def task():
            try:
                yield instruction()
            except SchedulerRequiredError:
                yield send("caught")
            return "ignored"

        outcome = evaluate(task)

        assert isinstance(outcome.error, SchedulerRequiredError)
        assert outcome.mail == ("caught",)

    def test_evaluation_is_idempotent(self) -> None:
        @do
        def main(n: int):
            total = 0
            for i in range(n):
                value = yield wait(i)
                total += value
                yield send(total)
            return total

        program = main(4)

        first = evaluate(program)
        second = evaluate(program)

        assert first == second
        assert first.value == 6
        assert first.mail == (0, 1, 3, 6)

    def test_arguments_are_passed_to_generator_functions(self) -> None:
        def greet(name, punctuation="!"):
            yield send(f"hello {name}{punctuation}")

        outcome = evaluate(greet, "world", punctuation="?")

        assert outcome.mail == ("hello world?",)


def _child_task():
    yield send("never")


class TestTask:
    def test_step_lifecycle(self) -> None:
        def gen():
            received = yield "first"
            return received * 2

        task = Task(gen())
        assert task.status is TaskStatus.PENDING

        assert task.step(ResumeWithValue()) == Yielded("first")
        assert task.status is TaskStatus.SUSPENDED

        assert task.step(ResumeWithValue(21)) == Returned(42)
        assert task.status is TaskStatus.COMPLETED
        assert task.done

    def test_error_injection_reaches_the_yield(self) -> None:
        def gen():
            try:
                yield "first"
            except KeyError:
                return "handled"

        task = Task(gen())
        task.step(ResumeWithValue())

        assert task.step(ResumeWithError(KeyError("k"))) == Returned("handled")

    def test_uncaught_error_fails_the_task(self) -> None:
        error = ValueError("bad")

        def gen():
            yield "first"
            raise error

        task = Task(gen())
        task.step(ResumeWithValue())

        assert task.step(ResumeWithValue()) == Raised(error)
        assert task.status is TaskStatus.FAILED

    def test_terminal_task_cannot_be_resumed(self) -> None:
        def gen():
            return 1
            yield

        task = Task(gen())
        task.step(ResumeWithValue())

        with pytest.raises(TaskStateError):
            task.step(ResumeWithValue())

    def test_unstarted_task_rejects_a_value(self) -> None:
        def gen():
            yield "first"

        with pytest.raises(TaskStateError):
            Task(gen()).step(ResumeWithValue("too early"))

    def test_from_source_accepts_programs_and_functions(self) -> None:
        def gen(x):
            yield x

        @do
        def prog():
            yield "p"

        assert Task.from_source(gen, 1).step(ResumeWithValue()) == Yielded(1)
        assert Task.from_source(prog()).step(ResumeWithValue()) == Yielded("p")
        assert Task.from_source(Program(gen, (2,))).name == gen.__qualname__

    def test_from_source_rejects_non_tasks(self) -> None:
        with pytest.raises(TypeError):
            Task.from_source(42)
