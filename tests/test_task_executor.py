# tests/test_task_executor.py

from __future__ import annotations

import asyncio

import pytest

from sequent.tasks.task_errors import (
    CyclicDependencyError,
    ExecutorBusyError,
    TaskFailedError,
    TaskNotFoundError,
)
from sequent.tasks.task_executor import Executor
from sequent.tasks.task_models import BusyPolicy, ExecutorEvent, RunState

from .fakes import EventRecorder


@pytest.mark.asyncio
async def test_execute_without_arguments_runs_everything_in_registration_order(
    arithmetic: Executor, counter: dict[str, int]
) -> None:
    await arithmetic.execute()
    assert counter["value"] == 10


@pytest.mark.asyncio
async def test_execute_only_runs_given_tasks(arithmetic: Executor, counter: dict[str, int]) -> None:
    await arithmetic.execute("Multiply3", "Add7")
    assert counter["value"] == 7


@pytest.mark.asyncio
async def test_execute_respects_requested_order(arithmetic: Executor, counter: dict[str, int]) -> None:
    await arithmetic.execute("Add7", "Multiply3")
    assert counter["value"] == 21


@pytest.mark.asyncio
async def test_run_is_an_alias_of_execute(arithmetic: Executor, counter: dict[str, int]) -> None:
    assert Executor.run is Executor.execute
    await arithmetic.run("Add1")
    assert counter["value"] == 1


@pytest.mark.asyncio
async def test_dependencies_run_before_dependents(executor: Executor) -> None:
    log: list[str] = []
    executor.add_task("deploy", lambda: log.append("deploy"), ["test", "lint"])
    executor.add_task("test", lambda: log.append("test"), ["build"])
    executor.add_task("build", lambda: log.append("build"))
    executor.add_task("lint", lambda: log.append("lint"))

    await executor.execute("deploy", "build")

    assert log == ["build", "test", "lint", "deploy"]


@pytest.mark.asyncio
async def test_event_order_for_two_independent_tasks(executor: Executor) -> None:
    executor.add_task("A", lambda: None).add_task("B", lambda: None)
    recorder = EventRecorder().attach(executor)

    await executor.execute()

    assert recorder.events == [
        ("start",),
        ("task:start", "A"),
        ("task:done", "A"),
        ("task:start", "B"),
        ("task:done", "B"),
        ("finish",),
    ]


@pytest.mark.asyncio
async def test_subscribers_added_after_execute_see_every_event(executor: Executor) -> None:
    executor.add_task("A", lambda: None)

    run = executor.execute()
    recorder = EventRecorder().attach(executor)
    await run

    assert recorder.events[0] == ("start",)
    assert recorder.events[-1] == ("finish",)
    assert recorder.names("task:done") == ["A"]


@pytest.mark.asyncio
async def test_first_task_waits_until_caller_yields(arithmetic: Executor, counter: dict[str, int]) -> None:
    run = arithmetic.execute()

    assert counter["value"] == 0
    assert arithmetic.is_running
    assert arithmetic.state is RunState.RUNNING

    await run
    assert counter["value"] == 10
    assert arithmetic.state is RunState.IDLE


@pytest.mark.asyncio
async def test_empty_registry_still_completes(executor: Executor) -> None:
    recorder = EventRecorder().attach(executor)

    await executor.execute()

    assert recorder.events == [("start",), ("finish",)]
    assert not executor.is_running


@pytest.mark.asyncio
async def test_unknown_requested_names_still_complete(arithmetic: Executor, counter: dict[str, int]) -> None:
    recorder = EventRecorder().attach(arithmetic)

    await arithmetic.execute("nope", "also-nope")

    assert counter["value"] == 0
    assert recorder.events == [("start",), ("finish",)]


@pytest.mark.asyncio
async def test_done_flag_is_set_and_tasks_rerun(arithmetic: Executor, counter: dict[str, int]) -> None:
    await arithmetic.execute("Add1")
    task = arithmetic.get_task("Add1")
    assert task is not None and task.done is True
    assert arithmetic.get_task("Add7").done is False  # type: ignore[union-attr]

    # done is advisory: a second run executes the task again.
    await arithmetic.execute("Add1")
    assert counter["value"] == 2
    assert task.done is True


@pytest.mark.asyncio
async def test_async_callbacks_are_awaited(executor: Executor) -> None:
    log: list[str] = []

    async def fetch() -> None:
        await asyncio.sleep(0.01)
        log.append("fetch")

    executor.add_task("fetch", fetch)
    executor.add_task("parse", lambda: log.append("parse"), ["fetch"])

    await executor.execute("parse")

    assert log == ["fetch", "parse"]
    assert executor.get_task("fetch").done is True  # type: ignore[union-attr]


@pytest.mark.asyncio
async def test_second_execute_is_rejected_while_running(arithmetic: Executor, counter: dict[str, int]) -> None:
    recorder = EventRecorder().attach(arithmetic)
    first = arithmetic.execute()

    with pytest.raises(ExecutorBusyError):
        arithmetic.execute("Add7")

    await first
    assert counter["value"] == 10
    assert recorder.events.count(("start",)) == 1
    assert recorder.events.count(("finish",)) == 1

    # Idle again: new runs are accepted.
    await arithmetic.execute("Add1")
    assert counter["value"] == 11


@pytest.mark.asyncio
async def test_queue_policy_runs_one_after_another() -> None:
    executor = Executor(busy_policy=BusyPolicy.QUEUE)
    log: list[str] = []

    async def slow(name: str) -> None:
        await asyncio.sleep(0.01)
        log.append(name)

    for name in ("a", "b", "c", "d"):
        executor.add_task(name, lambda name=name: slow(name))
    recorder = EventRecorder().attach(executor)

    first = executor.execute("a", "b")
    second = executor.execute("c")
    third = executor.execute("d")
    await asyncio.gather(first, second, third)

    assert log == ["a", "b", "c", "d"]
    assert [e[0] for e in recorder.events if e[0] in ("start", "finish")] == [
        "start",
        "finish",
        "start",
        "finish",
        "start",
        "finish",
    ]
    assert executor.state is RunState.IDLE


@pytest.mark.asyncio
async def test_queued_run_resolves_when_it_starts() -> None:
    executor = Executor(busy_policy="queue")
    log: list[str] = []

    def first_task() -> None:
        log.append("first")
        executor.add_task("late", lambda: log.append("late"))

    executor.add_task("first", first_task)

    first = executor.execute("first")
    second = executor.execute("late")
    await asyncio.gather(first, second)

    assert log == ["first", "late"]


@pytest.mark.asyncio
async def test_cycle_is_raised_synchronously_and_leaves_executor_idle(executor: Executor) -> None:
    executor.add_task("A", lambda: None, ["B"])
    executor.add_task("B", lambda: None, ["A"])
    recorder = EventRecorder().attach(executor)

    with pytest.raises(CyclicDependencyError):
        executor.execute()

    assert executor.state is RunState.IDLE
    assert recorder.events == []


@pytest.mark.asyncio
async def test_task_removed_mid_run_fails_the_run(executor: Executor) -> None:
    executor.add_task("a", lambda: executor.remove_task("b"))
    executor.add_task("b", lambda: None)
    recorder = EventRecorder().attach(executor)

    with pytest.raises(TaskNotFoundError) as excinfo:
        await executor.execute()

    assert excinfo.value.name == "b"
    assert ("finish",) not in recorder.events
    assert executor.state is RunState.IDLE


@pytest.mark.asyncio
async def test_failing_callback_fails_the_run(executor: Executor) -> None:
    log: list[str] = []

    def boom() -> None:
        raise ValueError("disk full")

    executor.add_task("boom", boom)
    executor.add_task("after", lambda: log.append("after"), ["boom"])
    recorder = EventRecorder().attach(executor)

    with pytest.raises(TaskFailedError) as excinfo:
        await executor.execute("after")

    assert excinfo.value.task_name == "boom"
    assert isinstance(excinfo.value.cause, ValueError)
    assert isinstance(excinfo.value.__cause__, ValueError)
    assert log == []
    assert executor.get_task("boom").done is False  # type: ignore[union-attr]
    assert recorder.events == [("start",), ("task:start", "boom"), ("task:error", "boom", "ValueError")]
    assert executor.state is RunState.IDLE


@pytest.mark.asyncio
async def test_handler_errors_do_not_break_the_run(arithmetic: Executor, counter: dict[str, int]) -> None:
    def broken(name: str) -> None:
        raise RuntimeError("subscriber bug")

    arithmetic.on(ExecutorEvent.TASK_DONE, broken)

    await arithmetic.execute()
    assert counter["value"] == 10


@pytest.mark.asyncio
async def test_executor_is_idle_when_finish_is_published(executor: Executor) -> None:
    seen: list[bool] = []
    executor.add_task("A", lambda: None)
    executor.on("finish", lambda: seen.append(executor.is_running))

    await executor.execute()

    assert seen == [False]


@pytest.mark.asyncio
async def test_cancelled_run_returns_to_idle(executor: Executor) -> None:
    async def forever() -> None:
        await asyncio.sleep(10)

    executor.add_task("forever", forever)
    run = executor.execute()
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    run.cancel()
    with pytest.raises(asyncio.CancelledError):
        await run
    assert executor.state is RunState.IDLE


@pytest.mark.asyncio
async def test_run_cancelled_before_first_step_returns_to_idle(executor: Executor) -> None:
    executor.add_task("A", lambda: None)
    run = executor.execute()
    run.cancel()

    with pytest.raises(asyncio.CancelledError):
        await run
    assert executor.state is RunState.IDLE


def test_execute_requires_running_loop(executor: Executor) -> None:
    with pytest.raises(RuntimeError):
        executor.execute()
    assert executor.state is RunState.IDLE


@pytest.mark.asyncio
async def test_long_sequences_do_not_grow_the_stack(executor: Executor) -> None:
    total = {"n": 0}

    def bump() -> None:
        total["n"] += 1

    for i in range(2000):
        executor.add_task(f"t{i}", bump, [f"t{i - 1}"] if i else [])

    await executor.execute(f"t{1999}")
    assert total["n"] == 2000


def _queued_executor(log: list[str]) -> Executor:
    executor = Executor(busy_policy=BusyPolicy.QUEUE)

    async def slow(name: str) -> None:
        await asyncio.sleep(0.01)
        log.append(name)

    for name in ("a", "b", "c"):
        executor.add_task(name, lambda name=name: slow(name))
    return executor


@pytest.mark.asyncio
async def test_queued_run_cancelled_before_it_starts_does_not_block_later_runs() -> None:
    log: list[str] = []
    executor = _queued_executor(log)

    first = executor.execute("a")
    queued = executor.execute("b")
    queued.cancel()

    await first
    with pytest.raises(asyncio.CancelledError):
        await queued

    assert executor.state is RunState.IDLE
    await asyncio.wait_for(executor.execute("c"), timeout=1.0)
    assert log == ["a", "c"]


@pytest.mark.asyncio
async def test_queued_run_cancelled_while_waiting_keeps_queue_order() -> None:
    log: list[str] = []
    executor = _queued_executor(log)

    first = executor.execute("a")
    queued = executor.execute("b")
    await asyncio.sleep(0)
    queued.cancel()
    third = executor.execute("c")

    await asyncio.wait_for(asyncio.gather(first, third), timeout=1.0)
    with pytest.raises(asyncio.CancelledError):
        await queued

    assert log == ["a", "c"]
    assert executor.state is RunState.IDLE
