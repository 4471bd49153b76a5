# src/sequent/cli/reporter.py

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime

from ..tasks.task_executor import Executor
from ..tasks.task_models import ExecutorEvent

ReportEmitter = Callable[[str], None]


def ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def print_ts(text: str) -> None:
    print(f"[{ts_local()}] {text}", flush=True)


class RunReporter:
    """
    Human-readable run report built from executor events.

    One line per event, timestamped; per-task and total durations.
    """

    def __init__(self, emit: ReportEmitter = print_ts) -> None:
        self._emit = emit
        self._run_started = 0.0
        self._task_started: dict[str, float] = {}
        self.completed = 0
        self.failed: list[str] = []

    def attach(self, executor: Executor) -> RunReporter:
        executor.on(ExecutorEvent.START, self.on_start)
        executor.on(ExecutorEvent.TASK_START, self.on_task_start)
        executor.on(ExecutorEvent.TASK_DONE, self.on_task_done)
        executor.on(ExecutorEvent.TASK_ERROR, self.on_task_error)
        executor.on(ExecutorEvent.FINISH, self.on_finish)
        return self

    def detach(self, executor: Executor) -> None:
        executor.off(ExecutorEvent.START, self.on_start)
        executor.off(ExecutorEvent.TASK_START, self.on_task_start)
        executor.off(ExecutorEvent.TASK_DONE, self.on_task_done)
        executor.off(ExecutorEvent.TASK_ERROR, self.on_task_error)
        executor.off(ExecutorEvent.FINISH, self.on_finish)

    def on_start(self) -> None:
        self._run_started = time.monotonic()
        self._task_started.clear()
        self.completed = 0
        self.failed = []
        self._emit("Run started")

    def on_task_start(self, name: str) -> None:
        self._task_started[name] = time.monotonic()
        self._emit(f"  -> {name}")

    def on_task_done(self, name: str) -> None:
        self.completed += 1
        self._emit(f"  ok {name} ({self._elapsed(name):.2f}s)")

    def on_task_error(self, name: str, error: BaseException) -> None:
        self.failed.append(name)
        self._emit(f"  FAILED {name} ({self._elapsed(name):.2f}s): {error}")

    def on_finish(self) -> None:
        total = time.monotonic() - self._run_started
        self._emit(f"Run finished: {self.completed} task(s) in {total:.2f}s")

    def _elapsed(self, name: str) -> float:
        started = self._task_started.pop(name, None)
        return 0.0 if started is None else time.monotonic() - started
