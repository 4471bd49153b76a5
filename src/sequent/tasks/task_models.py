# src/sequent/tasks/task_models.py

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum

TaskCallback = Callable[[], None | Awaitable[None]]


class RunState(StrEnum):
    """
    Executor run state.

    idle -> running when a run begins, running -> idle when the sequence is
    walked to the end, a task fails, or the run task is cancelled.
    """

    IDLE = "idle"
    RUNNING = "running"


class BusyPolicy(StrEnum):
    """What `execute` does when a run is already active."""

    REJECT = "reject"
    QUEUE = "queue"

    @classmethod
    def from_env(cls, raw: str | None) -> BusyPolicy:
        if not raw:
            return cls.REJECT
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.REJECT


class ExecutorEvent(StrEnum):
    START = "start"
    TASK_START = "task:start"
    TASK_DONE = "task:done"
    TASK_ERROR = "task:error"
    FINISH = "finish"


@dataclass(slots=True)
class Task:
    name: str
    callback: TaskCallback
    dependencies: list[str] = field(default_factory=list)

    # Advisory: set after the callback returns, never reset, never used to skip.
    done: bool = False
