# src/sequent/tasks/task_errors.py

from __future__ import annotations

from collections.abc import Sequence


class SequentError(Exception):
    """Base class for every error raised by the orchestrator."""


class CyclicDependencyError(SequentError):
    """Resolution met a task that is already on the current dependency path."""

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = list(cycle)
        super().__init__(f"Cyclic dependency: {' -> '.join(self.cycle)}")


class ExecutorBusyError(SequentError):
    """`execute` was called while a run is active and the policy is reject."""


class TaskNotFoundError(SequentError, LookupError):
    """A sequenced task disappeared from the registry before its step ran."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Task '{name}' is not registered")


class TaskFailedError(SequentError):
    """A task callback raised; the original exception is kept as `cause`."""

    def __init__(self, task_name: str, cause: BaseException) -> None:
        self.task_name = task_name
        self.cause = cause
        super().__init__(f"Task '{task_name}' failed: {cause}")


class TaskfileError(SequentError):
    """The taskfile could not be loaded or has no usable register() hook."""
