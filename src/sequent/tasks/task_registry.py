# src/sequent/tasks/task_registry.py

from __future__ import annotations

import logging
from collections.abc import Iterator

from .task_models import Task, TaskCallback

logger = logging.getLogger(__name__)


class TaskRegistry:
    """
    In-memory name -> Task mapping.

    Insertion order is kept (dict order); re-adding a name overwrites the
    record in place, so it keeps its original position.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    def add(
        self,
        name: str,
        callback: TaskCallback,
        dependencies: list[str] | None = None,
    ) -> Task:
        if name in self._tasks:
            logger.debug("Overwriting task %r", name)
        task = Task(name=name, callback=callback, dependencies=[] if dependencies is None else dependencies)
        self._tasks[name] = task
        return task

    def get(self, name: str) -> Task | None:
        return self._tasks.get(name)

    def remove(self, name: str) -> bool:
        """Delete `name`; returns False if it was not registered."""
        return self._tasks.pop(name, None) is not None

    def names(self) -> list[str]:
        return list(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[tuple[str, Task]]:
        return iter(list(self._tasks.items()))
