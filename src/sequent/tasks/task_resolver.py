# src/sequent/tasks/task_resolver.py

"""
Dependency resolution.

Turns a list of requested task names into one flat execution sequence:
- dependencies come before the task that lists them (depth-first, left-to-right),
- a name appears once, at the position of its first resolution,
- unknown names (requested or as dependencies) are dropped,
- a dependency chain that loops back onto itself raises CyclicDependencyError.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from ..core.ports import TaskLookup
from .task_errors import CyclicDependencyError

logger = logging.getLogger(__name__)


def resolve_sequence(registry: TaskLookup, requested: Iterable[str]) -> list[str]:
    sequence: list[str] = []
    placed: set[str] = set()

    for root in requested:
        if root in placed:
            continue
        root_task = registry.get(root)
        if root_task is None:
            logger.debug("Skipping unknown task %r", root)
            continue

        # Explicit stack instead of recursion: one frame per task on the current path.
        stack: list[tuple[str, Iterator[str]]] = [(root, iter(root_task.dependencies))]
        on_path: set[str] = {root}

        while stack:
            name, deps = stack[-1]
            for dep in deps:
                if dep in placed:
                    continue
                if dep in on_path:
                    path = [frame[0] for frame in stack]
                    raise CyclicDependencyError(path[path.index(dep):] + [dep])
                dep_task = registry.get(dep)
                if dep_task is None:
                    logger.debug("Skipping unknown dependency %r of %r", dep, name)
                    continue
                stack.append((dep, iter(dep_task.dependencies)))
                on_path.add(dep)
                break
            else:
                stack.pop()
                on_path.discard(name)
                placed.add(name)
                sequence.append(name)

    return sequence
