# src/sequent/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the resolver and the event emitter.

The resolver only needs name -> task lookups, so it depends on a Protocol
instead of the concrete registry; tests pass small dict-backed fakes.
"""

from collections.abc import Callable
from typing import Any, Protocol

from ..tasks.task_models import Task

EventHandler = Callable[..., Any]


class TaskLookup(Protocol):
    """Read side of the task registry."""

    def get(self, name: str) -> Task | None: ...
