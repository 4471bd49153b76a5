# src/sequent/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from ..tasks.task_executor import Executor


@dataclass
class AppState:
    # Store Settings on the state for easy access in commands/connectors.
    settings: object

    executor: Executor
    taskfile: Path | None = None

    # Outcome of the most recent run started from the CLI/console.
    last_sequence: list[str] = field(default_factory=list)
    last_error: str | None = None
