# src/sequent/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- builds the Executor from settings (busy policy),
- loads a taskfile (a Python file with a `register(executor)` hook),
- wires both into AppState for the console/commands.
"""

from __future__ import annotations

import importlib.util
import logging
from pathlib import Path

from ..config import get_settings
from ..core.state import AppState
from ..tasks.task_errors import TaskfileError
from ..tasks.task_executor import Executor

logger = logging.getLogger(__name__)

TASKFILE_MODULE = "sequent_taskfile"


def create_executor(*, settings=None) -> Executor:
    """
    Create an Executor from the provided settings.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()
    return Executor(busy_policy=settings.busy_policy)


def load_taskfile(executor: Executor, path: str | Path) -> None:
    """
    Import `path` as a module and call its `register(executor)`.

    Any failure (missing file, import error, missing hook) is reported as TaskfileError.
    """
    path = Path(path)
    if not path.is_file():
        raise TaskfileError(f"Taskfile not found: {path}")

    spec = importlib.util.spec_from_file_location(TASKFILE_MODULE, path)
    if spec is None or spec.loader is None:
        raise TaskfileError(f"Cannot import taskfile: {path}")

    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise TaskfileError(f"Failed to import taskfile {path}: {e}") from e

    register = getattr(module, "register", None)
    if not callable(register):
        raise TaskfileError(f"Taskfile {path} must define a callable register(executor)")

    before = len(executor.task_names)
    register(executor)
    logger.info("Loaded taskfile %s (%d task(s) registered)", path, len(executor.task_names) - before)


def create_initial_state(*, settings=None, taskfile: str | Path | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    `taskfile` overrides settings.taskfile; the file is loaded into the new executor.
    """
    if settings is None:
        settings = get_settings()

    executor = create_executor(settings=settings)
    path = Path(taskfile) if taskfile is not None else Path(settings.taskfile)
    load_taskfile(executor, path)

    return AppState(settings=settings, executor=executor, taskfile=path)
