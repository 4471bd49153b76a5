# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from sequent.tasks.task_executor import Executor
from sequent.tasks.task_models import BusyPolicy


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap/commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any local .env.
    """
    return SimpleNamespace(
        app_name="sequent-test",
        log_level="DEBUG",
        log_dir=tmp_path / "logs",
        log_to_file=False,
        taskfile=tmp_path / "tasks.py",
        busy_policy=BusyPolicy.REJECT,
    )


@pytest.fixture()
def executor() -> Executor:
    return Executor()


@pytest.fixture()
def counter() -> dict[str, int]:
    return {"value": 0}


@pytest.fixture()
def arithmetic(executor: Executor, counter: dict[str, int]) -> Executor:
    """Add1, Multiply3, Add7 operating on a shared counter starting at 0."""

    def add1() -> None:
        counter["value"] += 1

    def multiply3() -> None:
        counter["value"] *= 3

    def add7() -> None:
        counter["value"] += 7

    executor.add_task("Add1", add1)
    executor.add_task("Multiply3", multiply3)
    executor.add_task("Add7", add7)
    return executor
