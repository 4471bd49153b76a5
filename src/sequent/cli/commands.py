# src/sequent/cli/commands.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence

from ..cli.reporter import RunReporter
from ..core.state import AppState
from ..tasks.task_errors import SequentError
from ..tasks.task_executor import Executor

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, list[str], CommandEmitter | None], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /run, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(state, args, emit)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


async def run_tasks(executor: Executor, names: Sequence[str]) -> None:
    """Start a run and wait for it (usable with asyncio.run from sync code)."""
    await executor.execute(*names)


def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    names = state.executor.task_names
    if not names:
        return "No tasks registered."
    lines = [f"Tasks ({len(names)}):"]
    for name in names:
        task = state.executor.get_task(name)
        deps = ", ".join(task.dependencies) if task and task.dependencies else "(no deps)"
        lines.append(f"  {name} <- {deps}")
    return "\n".join(lines)


def cmd_plan(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /plan          -> sequence for all tasks
    /plan a b      -> sequence for a and b (with dependencies)
    """
    try:
        sequence = state.executor.resolve(*args)
    except SequentError as e:
        return f"Cannot plan: {e}"
    if not sequence:
        return "Nothing to run."
    return "Plan: " + " -> ".join(sequence)


def cmd_run(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /run           -> run every registered task
    /run a b       -> run a and b (with dependencies)

    With `emit`, progress lines are streamed while the run is active.
    """
    reporter = RunReporter(emit).attach(state.executor) if emit is not None else None
    try:
        state.last_sequence = state.executor.resolve(*args)
        asyncio.run(run_tasks(state.executor, args))
    except SequentError as e:
        state.last_error = str(e)
        logger.debug("Run from console failed", exc_info=True)
        return f"Run failed: {e}"
    finally:
        if reporter is not None:
            reporter.detach(state.executor)

    state.last_error = None
    return f"Done: {len(state.last_sequence)} task(s)."


def cmd_status(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    executor = state.executor
    last = " -> ".join(state.last_sequence) if state.last_sequence else "(none)"
    return (
        "Status:\n"
        f"  Taskfile: {state.taskfile or '(none)'}\n"
        f"  Tasks: {len(executor.task_names)}\n"
        f"  State: {executor.state.value} (busy policy: {executor.busy_policy.value})\n"
        f"  Last run: {last}\n"
        f"  Last error: {state.last_error or '(none)'}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="List registered tasks and their dependencies.", aliases=["ls"])
registry.register("plan", cmd_plan, help_text="Show the execution order: /plan [task ...].")
registry.register("run", cmd_run, help_text="Run tasks (all when none given): /run [task ...].")
registry.register("status", cmd_status, help_text="Show taskfile, run state and last run.")
