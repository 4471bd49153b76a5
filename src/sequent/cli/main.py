# src/sequent/cli/main.py

"""
CLI entrypoint.

Initializes logging, loads the taskfile into an Executor, then either:
- lists tasks, prints the plan, opens the console, or
- runs the requested tasks (all when none given) with a progress report.

Exit codes: 0 success, 1 a task failed, 2 taskfile/cycle/usage error.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from ..cli.bootstrap import create_initial_state
from ..cli.commands import cmd_list, cmd_plan, run_tasks
from ..cli.reporter import RunReporter
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..tasks.task_errors import SequentError, TaskfileError, TaskFailedError, TaskNotFoundError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_TASK_FAILED = 1
EXIT_USAGE = 2


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="sequent", description="Run tasks in dependency order")
    parser.add_argument("tasks", nargs="*", metavar="NAME", help="Tasks to run (default: all)")
    parser.add_argument("-f", "--taskfile", help="Python file defining register(executor)")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--list", action="store_true", help="List registered tasks and exit")
    mode.add_argument("--plan", action="store_true", help="Print the execution order and exit")
    mode.add_argument("--console", action="store_true", help="Start the interactive console")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(
        log_dir=settings.log_dir,
        console_level=console_level,
        log_to_file=settings.log_to_file,
    )

    try:
        state = create_initial_state(settings=settings, taskfile=args.taskfile)
    except TaskfileError as e:
        logger.error("%s", e)
        return EXIT_USAGE

    if args.list:
        print(cmd_list(state, []))
        return EXIT_OK

    if args.plan:
        print(cmd_plan(state, args.tasks))
        return EXIT_OK

    if args.console:
        run_console_loop(state)
        return EXIT_OK

    RunReporter().attach(state.executor)
    try:
        asyncio.run(run_tasks(state.executor, args.tasks))
    except (TaskFailedError, TaskNotFoundError) as e:
        logger.error("Run failed: %s", e)
        return EXIT_TASK_FAILED
    except SequentError as e:
        logger.error("%s", e)
        return EXIT_USAGE

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
