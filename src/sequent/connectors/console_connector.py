# src/sequent/connectors/console_connector.py

from __future__ import annotations

import logging

from ..cli.commands import registry as command_registry
from ..cli.reporter import print_ts
from ..core.state import AppState

logger = logging.getLogger(__name__)


def run_console_loop(state: AppState, *, prompt: str = "sequent> ") -> None:
    logger.info("Console started (taskfile=%s).", state.taskfile)
    print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    while True:
        try:
            user_input = input(prompt).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        # Bare words are shorthand for /run.
        if not user_input.startswith("/"):
            user_input = f"/run {user_input}"

        try:
            response = command_registry.handle(state, user_input, emit=print_ts)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is not None:
            print_ts(response)

    logger.info("Console finished.")
