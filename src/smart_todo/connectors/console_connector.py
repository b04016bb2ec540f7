# src/smart_todo/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def handle_line(state: AppState, line: str, emit=None) -> str | None:
    """
    One REPL step. Slash commands go to the registry; any other text is
    shorthand for /add on the selected date.
    """
    line = line.strip()
    if not line:
        return None
    if not line.startswith("/"):
        line = "/add " + line

    try:
        return command_registry.handle(state, line, emit=emit)
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (date=%s).", state.selected_date)
    _print_ts("[CONSOLE] Type a task to add it. Use /help for commands. Use /exit to quit.\n")
    print(handle_line(state, "/list"))

    def emit(text: str) -> None:
        # Immediate user-visible feedback for slow operations (weather fetch)
        print(f"[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            user_input = input(">>> ").strip()
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

        reply = handle_line(state, user_input, emit=emit)
        if reply is not None:
            print(reply)

    logger.info("Console connector finished.")
