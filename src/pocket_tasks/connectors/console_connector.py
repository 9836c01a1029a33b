# src/pocket_tasks/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def handle_line(state: AppState, line: str) -> str | None:
    """Run one console line. Returns the reply, or None for blank input."""
    line = line.strip()
    if not line:
        return None

    # After shutdown nothing reaches storage any more; don't pretend otherwise.
    if state.writer.closed:
        logger.warning("Ignoring console input after storage shutdown: %r", line)
        return "Storage is closed; changes can no longer be saved."

    # Bare text is shorthand for /add.
    if not line.startswith("/"):
        line = f"/add {line}"

    try:
        reply = command_registry.handle(state, line)
    except Exception:
        logger.exception("Command handler crashed.")
        reply = "Internal error while handling a command."
    return reply


def run_console_loop(state: AppState, read: Callable[[str], str] = input) -> None:
    """
    Blocking REPL on the main thread. The event loop runs the snapshot writer
    in a background thread; dispatches cross over via the writer's submit().
    """
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "pocket-tasks"))
    logger.info("Console connector started.")
    print(f"[{_ts_local()}] {app_name}: type /help for commands, /exit to quit.\n")

    while True:
        try:
            user_input = read(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        reply = handle_line(state, user_input)
        if reply is not None:
            print(reply)

    logger.info("Console connector finished.")
