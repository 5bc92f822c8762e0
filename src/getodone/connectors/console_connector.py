# src/getodone/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..scheduling.sweeper import sweep

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def handle_line(state: AppState, line: str, emit=None) -> str | None:
    """Commands go to the registry; any other text is added as a todo."""
    line = line.strip()
    if not line:
        return None

    with state.lock:
        reply = command_registry.handle(state, line, emit=emit)
        if reply is not None:
            return reply
        return command_registry.handle(state, f"/add {line}")


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    app_name = str(getattr(state.settings, "app_name", "getodone"))
    _print_ts(f"[{app_name}] Type a todo to add it. Use /help for commands. Use /exit to quit.\n")

    # The console appearing counts as the task screen becoming visible.
    try:
        sweep(state.dispatcher)
    except Exception:
        logger.exception("Sweep on console start failed.")

    def emit(text: str) -> None:
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

        try:
            reply = handle_line(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command failed: %s", user_input.split()[0])
            reply = "Something went wrong. See the log for details."

        if reply:
            _print_ts(reply)
