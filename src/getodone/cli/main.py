# src/getodone/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, starts the scheduler backend, then runs the
console in the main thread. Recurring nudges fire on the backend's worker threads.
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state, start_background
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..scheduling.platform import undefine_recurring

logger = logging.getLogger(__name__)


def _shutdown(state) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.keep_alive.stop()
    except Exception:
        logger.debug("Keep-alive stop failed.", exc_info=True)

    try:
        undefine_recurring(state.controller.trigger_name)
        state.dispatcher.shutdown(wait=False)
    except Exception:
        logger.exception("Scheduler shutdown failed.")


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.INFO)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)
    start_background(state)

    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError, AttributeError):
        # Not the main thread, or the platform lacks SIGTERM.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(state)
            if state.keep_alive.is_running():
                logger.info("Keep-alive is on. Nudges continue in the background. Press Ctrl+C to stop.")
                stop_main.wait()
        else:
            logger.info("Console disabled. Running background nudges only. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
