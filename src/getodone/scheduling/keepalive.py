# src/getodone/scheduling/keepalive.py

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class KeepAliveService:
    """
    Keeps the interpreter alive while enabled.

    The scheduler backend runs on daemon threads; a non-daemon waiter thread stops the
    process from exiting when the console closes. Independent of nudge scheduling.
    """

    def __init__(
        self,
        *,
        notify: Callable[[str, str], None] | None = None,
        title: str = "Getodone Running",
    ) -> None:
        self._notify = notify
        self._title = title
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    def start(self, message: str) -> None:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                logger.info("Keep-alive already running.")
                return
            self._stop = threading.Event()
            self._thread = threading.Thread(target=self._stop.wait, name="getodone-keepalive", daemon=False)
            self._thread.start()
        logger.info("Keep-alive started: %s", message)
        if self._notify is not None:
            self._notify(self._title, message)

    def stop(self) -> None:
        with self._lock:
            thread = self._thread
            self._thread = None
            self._stop.set()
        if thread is None:
            logger.info("Keep-alive was not running.")
            return
        thread.join(timeout=5.0)
        logger.info("Keep-alive stopped.")

    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()
