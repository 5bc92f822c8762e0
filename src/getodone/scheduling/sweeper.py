# src/getodone/scheduling/sweeper.py

from __future__ import annotations

import logging
from datetime import datetime

from ..core.ports import NotificationDispatcher

logger = logging.getLogger(__name__)


def _aware(dt: datetime) -> datetime:
    # Naive timestamps are taken as local time.
    return dt if dt.tzinfo is not None else dt.astimezone()


def sweep(dispatcher: NotificationDispatcher, now: datetime | None = None) -> list[str]:
    """
    Cancel one-shot notifications whose fire instant has already passed.

    Some backends leave expired one-shot entries behind (e.g. a nudge that was due
    while the process was down). Entries without a fire time are left alone.
    Returns the cancelled identifiers; running it again is a no-op.
    """
    now = _aware(now or datetime.now().astimezone())

    cancelled: list[str] = []
    for entry in dispatcher.list_scheduled():
        if entry.fires_at is None:
            continue
        if _aware(entry.fires_at) < now:
            try:
                dispatcher.cancel(entry.identifier)
            except Exception:
                logger.exception("Failed to cancel stale notification %s", entry.identifier)
                continue
            cancelled.append(entry.identifier)

    if cancelled:
        logger.info("Swept %d stale notification(s)", len(cancelled))
    return cancelled
