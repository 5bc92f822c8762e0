# src/getodone/scheduling/platform.py

from __future__ import annotations

"""
APScheduler-backed scheduler backend.

Implements the NotificationDispatcher port:
- one-shot nudges are `date` jobs with ids "nudge:<hex>",
- the recurring nudge trigger is an `interval` job with id "recurring:<name>".

With a SQLite jobstore both kinds survive process restarts. Job functions are
module-level so the jobstore can persist them by reference; a recurring job only
carries its name and looks up the callback bound with define_recurring() at startup.
"""

import logging
import threading
import uuid
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger
from plyer import notification as desktop_notification

from ..core.models import ScheduledNotification

logger = logging.getLogger(__name__)

NUDGE_PREFIX = "nudge:"
RECURRING_PREFIX = "recurring:"
MISFIRE_GRACE_SECONDS = 300

_RECURRING_CALLBACKS: dict[str, Callable[[], Any]] = {}
_callbacks_lock = threading.Lock()


def define_recurring(name: str, callback: Callable[[], Any]) -> None:
    """Bind a recurring trigger name to the callable it runs. Call once at startup."""
    with _callbacks_lock:
        _RECURRING_CALLBACKS[name] = callback
    logger.debug("Recurring callback defined name=%s", name)


def undefine_recurring(name: str) -> None:
    with _callbacks_lock:
        _RECURRING_CALLBACKS.pop(name, None)


def fire_recurring(name: str) -> None:
    with _callbacks_lock:
        callback = _RECURRING_CALLBACKS.get(name)
    if callback is None:
        logger.warning("Background trigger %s fired but no callback is defined", name)
        return
    logger.info("Background trigger %s fired", name)
    result = callback()
    logger.info("Background trigger %s finished: %s", name, getattr(result, "value", result))


def deliver_notification(title: str, text: str) -> None:
    """Show a nudge. Desktop notifications are best-effort; the log always gets it."""
    logger.info("%s %s", title, text)
    try:
        desktop_notification.notify(title=title, message=text, app_name="getodone", timeout=10)
    except Exception:
        logger.debug("Desktop notification unavailable", exc_info=True)


class SchedulerPlatform:
    """NotificationDispatcher on top of an APScheduler BackgroundScheduler."""

    def __init__(
        self,
        *,
        jobs_db_path: str | Path | None = None,
        notification_title: str = "Getodone Nudge!",
        timezone: Any = None,
    ) -> None:
        if jobs_db_path is None:
            jobstore: Any = MemoryJobStore()
        else:
            jobstore = SQLAlchemyJobStore(url=f"sqlite:///{Path(jobs_db_path)}")

        kwargs: dict[str, Any] = {
            "jobstores": {"default": jobstore},
            "job_defaults": {"coalesce": True, "max_instances": 1},
        }
        if timezone is not None:
            kwargs["timezone"] = timezone

        self._scheduler = BackgroundScheduler(**kwargs)
        self._title = notification_title

    def start(self, *, paused: bool = False) -> None:
        if self._scheduler.running:
            return
        self._scheduler.start(paused=paused)
        logger.info("Scheduler backend started (paused=%s)", paused)

    def shutdown(self, *, wait: bool = False) -> None:
        if not self._scheduler.running:
            return
        self._scheduler.shutdown(wait=wait)
        logger.info("Scheduler backend stopped")

    # ---- one-shot ----

    def schedule_one_shot(self, text: str, fires_at: datetime | None) -> str:
        identifier = f"{NUDGE_PREFIX}{uuid.uuid4().hex}"
        run_date = fires_at or datetime.now().astimezone()
        self._scheduler.add_job(
            deliver_notification,
            trigger=DateTrigger(run_date=run_date),
            id=identifier,
            name="getodone nudge",
            args=[self._title, text],
            misfire_grace_time=MISFIRE_GRACE_SECONDS,
        )
        logger.debug("Scheduled %s at %s", identifier, run_date.isoformat())
        return identifier

    def list_scheduled(self) -> list[ScheduledNotification]:
        out: list[ScheduledNotification] = []
        for job in self._scheduler.get_jobs():
            if not job.id.startswith(NUDGE_PREFIX):
                continue
            text = str(job.args[1]) if len(job.args) > 1 else ""
            # Jobs added before start() have no next_run_time yet.
            out.append(
                ScheduledNotification(
                    identifier=job.id,
                    fires_at=getattr(job, "next_run_time", None),
                    text=text,
                )
            )
        return out

    def cancel(self, identifier: str) -> None:
        try:
            self._scheduler.remove_job(identifier)
        except JobLookupError:
            # Already fired or removed.
            logger.debug("cancel: %s not found", identifier)

    def cancel_all(self) -> None:
        for entry in self.list_scheduled():
            self.cancel(entry.identifier)

    # ---- recurring ----

    def register_recurring(self, name: str, interval_seconds: int) -> None:
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self._scheduler.add_job(
            fire_recurring,
            trigger=IntervalTrigger(seconds=int(interval_seconds)),
            id=f"{RECURRING_PREFIX}{name}",
            name=name,
            args=[name],
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=MISFIRE_GRACE_SECONDS,
        )

    def unregister_recurring(self, name: str) -> None:
        try:
            self._scheduler.remove_job(f"{RECURRING_PREFIX}{name}")
        except JobLookupError:
            logger.debug("unregister_recurring: %s not registered", name)

    def is_recurring_registered(self, name: str) -> bool:
        return self._scheduler.get_job(f"{RECURRING_PREFIX}{name}") is not None

    def recurring_next_run(self, name: str) -> datetime | None:
        job = self._scheduler.get_job(f"{RECURRING_PREFIX}{name}")
        if job is None:
            return None
        return getattr(job, "next_run_time", None)
