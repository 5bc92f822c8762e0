# src/getodone/scheduling/controller.py

from __future__ import annotations

"""
Nudge schedule controller.

Derives the schedule from preferences every time they are saved:
- disabled          -> nothing scheduled at all
- one-shot modes    -> generate now, deliver once at a computed instant
- recurring modes   -> (re)register the single background trigger

and runs the generate-and-notify cycle for each background firing or manual test.
The controller holds no schedule state of its own; the dispatcher owns the triggers.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Any

from ..core.errors import (
    ConfigurationMissing,
    GenerationError,
    NoPendingTasks,
    SchedulingFailure,
)
from ..core.models import DEFAULT_CUSTOM_TIME, CycleResult, FrequencyMode, Preferences
from ..core.ports import MessageGenerator, NotificationDispatcher, PreferenceRepo, TaskRepo
from ..core.prompt import compose_prompt, pending_tasks

logger = logging.getLogger(__name__)

BACKGROUND_TASK_NAME = "motivation-task"

ONE_SHOT_SOON_DELAY = timedelta(seconds=60)
# Background deliveries are not immediate: give the notification backend a moment.
CYCLE_DELIVERY_DELAY = timedelta(seconds=1)

DEFAULT_INTERVAL_SECONDS = 24 * 60 * 60
FREQUENCY_INTERVALS: dict[FrequencyMode, int] = {
    FrequencyMode.HOURLY: 60 * 60,
    FrequencyMode.THREE_PER_DAY: 8 * 60 * 60,
    FrequencyMode.DAILY: 24 * 60 * 60,
}


def _now_local() -> datetime:
    return datetime.now().astimezone()


def interval_for(mode: FrequencyMode) -> int:
    return FREQUENCY_INTERVALS.get(mode, DEFAULT_INTERVAL_SECONDS)


def parse_custom_time(raw: str | None) -> tuple[int, int]:
    """Parse "HH:MM"; anything missing or invalid falls back to 10:00."""
    text = (raw or "").strip() or DEFAULT_CUSTOM_TIME
    try:
        hh, mm = text.split(":", 1)
        hour, minute = int(hh), int(mm)
        if 0 <= hour <= 23 and 0 <= minute <= 59:
            return hour, minute
    except ValueError:
        pass
    if raw:
        logger.warning("Invalid custom time %r, using %s", raw, DEFAULT_CUSTOM_TIME)
    return parse_custom_time(DEFAULT_CUSTOM_TIME)


def _wall_clock(day: date, hour: int, minute: int, now: datetime) -> datetime:
    """The instant the clocks in now's zone show day hour:minute."""
    naive = datetime.combine(day, time(hour, minute))
    tz = now.tzinfo
    if tz is None:
        return naive
    if isinstance(tz, timezone) and now.utcoffset() == now.astimezone().utcoffset():
        # Fixed offset taken from the system zone; `day` may be on the other side of a DST change.
        return naive.astimezone()
    return naive.replace(tzinfo=tz)


def next_fire_at(custom_time: str | None, now: datetime) -> datetime:
    """
    Today's wall-clock custom_time, or the same time tomorrow if that is not in the future.

    An instant equal to now counts as past.
    """
    hour, minute = parse_custom_time(custom_time)
    target = _wall_clock(now.date(), hour, minute, now)
    if target <= now:
        target = _wall_clock(now.date() + timedelta(days=1), hour, minute, now)
    return target


class ScheduleKind(str, Enum):
    DISABLED = "disabled"
    ONE_SHOT = "one_shot"
    RECURRING = "recurring"


@dataclass(slots=True, frozen=True)
class ScheduleOutcome:
    """What apply_preferences ended up scheduling."""

    kind: ScheduleKind
    fires_at: datetime | None = None
    interval_seconds: int | None = None
    message: str | None = None
    identifier: str | None = None


@dataclass(slots=True, frozen=True)
class CycleReport:
    """CycleResult plus the details a UI wants to show for a manual run."""

    result: CycleResult
    message: str | None = None
    detail: str | None = None


class ScheduleController:
    def __init__(
        self,
        tasks: TaskRepo,
        preferences: PreferenceRepo,
        generator: MessageGenerator,
        dispatcher: NotificationDispatcher,
        *,
        clock: Callable[[], datetime] = _now_local,
        trigger_name: str = BACKGROUND_TASK_NAME,
    ) -> None:
        self._tasks = tasks
        self._preferences = preferences
        self._generator = generator
        self._dispatcher = dispatcher
        self._clock = clock
        self._trigger_name = trigger_name
        # At most one cycle in flight; overlapping firings are skipped.
        self._in_flight = threading.Lock()

    @property
    def trigger_name(self) -> str:
        return self._trigger_name

    # ---- dispatcher calls ----

    def _call(self, what: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args)
        except SchedulingFailure:
            raise
        except Exception as e:
            logger.exception("Scheduling failed: %s", what)
            raise SchedulingFailure(f"Could not {what}: {e}") from e

    def _unregister_recurring(self) -> None:
        if self._call("query the background trigger", self._dispatcher.is_recurring_registered, self._trigger_name):
            self._call("unregister the background trigger", self._dispatcher.unregister_recurring, self._trigger_name)
            logger.info("Background trigger %s unregistered", self._trigger_name)

    def _cancel_one_shots(self) -> None:
        self._call("cancel scheduled notifications", self._dispatcher.cancel_all)

    def _schedule(self, text: str, fires_at: datetime | None) -> str:
        return self._call("schedule a notification", self._dispatcher.schedule_one_shot, text, fires_at)

    # ---- preferences -> schedule ----

    def apply_preferences(self, prefs: Preferences) -> ScheduleOutcome:
        """
        Re-derive the schedule from freshly saved preferences.

        Raises (user-initiated, surfaced by the caller):
        - ConfigurationMissing / NoPendingTasks / GenerationError for one-shot modes
        - SchedulingFailure when the scheduler backend refuses a call
        """
        if not prefs.notifications_enabled:
            self._unregister_recurring()
            self._cancel_one_shots()
            logger.info("Notifications disabled; all triggers cleared")
            return ScheduleOutcome(kind=ScheduleKind.DISABLED)

        if prefs.frequency_mode.is_one_shot:
            return self._apply_one_shot(prefs)

        return self._apply_recurring(prefs)

    def _apply_one_shot(self, prefs: Preferences) -> ScheduleOutcome:
        # One-shot and recurring delivery are mutually exclusive.
        self._unregister_recurring()

        if not prefs.is_configured:
            raise ConfigurationMissing()

        pending = pending_tasks(self._tasks.list_tasks())
        if not pending:
            raise NoPendingTasks()

        message = self._generator.generate(compose_prompt(pending, prefs.tone), prefs.api_key, prefs.model_id)
        if not message:
            raise GenerationError("The AI returned an empty message.")

        now = self._clock()
        if prefs.frequency_mode == FrequencyMode.ONE_SHOT_SOON:
            fires_at = now + ONE_SHOT_SOON_DELAY
        else:
            fires_at = next_fire_at(prefs.custom_time, now)

        self._cancel_one_shots()
        identifier = self._schedule(message, fires_at)
        logger.info("One-shot nudge %s scheduled for %s", identifier, fires_at.isoformat())
        return ScheduleOutcome(
            kind=ScheduleKind.ONE_SHOT,
            fires_at=fires_at,
            message=message,
            identifier=identifier,
        )

    def _apply_recurring(self, prefs: Preferences) -> ScheduleOutcome:
        interval = interval_for(prefs.frequency_mode)

        self._unregister_recurring()
        self._cancel_one_shots()
        self._call(
            "register the background trigger",
            self._dispatcher.register_recurring,
            self._trigger_name,
            interval,
        )
        logger.info("Background trigger %s registered with interval: %d minutes", self._trigger_name, interval // 60)
        return ScheduleOutcome(kind=ScheduleKind.RECURRING, interval_seconds=interval)

    # ---- cycle ----

    def run_cycle(self) -> CycleResult:
        """Body of every background firing. Never raises."""
        return self._run_cycle(require_pending=False).result

    def trigger_now(self) -> CycleReport:
        """Manual "test nudge" entry point."""
        logger.info("Manual nudge requested")
        return self._run_cycle(require_pending=True)

    def _run_cycle(self, *, require_pending: bool) -> CycleReport:
        if not self._in_flight.acquire(blocking=False):
            logger.warning("Nudge cycle already in flight; skipping this invocation")
            return CycleReport(CycleResult.NO_DATA, detail="A nudge is already being generated.")
        try:
            report = self._cycle_body(require_pending=require_pending)
        except Exception as e:
            logger.exception("Nudge cycle failed")
            report = CycleReport(CycleResult.FAILED, detail=str(e) or e.__class__.__name__)
        finally:
            self._in_flight.release()

        logger.info("Nudge cycle finished: %s", report.result.value)
        return report

    def _cycle_body(self, *, require_pending: bool) -> CycleReport:
        tasks = self._tasks.list_tasks()
        prefs = self._preferences.get_preferences()

        if prefs is None or not prefs.is_configured:
            logger.info("AI settings not configured; skipping nudge")
            return CycleReport(CycleResult.NO_DATA, detail=str(ConfigurationMissing()))

        if not prefs.notifications_enabled:
            logger.info("Notifications disabled; skipping nudge")
            return CycleReport(CycleResult.NO_DATA, detail="Notifications are disabled.")

        if prefs.frequency_mode.is_one_shot:
            # Delivered directly by apply_preferences; avoid double delivery.
            logger.info("One-shot mode %s; background cycle does nothing", prefs.frequency_mode.value)
            return CycleReport(
                CycleResult.NO_DATA,
                detail="One-time nudges are delivered when settings are saved.",
            )

        if require_pending and not pending_tasks(tasks):
            return CycleReport(CycleResult.NO_DATA, detail=str(NoPendingTasks()))

        prompt = compose_prompt(tasks, prefs.tone)
        try:
            message = self._generator.generate(prompt, prefs.api_key, prefs.model_id)
        except GenerationError as e:
            logger.warning("Nudge generation failed: %s", e)
            return CycleReport(CycleResult.FAILED, detail=str(e))

        if not message:
            logger.info("Generator returned an empty message; nothing to deliver")
            return CycleReport(CycleResult.NO_DATA, detail="The AI returned an empty message.")

        fires_at = self._clock() + CYCLE_DELIVERY_DELAY
        # Never more than one pending nudge.
        self._cancel_one_shots()
        identifier = self._schedule(message, fires_at)
        logger.info("Nudge %s scheduled for %s", identifier, fires_at.isoformat())
        return CycleReport(CycleResult.NEW_DATA, message=message)
