# src/getodone/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
import re
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import cast

from ..core.errors import GenerationError, GetodoneError
from ..core.models import CycleResult, FrequencyMode, Preferences, Task, Tone
from ..core.state import AppState
from ..llm.client import friendly_generation_error
from ..scheduling.controller import ScheduleKind, ScheduleOutcome
from ..scheduling.sweeper import sweep

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})$")


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, /test, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _fmt_ts(dt: datetime | None) -> str:
    if dt is None:
        return "as soon as possible"
    return dt.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _mask(secret: str) -> str:
    if not secret:
        return "(not set)"
    if len(secret) <= 8:
        return "*" * len(secret)
    return f"{secret[:4]}...{secret[-4:]}"


def _valid_hhmm(raw: str) -> bool:
    m = _HHMM.match(raw.strip())
    if not m:
        return False
    return 0 <= int(m.group(1)) <= 23 and 0 <= int(m.group(2)) <= 59


def _task_by_number(state: AppState, args: list[str]) -> Task | None:
    if not args:
        return None
    try:
        idx = int(args[0])
    except ValueError:
        return None
    tasks = state.task_store.list_tasks()
    if 1 <= idx <= len(tasks):
        return tasks[idx - 1]
    return None


def describe_outcome(outcome: ScheduleOutcome) -> str:
    if outcome.kind == ScheduleKind.DISABLED:
        return "Notifications are off. Nothing is scheduled."
    if outcome.kind == ScheduleKind.ONE_SHOT:
        return f"Nudge scheduled for {_fmt_ts(outcome.fires_at)}:\n  {outcome.message}"
    minutes = (outcome.interval_seconds or 0) // 60
    return f"Background nudges every {minutes} minutes."


def apply_and_describe(state: AppState, prefs: Preferences) -> str:
    """Apply saved preferences; failures become user-facing text."""
    try:
        outcome = state.controller.apply_preferences(prefs)
    except GenerationError as e:
        logger.warning("Applying preferences: generation failed (%s)", e.__class__.__name__)
        return f"Nothing scheduled. {friendly_generation_error(e)}"
    except GetodoneError as e:
        return f"Nothing scheduled. {e}"
    return describe_outcome(outcome)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    # Showing the task list is the moment to clear out expired nudges.
    with contextlib.suppress(Exception):
        sweep(state.dispatcher)

    tasks = state.task_store.list_tasks()
    if not tasks:
        return "No todos yet! Add some tasks to get started."
    lines = ["Your todos:"]
    for i, t in enumerate(tasks, start=1):
        mark = "x" if t.is_completed else " "
        lines.append(f"  {i}. [{mark}] {t.title}")
    return "\n".join(lines)


def cmd_add(state: AppState, args: list[str]) -> str:
    title = " ".join(args).strip()
    if not title:
        return "Todo title cannot be empty. Usage: /add <title>"
    state.task_store.add_task(title)
    return f"Added: {title}"


def cmd_done(state: AppState, args: list[str]) -> str:
    task = _task_by_number(state, args)
    if task is None:
        return "Usage: /done <number> (see /list)"
    toggled = state.task_store.toggle_task(task.id)
    if toggled is None:
        return "That todo no longer exists."
    return f"{'Completed' if toggled.is_completed else 'Reopened'}: {toggled.title}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    task = _task_by_number(state, args)
    if task is None:
        return "Usage: /del <number> (see /list)"
    state.task_store.delete_task(task.id)
    return f"Deleted: {task.title}"


def cmd_settings(state: AppState, args: list[str]) -> str:
    prefs = state.preference_store.load_or_default(state.settings.default_model_id)
    return (
        "Settings:\n"
        f"  notifications: {'on' if prefs.notifications_enabled else 'off'}\n"
        f"  frequency:     {prefs.frequency_mode.value}\n"
        f"  time:          {prefs.custom_time or '10:00'} (used by 'custom')\n"
        f"  tone:          {prefs.tone.value}\n"
        f"  key:           {_mask(prefs.api_key)}\n"
        f"  model:         {prefs.model_id or '(not set)'}"
    )


_SET_USAGE = (
    "Usage: /set <field> <value>\n"
    "  frequency hourly|3-per-day|daily|1-min|custom\n"
    "  time HH:MM\n"
    "  tone soft|hard|neutral\n"
    "  key <api key>\n"
    "  model <model id>\n"
    "  notifications on|off"
)


def cmd_set(state: AppState, args: list[str]) -> str:
    """
    /set <field> <value> -> save the whole preferences record, then re-apply the schedule.
    """
    if len(args) < 2:
        return _SET_USAGE

    field_name = args[0].lower()
    value = " ".join(args[1:]).strip()
    prefs = state.preference_store.load_or_default(state.settings.default_model_id)

    if field_name in ("frequency", "freq"):
        try:
            mode = FrequencyMode(value.lower())
        except ValueError:
            return _SET_USAGE
        prefs = replace(prefs, frequency_mode=mode)
    elif field_name == "time":
        if not _valid_hhmm(value):
            return "Time must be HH:MM (24h), e.g. /set time 09:30"
        hh, mm = value.split(":")
        prefs = replace(prefs, custom_time=f"{int(hh):02d}:{mm}")
    elif field_name == "tone":
        try:
            tone = Tone(value.lower())
        except ValueError:
            return _SET_USAGE
        prefs = replace(prefs, tone=tone)
    elif field_name in ("key", "apikey", "api_key"):
        prefs = replace(prefs, api_key=value)
    elif field_name == "model":
        prefs = replace(prefs, model_id=value)
    elif field_name in ("notifications", "notify"):
        if value.lower() in ("on", "1", "true", "yes"):
            prefs = replace(prefs, notifications_enabled=True)
        elif value.lower() in ("off", "0", "false", "no"):
            prefs = replace(prefs, notifications_enabled=False)
        else:
            return _SET_USAGE
    else:
        return _SET_USAGE

    state.preference_store.set_preferences(prefs)
    return "Settings saved.\n" + apply_and_describe(state, prefs)


def cmd_test(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """Generate and deliver one nudge now."""
    if emit:
        with contextlib.suppress(Exception):
            emit("Generating a nudge...")

    report = state.controller.trigger_now()
    if report.result == CycleResult.NEW_DATA:
        return f"Test notification sent:\n  {report.message}"
    if report.result == CycleResult.FAILED:
        return f"Failed to send test notification: {report.detail or 'unknown error'}"
    return f"No nudge sent. {report.detail or ''}".strip()


def cmd_sweep(state: AppState, args: list[str]) -> str:
    cancelled = sweep(state.dispatcher)
    return f"Removed {len(cancelled)} stale notification(s)."


def cmd_status(state: AppState, args: list[str]) -> str:
    prefs = state.preference_store.get_preferences()
    name = state.controller.trigger_name
    registered = state.dispatcher.is_recurring_registered(name)

    lines = ["Status:"]
    lines.append(f"  Notifications: {'on' if prefs and prefs.notifications_enabled else 'off'}")
    if registered:
        next_run = None
        next_run_fn = getattr(state.dispatcher, "recurring_next_run", None)
        if callable(next_run_fn):
            next_run = next_run_fn(name)
        lines.append(f"  Background nudges: on (next: {_fmt_ts(next_run)})")
    else:
        lines.append("  Background nudges: off")

    pending = state.dispatcher.list_scheduled()
    if pending:
        lines.append("  Pending nudges:")
        for entry in pending:
            lines.append(f"    {_fmt_ts(entry.fires_at)}")
    else:
        lines.append("  Pending nudges: none")
    lines.append(f"  Keep-alive: {'on' if state.keep_alive.is_running() else 'off'}")
    return "\n".join(lines)


def cmd_keepalive(state: AppState, args: list[str]) -> str:
    """
    /keepalive          -> show status
    /keepalive on|off   -> keep the process running after the console closes
    """
    if not args:
        return f"Keep-alive is {'ON' if state.keep_alive.is_running() else 'OFF'}. Use /keepalive on|off."

    arg = args[0].lower()
    if arg in ("on", "1", "true", "yes"):
        if state.keep_alive.is_running():
            return "Keep-alive is already ON."
        state.keep_alive.start("Nudges keep running in the background.")
        return "Keep-alive enabled. The app keeps running after you exit the console."
    if arg in ("off", "0", "false", "no"):
        if not state.keep_alive.is_running():
            return "Keep-alive is already OFF."
        state.keep_alive.stop()
        return "Keep-alive disabled."
    return "Usage: /keepalive on or /keepalive off."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show your todos.", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a todo: /add <title>.")
registry.register("done", cmd_done, help_text="Toggle a todo: /done <number>.")
registry.register("del", cmd_delete, help_text="Delete a todo: /del <number>.", aliases=["rm"])
registry.register("settings", cmd_settings, help_text="Show notification settings.")
registry.register("set", cmd_set, help_text="Change a setting and reschedule: /set <field> <value>.")
registry.register("test", cmd_test, help_text="Generate and send a nudge now.")
registry.register("sweep", cmd_sweep, help_text="Remove nudges whose time already passed.")
registry.register("status", cmd_status, help_text="Show what is scheduled.")
registry.register("keepalive", cmd_keepalive, help_text="Keep running in background: /keepalive on|off.")
