# src/getodone/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the scheduling core.

The core depends on Protocols instead of concrete implementations.
This keeps storage, the LLM backend and the scheduler backend swappable and
makes the controller testable with in-memory fakes.
"""

from datetime import datetime
from typing import Protocol

from .models import Preferences, ScheduledNotification, Task


class TaskRepo(Protocol):
    def list_tasks(self) -> list[Task]: ...


class PreferenceRepo(Protocol):
    def get_preferences(self) -> Preferences | None: ...
    def set_preferences(self, prefs: Preferences) -> None: ...


class MessageGenerator(Protocol):
    """Single-shot text generation. Raises GenerationError subclasses on failure."""

    def generate(self, prompt: str, api_key: str, model_id: str) -> str: ...


class NotificationDispatcher(Protocol):
    """
    Scheduler-backend port.

    One-shot side: user-facing notifications firing once (fires_at=None -> ASAP).
    Recurring side: named periodic triggers that run the nudge cycle.
    """

    def schedule_one_shot(self, text: str, fires_at: datetime | None) -> str: ...
    def cancel_all(self) -> None: ...
    def list_scheduled(self) -> list[ScheduledNotification]: ...
    def cancel(self, identifier: str) -> None: ...

    def register_recurring(self, name: str, interval_seconds: int) -> None: ...
    def unregister_recurring(self, name: str) -> None: ...
    def is_recurring_registered(self, name: str) -> bool: ...


class KeepAlive(Protocol):
    """Keeps the process running so background triggers can fire."""

    def start(self, message: str) -> None: ...
    def stop(self) -> None: ...
    def is_running(self) -> bool: ...
