# src/getodone/storage/stores.py

from __future__ import annotations

import logging

from ..core.models import Preferences, Task
from .kv_store import KeyValueStore

logger = logging.getLogger(__name__)

TASKS_KEY = "todos"
SETTINGS_KEY = "settings"


class TaskStore:
    """Ordered task list persisted as one blob. The scheduler only calls list_tasks()."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    def list_tasks(self) -> list[Task]:
        raw = self._kv.get_json(TASKS_KEY)
        if not isinstance(raw, list):
            return []
        return [Task.from_dict(item) for item in raw if isinstance(item, dict)]

    def list_pending_tasks(self) -> list[Task]:
        return [t for t in self.list_tasks() if not t.is_completed]

    def save_tasks(self, tasks: list[Task]) -> None:
        self._kv.set_json(TASKS_KEY, [t.to_dict() for t in tasks])

    def add_task(self, title: str) -> Task:
        title = (title or "").strip()
        if not title:
            raise ValueError("Task title cannot be empty.")
        task = Task.new(title)
        tasks = self.list_tasks()
        tasks.append(task)
        self.save_tasks(tasks)
        logger.debug("Task added id=%s", task.id)
        return task

    def toggle_task(self, task_id: str) -> Task | None:
        tasks = self.list_tasks()
        found: Task | None = None
        for t in tasks:
            if t.id == task_id:
                t.is_completed = not t.is_completed
                found = t
                break
        if found is None:
            return None
        self.save_tasks(tasks)
        return found

    def delete_task(self, task_id: str) -> bool:
        tasks = self.list_tasks()
        kept = [t for t in tasks if t.id != task_id]
        if len(kept) == len(tasks):
            return False
        self.save_tasks(kept)
        return True


class PreferenceStore:
    """Single preferences record, replaced wholesale on every save."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    def get_preferences(self) -> Preferences | None:
        raw = self._kv.get_json(SETTINGS_KEY)
        if not isinstance(raw, dict):
            return None
        return Preferences.from_dict(raw)

    def set_preferences(self, prefs: Preferences) -> None:
        self._kv.set_json(SETTINGS_KEY, prefs.to_dict())
        logger.info(
            "Preferences saved (frequency=%s tone=%s enabled=%s)",
            prefs.frequency_mode.value,
            prefs.tone.value,
            prefs.notifications_enabled,
        )

    def load_or_default(self, default_model_id: str) -> Preferences:
        """Stored preferences, or first-run defaults (not persisted until saved)."""
        prefs = self.get_preferences()
        if prefs is not None:
            return prefs
        return Preferences(model_id=default_model_id)
