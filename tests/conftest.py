# tests/conftest.py

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from getodone.cli.bootstrap import create_initial_state
from getodone.core.models import FrequencyMode, Preferences, Tone
from getodone.core.state import AppState
from getodone.scheduling.controller import ScheduleController

from .fakes import FakeDispatcher, FakeGenerator, MemoryPreferenceRepo, MemoryTaskRepo, make_task

NOW = datetime(2026, 10, 19, 9, 0, 0, tzinfo=UTC)


class Clock:
    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture()
def clock() -> Clock:
    return Clock()


@pytest.fixture()
def dispatcher() -> FakeDispatcher:
    return FakeDispatcher()


@pytest.fixture()
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture()
def task_repo() -> MemoryTaskRepo:
    return MemoryTaskRepo([make_task("Write report"), make_task("Call mom", done=True)])


@pytest.fixture()
def prefs() -> Preferences:
    return Preferences(
        frequency_mode=FrequencyMode.DAILY,
        tone=Tone.SOFT,
        api_key="sk-test",
        model_id="test-model",
        notifications_enabled=True,
    )


@pytest.fixture()
def pref_repo(prefs: Preferences) -> MemoryPreferenceRepo:
    return MemoryPreferenceRepo(prefs)


@pytest.fixture()
def controller(task_repo, pref_repo, generator, dispatcher, clock) -> ScheduleController:
    return ScheduleController(task_repo, pref_repo, generator, dispatcher, clock=clock)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="getodone-test",
        data_dir=tmp_path,
        store_db_path=tmp_path / "store.sqlite3",
        jobs_db_path=tmp_path / "jobs.sqlite3",
        notification_title="Getodone Nudge!",
        default_model_id="test-model",
        llm_base_url="https://llm.invalid/v1",
        llm_connect_timeout_seconds=1.0,
        llm_read_timeout_seconds=1.0,
    )


@pytest.fixture()
def state(settings: SimpleNamespace, dispatcher: FakeDispatcher, generator: FakeGenerator) -> AppState:
    """AppState with real SQLite stores and fake scheduler/LLM backends."""
    return create_initial_state(settings=settings, dispatcher=dispatcher, generator=generator)
