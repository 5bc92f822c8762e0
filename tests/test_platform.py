# tests/test_platform.py

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from types import SimpleNamespace

import pytest

from getodone.core.models import CycleResult
from getodone.scheduling import platform as platform_mod
from getodone.scheduling.platform import (
    SchedulerPlatform,
    define_recurring,
    deliver_notification,
    fire_recurring,
    undefine_recurring,
)
from getodone.scheduling.sweeper import sweep


@pytest.fixture()
def backend():
    """Real APScheduler backend, in-memory jobstore, started paused so nothing fires."""
    p = SchedulerPlatform(timezone="UTC")
    p.start(paused=True)
    yield p
    p.shutdown()


def test_one_shot_schedule_list_cancel(backend: SchedulerPlatform) -> None:
    fires_at = datetime.now(UTC) + timedelta(hours=1)

    identifier = backend.schedule_one_shot("Go!", fires_at)

    [entry] = backend.list_scheduled()
    assert entry.identifier == identifier
    assert entry.text == "Go!"
    assert entry.fires_at == fires_at

    backend.cancel(identifier)
    assert backend.list_scheduled() == []
    # Cancelling again is harmless.
    backend.cancel(identifier)


def test_cancel_all_leaves_recurring_trigger(backend: SchedulerPlatform) -> None:
    soon = datetime.now(UTC) + timedelta(minutes=10)
    backend.schedule_one_shot("a", soon)
    backend.schedule_one_shot("b", soon)
    backend.register_recurring("motivation-task", 3600)

    backend.cancel_all()

    assert backend.list_scheduled() == []
    assert backend.is_recurring_registered("motivation-task")


def test_recurring_register_is_replace_not_duplicate(backend: SchedulerPlatform) -> None:
    backend.register_recurring("motivation-task", 3600)
    backend.register_recurring("motivation-task", 86400)

    assert backend.is_recurring_registered("motivation-task")
    assert backend.list_scheduled() == []
    assert backend.recurring_next_run("motivation-task") is not None

    backend.unregister_recurring("motivation-task")
    assert not backend.is_recurring_registered("motivation-task")
    backend.unregister_recurring("motivation-task")


def test_register_rejects_non_positive_interval(backend: SchedulerPlatform) -> None:
    with pytest.raises(ValueError):
        backend.register_recurring("motivation-task", 0)


def test_sweep_against_real_backend(backend: SchedulerPlatform) -> None:
    now = datetime.now(UTC)
    backend.schedule_one_shot("stale", now - timedelta(hours=2))
    keep = backend.schedule_one_shot("fresh", now + timedelta(hours=2))

    cancelled = sweep(backend, now)

    assert len(cancelled) == 1
    assert [e.identifier for e in backend.list_scheduled()] == [keep]


def test_fire_recurring_runs_defined_callback() -> None:
    calls: list[str] = []

    def cycle() -> CycleResult:
        calls.append("ran")
        return CycleResult.NEW_DATA

    define_recurring("test-trigger", cycle)
    try:
        fire_recurring("test-trigger")
    finally:
        undefine_recurring("test-trigger")

    assert calls == ["ran"]
    # Undefined name: logged, not raised.
    fire_recurring("test-trigger")


def test_deliver_notification_survives_missing_desktop_backend(monkeypatch) -> None:
    def broken(**kwargs):
        raise NotImplementedError("no notification backend")

    monkeypatch.setattr(platform_mod, "desktop_notification", SimpleNamespace(notify=broken))

    deliver_notification("Getodone Nudge!", "Keep going")


def test_deliver_notification_passes_title_and_text(monkeypatch) -> None:
    seen: list[dict] = []
    monkeypatch.setattr(platform_mod, "desktop_notification", SimpleNamespace(notify=lambda **kw: seen.append(kw)))

    deliver_notification("Getodone Nudge!", "Keep going")

    assert seen[0]["title"] == "Getodone Nudge!"
    assert seen[0]["message"] == "Keep going"


def test_sqlite_jobstore_survives_restart(tmp_path) -> None:
    db = tmp_path / "jobs.sqlite3"
    fires_at = datetime.now(UTC) + timedelta(hours=3)

    first = SchedulerPlatform(jobs_db_path=db, timezone="UTC")
    first.start(paused=True)
    first.register_recurring("motivation-task", 3600)
    identifier = first.schedule_one_shot("Still here", fires_at)
    first.shutdown()

    second = SchedulerPlatform(jobs_db_path=db, timezone="UTC")
    second.start(paused=True)
    try:
        assert second.is_recurring_registered("motivation-task")
        [entry] = second.list_scheduled()
        assert entry.identifier == identifier
        assert entry.text == "Still here"
        assert entry.fires_at == fires_at
    finally:
        second.shutdown()
