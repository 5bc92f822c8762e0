# tests/test_sweeper.py

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from getodone.scheduling.sweeper import sweep

from .fakes import FakeDispatcher

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def test_sweep_cancels_exactly_the_expired_entries() -> None:
    d = FakeDispatcher()
    old1 = d.schedule_one_shot("a", NOW - timedelta(hours=3))
    old2 = d.schedule_one_shot("b", NOW - timedelta(seconds=1))
    future = d.schedule_one_shot("c", NOW + timedelta(minutes=5))
    at_now = d.schedule_one_shot("d", NOW)
    asap = d.schedule_one_shot("e", None)

    cancelled = sweep(d, NOW)

    assert sorted(cancelled) == sorted([old1, old2])
    assert sorted(e.identifier for e in d.list_scheduled()) == sorted([future, at_now, asap])


def test_sweep_is_idempotent() -> None:
    d = FakeDispatcher()
    d.schedule_one_shot("a", NOW - timedelta(minutes=1))
    d.schedule_one_shot("b", NOW + timedelta(minutes=1))

    assert len(sweep(d, NOW)) == 1
    assert sweep(d, NOW) == []
    assert len(d.list_scheduled()) == 1


def test_sweep_on_empty_queue() -> None:
    assert sweep(FakeDispatcher(), NOW) == []


def test_sweep_handles_naive_timestamps() -> None:
    d = FakeDispatcher()
    d.schedule_one_shot("naive past", datetime(2000, 1, 1, 8, 0))

    assert len(sweep(d, NOW)) == 1
