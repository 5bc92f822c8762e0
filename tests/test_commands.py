# tests/test_commands.py

from __future__ import annotations

from getodone.cli.commands import CommandRegistry, registry
from getodone.connectors.console_connector import handle_line
from getodone.core.errors import GenerationRejected
from getodone.core.models import FrequencyMode
from getodone.scheduling.controller import BACKGROUND_TASK_NAME


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b")

    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/b y", emit=lambda _: None) == "h3"
    assert called == {"h2": 1, "h3": 1}


def test_command_registry_unknown_and_non_command(state) -> None:
    assert registry.handle(state, "hello") is None
    assert "Unknown command" in (registry.handle(state, "/nope") or "")


def test_plain_text_adds_todo_and_list_shows_it(state) -> None:
    assert handle_line(state, "Write report") == "Added: Write report"
    handle_line(state, "/done 1")

    listing = registry.handle(state, "/list") or ""
    assert "1. [x] Write report" in listing


def test_set_saves_whole_record_and_registers_trigger(state, dispatcher) -> None:
    registry.handle(state, "/set key sk-test")
    reply = registry.handle(state, "/set notifications on") or ""

    prefs = state.preference_store.get_preferences()
    assert prefs is not None
    assert prefs.api_key == "sk-test"
    assert prefs.model_id == "test-model"
    assert prefs.notifications_enabled is True
    assert "Background nudges every 1440 minutes" in reply
    assert dispatcher.recurring == {BACKGROUND_TASK_NAME: 1}


def test_set_one_shot_without_tasks_reports_hint(state, dispatcher) -> None:
    registry.handle(state, "/set key sk-test")
    registry.handle(state, "/set notifications on")

    reply = registry.handle(state, "/set frequency 1-min") or ""

    assert state.preference_store.get_preferences().frequency_mode == FrequencyMode.ONE_SHOT_SOON
    assert "Add some tasks first" in reply
    assert dispatcher.recurring == {}
    assert dispatcher.list_scheduled() == []


def test_set_one_shot_schedules_generated_nudge(state, dispatcher, generator) -> None:
    registry.handle(state, "/add Write report")
    registry.handle(state, "/set key sk-test")
    registry.handle(state, "/set notifications on")

    reply = registry.handle(state, "/set frequency custom") or ""

    assert "Nudge scheduled for" in reply
    assert generator.next_text in reply
    assert len(dispatcher.list_scheduled()) == 1


def test_set_rejects_bad_values(state) -> None:
    assert "Usage" in (registry.handle(state, "/set frequency weekly") or "")
    assert "HH:MM" in (registry.handle(state, "/set time 7pm") or "")
    assert state.preference_store.get_preferences() is None


def test_test_command_reports_rejection(state, generator) -> None:
    registry.handle(state, "/add Write report")
    registry.handle(state, "/set key sk-test")
    registry.handle(state, "/set notifications on")
    generator.error = GenerationRejected("invalid_api_key")

    reply = registry.handle(state, "/test") or ""

    assert reply == "Failed to send test notification: invalid_api_key"


def test_test_command_without_settings(state) -> None:
    reply = registry.handle(state, "/test") or ""
    assert "configure your AI API key" in reply


def test_status_lists_pending_nudges(state, dispatcher) -> None:
    dispatcher.schedule_one_shot("hi", None)
    reply = registry.handle(state, "/status") or ""
    assert "as soon as possible" in reply
    assert "Background nudges: off" in reply


def test_keepalive_toggles_through_state(state, monkeypatch) -> None:
    shown: list[tuple[str, str]] = []
    monkeypatch.setattr(state.keep_alive, "_notify", lambda title, text: shown.append((title, text)))

    try:
        assert registry.handle(state, "/keepalive on") == (
            "Keep-alive enabled. The app keeps running after you exit the console."
        )
        assert state.keep_alive.is_running()
        assert "Keep-alive: on" in (registry.handle(state, "/status") or "")
    finally:
        assert registry.handle(state, "/keepalive off") == "Keep-alive disabled."

    assert not state.keep_alive.is_running()
    assert len(shown) == 1
