# src/getodone/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires storage, the LLM generator and the scheduler backend into AppState,
- binds the recurring nudge trigger to the controller and starts the backend.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import MessageGenerator
from ..core.state import AppState
from ..llm.client import OpenAICompatibleGenerator
from ..scheduling.controller import ScheduleController
from ..scheduling.keepalive import KeepAliveService
from ..scheduling.platform import SchedulerPlatform, define_recurring, deliver_notification
from ..scheduling.sweeper import sweep
from ..storage.kv_store import KeyValueStore
from ..storage.stores import PreferenceStore, TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.store_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.jobs_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    dispatcher: SchedulerPlatform | None = None,
    generator: MessageGenerator | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings and collaborators injectable makes the app easier to test.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    kv = KeyValueStore(settings.store_db_path)
    task_store = TaskStore(kv)
    preference_store = PreferenceStore(kv)

    if dispatcher is None:
        dispatcher = SchedulerPlatform(
            jobs_db_path=settings.jobs_db_path,
            notification_title=settings.notification_title,
        )
    if generator is None:
        generator = OpenAICompatibleGenerator.from_settings(settings)

    controller = ScheduleController(task_store, preference_store, generator, dispatcher)

    return AppState(
        settings=settings,
        task_store=task_store,
        preference_store=preference_store,
        dispatcher=dispatcher,
        controller=controller,
        keep_alive=KeepAliveService(notify=deliver_notification),
    )


def start_background(state: AppState, *, paused: bool = False) -> None:
    """
    Explicit startup step: bind the recurring trigger to this process's controller,
    start the scheduler backend (restoring persisted jobs) and sweep stale nudges.
    """
    define_recurring(state.controller.trigger_name, state.controller.run_cycle)
    state.dispatcher.start(paused=paused)

    try:
        sweep(state.dispatcher)
    except Exception:
        logger.exception("Startup sweep failed.")

    if state.dispatcher.is_recurring_registered(state.controller.trigger_name):
        logger.info("Restored background trigger %s", state.controller.trigger_name)
