# src/getodone/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..scheduling.controller import ScheduleController
from ..scheduling.platform import SchedulerPlatform
from ..storage.stores import PreferenceStore, TaskStore
from .ports import KeepAlive


@dataclass
class AppState:
    # Settings are kept on the state so commands never re-read env.
    settings: Any

    task_store: TaskStore
    preference_store: PreferenceStore
    dispatcher: SchedulerPlatform
    controller: ScheduleController
    keep_alive: KeepAlive

    # Serializes console commands against each other (background cycles use the controller guard).
    lock: threading.RLock = field(default_factory=threading.RLock)
