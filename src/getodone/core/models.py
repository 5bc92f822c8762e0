# src/getodone/core/models.py

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, StrEnum
from typing import Any

from ..config import DEFAULT_MODEL_ID

logger = logging.getLogger(__name__)

DEFAULT_CUSTOM_TIME = "10:00"


class Tone(StrEnum):
    SOFT = "soft"
    HARD = "hard"
    NEUTRAL = "neutral"

    @classmethod
    def from_db(cls, raw: str | None) -> Tone:
        if not raw:
            return cls.NEUTRAL
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.NEUTRAL


class FrequencyMode(StrEnum):
    """
    How often a nudge is delivered.

    Notes:
    - HOURLY / THREE_PER_DAY / DAILY are recurring (background trigger).
    - ONE_SHOT_SOON / ONE_SHOT_AT_TIME are delivered once, directly when preferences
      are saved. "5-mins" is an older stored spelling of the near-term option.
    """

    HOURLY = "hourly"
    THREE_PER_DAY = "3-per-day"
    DAILY = "daily"
    ONE_SHOT_SOON = "1-min"
    ONE_SHOT_AT_TIME = "custom"

    @property
    def is_one_shot(self) -> bool:
        return self in (FrequencyMode.ONE_SHOT_SOON, FrequencyMode.ONE_SHOT_AT_TIME)

    @classmethod
    def from_db(cls, raw: str | None) -> FrequencyMode:
        if not raw:
            return cls.DAILY
        s = str(raw).strip().lower()
        if s == "5-mins":
            return cls.ONE_SHOT_SOON
        try:
            return cls(s)
        except ValueError:
            logger.warning("Unknown frequency mode %r, using daily", raw)
            return cls.DAILY


class CycleResult(Enum):
    """Outcome of one generate-and-notify cycle."""

    NO_DATA = "no-data"
    NEW_DATA = "new-data"
    FAILED = "failed"


@dataclass(slots=True)
class Task:
    id: str
    title: str
    created_at: float
    is_completed: bool = False

    @classmethod
    def new(cls, title: str) -> Task:
        return cls(id=uuid.uuid4().hex, title=title, created_at=time.time(), is_completed=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "created_at": self.created_at,
            "is_completed": self.is_completed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        return cls(
            id=str(data.get("id") or uuid.uuid4().hex),
            title=str(data.get("title", "")),
            created_at=float(data.get("created_at") or 0.0),
            is_completed=bool(data.get("is_completed", False)),
        )


@dataclass(frozen=True, slots=True)
class Preferences:
    """
    User preferences. A single record per installation, always replaced wholesale.

    custom_time ("HH:MM") only matters for ONE_SHOT_AT_TIME.
    """

    frequency_mode: FrequencyMode = FrequencyMode.DAILY
    custom_time: str | None = None
    tone: Tone = Tone.NEUTRAL
    api_key: str = ""
    model_id: str = DEFAULT_MODEL_ID
    notifications_enabled: bool = False

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key.strip()) and bool(self.model_id.strip())

    def to_dict(self) -> dict[str, Any]:
        return {
            "frequency_mode": self.frequency_mode.value,
            "custom_time": self.custom_time,
            "tone": self.tone.value,
            "api_key": self.api_key,
            "model_id": self.model_id,
            "notifications_enabled": self.notifications_enabled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Preferences:
        custom_time = data.get("custom_time")
        return cls(
            frequency_mode=FrequencyMode.from_db(data.get("frequency_mode")),
            custom_time=str(custom_time) if custom_time else None,
            tone=Tone.from_db(data.get("tone")),
            api_key=str(data.get("api_key") or ""),
            model_id=str(data.get("model_id") or ""),
            notifications_enabled=bool(data.get("notifications_enabled", False)),
        )


@dataclass(frozen=True, slots=True)
class ScheduledNotification:
    """A pending one-shot notification. fires_at=None means "as soon as possible"."""

    identifier: str
    fires_at: datetime | None
    text: str = ""
