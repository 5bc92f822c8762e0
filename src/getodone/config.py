# src/getodone/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (the LLM key lives in user preferences).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "GETODONE"

DEFAULT_MODEL_ID = "meta-llama/llama-4-scout-17b-16e-instruct"
DEFAULT_LLM_BASE_URL = "https://api.groq.com/openai/v1"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    console_enabled: bool

    # ---- LLM backend ----
    llm_base_url: str
    default_model_id: str
    llm_connect_timeout_seconds: float
    llm_read_timeout_seconds: float

    # ---- Notifications ----
    notification_title: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    store_db_path: Path
    jobs_db_path: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "getodone").strip() or "getodone"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        llm_base_url = _env(_k("LLM_BASE_URL"), DEFAULT_LLM_BASE_URL).strip() or DEFAULT_LLM_BASE_URL
        default_model_id = _env(_k("DEFAULT_MODEL"), DEFAULT_MODEL_ID).strip() or DEFAULT_MODEL_ID

        connect_timeout = _env_float(_k("LLM_CONNECT_TIMEOUT_SECONDS"), 5.0)
        read_timeout = _env_float(_k("LLM_READ_TIMEOUT_SECONDS"), 30.0)

        notification_title = _env(_k("NOTIFICATION_TITLE"), "Getodone Nudge!")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/getodone"))
        store_db_path = _env_path(_k("STORE_DB_PATH"), data_dir / "store.sqlite3")
        jobs_db_path = _env_path(_k("JOBS_DB_PATH"), data_dir / "jobs.sqlite3")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            llm_base_url=llm_base_url,
            default_model_id=default_model_id,
            llm_connect_timeout_seconds=max(0.5, connect_timeout),
            llm_read_timeout_seconds=max(1.0, read_timeout),
            notification_title=notification_title,
            data_dir=data_dir,
            store_db_path=store_db_path,
            jobs_db_path=jobs_db_path,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
