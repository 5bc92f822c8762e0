# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
The AI API key and model are user preferences (set with /set key ... and /set model ...),
not environment variables, so nothing secret belongs here.
"""

ENV_VARS = {
    # App / logging
    "GETODONE_APP_NAME": "App display name (default: getodone).",
    "GETODONE_LOG_LEVEL": "Console logging level (default: INFO).",
    "GETODONE_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    # LLM backend
    "GETODONE_LLM_BASE_URL": "OpenAI-compatible base URL (default: https://api.groq.com/openai/v1).",
    "GETODONE_DEFAULT_MODEL": "Model id used for first-run preferences.",
    "GETODONE_LLM_CONNECT_TIMEOUT_SECONDS": "Connect timeout for the generation call (default: 5).",
    "GETODONE_LLM_READ_TIMEOUT_SECONDS": "Read timeout for the generation call (default: 30).",
    # Notifications
    "GETODONE_NOTIFICATION_TITLE": "Title of nudge notifications (default: Getodone Nudge!).",
    # Paths (gitignored)
    "GETODONE_DATA_DIR": "Local data directory (default: .local/getodone).",
    "GETODONE_STORE_DB_PATH": "Tasks/preferences SQLite path (default: <data_dir>/store.sqlite3).",
    "GETODONE_JOBS_DB_PATH": "Scheduler jobstore SQLite path (default: <data_dir>/jobs.sqlite3).",
}
