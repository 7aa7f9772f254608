# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
See src/taskpad/config.py for parsing rules and defaults.
"""

ENV_VARS = {
    # App / logging
    "TASKPAD_APP_NAME": "App display name (default: taskpad).",
    "TASKPAD_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Paths (gitignored)
    "TASKPAD_DATA_DIR": "Local data directory for the database and taskpad.log (default: .local/taskpad).",
    "TASKPAD_STORAGE_DB_PATH": "Key-value SQLite path (default: <data_dir>/storage.sqlite3).",
    # Storage keys
    "TASKPAD_TASKS_KEY": "Key holding the task collection (default: @tasks).",
    "TASKPAD_PREFERENCES_KEY": "Key holding user preferences (default: @user_preferences).",
    "TASKPAD_APP_SETTINGS_KEY": "Key holding app settings (default: @app_settings).",
    # Task behaviour
    "TASKPAD_UPCOMING_DAYS": "Default window for /upcoming in days (default: 7).",
    "TASKPAD_DEFAULT_REMINDER_MINUTES": "Reminder lead time for new tasks (default: 10).",
    "TASKPAD_SERIALIZE_WRITES": "Run store transactions one at a time (true/false, default: false).",
    "TASKPAD_TIMEZONE": "IANA zone for today/overdue day boundaries (empty => system local time).",
}
