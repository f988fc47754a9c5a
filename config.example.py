# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKITO_APP_NAME": "App display name, also the system notification title prefix (default: taskito).",
    "TASKITO_LOG_LEVEL": "Console logging level (default: INFO).",
    # Connectors
    "TASKITO_CONSOLE_ENABLED": "Run the console REPL (true/false). When off, only reminders run.",
    # Paths (gitignored)
    "TASKITO_DATA_DIR": "Local data directory, also holds taskito.log (default: .local/taskito).",
    "TASKITO_TASKS_DB_PATH": "TaskStore SQLite path (default: <data_dir>/tasks.sqlite3).",
    # Reminders
    "TASKITO_REMINDER_INTERVAL_SECONDS": "Reminder poll interval, clamped to 0.5..60 (default: 20).",
    "TASKITO_REMINDER_GRACE_MINUTES": (
        "Fire reminders missed by up to N minutes, e.g. after sleep (default: 0 = exact minute only)."
    ),
    "TASKITO_NOTIFICATIONS_ENABLED": "Show system notifications via plyer (true/false).",
    "TASKITO_ALARM_ENABLED": "Play the looping alarm tone via sounddevice (true/false).",
    "TASKITO_REMINDER_TONE": "Alarm tone: soft, louder or urgent (default: louder).",
}
