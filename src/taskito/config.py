# src/taskito/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every value has a usable default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TASKITO"

REMINDER_TONES = ("soft", "louder", "urgent")


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


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


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

    # ---- Connector flags ----
    console_enabled: bool

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path

    # ---- Reminders ----
    reminder_interval_seconds: float
    reminder_grace_minutes: int
    notifications_enabled: bool
    alarm_enabled: bool
    reminder_tone: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskito").strip() or "taskito"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskito"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")

        # Exact-minute matching needs at least one tick per minute.
        interval = _env_float(_k("REMINDER_INTERVAL_SECONDS"), 20.0)
        reminder_interval_seconds = max(0.5, min(60.0, interval))
        reminder_grace_minutes = max(0, _env_int(_k("REMINDER_GRACE_MINUTES"), 0))

        notifications_enabled = _env_bool(_k("NOTIFICATIONS_ENABLED"), True)
        alarm_enabled = _env_bool(_k("ALARM_ENABLED"), True)

        reminder_tone = _env(_k("REMINDER_TONE"), "louder").strip().lower()
        if reminder_tone not in REMINDER_TONES:
            reminder_tone = "louder"

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            reminder_interval_seconds=reminder_interval_seconds,
            reminder_grace_minutes=reminder_grace_minutes,
            notifications_enabled=notifications_enabled,
            alarm_enabled=alarm_enabled,
            reminder_tone=reminder_tone,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
