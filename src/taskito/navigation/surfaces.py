# src/taskito/navigation/surfaces.py

from __future__ import annotations

from enum import StrEnum


class Surface(StrEnum):
    """Overlay surfaces that a single back gesture can close."""

    TASK_EDITOR = "task_editor"
    PROJECT_EDITOR = "project_editor"
    PROFILE_EDITOR = "profile_editor"
    SEARCH = "search"
    CONFIRM = "confirm"
    REMINDER_POPUP = "reminder_popup"

    @classmethod
    def parse(cls, raw: str | None) -> Surface | None:
        if not raw:
            return None
        key = raw.strip().lower().replace("-", "_")
        try:
            return cls(key)
        except ValueError:
            return None
