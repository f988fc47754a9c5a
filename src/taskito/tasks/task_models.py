# src/taskito/tasks/task_models.py

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from enum import StrEnum

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


class TaskKind(StrEnum):
    TASK = "task"
    NOTE = "note"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskKind:
        if not raw:
            return cls.TASK
        try:
            return cls(raw)
        except Exception:
            return cls.TASK


@dataclass(slots=True, frozen=True)
class Task:
    """
    Snapshot of a task/note record.

    date/time are local wall-clock values ("YYYY-MM-DD" / "HH:MM").
    A task without a date is "unplanned" and never gets a reminder.
    """

    id: str
    title: str
    details: str = ""

    date: str | None = None
    time: str | None = None
    reminder_minutes: int | None = None
    completed: bool = False

    kind: TaskKind = TaskKind.TASK
    project_id: str | None = None
    created_at: float = 0.0
    updated_at: float = 0.0


def parse_time_minutes(raw: str | None) -> int | None:
    """Convert "HH:MM" to minutes since midnight. Returns None for anything malformed."""
    if not raw:
        return None
    m = _TIME_RE.match(raw.strip())
    if not m:
        return None
    hours, minutes = int(m.group(1)), int(m.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours * 60 + minutes


def is_valid_date(raw: str | None) -> bool:
    if not raw or not _DATE_RE.match(raw):
        return False
    try:
        date.fromisoformat(raw)
    except ValueError:
        return False
    return True
