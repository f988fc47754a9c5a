# src/taskito/core/clock.py

from __future__ import annotations

from datetime import datetime


class SystemClock:
    """Samples the local wall clock. Reminders never compare in UTC."""

    def now(self) -> datetime:
        return datetime.now()


def minute_of_day(ts: datetime) -> int:
    return ts.hour * 60 + ts.minute


def local_date_string(ts: datetime | None = None) -> str:
    """Local calendar date as "YYYY-MM-DD"."""
    return (ts or datetime.now()).date().isoformat()
