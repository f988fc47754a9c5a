# src/taskito/reminders/evaluator.py

from __future__ import annotations

"""
Trigger evaluation.

Given the current local time and a task snapshot, decide which reminders
elapse right now. Pure apart from the ledger insert that claims each firing.
"""

from collections.abc import Iterable
from datetime import datetime

from ..core.clock import minute_of_day
from ..tasks.task_models import Task, parse_time_minutes
from .ledger import FiredLedger


def _reminder_offset(task: Task) -> int | None:
    raw = task.reminder_minutes
    # bool is an int subclass; a stray True/False is not an offset.
    if raw is None or isinstance(raw, bool) or not isinstance(raw, int):
        return None
    if raw < 0:
        return None
    return raw


def is_reminder_eligible(task: Task) -> bool:
    """date, time and reminder offset are set, and the task is not completed."""
    if task.completed or not task.date:
        return False
    if parse_time_minutes(task.time) is None:
        return False
    return _reminder_offset(task) is not None


def trigger_minute(task: Task) -> int | None:
    """
    Minute of day at which the reminder fires, or None.

    No cross-midnight rollover: an offset reaching before 00:00 never fires.
    """
    if not is_reminder_eligible(task):
        return None
    task_min = parse_time_minutes(task.time)
    offset = _reminder_offset(task)
    if task_min is None or offset is None:
        return None
    trig = task_min - offset
    if trig < 0:
        return None
    return trig


def evaluate(
    now: datetime,
    tasks: Iterable[Task],
    ledger: FiredLedger,
    *,
    grace_minutes: int = 0,
) -> list[Task]:
    """
    Return tasks whose reminder instant is "now" and that have not fired yet.

    With grace_minutes=0 the current minute must equal the trigger minute
    exactly, so the caller has to tick at least once per minute. A positive
    grace window also fires reminders whose minute was missed by up to
    grace_minutes (e.g. after the process was suspended).

    Each returned task has already been claimed in the ledger; a later call
    in the same minute will not return it again. Never raises for malformed
    tasks; they are simply skipped.
    """
    today = now.date().isoformat()
    now_min = minute_of_day(now)
    grace = max(0, int(grace_minutes))

    fired: list[Task] = []
    for task in tasks:
        try:
            if task.date != today:
                continue
            trig = trigger_minute(task)
        except Exception:
            continue
        if trig is None:
            continue

        late_by = now_min - trig
        if late_by < 0 or late_by > grace:
            continue

        if not ledger.claim(str(task.id), trig):
            continue
        fired.append(task)

    return fired
