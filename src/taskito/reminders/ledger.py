# src/taskito/reminders/ledger.py

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def ledger_key(task_id: str, trigger_minute: int) -> str:
    """
    Key for one (task, trigger instant) pair.

    The key is derived from the trigger minute, not from the task id alone:
    editing time or reminder offset yields a new key and re-arms the reminder.
    """
    return f"{task_id}-{int(trigger_minute)}"


class FiredLedger:
    """
    Session-lifetime record of reminders that were already dispatched.

    Entries are never evicted during a session; reset() clears everything
    at session boundaries (sign-out, account switch).
    """

    def __init__(self) -> None:
        self._keys: set[str] = set()

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def has_fired(self, task_id: str, trigger_minute: int) -> bool:
        return ledger_key(task_id, trigger_minute) in self._keys

    def claim(self, task_id: str, trigger_minute: int) -> bool:
        """
        Insert the key if absent.

        Returns True only for the caller that inserted it; that caller owns the dispatch.
        """
        key = ledger_key(task_id, trigger_minute)
        if key in self._keys:
            return False
        self._keys.add(key)
        return True

    def reset(self) -> None:
        if self._keys:
            logger.debug("Ledger reset (%d entries dropped).", len(self._keys))
        self._keys.clear()
