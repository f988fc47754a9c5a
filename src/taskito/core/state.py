# src/taskito/core/state.py

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from ..navigation.stack import NavigationStack
from ..platform.history import ConsoleHistory
from ..reminders.scheduler import ReminderEngine
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    """
    Everything one console session owns.

    The lock serializes console commands with reminder ticks (the scheduler
    runs on a background thread).
    """

    settings: Any

    task_store: TaskStore
    history: ConsoleHistory
    navigation: NavigationStack
    reminders: ReminderEngine

    lock: threading.RLock = field(default_factory=threading.RLock)

    # id of the task a CONFIRM overlay is asking about (/delete -> /yes)
    pending_delete_id: str | None = None

    def reset_session(self) -> None:
        """Sign-out: drop fired reminders, active reminder and all overlays."""
        with self.lock:
            self.reminders.reset()
            self.navigation.reset()
            self.history.reset()
            self.pending_delete_id = None
        logger.info("Session state cleared.")
