# src/taskito/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete platform adapters (notifications, alarm, history, clock)
  and the task store into AppState.
"""

from __future__ import annotations

import logging
import threading

from ..config import get_settings
from ..core.clock import SystemClock
from ..core.ports import AlarmPlayer, Clock, Notifier
from ..core.state import AppState
from ..navigation.stack import NavigationStack
from ..platform.alarm import ToneAlarm
from ..platform.history import ConsoleHistory
from ..platform.notifier import DesktopNotifier
from ..reminders.dispatcher import NotificationDispatcher
from ..reminders.scheduler import ReminderEngine
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    notifier: Notifier | None = None,
    alarm: AlarmPlayer | None = None,
    clock: Clock | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings and platform adapters injectable makes the app easier to
    test and avoids hidden global config reads. If settings is None, falls
    back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    app_name = getattr(settings, "app_name", "taskito")

    if notifier is None:
        notifier = DesktopNotifier(enabled=settings.notifications_enabled, app_name=app_name)
    if alarm is None:
        alarm = ToneAlarm(enabled=settings.alarm_enabled, tone=settings.reminder_tone)

    lock = threading.RLock()
    history = ConsoleHistory()
    navigation = NavigationStack(history)
    task_store = TaskStore(settings.tasks_db_path)

    dispatcher = NotificationDispatcher(notifier, alarm, navigation, app_name=app_name)
    engine = ReminderEngine(
        task_store,
        dispatcher,
        clock or SystemClock(),
        grace_minutes=settings.reminder_grace_minutes,
        lock=lock,
    )

    return AppState(
        settings=settings,
        task_store=task_store,
        history=history,
        navigation=navigation,
        reminders=engine,
        lock=lock,
    )
