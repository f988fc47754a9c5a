# src/taskito/reminders/dispatcher.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.ports import AlarmPlayer, Notifier
from ..navigation.stack import NavigationStack
from ..navigation.surfaces import Surface
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

ReminderListener = Callable[[Task | None], None]

DEFAULT_BODY = "Time for your task!"


class NotificationDispatcher:
    """
    Side effects for a fired reminder.

    dispatch(task):
    - (re)start the looping alarm (one alarm at most; a new reminder replaces it)
    - show a system notification if permission is granted
    - publish the task as the active reminder and open the reminder popup overlay
      (an already open popup is reused, so at most one popup entry exists)

    Everything is best-effort: a failing side effect is logged and the others still run.
    """

    def __init__(
        self,
        notifier: Notifier,
        alarm: AlarmPlayer,
        navigation: NavigationStack,
        *,
        app_name: str = "taskito",
    ) -> None:
        self._notifier = notifier
        self._alarm = alarm
        self._navigation = navigation
        self._app_name = app_name

        self._active: Task | None = None
        self._listeners: list[ReminderListener] = []

    # ---- reactive "active reminder" value ----

    @property
    def active_reminder(self) -> Task | None:
        return self._active

    def subscribe(self, listener: ReminderListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _set_active(self, task: Task | None) -> None:
        if task is self._active:
            return
        self._active = task
        for listener in list(self._listeners):
            try:
                listener(task)
            except Exception:
                logger.exception("Active reminder listener failed.")

    # ---- dispatch / dismiss ----

    def request_permission(self) -> bool:
        try:
            return bool(self._notifier.request_permission())
        except Exception:
            logger.debug("Notification permission request failed.", exc_info=True)
            return False

    def notifications_granted(self) -> bool:
        try:
            return bool(self._notifier.is_granted())
        except Exception:
            return False

    def dispatch(self, task: Task) -> None:
        logger.info("Reminder fired task_id=%s title=%r", task.id, task.title)

        try:
            self._alarm.play(loop=True)
        except Exception:
            logger.debug("Alarm playback failed task_id=%s", task.id, exc_info=True)

        self._notify(task)

        self._set_active(task)
        if self._navigation.is_open(Surface.REMINDER_POPUP):
            # One popup shows the latest reminder; it only swaps its task.
            return
        try:
            self._navigation.open(Surface.REMINDER_POPUP, on_close=self._silence)
        except Exception:
            logger.exception("Failed to open reminder popup task_id=%s", task.id)

    def dismiss(self) -> None:
        """
        Acknowledge the active reminder (explicit UI action).

        Closes the popup overlay if it is still open; its close action silences
        the alarm. The ledger is not touched: a dismissed reminder never re-fires.
        """
        if not self._navigation.close(Surface.REMINDER_POPUP):
            self._silence()

    dismiss_active_reminder = dismiss

    def stop_alarm(self) -> None:
        try:
            self._alarm.stop()
        except Exception:
            logger.debug("Alarm stop failed.", exc_info=True)

    def play_completion_cue(self) -> None:
        """Short chime for a completed task; skipped while a reminder is ringing."""
        if self._active is not None:
            return
        try:
            self._alarm.chime()
        except Exception:
            logger.debug("Completion chime failed.", exc_info=True)

    def reset(self) -> None:
        self.stop_alarm()
        self._set_active(None)

    # ---- helpers ----

    def _notify(self, task: Task) -> None:
        try:
            if not self._notifier.is_granted():
                logger.debug("Notification permission not granted; skipping task_id=%s", task.id)
                return
            title = f"{self._app_name}: {task.title}"
            body = (task.details or "").strip() or DEFAULT_BODY
            self._notifier.show(title, body)
        except Exception:
            logger.debug("System notification failed task_id=%s", task.id, exc_info=True)

    def _silence(self) -> None:
        # Close action of the reminder popup (back gesture or explicit dismiss).
        self.stop_alarm()
        self._set_active(None)
