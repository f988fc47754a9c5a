# src/taskito/reminders/scheduler.py

from __future__ import annotations

"""
Reminder scheduler.

A small polling loop that:
- samples the local clock,
- reads a fresh task snapshot from the feed,
- evaluates which reminders elapse now (claiming them in the ledger),
- hands each fired task to the notification dispatcher.

Ticks and UI events share one lock, so a tick never interleaves with a
half-applied navigation change.
"""

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass
from typing import Any

from ..core.ports import Clock, TaskFeed
from ..tasks.task_models import Task
from .dispatcher import NotificationDispatcher
from .evaluator import evaluate
from .ledger import FiredLedger

logger = logging.getLogger(__name__)


class ReminderEngine:
    """
    Owns the per-session reminder state: ledger, dispatcher, and the feed it watches.

    tick() runs one evaluation cycle; reset() clears session state (sign-out).
    """

    def __init__(
        self,
        feed: TaskFeed,
        dispatcher: NotificationDispatcher,
        clock: Clock,
        *,
        ledger: FiredLedger | None = None,
        grace_minutes: int = 0,
        lock: Any = None,
    ) -> None:
        self.feed = feed
        self.dispatcher = dispatcher
        self.clock = clock
        self.ledger = ledger if ledger is not None else FiredLedger()
        self.grace_minutes = max(0, int(grace_minutes))
        self._lock = lock if lock is not None else contextlib.nullcontext()

    @property
    def active_reminder(self) -> Task | None:
        return self.dispatcher.active_reminder

    def dismiss_active_reminder(self) -> None:
        with self._lock:
            self.dispatcher.dismiss()

    def tick(self) -> list[Task]:
        """
        One evaluation cycle. Returns the tasks dispatched in this cycle.

        Never raises: feed and dispatch failures are logged.
        """
        with self._lock:
            now = self.clock.now()

            try:
                tasks = self.feed.snapshot()
            except Exception:
                logger.exception("Task feed snapshot failed")
                tasks = []

            fired = evaluate(now, tasks, self.ledger, grace_minutes=self.grace_minutes)

            for task in fired:
                try:
                    self.dispatcher.dispatch(task)
                except Exception:
                    logger.exception("dispatch failed task_id=%s", task.id)

            if fired:
                logger.debug("Tick %s fired=%d ledger=%d", now.strftime("%H:%M:%S"), len(fired), len(self.ledger))
            return fired

    def reset(self) -> None:
        """Drop session state: fired ledger, active reminder, alarm."""
        with self._lock:
            self.ledger.reset()
            self.dispatcher.reset()
        logger.info("Reminder session reset.")


async def run_reminder_scheduler(
        engine: ReminderEngine,
        *,
        interval_seconds: float = 20.0,
) -> None:
    """
    Simple polling scheduler.

    Every interval_seconds run engine.tick(). Exact-minute matching needs at
    least one tick per minute; the interval is clamped to [0.5, 60] seconds.

    To stop the scheduler, cancel the coroutine/task. The alarm is silenced on
    the way out; notifications already shown are not retracted.
    """
    sleep_s = max(0.5, min(60.0, float(interval_seconds)))
    logger.info("Reminder scheduler started (interval=%.1fs grace=%dmin).", sleep_s, engine.grace_minutes)

    try:
        while True:
            try:
                engine.tick()
            except Exception:
                logger.exception("Reminder tick failed")

            await asyncio.sleep(sleep_s)
    finally:
        engine.dispatcher.stop_alarm()
        logger.info("Reminder scheduler stopped.")


@dataclass
class ReminderBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    task: asyncio.Task[None]

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.task.cancel)
        except Exception:
            logger.debug("Failed to signal reminder scheduler stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_reminders_in_background(
    engine: ReminderEngine,
    *,
    interval_seconds: float = 20.0,
) -> ReminderBackgroundRunner | None:
    """
    Start the reminder scheduler in a background thread.

    Why a thread: the console REPL blocks on input() while the scheduler
    needs its own event loop.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)

        task = loop.create_task(run_reminder_scheduler(engine, interval_seconds=interval_seconds))
        holder["loop"] = loop
        holder["task"] = task
        ready.set()

        try:
            loop.run_until_complete(task)
        except asyncio.CancelledError:
            pass
        finally:
            with contextlib.suppress(Exception):
                loop.stop()
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="taskito-reminders", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    task = holder.get("task")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(task, asyncio.Task):
        logger.error("Reminder thread did not initialize properly.")
        return None

    logger.info("Reminder background thread started.")
    return ReminderBackgroundRunner(thread=t, loop=loop, task=task)
