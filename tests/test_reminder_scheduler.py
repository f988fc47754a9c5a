# tests/test_reminder_scheduler.py

from __future__ import annotations

import asyncio
import threading
import time
from datetime import datetime

import pytest

from taskito.navigation.stack import NavigationStack
from taskito.navigation.surfaces import Surface
from taskito.platform.history import ConsoleHistory
from taskito.reminders.dispatcher import NotificationDispatcher
from taskito.reminders.scheduler import ReminderEngine, run_reminder_scheduler, start_reminders_in_background
from taskito.tasks.task_models import Task

from .conftest import TODAY
from .fakes import FakeAlarm, FakeClock, FakeNotifier, FakeTaskFeed


def _engine(feed: FakeTaskFeed, clock: FakeClock) -> tuple[ReminderEngine, FakeNotifier, FakeAlarm]:
    notifier = FakeNotifier()
    alarm = FakeAlarm()
    nav = NavigationStack(ConsoleHistory())
    dispatcher = NotificationDispatcher(notifier, alarm, nav)
    return ReminderEngine(feed, dispatcher, clock), notifier, alarm


def test_tick_dispatches_once_per_trigger_minute() -> None:
    task = Task(id="t1", title="Standup", date=TODAY, time="09:00", reminder_minutes=15)
    feed = FakeTaskFeed([task])
    clock = FakeClock(datetime(2026, 3, 14, 8, 44, 40))
    engine, notifier, _alarm = _engine(feed, clock)

    assert engine.tick() == []
    clock.set(8, 45, 0)
    assert engine.tick() == [task]
    clock.set(8, 45, 20)
    assert engine.tick() == []
    clock.set(8, 45, 40)
    assert engine.tick() == []

    assert len(notifier.shown) == 1
    assert engine.active_reminder == task


def test_dismissed_reminder_never_refires() -> None:
    task = Task(id="t1", title="Standup", date=TODAY, time="09:00", reminder_minutes=15)
    clock = FakeClock(datetime(2026, 3, 14, 8, 45, 0))
    engine, notifier, alarm = _engine(FakeTaskFeed([task]), clock)

    engine.tick()
    engine.dismiss_active_reminder()
    assert not alarm.playing

    clock.set(8, 45, 30)
    assert engine.tick() == []
    assert len(notifier.shown) == 1


def test_feed_failure_is_logged_not_raised() -> None:
    feed = FakeTaskFeed()
    feed.fail = True
    engine, _notifier, _alarm = _engine(feed, FakeClock(datetime(2026, 3, 14, 8, 45)))
    assert engine.tick() == []


def test_edit_between_ticks_rearms(state, clock) -> None:
    store = state.task_store
    task_id = store.add_task(title="Dentist", date=TODAY, time_="09:00", reminder_minutes=15)

    clock.set(8, 45)
    fired = state.reminders.tick()
    assert [t.id for t in fired] == [task_id]
    state.reminders.dismiss_active_reminder()

    store.update_task_fields(task_id, time_="09:30")
    clock.set(9, 15)
    fired = state.reminders.tick()
    assert [t.id for t in fired] == [task_id]


def test_completed_task_in_store_is_skipped(state, clock, notifier) -> None:
    store = state.task_store
    task_id = store.add_task(title="Gym", date=TODAY, time_="09:00", reminder_minutes=15)
    store.toggle_task(task_id)

    clock.set(8, 45)
    assert state.reminders.tick() == []
    assert notifier.shown == []


def test_reset_session_clears_ledger_overlays_and_alarm(state, clock, alarm) -> None:
    state.task_store.add_task(title="Standup", date=TODAY, time_="09:00", reminder_minutes=15)
    clock.set(8, 45)
    state.reminders.tick()
    assert state.navigation.is_open(Surface.REMINDER_POPUP)
    assert alarm.playing

    state.reset_session()

    assert len(state.reminders.ledger) == 0
    assert len(state.navigation) == 0
    assert state.history.depth == 0
    assert state.reminders.active_reminder is None
    assert not alarm.playing

    # a new session may fire the same instant again
    assert len(state.reminders.tick()) == 1


@pytest.mark.asyncio
async def test_scheduler_loop_fires_and_silences_on_cancel() -> None:
    task = Task(id="t1", title="Standup", date=TODAY, time="09:00", reminder_minutes=15)
    clock = FakeClock(datetime(2026, 3, 14, 8, 45, 0))
    engine, notifier, alarm = _engine(FakeTaskFeed([task]), clock)

    runner = asyncio.create_task(run_reminder_scheduler(engine, interval_seconds=0.01))

    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert len(notifier.shown) == 1, "Scheduler must notify exactly once for one trigger minute"
    assert engine.active_reminder == task
    # teardown force-stops the alarm
    assert not alarm.playing


def test_tick_waits_for_console_lock(state, clock, notifier) -> None:
    state.task_store.add_task(title="Standup", date=TODAY, time_="09:00", reminder_minutes=15)
    clock.set(8, 45)
    results: list[list[Task]] = []

    worker = threading.Thread(target=lambda: results.append(state.reminders.tick()))
    with state.lock:
        worker.start()
        worker.join(timeout=0.2)
        # the tick is parked on the lock while a command holds it
        assert worker.is_alive()
        assert results == []
        assert notifier.shown == []

    worker.join(timeout=5.0)
    assert not worker.is_alive()
    assert len(results) == 1 and len(results[0]) == 1
    assert len(notifier.shown) == 1


def test_background_runner_starts_ticks_and_stops_cleanly() -> None:
    task = Task(id="t1", title="Standup", date=TODAY, time="09:00", reminder_minutes=15)
    clock = FakeClock(datetime(2026, 3, 14, 8, 45, 0))
    engine, notifier, alarm = _engine(FakeTaskFeed([task]), clock)

    runner = start_reminders_in_background(engine, interval_seconds=0.5)
    assert runner is not None
    assert runner.thread.is_alive()

    deadline = time.monotonic() + 5.0
    while not notifier.shown and time.monotonic() < deadline:
        time.sleep(0.01)
    assert len(notifier.shown) == 1
    assert alarm.playing

    runner.stop()
    runner.join(timeout=5.0)

    assert not runner.thread.is_alive()
    assert not alarm.playing
    assert runner.loop.is_closed()
