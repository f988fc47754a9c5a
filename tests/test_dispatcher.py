# tests/test_dispatcher.py

from __future__ import annotations

from taskito.navigation.stack import NavigationStack
from taskito.navigation.surfaces import Surface
from taskito.platform.history import ConsoleHistory
from taskito.reminders.dispatcher import DEFAULT_BODY, NotificationDispatcher
from taskito.tasks.task_models import Task

from .fakes import FakeAlarm, FakeNotifier


def _make(notifier: FakeNotifier | None = None, alarm: FakeAlarm | None = None):
    history = ConsoleHistory()
    nav = NavigationStack(history)
    notifier = notifier or FakeNotifier()
    alarm = alarm or FakeAlarm()
    dispatcher = NotificationDispatcher(notifier, alarm, nav, app_name="taskito")
    return dispatcher, nav, history, notifier, alarm


TASK = Task(id="t1", title="Pay rent", details="", date="2026-03-14", time="09:00", reminder_minutes=15)


def test_dispatch_runs_all_side_effects() -> None:
    dispatcher, nav, history, notifier, alarm = _make()
    seen: list[Task | None] = []
    dispatcher.subscribe(seen.append)

    dispatcher.dispatch(TASK)

    assert alarm.playing and alarm.plays == 1
    assert len(notifier.shown) == 1
    assert notifier.shown[0].title == "taskito: Pay rent"
    assert notifier.shown[0].body == DEFAULT_BODY
    assert dispatcher.active_reminder == TASK
    assert nav.top == Surface.REMINDER_POPUP
    assert history.depth == 1
    assert seen == [TASK]


def test_permission_denied_skips_notification_only() -> None:
    dispatcher, nav, _history, notifier, alarm = _make(notifier=FakeNotifier(granted=False))
    dispatcher.dispatch(TASK)
    assert notifier.shown == []
    assert alarm.playing
    assert dispatcher.active_reminder == TASK
    assert nav.is_open(Surface.REMINDER_POPUP)


def test_blocked_audio_and_broken_notifier_are_swallowed() -> None:
    dispatcher, nav, _history, _notifier, alarm = _make(
        notifier=FakeNotifier(fail=True),
        alarm=FakeAlarm(blocked=True),
    )
    dispatcher.dispatch(TASK)
    assert not alarm.playing
    assert dispatcher.active_reminder == TASK
    assert nav.is_open(Surface.REMINDER_POPUP)


def test_explicit_dismiss_stops_alarm_and_closes_popup() -> None:
    dispatcher, nav, history, _notifier, alarm = _make()
    seen: list[Task | None] = []
    dispatcher.subscribe(seen.append)

    dispatcher.dispatch(TASK)
    dispatcher.dismiss_active_reminder()

    assert not alarm.playing
    assert dispatcher.active_reminder is None
    assert len(nav) == 0
    assert history.depth == 0
    assert seen == [TASK, None]

    # a later back gesture does not reach the already-closed popup
    assert history.go_back() is False


def test_back_gesture_dismisses_reminder() -> None:
    dispatcher, nav, history, _notifier, alarm = _make()
    nav.open(Surface.SEARCH)
    dispatcher.dispatch(TASK)

    assert history.go_back() is True

    assert dispatcher.active_reminder is None
    assert not alarm.playing
    assert nav.surfaces() == [Surface.SEARCH]


def test_second_reminder_replaces_alarm_and_active_value() -> None:
    dispatcher, nav, _history, notifier, alarm = _make()
    other = Task(id="t2", title="Call mom", details="birthday", date="2026-03-14", time="08:50", reminder_minutes=5)

    dispatcher.dispatch(TASK)
    dispatcher.dispatch(other)

    assert alarm.plays == 2
    assert dispatcher.active_reminder == other
    assert nav.surfaces() == [Surface.REMINDER_POPUP]
    assert notifier.shown[-1].body == "birthday"


def test_one_dismiss_after_two_reminders_leaves_no_popup() -> None:
    dispatcher, nav, history, _notifier, alarm = _make()
    other = Task(id="t2", title="Call mom", date="2026-03-14", time="08:50", reminder_minutes=5)

    dispatcher.dispatch(TASK)
    dispatcher.dispatch(other)
    dispatcher.dismiss_active_reminder()

    assert dispatcher.active_reminder is None
    assert not alarm.playing
    assert len(nav) == 0
    assert history.depth == 0
    assert history.go_back() is False


def test_reminder_under_another_overlay_reuses_popup() -> None:
    dispatcher, nav, history, _notifier, _alarm = _make()
    other = Task(id="t2", title="Call mom", date="2026-03-14", time="08:50", reminder_minutes=5)

    dispatcher.dispatch(TASK)
    nav.open(Surface.SEARCH)
    dispatcher.dispatch(other)

    assert nav.surfaces() == [Surface.REMINDER_POPUP, Surface.SEARCH]
    assert dispatcher.active_reminder == other

    # back closes search, then the popup with the latest reminder
    history.go_back()
    assert dispatcher.active_reminder == other
    history.go_back()
    assert dispatcher.active_reminder is None
    assert len(nav) == 0


def test_dismiss_without_popup_still_silences() -> None:
    dispatcher, nav, _history, _notifier, alarm = _make()
    dispatcher.dispatch(TASK)
    nav.reset()

    dispatcher.dismiss()
    assert alarm.stops == 1
    assert dispatcher.active_reminder is None


def test_unsubscribe_and_failing_listener() -> None:
    dispatcher, *_ = _make()
    seen: list[Task | None] = []

    def broken(_task) -> None:
        raise RuntimeError("render failed")

    dispatcher.subscribe(broken)
    unsubscribe = dispatcher.subscribe(seen.append)
    dispatcher.dispatch(TASK)
    unsubscribe()
    dispatcher.dismiss()

    assert seen == [TASK]


def test_completion_cue_waits_for_silence() -> None:
    dispatcher, _nav, _history, _notifier, alarm = _make()

    dispatcher.dispatch(TASK)
    dispatcher.play_completion_cue()
    assert alarm.chimes == 0

    dispatcher.dismiss()
    dispatcher.play_completion_cue()
    assert alarm.chimes == 1

    # blocked audio is not an error for the caller
    blocked = _make(alarm=FakeAlarm(blocked=True))[0]
    blocked.play_completion_cue()
