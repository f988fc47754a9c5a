# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskito.cli.bootstrap import create_initial_state
from taskito.core.state import AppState

from .fakes import FakeAlarm, FakeClock, FakeNotifier

TODAY = "2026-03-14"


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskito",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        reminder_interval_seconds=20.0,
        reminder_grace_minutes=0,
        notifications_enabled=True,
        alarm_enabled=True,
        reminder_tone="louder",
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 14, 8, 0, 0))


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def alarm() -> FakeAlarm:
    return FakeAlarm()


@pytest.fixture()
def state(settings: SimpleNamespace, notifier: FakeNotifier, alarm: FakeAlarm, clock: FakeClock) -> AppState:
    """
    AppState wired with deterministic fakes for the platform side.

    NOTE: the SQLite TaskStore is real; the reminder engine polls it.
    """
    return create_initial_state(settings=settings, notifier=notifier, alarm=alarm, clock=clock)
