# src/taskito/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The reminder engine and the navigation stack depend on Protocols instead of
concrete platform adapters. This keeps desktop notifications / audio / history
swappable and makes testing easier.
"""

from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from ..tasks.task_models import Task

BackListener = Callable[[], None]


class Clock(Protocol):
    """Local wall-clock time source (naive datetime, same frame as task date/time)."""

    def now(self) -> datetime: ...


class TaskFeed(Protocol):
    """
    Current task collection as of the last successful sync.

    Every call returns a fresh snapshot; no diff contract.
    """

    def snapshot(self) -> list[Task]: ...


class Notifier(Protocol):
    """System notification capability."""

    def request_permission(self) -> bool: ...
    def is_granted(self) -> bool: ...
    def show(self, title: str, body: str) -> None: ...


class AlarmPlayer(Protocol):
    """
    Audible alarm capability. At most one alarm plays at a time.

    stop() also rewinds: the next play() starts from the beginning.
    chime() plays a short one-shot cue (task completed); it never loops.
    """

    def play(self, loop: bool = True) -> None: ...
    def stop(self) -> None: ...
    def chime(self) -> None: ...


class History(Protocol):
    """
    Platform back/forward history.

    push_entry() adds one entry; back() consumes the newest entry
    programmatically. Both user gestures and back() raise a back signal
    delivered to registered listeners, in the order they were requested.
    """

    def push_entry(self) -> None: ...
    def back(self) -> None: ...
    def add_back_listener(self, listener: BackListener) -> None: ...
