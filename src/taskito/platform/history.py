# src/taskito/platform/history.py

from __future__ import annotations

import logging

from ..core.ports import BackListener

logger = logging.getLogger(__name__)


class ConsoleHistory:
    """
    In-process stand-in for a browser-style history stack.

    Entries are anonymous; only the depth is tracked. Both the user gesture
    (go_back) and the programmatic back() deliver one back signal to the
    listeners, synchronously and in call order.
    """

    def __init__(self) -> None:
        self._depth = 0
        self._listeners: list[BackListener] = []

    @property
    def depth(self) -> int:
        return self._depth

    def add_back_listener(self, listener: BackListener) -> None:
        self._listeners.append(listener)

    def push_entry(self) -> None:
        self._depth += 1

    def back(self) -> None:
        self._traverse_back()

    def go_back(self) -> bool:
        """
        User back gesture.

        Returns False when there is no entry left, i.e. the platform default
        (leaving the app) would apply.
        """
        return self._traverse_back()

    def reset(self) -> None:
        self._depth = 0

    def _traverse_back(self) -> bool:
        if self._depth <= 0:
            return False
        self._depth -= 1
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Back listener failed.")
        return True
