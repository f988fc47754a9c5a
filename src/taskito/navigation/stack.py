# src/taskito/navigation/stack.py

from __future__ import annotations

"""
Overlay navigation stack.

Every open overlay owns exactly one platform history entry, so the native
back action can be mapped to "close the top-most overlay".

Two ways an overlay can go away:
- back signal: the platform already consumed the history entry; we pop the top.
- explicit close(tag): we remove the entry ourselves and consume one history
  entry via history.back(). That call raises a back signal of its own, which
  must not close anything; it is counted in _pending_self_backs and swallowed.

History entries are anonymous, so only their count has to match the stack.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..core.ports import History
from .surfaces import Surface

logger = logging.getLogger(__name__)

CloseAction = Callable[[], None]


@dataclass(slots=True, frozen=True)
class NavEntry:
    surface: Surface
    on_close: CloseAction | None = None


class NavigationStack:
    def __init__(self, history: History) -> None:
        self._history = history
        self._entries: list[NavEntry] = []
        self._pending_self_backs = 0
        history.add_back_listener(self.on_back_signal)

    # ---- introspection ----

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def top(self) -> Surface | None:
        return self._entries[-1].surface if self._entries else None

    def surfaces(self) -> list[Surface]:
        """Open surfaces, bottom to top."""
        return [e.surface for e in self._entries]

    def is_open(self, surface: Surface) -> bool:
        return any(e.surface == surface for e in self._entries)

    # ---- transitions ----

    def open(self, surface: Surface, on_close: CloseAction | None = None) -> None:
        self._entries.append(NavEntry(surface=surface, on_close=on_close))
        try:
            self._history.push_entry()
        except Exception:
            logger.exception("history.push_entry failed surface=%s", surface.value)
        logger.debug("Overlay opened: %s (depth=%d)", surface.value, len(self._entries))

    def on_back_signal(self) -> bool:
        """
        Handle one back signal from the platform.

        Returns True if the signal was consumed here, False if it should fall
        through to the platform default (nothing open).
        """
        if self._pending_self_backs > 0:
            self._pending_self_backs -= 1
            logger.debug("Back signal from explicit close swallowed.")
            return True

        if not self._entries:
            return False

        entry = self._entries.pop()
        logger.debug("Back closes overlay: %s (depth=%d)", entry.surface.value, len(self._entries))
        self._run_close_action(entry)
        return True

    def close(self, surface: Surface) -> bool:
        """
        Explicitly close the top-most overlay of the given kind.

        Returns False (and does nothing) if no such overlay is open.
        """
        idx = self._find_topmost(surface)
        if idx is None:
            return False

        entry = self._entries.pop(idx)
        logger.debug("Overlay closed: %s (depth=%d)", surface.value, len(self._entries))

        # Count before calling back(): some platforms deliver the signal synchronously.
        self._pending_self_backs += 1
        try:
            self._history.back()
        except Exception:
            self._pending_self_backs -= 1
            logger.exception("history.back failed surface=%s", surface.value)

        self._run_close_action(entry)
        return True

    def reset(self) -> None:
        """Forget all overlays without running their close actions (session end)."""
        self._entries.clear()
        self._pending_self_backs = 0

    # Application-facing names.
    open_overlay = open
    close_overlay = close

    # ---- helpers ----

    def _find_topmost(self, surface: Surface) -> int | None:
        for i in range(len(self._entries) - 1, -1, -1):
            if self._entries[i].surface == surface:
                return i
        return None

    @staticmethod
    def _run_close_action(entry: NavEntry) -> None:
        # Runs after the entry left the stack, so a close action that calls
        # close() for its own surface is a harmless no-op.
        if entry.on_close is None:
            return
        try:
            entry.on_close()
        except Exception:
            logger.exception("Close action failed surface=%s", entry.surface.value)
