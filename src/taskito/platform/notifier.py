# src/taskito/platform/notifier.py

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


class DesktopNotifier:
    """
    System notifications through plyer.

    Permission model: granted when notifications are enabled in settings and
    the plyer notification backend imports. request_permission() resolves
    the backend once; later calls reuse the result.
    """

    def __init__(self, *, enabled: bool = True, app_name: str = "taskito", timeout_seconds: int = 10) -> None:
        self.enabled = bool(enabled)
        self.app_name = app_name
        self.timeout_seconds = int(timeout_seconds)

        self._backend: Any = None
        self._resolved = False

    def request_permission(self) -> bool:
        if self._resolved:
            return self.is_granted()
        self._resolved = True

        if not self.enabled:
            logger.info("System notifications disabled.")
            return False

        try:
            from plyer import notification  # type: ignore
        except Exception as e:
            logger.warning("plyer is not available; system notifications are off. Error: %s", repr(e))
            return False

        self._backend = notification
        logger.info("System notifications enabled (plyer).")
        return True

    def is_granted(self) -> bool:
        return self.enabled and self._backend is not None

    def show(self, title: str, body: str) -> None:
        if not self.is_granted():
            return
        self._backend.notify(
            title=title,
            message=body,
            app_name=self.app_name,
            timeout=self.timeout_seconds,
        )
