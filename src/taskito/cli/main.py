# src/taskito/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts:
- the reminder scheduler in a background thread,
- the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..reminders.scheduler import ReminderBackgroundRunner, start_reminders_in_background

logger = logging.getLogger(__name__)


def _shutdown(state, runner: ReminderBackgroundRunner | None) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    if runner is not None:
        try:
            runner.stop()
            runner.join(timeout=5.0)
        except Exception:
            logger.debug("Reminder runner stop failed.", exc_info=True)

    # In-flight notifications stay; only the alarm is forced off.
    try:
        state.reminders.dispatcher.stop_alarm()
    except Exception:
        logger.debug("Alarm stop failed.", exc_info=True)

    # TaskStore uses short-lived sqlite connections per call; close() is a no-op hook.
    try:
        state.task_store.close()
    except Exception:
        logger.debug("TaskStore close failed.", exc_info=True)


def _install_signal_handlers(handler, *, console_enabled: bool) -> list[signal.Signals]:
    """
    SIGTERM always stops the app. SIGINT is taken over only without a console:
    at the REPL, Ctrl+C must stay a KeyboardInterrupt so input() returns.
    """
    wanted = [signal.SIGTERM]
    if not console_enabled:
        wanted.append(signal.SIGINT)

    installed: list[signal.Signals] = []
    for sig in wanted:
        try:
            signal.signal(sig, handler)
        except Exception:
            logger.debug("Cannot install handler for signal %s.", sig, exc_info=True)
            continue
        installed.append(sig)
    return installed


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/taskito")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "taskito"))

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)

    # Ask once up front, as a browser would when permission is still undecided.
    state.reminders.dispatcher.request_permission()

    runner = start_reminders_in_background(
        state.reminders,
        interval_seconds=settings.reminder_interval_seconds,
    )

    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    _install_signal_handlers(_handle_signal, console_enabled=settings.console_enabled)

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            logger.info("Console disabled. Running reminders only. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        _shutdown(state, runner)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
