# src/taskito/logging_setup.py

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Background components that log on every reminder tick or alarm restart.
# The console shows them only from WARNING up; the file keeps everything.
QUIET_ON_CONSOLE: tuple[str, ...] = (
    "taskito.reminders.scheduler",
    "taskito.reminders.dispatcher",
    "taskito.navigation.stack",
    "taskito.platform.alarm",
)

# Third-party loggers capped at this level even in the log file.
LIBRARY_LEVELS: dict[str, int] = {
    "plyer": logging.WARNING,
    "sounddevice": logging.WARNING,
}

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s [%(threadName)s]: %(message)s"


class _ConsoleNoiseFilter(logging.Filter):
    """Keep the REPL readable while reminders fire from the background thread."""

    def __init__(self, quiet: tuple[str, ...] = QUIET_ON_CONSOLE) -> None:
        super().__init__()
        self._quiet = quiet

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if not name.startswith("taskito."):
            # plyer / sounddevice / py.warnings
            return record.levelno >= logging.ERROR
        if name.startswith(self._quiet):
            return record.levelno >= logging.WARNING
        return True


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskito",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    max_bytes: int = 1_000_000,
    backups: int = 3,
) -> Path:
    """
    Console gets a filtered view; taskito.log (rotated) gets the full story.

    Safe to call again: existing root handlers are replaced. Returns the log file path.
    """
    log_file = Path(log_dir) / "taskito.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.addFilter(_ConsoleNoiseFilter())

    file = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backups, encoding="utf-8")
    file.setLevel(file_level)

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in (console, file):
        h.setFormatter(fmt)
        root.addHandler(h)

    for name, level in LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(level)

    logging.captureWarnings(True)
    return log_file
