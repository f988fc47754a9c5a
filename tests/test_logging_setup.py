# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

from taskito.logging_setup import _ConsoleNoiseFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_quiets_tick_noise_and_libraries() -> None:
    f = _ConsoleNoiseFilter()

    assert f.filter(_record("taskito.cli.commands", logging.INFO))
    assert not f.filter(_record("taskito.reminders.dispatcher", logging.INFO))
    assert not f.filter(_record("taskito.reminders.scheduler", logging.DEBUG))
    assert f.filter(_record("taskito.reminders.scheduler", logging.WARNING))
    assert not f.filter(_record("plyer", logging.WARNING))
    assert f.filter(_record("sounddevice", logging.ERROR))


def test_setup_logging_writes_file_and_replaces_handlers(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    try:
        setup_logging(log_dir=tmp_path)
        log_file = setup_logging(log_dir=tmp_path)
        assert len(root.handlers) == 2

        logging.getLogger("taskito.reminders.dispatcher").debug("tick noise")
        for h in root.handlers:
            h.flush()
        assert "tick noise" in log_file.read_text(encoding="utf-8")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved[0]:
            root.addHandler(h)
        root.setLevel(saved[1])
        logging.captureWarnings(False)
