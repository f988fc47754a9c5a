# tests/test_main.py

from __future__ import annotations

import signal

import pytest

from taskito.cli import main as main_mod


@pytest.fixture()
def installed(monkeypatch: pytest.MonkeyPatch) -> dict:
    calls: dict = {}
    monkeypatch.setattr(main_mod.signal, "signal", lambda sig, handler: calls.__setitem__(sig, handler))
    return calls


def test_console_mode_leaves_ctrl_c_to_the_repl(installed: dict) -> None:
    handler = lambda *_: None  # noqa: E731

    got = main_mod._install_signal_handlers(handler, console_enabled=True)

    assert got == [signal.SIGTERM]
    assert signal.SIGINT not in installed
    assert installed[signal.SIGTERM] is handler


def test_headless_mode_handles_ctrl_c(installed: dict) -> None:
    got = main_mod._install_signal_handlers(lambda *_: None, console_enabled=False)
    assert got == [signal.SIGTERM, signal.SIGINT]
    assert set(installed) == {signal.SIGTERM, signal.SIGINT}


def test_unsupported_signal_is_skipped(monkeypatch: pytest.MonkeyPatch) -> None:
    def refuse(sig, handler):
        if sig == signal.SIGTERM:
            raise ValueError("not supported here")

    monkeypatch.setattr(main_mod.signal, "signal", refuse)
    assert main_mod._install_signal_handlers(lambda *_: None, console_enabled=False) == [signal.SIGINT]
