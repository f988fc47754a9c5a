# src/taskito/platform/alarm.py

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToneProfile:
    frequency_hz: float
    volume: float
    beeps_per_second: int


TONE_PROFILES: dict[str, ToneProfile] = {
    "soft": ToneProfile(frequency_hz=660.0, volume=0.25, beeps_per_second=1),
    "louder": ToneProfile(frequency_hz=880.0, volume=0.6, beeps_per_second=2),
    "urgent": ToneProfile(frequency_hz=1320.0, volume=0.9, beeps_per_second=4),
}


class ToneAlarm:
    """
    Looping alarm tone played through sounddevice.

    Design goals:
    - Optional dependencies: if numpy/sounddevice are missing or no output
      device exists, the alarm disables itself and play() becomes a no-op.
    - Non-blocking: sounddevice plays in its own callback thread.
    - One alarm at a time: play() restarts from the beginning.
    """

    def __init__(self, *, enabled: bool = True, tone: str = "louder", sample_rate: int = 44100) -> None:
        self.enabled = bool(enabled)
        self.profile = TONE_PROFILES.get(tone, TONE_PROFILES["louder"])
        self.sample_rate = int(sample_rate)

        self._sd: Any = None  # sounddevice module (runtime import)
        self._wave: Any = None
        self._chime: Any = None
        self._playing = False
        self._lock = threading.Lock()

        if not self.enabled:
            logger.info("Alarm sound disabled.")
            return

        try:
            import numpy as np  # type: ignore
            import sounddevice as sd  # type: ignore
        except Exception as e:
            self.enabled = False
            logger.warning(
                "Alarm is enabled, but audio dependencies failed to import. "
                "Install numpy + sounddevice to hear reminders. Error: %s",
                repr(e),
            )
            return

        self._sd = sd
        self._wave = self._build_wave(np)
        self._chime = self._build_chime(np)

    def _build_wave(self, np: Any) -> Any:
        """One second of beeps: on for the first half of each slot, silent for the rest."""
        n = self.sample_rate
        t = np.arange(n, dtype=np.float32) / float(self.sample_rate)
        carrier = np.sin(2.0 * np.pi * self.profile.frequency_hz * t)

        slot = max(1, n // self.profile.beeps_per_second)
        gate = ((np.arange(n) % slot) < (slot // 2)).astype(np.float32)

        return (carrier * gate * self.profile.volume).astype(np.float32)

    def _build_chime(self, np: Any) -> Any:
        """Two short rising notes with a fade-out, about a quarter second."""
        n = self.sample_rate // 8
        t = np.arange(n, dtype=np.float32) / float(self.sample_rate)
        fade = np.linspace(1.0, 0.0, n, dtype=np.float32)
        notes = [np.sin(2.0 * np.pi * f * t) * fade for f in (784.0, 1046.5)]
        return (np.concatenate(notes) * 0.4).astype(np.float32)

    @property
    def is_playing(self) -> bool:
        return self._playing

    def play(self, loop: bool = True) -> None:
        if not self.enabled or self._sd is None:
            return
        with self._lock:
            # sounddevice.play() replaces any sound that is still playing.
            self._sd.play(self._wave, self.sample_rate, loop=bool(loop))
            self._playing = True

    def chime(self) -> None:
        if not self.enabled or self._sd is None:
            return
        with self._lock:
            if self._playing:
                # Would cut off a ringing reminder.
                return
            self._sd.play(self._chime, self.sample_rate)

    def stop(self) -> None:
        if self._sd is None:
            return
        with self._lock:
            if not self._playing:
                return
            self._sd.stop()
            self._playing = False
