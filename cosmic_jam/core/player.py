"""Recording playback — replays notes through single-shot Qt timers.

Every note gets its own timer at ``timestamp / speed``; one extra timer at
``duration / speed`` ends playback. The player owns all of those timers
and ``stop()`` cancels every one of them before returning, so no note can
be emitted after playback has been reported stopped.

Ordering between notes is best-effort: it relies on the Qt event loop
firing timers in deadline order and does not compensate for drift.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from PyQt6.QtCore import QObject, Qt, QTimer, pyqtSignal

from .recording import PlaybackState, RecordedNote, Recording

log = logging.getLogger(__name__)

# Largest interval QTimer accepts (signed 32-bit milliseconds, about 24.8 days).
MAX_TIMER_INTERVAL_MS = 2**31 - 1


class Player(QObject):
    """Replays a Recording's notes as ``playback_note`` signals."""

    playback_started = pyqtSignal(object)   # Recording
    playback_note = pyqtSignal(object)      # RecordedNote
    playback_stopped = pyqtSignal(object)   # Recording | None

    def __init__(
        self,
        clock: Callable[[], float] = time.perf_counter,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._clock = clock
        self._playing = False
        self._recording: Recording | None = None
        self._speed = 1.0
        self._start_ms = 0.0
        self._timers: list[QTimer] = []

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def pending_count(self) -> int:
        """Number of scheduled timers that have neither fired nor been cancelled."""
        return sum(1 for t in self._timers if t.isActive())

    def _now_ms(self) -> float:
        return self._clock() * 1000.0

    def play(self, recording: Recording, speed: float = 1.0) -> bool:
        """Schedule every note of *recording*. Returns False if already playing."""
        if self._playing:
            return False
        if speed <= 0:
            log.warning("Refusing to play at non-positive speed %r", speed)
            return False

        self._playing = True
        self._recording = recording
        self._speed = speed
        self._start_ms = self._now_ms()

        try:
            for note in recording.notes:
                self._schedule(note.timestamp / speed, lambda n=note: self._emit_note(n))
            self._schedule(recording.duration / speed, self.stop)
        except (OverflowError, ValueError) as e:
            log.warning("Cannot schedule playback of %s: %s", recording.name, e)
            self._cancel_timers()
            self._playing = False
            self._recording = None
            self._speed = 1.0
            self._start_ms = 0.0
            return False

        log.info("Playback started: %s at %.2fx", recording.name, speed)
        self.playback_started.emit(recording)
        return True

    def stop(self) -> None:
        if not self._playing:
            return
        self._playing = False
        self._cancel_timers()

        recording = self._recording
        self._recording = None
        self._speed = 1.0
        self._start_ms = 0.0
        self.playback_stopped.emit(recording)

    def pause(self) -> bool:
        """Stop playback. There is no resume: playing again starts from zero."""
        if not self._playing:
            return False
        self.stop()
        return True

    def state(self) -> PlaybackState:
        if not self._playing or self._recording is None:
            return PlaybackState()
        total = self._recording.duration
        elapsed = self._now_ms() - self._start_ms
        return PlaybackState(
            is_playing=True,
            current_time=min(elapsed * self._speed, total),
            total_duration=total,
            recording=self._recording,
            speed=self._speed,
        )

    # ── Timers ──────────────────────────────────────────

    def _schedule(self, delay_ms: float, callback: Callable[[], None]) -> None:
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.setTimerType(Qt.TimerType.PreciseTimer)
        timer.timeout.connect(callback)
        self._timers.append(timer)
        timer.start(min(MAX_TIMER_INTERVAL_MS, max(0, round(delay_ms))))

    def _cancel_timers(self) -> None:
        timers, self._timers = self._timers, []
        for timer in timers:
            timer.stop()
            timer.deleteLater()

    def _emit_note(self, note: RecordedNote) -> None:
        if self._playing:
            self.playback_note.emit(note)
