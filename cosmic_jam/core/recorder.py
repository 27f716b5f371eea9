"""Recording state machine — captures note-start/note-end pairs with timing.

States: idle → recording ⇄ paused → idle. Time is measured against a
*virtual start time* that is shifted forward on resume, so paused
intervals never count toward note offsets or the final duration.

Single-threaded: every method is called from the Qt main thread.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from PyQt6.QtCore import QObject, pyqtSignal

from .constants import (
    DEFAULT_FLUSH_SOUND,
    DEFAULT_RECORDING_NAME_PREFIX,
    MAX_RECORDING_DURATION_MS,
)
from .recording import (
    RecordedNote,
    Recording,
    RecordingMetadata,
    RecordingStatus,
    SoundConfig,
)
from .recording_codec import generate_id, now_ms
from .recording_store import RecordingStore

log = logging.getLogger(__name__)


class Recorder(QObject):
    """Captures live key presses into a Recording and files it in the store."""

    recording_started = pyqtSignal(object)   # Recording (draft)
    recording_paused = pyqtSignal()
    recording_resumed = pyqtSignal()
    recording_stopped = pyqtSignal(object)   # Recording
    recording_limit_reached = pyqtSignal()
    note_recorded = pyqtSignal(object)       # RecordedNote

    def __init__(
        self,
        store: RecordingStore,
        clock: Callable[[], float] = time.perf_counter,
        max_duration_ms: float = MAX_RECORDING_DURATION_MS,
        name_prefix: str = DEFAULT_RECORDING_NAME_PREFIX,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._store = store
        self._clock = clock
        self.max_duration_ms = max_duration_ms
        self.name_prefix = name_prefix

        self._recording = False
        self._paused = False
        self._start_ms = 0.0        # virtual start time
        self._pause_started_ms = 0.0
        self._draft: Recording | None = None
        self._notes: list[RecordedNote] = []
        self._active: dict[str, float] = {}  # key -> start offset (ms)

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def notes(self) -> list[RecordedNote]:
        """Copy of the notes finished so far in the current session."""
        return list(self._notes)

    @property
    def active_keys(self) -> list[str]:
        return list(self._active)

    def _now_ms(self) -> float:
        return self._clock() * 1000.0

    def _elapsed_ms(self) -> float:
        if self._paused:
            return self._pause_started_ms - self._start_ms
        return self._now_ms() - self._start_ms

    def status(self) -> RecordingStatus:
        return RecordingStatus(
            is_recording=self._recording,
            is_paused=self._paused,
            duration=self._elapsed_ms() if self._recording else 0.0,
        )

    # ── Transport ───────────────────────────────────────

    def start(self, name: str | None = None) -> bool:
        """Begin a new session. Returns False if one is already running."""
        if self._recording:
            return False

        self._recording = True
        self._paused = False
        self._notes = []
        self._active.clear()
        self._start_ms = self._now_ms()

        created = now_ms()
        self._draft = Recording(
            id=generate_id(),
            name=name or f"{self.name_prefix} {created}",
            created_at=created,
            metadata=RecordingMetadata(),
        )
        log.info("Recording started: %s", self._draft.name)
        self.recording_started.emit(self._draft)
        return True

    def pause(self) -> bool:
        if not self._recording or self._paused:
            return False
        self._flush_active_notes()
        self._pause_started_ms = self._now_ms()
        self._paused = True
        self.recording_paused.emit()
        return True

    def resume(self) -> bool:
        if not self._recording or not self._paused:
            return False
        self._start_ms += self._now_ms() - self._pause_started_ms
        self._paused = False
        self.recording_resumed.emit()
        return True

    def stop(self) -> Recording | None:
        """Finish the session, store it, and return the finished Recording."""
        if not self._recording:
            return None

        self._flush_active_notes()
        duration = self._elapsed_ms()
        self._recording = False
        self._paused = False

        recording = self._draft
        self._draft = None
        if recording is None:
            return None

        notes = self._notes
        self._notes = []
        recording.duration = duration
        recording.notes = list(notes)
        recording.metadata = RecordingMetadata.from_notes(notes)

        self._store.insert(recording)
        log.info(
            "Recording stopped: %s (%d notes, %.0f ms)",
            recording.name, recording.note_count, recording.duration,
        )
        self.recording_stopped.emit(recording)
        return recording

    # ── Note capture ────────────────────────────────────

    def note_start(self, key: str, sound_config: SoundConfig) -> None:
        """Mark *key* as held. A key that is already held is re-triggered."""
        if not self._recording or self._paused:
            return

        offset = self._elapsed_ms()
        if offset > self.max_duration_ms:
            log.warning("Recording limit of %.0f ms reached, stopping", self.max_duration_ms)
            self.stop()
            self.recording_limit_reached.emit()
            return

        self._active[key] = offset

    def note_end(self, key: str, sound_config: SoundConfig) -> None:
        """Close the held interval for *key* and append it as a RecordedNote."""
        if not self._recording or self._paused:
            return
        start = self._active.get(key)
        if start is None:
            return

        note = RecordedNote(
            timestamp=start,
            key=key,
            sound_config=sound_config,
            duration=self._elapsed_ms() - start,
        )
        self._notes.append(note)
        del self._active[key]
        self.note_recorded.emit(note)

    def _flush_active_notes(self) -> None:
        """End every held key at the current offset, with the default sound."""
        if not self._active:
            return
        offset = self._elapsed_ms()
        for key, start in self._active.items():
            self._notes.append(RecordedNote(
                timestamp=start,
                key=key,
                sound_config=SoundConfig(key=key, **DEFAULT_FLUSH_SOUND),
                duration=offset - start,
            ))
        self._active.clear()
