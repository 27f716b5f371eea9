"""High-level recording engine — owns recorder, player, store and codec.

Recording and playback are mutually exclusive: neither may start while
the other is active. Every component signal is re-published here so
listeners (UI, scoring, achievements) only connect to one object.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from PyQt6.QtCore import QObject, pyqtSignal

from .config import ConfigManager, get_config
from .player import Player
from .recorder import Recorder
from .recording import PlaybackState, Recording, RecordingStatus, SoundConfig
from .recording_codec import export_recording, import_recording
from .recording_store import RecordingStore
from .storage import JsonFileStorage, KeyValueStorage

log = logging.getLogger(__name__)


def default_storage(config: ConfigManager) -> JsonFileStorage:
    """File storage next to the user config, sized by ``storage.max_bytes``."""
    return JsonFileStorage(
        config.config_dir / config.get("storage.file", "recordings.json"),
        max_bytes=config.get("storage.max_bytes"),
    )


class RecordingEngine(QObject):
    """Façade for capture, replay, library management and interchange."""

    recording_started = pyqtSignal(object)    # Recording (draft)
    recording_paused = pyqtSignal()
    recording_resumed = pyqtSignal()
    recording_stopped = pyqtSignal(object)    # Recording | None
    recording_limit_reached = pyqtSignal()
    note_recorded = pyqtSignal(object)        # RecordedNote
    playback_started = pyqtSignal(object)     # Recording
    playback_note = pyqtSignal(object)        # RecordedNote
    playback_stopped = pyqtSignal(object)     # Recording | None
    recording_deleted = pyqtSignal(str)       # id
    recording_renamed = pyqtSignal(str, str)  # id, new name
    recording_imported = pyqtSignal(object)   # Recording

    def __init__(
        self,
        storage: KeyValueStorage | None = None,
        config: ConfigManager | None = None,
        clock: Callable[[], float] = time.perf_counter,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        if config is None:
            config = get_config()
        if storage is None:
            storage = default_storage(config)
        self._config = config

        self._store = RecordingStore(storage, config.get("storage.key"))
        self._recorder = Recorder(
            self._store,
            clock=clock,
            max_duration_ms=config.get("recording.max_duration_ms"),
            name_prefix=config.get("recording.default_name_prefix"),
            parent=self,
        )
        self._player = Player(clock=clock, parent=self)

        self._recorder.recording_started.connect(self.recording_started)
        self._recorder.recording_paused.connect(self.recording_paused)
        self._recorder.recording_resumed.connect(self.recording_resumed)
        self._recorder.recording_stopped.connect(self.recording_stopped)
        self._recorder.recording_limit_reached.connect(self.recording_limit_reached)
        self._recorder.note_recorded.connect(self.note_recorded)
        self._player.playback_started.connect(self.playback_started)
        self._player.playback_note.connect(self.playback_note)
        self._player.playback_stopped.connect(self.playback_stopped)

    @property
    def recorder(self) -> Recorder:
        return self._recorder

    @property
    def player(self) -> Player:
        return self._player

    @property
    def store(self) -> RecordingStore:
        return self._store

    @property
    def is_recording(self) -> bool:
        return self._recorder.is_recording

    @property
    def is_playing(self) -> bool:
        return self._player.is_playing

    # ── Recording ───────────────────────────────────────

    def start_recording(self, name: str | None = None) -> bool:
        if self._recorder.is_recording or self._player.is_playing:
            return False
        return self._recorder.start(name)

    def pause_recording(self) -> bool:
        return self._recorder.pause()

    def resume_recording(self) -> bool:
        return self._recorder.resume()

    def stop_recording(self) -> Recording | None:
        return self._recorder.stop()

    def note_start(self, key: str, sound_config: SoundConfig) -> None:
        self._recorder.note_start(key, sound_config)

    def note_end(self, key: str, sound_config: SoundConfig) -> None:
        self._recorder.note_end(key, sound_config)

    def recording_state(self) -> RecordingStatus:
        return self._recorder.status()

    # ── Playback ────────────────────────────────────────

    def play_recording(self, recording: Recording, speed: float | None = None) -> bool:
        if self._player.is_playing or self._recorder.is_recording:
            return False
        if speed is None:
            speed = self._config.get("playback.default_speed", 1.0)
        return self._player.play(recording, speed)

    def stop_playback(self) -> None:
        self._player.stop()

    def pause_playback(self) -> bool:
        return self._player.pause()

    def playback_state(self) -> PlaybackState:
        return self._player.state()

    # ── Library ─────────────────────────────────────────

    def get_recordings(self) -> list[Recording]:
        return self._store.list()

    def get_recording(self, recording_id: str) -> Recording | None:
        return self._store.get(recording_id)

    def delete_recording(self, recording_id: str) -> bool:
        if not self._store.delete(recording_id):
            return False
        self.recording_deleted.emit(recording_id)
        return True

    def rename_recording(self, recording_id: str, new_name: str) -> bool:
        if not self._store.rename(recording_id, new_name):
            return False
        self.recording_renamed.emit(recording_id, new_name)
        return True

    # ── Interchange ─────────────────────────────────────

    def export_recording(self, recording: Recording) -> str:
        return export_recording(recording)

    def import_recording(self, text: str) -> Recording | None:
        """Import exported text as a new recording. Returns None on failure."""
        recording = import_recording(text)
        if recording is None:
            return None
        self._store.insert(recording)
        log.info("Imported recording %s as %s", recording.name, recording.id)
        self.recording_imported.emit(recording)
        return recording

    def cleanup(self) -> None:
        """Stop any session and drop the in-memory library."""
        self._recorder.stop()
        self._player.stop()
        self._store.clear()
