"""In-memory recording collection persisted through a key-value storage.

All recordings live in one storage entry as a JSON array, loaded on
construction and rewritten after every mutation. Persistence is
best-effort: failures are logged and the in-memory state stays authoritative.
"""

from __future__ import annotations

import json
import logging

from .constants import STORAGE_KEY
from .recording import Recording
from .storage import KeyValueStorage, StorageError

log = logging.getLogger(__name__)


class RecordingStore:
    """Keyed collection of recordings with list/get/delete/rename."""

    def __init__(self, storage: KeyValueStorage, storage_key: str = STORAGE_KEY) -> None:
        self._storage = storage
        self._storage_key = storage_key
        self._recordings: dict[str, Recording] = {}
        self.load_all()

    @property
    def storage_key(self) -> str:
        return self._storage_key

    def __len__(self) -> int:
        return len(self._recordings)

    def __contains__(self, recording_id: object) -> bool:
        return recording_id in self._recordings

    def list(self) -> list[Recording]:
        """All recordings, newest first."""
        return sorted(self._recordings.values(), key=lambda r: r.created_at, reverse=True)

    def get(self, recording_id: str) -> Recording | None:
        return self._recordings.get(recording_id)

    def insert(self, recording: Recording) -> None:
        self._recordings[recording.id] = recording
        self.save_all()

    def delete(self, recording_id: str) -> bool:
        """Remove a recording. Returns True if it existed."""
        if recording_id not in self._recordings:
            return False
        del self._recordings[recording_id]
        self.save_all()
        return True

    def rename(self, recording_id: str, new_name: str) -> bool:
        """Rename a recording in place. Returns True if it existed."""
        recording = self._recordings.get(recording_id)
        if recording is None:
            return False
        recording.name = new_name
        self.save_all()
        return True

    def clear(self) -> None:
        """Drop every recording from memory without touching storage."""
        self._recordings.clear()

    # ── Persistence ─────────────────────────────────────

    def save_all(self) -> bool:
        """Write every recording to storage. Returns False if the write failed."""
        try:
            raw = json.dumps([r.to_dict() for r in self._recordings.values()], ensure_ascii=False)
            self._storage.set(self._storage_key, raw)
        except (StorageError, TypeError, ValueError) as e:
            log.warning("Failed to save recordings: %s", e)
            return False
        return True

    def load_all(self) -> int:
        """Load recordings from storage, merging over the in-memory ones.

        Returns the number of recordings loaded. Unreadable entries are skipped.
        """
        try:
            raw = self._storage.get(self._storage_key)
            if not raw:
                return 0
            items = json.loads(raw)
        except (StorageError, OSError, TypeError, ValueError) as e:
            log.warning("Failed to load recordings: %s", e)
            return 0

        if not isinstance(items, list):
            log.warning("Failed to load recordings: stored value is not a list")
            return 0

        loaded = 0
        for item in items:
            try:
                recording = Recording.from_dict(item)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                log.warning("Skipping unreadable stored recording: %s", e)
                continue
            self._recordings[recording.id] = recording
            loaded += 1
        log.debug("Loaded %d recordings from %r", loaded, self._storage_key)
        return loaded
