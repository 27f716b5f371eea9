"""String key-value storage backends for persisted recordings.

The recording store only relies on ``get(key)`` and ``set(key, value)``.
Both backends enforce an optional size quota, the way browser local
storage rejects writes once it is full.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

log = logging.getLogger(__name__)


class StorageError(Exception):
    """A value could not be written to storage."""


class StorageQuotaError(StorageError):
    """Writing a value would exceed the storage capacity."""


class KeyValueStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


def _size_of(entries: dict[str, str]) -> int:
    return sum(len(k.encode("utf-8")) + len(v.encode("utf-8")) for k, v in entries.items())


def _check_quota(entries: dict[str, str], key: str, value: str, max_bytes: int | None) -> None:
    if max_bytes is None:
        return
    pending = dict(entries)
    pending[key] = value
    size = _size_of(pending)
    if size > max_bytes:
        raise StorageQuotaError(
            f"Storing {key!r} needs {size} bytes, quota is {max_bytes}"
        )


class MemoryStorage:
    """In-process storage, mainly for tests and headless sessions."""

    def __init__(self, max_bytes: int | None = None) -> None:
        self._entries: dict[str, str] = {}
        self.max_bytes = max_bytes

    def get(self, key: str) -> str | None:
        return self._entries.get(key)

    def set(self, key: str, value: str) -> None:
        _check_quota(self._entries, key, value, self.max_bytes)
        self._entries[key] = value

    def __len__(self) -> int:
        return len(self._entries)


class JsonFileStorage:
    """Keys and string values kept in a single JSON object file."""

    def __init__(self, path: str | Path, max_bytes: int | None = None) -> None:
        self.path = Path(path)
        self.max_bytes = max_bytes

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (ValueError, OSError) as e:
            log.warning("Failed to read storage file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            log.warning("Ignoring storage file %s: not a JSON object", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        entries = self._read()
        _check_quota(entries, key, value, self.max_bytes)
        entries[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(entries, f, ensure_ascii=False)
        except OSError as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e
