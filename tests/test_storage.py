"""Tests for key-value storage backends."""

import json

import pytest

from cosmic_jam.core.storage import (
    JsonFileStorage,
    MemoryStorage,
    StorageError,
    StorageQuotaError,
)


class TestMemoryStorage:
    def test_get_missing(self):
        assert MemoryStorage().get("nope") is None

    def test_set_get(self):
        s = MemoryStorage()
        s.set("k", "value")
        assert s.get("k") == "value"
        assert len(s) == 1

    def test_quota_rejects_oversized_write(self):
        s = MemoryStorage(max_bytes=10)
        s.set("k", "1234")
        with pytest.raises(StorageQuotaError):
            s.set("k2", "123456789")
        assert s.get("k2") is None

    def test_quota_counts_replacement_not_sum(self):
        s = MemoryStorage(max_bytes=10)
        s.set("k", "12345678")
        s.set("k", "87654321")
        assert s.get("k") == "87654321"

    def test_quota_error_is_storage_error(self):
        assert issubclass(StorageQuotaError, StorageError)


class TestJsonFileStorage:
    def test_missing_file_reads_empty(self, tmp_path):
        s = JsonFileStorage(tmp_path / "store.json")
        assert s.get("k") is None

    def test_set_creates_directories(self, tmp_path):
        path = tmp_path / "sub" / "dir" / "store.json"
        s = JsonFileStorage(path)
        s.set("k", "v")
        assert path.exists()
        assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "store.json"
        JsonFileStorage(path).set("k", "[1, 2]")
        assert JsonFileStorage(path).get("k") == "[1, 2]"

    def test_keeps_other_keys(self, tmp_path):
        s = JsonFileStorage(tmp_path / "store.json")
        s.set("a", "1")
        s.set("b", "2")
        assert s.get("a") == "1"
        assert s.get("b") == "2"

    def test_corrupted_file_reads_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{ not json", encoding="utf-8")
        s = JsonFileStorage(path)
        assert s.get("k") is None
        s.set("k", "v")
        assert s.get("k") == "v"

    def test_invalid_utf8_file_reads_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_bytes(b'{"k": "\xff\xfe"}')
        s = JsonFileStorage(path)
        assert s.get("k") is None
        s.set("k", "v")
        assert s.get("k") == "v"

    def test_non_object_file_reads_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        assert JsonFileStorage(path).get("0") is None

    def test_quota(self, tmp_path):
        s = JsonFileStorage(tmp_path / "store.json", max_bytes=8)
        with pytest.raises(StorageQuotaError):
            s.set("key", "too long")

    def test_unwritable_path_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        s = JsonFileStorage(blocker / "store.json")
        with pytest.raises(StorageError):
            s.set("k", "v")
