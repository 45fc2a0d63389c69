"""Tests for trustledger.storage.backend."""

from __future__ import annotations

import json
import logging
from datetime import datetime

import pytest

from trustledger.core.exceptions import StorageError
from trustledger.storage.backend import (
    LEGACY_SCHEMA_VERSION,
    JsonFileBackend,
    MemoryBackend,
    StoredDocument,
)


class TestStoredDocument:
    """Envelope wrapping and unwrapping."""

    def test_envelope_round_trip(self):
        doc = StoredDocument(3, {"a": 1})
        assert StoredDocument.from_raw(doc.to_envelope()) == doc

    def test_bare_payload_is_legacy(self):
        doc = StoredDocument.from_raw({"selections": []})
        assert doc.schema_version == LEGACY_SCHEMA_VERSION
        assert doc.data == {"selections": []}

    def test_none(self):
        assert StoredDocument.from_raw(None) is None


class TestMemoryBackend:
    """Tests for MemoryBackend."""

    def test_write_then_read(self):
        backend = MemoryBackend()
        backend.write("badge_rules", 1, {"x": [1, 2]})

        doc = backend.read("badge_rules")
        assert doc.schema_version == 1
        assert doc.data == {"x": [1, 2]}
        assert backend.read_data("badge_rules") == {"x": [1, 2]}
        assert backend.write_count == 1

    def test_missing_key(self):
        backend = MemoryBackend()
        assert backend.read("nothing") is None
        assert backend.read_data("nothing") is None

    def test_reads_are_isolated_copies(self):
        backend = MemoryBackend()
        backend.write("k", 1, {"items": [1]})

        backend.read_data("k")["items"].append(2)

        assert backend.read_data("k") == {"items": [1]}

    def test_initial_documents(self):
        backend = MemoryBackend({"badges_v1": {"checkins": []}})
        assert backend.read("badges_v1").schema_version == LEGACY_SCHEMA_VERSION
        assert backend.keys() == ["badges_v1"]

    def test_unserializable_rejected(self):
        backend = MemoryBackend()
        with pytest.raises(StorageError):
            backend.write("k", 1, {"when": datetime(2026, 1, 1)})
        assert backend.read("k") is None

    def test_delete(self):
        backend = MemoryBackend()
        backend.write("k", 1, {})
        assert backend.delete("k") is True
        assert backend.delete("k") is False
        assert backend.keys() == []

    def test_raw_envelope(self):
        backend = MemoryBackend()
        backend.write("k", 2, {"a": 1})
        assert backend.raw("k") == {"schemaVersion": 2, "data": {"a": 1}}


class TestJsonFileBackend:
    """Tests for JsonFileBackend."""

    def test_write_creates_directory_and_file(self, tmp_path):
        backend = JsonFileBackend(tmp_path / "store")
        backend.write("badges_v2", 3, {"checkins": []})

        path = tmp_path / "store" / "badges_v2.json"
        assert json.loads(path.read_text()) == {"schemaVersion": 3, "data": {"checkins": []}}
        assert backend.read("badges_v2") == StoredDocument(3, {"checkins": []})

    def test_no_temp_files_left(self, tmp_path):
        backend = JsonFileBackend(tmp_path)
        backend.write("k", 1, {"a": 1})
        backend.write("k", 1, {"a": 2})
        assert sorted(p.name for p in tmp_path.iterdir()) == ["k.json"]
        assert backend.read_data("k") == {"a": 2}

    def test_missing_file(self, tmp_path):
        assert JsonFileBackend(tmp_path).read("badges_v2") is None

    def test_unparseable_file_is_ignored(self, tmp_path, caplog):
        (tmp_path / "badge_rules.json").write_text("{not json")
        with caplog.at_level(logging.WARNING):
            assert JsonFileBackend(tmp_path).read("badge_rules") is None
        assert "unparseable" in caplog.text

    @pytest.mark.parametrize("key", ["", "../escape", "a/b", ".hidden"])
    def test_invalid_keys(self, tmp_path, key):
        with pytest.raises(StorageError):
            JsonFileBackend(tmp_path).write(key, 1, {})

    def test_unserializable_rejected(self, tmp_path):
        backend = JsonFileBackend(tmp_path)
        with pytest.raises(StorageError):
            backend.write("k", 1, {"s": {1, 2}})
        assert backend.keys() == []

    def test_keys_and_delete(self, tmp_path):
        backend = JsonFileBackend(tmp_path)
        assert backend.keys() == []
        backend.write("b", 1, {})
        backend.write("a", 1, {})
        assert backend.keys() == ["a", "b"]
        assert backend.delete("a") is True
        assert backend.delete("a") is False
        assert backend.keys() == ["b"]

    def test_backend_types(self, tmp_path):
        assert MemoryBackend().backend_type == "memory"
        assert JsonFileBackend(tmp_path).backend_type == "json"
