# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Storage backend abstraction for the badge engine.

The engine persists a handful of whole documents (ledger store, level rules,
scoring configuration), each under its own key and wrapped in a versioned
envelope::

    {"schemaVersion": 3, "data": {...}}

Supported backends:
- Memory (tests and embedding hosts that persist elsewhere)
- Local JSON files, one ``<key>.json`` per document
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..core.exceptions import StorageError

logger = logging.getLogger(__name__)

# Documents written before envelopes existed are reported with this version
LEGACY_SCHEMA_VERSION = 0


@dataclass
class StoredDocument:
    """A versioned document as read from a backend."""

    schema_version: int
    data: Any

    def to_envelope(self) -> dict[str, Any]:
        return {"schemaVersion": self.schema_version, "data": self.data}

    @classmethod
    def from_raw(cls, raw: Any) -> StoredDocument | None:
        """Unwrap an envelope; bare payloads are treated as legacy data."""
        if raw is None:
            return None
        if isinstance(raw, dict) and isinstance(raw.get("schemaVersion"), int) and "data" in raw:
            return cls(schema_version=raw["schemaVersion"], data=raw["data"])
        return cls(schema_version=LEGACY_SCHEMA_VERSION, data=raw)


class StorageBackend(ABC):
    """Persistence port used by every engine component.

    Reads and writes are whole-document; there is no locking, so two writers
    racing on the same key resolve as last-writer-wins.
    """

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Type of backend (e.g., 'memory', 'json')."""

    @abstractmethod
    def read(self, key: str) -> StoredDocument | None:
        """Read the document stored under ``key``.

        Returns:
            The document, or None when nothing (or nothing parseable) is stored.
        """

    @abstractmethod
    def write(self, key: str, schema_version: int, data: Any) -> None:
        """Replace the document stored under ``key``.

        Raises:
            StorageError: If the write fails
        """

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete a document. Returns True if it existed."""

    @abstractmethod
    def keys(self) -> list[str]:
        """List stored keys."""

    def read_data(self, key: str) -> Any:
        """Read just the payload of a document (None if absent)."""
        doc = self.read(key)
        return doc.data if doc is not None else None


class MemoryBackend(StorageBackend):
    """In-memory backend.

    Documents are deep-copied in and out so callers can never mutate stored
    state without an explicit write.
    """

    def __init__(self, initial: dict[str, Any] | None = None):
        self._documents: dict[str, Any] = {}
        for key, raw in (initial or {}).items():
            self._documents[key] = copy.deepcopy(raw)
        self.write_count = 0

    @property
    def backend_type(self) -> str:
        return "memory"

    def read(self, key: str) -> StoredDocument | None:
        raw = self._documents.get(key)
        return StoredDocument.from_raw(copy.deepcopy(raw))

    def write(self, key: str, schema_version: int, data: Any) -> None:
        envelope = StoredDocument(schema_version, data).to_envelope()
        # Round-trip through JSON so the memory backend rejects what a file would
        try:
            self._documents[key] = json.loads(json.dumps(envelope))
        except (TypeError, ValueError) as e:
            raise StorageError(f"Cannot serialize document: {e}", key=key) from e
        self.write_count += 1

    def delete(self, key: str) -> bool:
        return self._documents.pop(key, None) is not None

    def keys(self) -> list[str]:
        return sorted(self._documents)

    def raw(self, key: str) -> Any:
        """Return the stored envelope as written (tests and diagnostics)."""
        return copy.deepcopy(self._documents.get(key))


class JsonFileBackend(StorageBackend):
    """Local directory backend storing one JSON envelope per key."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory).expanduser()

    @property
    def backend_type(self) -> str:
        return "json"

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise StorageError(f"Invalid storage key: {key!r}", key=key)
        return self.directory / f"{key}.json"

    def read(self, key: str) -> StoredDocument | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unparseable store document {path}: {e}")
            return None
        except OSError as e:
            raise StorageError(f"Cannot read {path}: {e}", key=key) from e
        return StoredDocument.from_raw(raw)

    def write(self, key: str, schema_version: int, data: Any) -> None:
        path = self._path(key)
        envelope = StoredDocument(schema_version, data).to_envelope()
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(envelope, fh, indent=2, sort_keys=True)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Cannot write {path}: {e}", key=key) from e
        logger.debug(f"Wrote {path} (schema v{schema_version})")

    def delete(self, key: str) -> bool:
        path = self._path(key)
        if not path.exists():
            return False
        path.unlink()
        return True

    def keys(self) -> list[str]:
        if not self.directory.exists():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json"))
