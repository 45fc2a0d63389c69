# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Persistence port and backends for the badge engine."""

from .backend import (
    LEGACY_SCHEMA_VERSION,
    JsonFileBackend,
    MemoryBackend,
    StorageBackend,
    StoredDocument,
)

__all__ = [
    "LEGACY_SCHEMA_VERSION",
    "JsonFileBackend",
    "MemoryBackend",
    "StorageBackend",
    "StoredDocument",
]
