# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""The badge ledger document and its repository.

One document holds every selection, progress record and checkin. Operations
load it, mutate the in-memory copy, and write it back whole.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..storage.backend import StorageBackend
from .models import BadgeCheckin, BadgeProgress, BadgeSelection, LedgerKey, Role

logger = logging.getLogger(__name__)

BADGES_KEY = "badges_v2"
LEGACY_BADGES_KEY = "badges_v1"
BADGES_SCHEMA_VERSION = 3


def _parse_all(items: Any, parser: Callable[[Any, datetime], Any], now: datetime) -> list[Any]:
    if not isinstance(items, list):
        return []
    parsed = [parser(item, now) for item in items]
    dropped = sum(1 for item in parsed if item is None)
    if dropped:
        logger.warning(f"Dropped {dropped} malformed record(s) while loading the badge store")
    return [item for item in parsed if item is not None]


@dataclass
class BadgeStore:
    """In-memory copy of the ledger document."""

    selections: list[BadgeSelection] = field(default_factory=list)
    progress: list[BadgeProgress] = field(default_factory=list)
    checkins: list[BadgeCheckin] = field(default_factory=list)

    # -------------------------------------------------------------------------
    # Selections
    # -------------------------------------------------------------------------

    def find_selection(self, role: Role, owner_id: str) -> BadgeSelection | None:
        for selection in self.selections:
            if selection.owner_role is role and selection.owner_id == owner_id:
                return selection
        return None

    def put_selection(self, selection: BadgeSelection) -> None:
        for idx, existing in enumerate(self.selections):
            if existing.owner_role is selection.owner_role and existing.owner_id == selection.owner_id:
                self.selections[idx] = selection
                return
        self.selections.append(selection)

    # -------------------------------------------------------------------------
    # Progress
    # -------------------------------------------------------------------------

    def find_progress(self, role: Role, owner_id: str, badge_id: str) -> BadgeProgress | None:
        for progress in self.progress:
            if progress.key == (role, owner_id, badge_id):
                return progress
        return None

    def get_or_create_progress(self, role: Role, owner_id: str, badge_id: str, now: datetime) -> BadgeProgress:
        progress = self.find_progress(role, owner_id, badge_id)
        if progress is None:
            progress = BadgeProgress(
                badge_id=badge_id,
                owner_role=role,
                owner_id=owner_id,
                created_at=now,
                updated_at=now,
            )
            self.progress.append(progress)
        return progress

    # -------------------------------------------------------------------------
    # Checkins
    # -------------------------------------------------------------------------

    def find_checkin(self, key: LedgerKey) -> BadgeCheckin | None:
        for checkin in self.checkins:
            if checkin.ledger_key == key:
                return checkin
        return None

    def find_checkin_by_id(self, checkin_id: str) -> BadgeCheckin | None:
        for checkin in self.checkins:
            if checkin.id == checkin_id:
                return checkin
        return None

    def checkins_for(self, role: Role, target_id: str, badge_id: str) -> Iterable[BadgeCheckin]:
        return (
            c
            for c in self.checkins
            if c.target_role is role and c.target_id == target_id and c.badge_id == badge_id
        )

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "selections": [s.to_dict() for s in self.selections],
            "progress": [p.to_dict() for p in self.progress],
            "checkins": [c.to_dict() for c in self.checkins],
        }

    @classmethod
    def from_dict(cls, raw: Any, now: datetime) -> BadgeStore:
        """Parse a stored document, dropping records that lack an identity."""
        if not isinstance(raw, Mapping):
            return cls()
        return cls(
            selections=_parse_all(raw.get("selections"), BadgeSelection.from_dict, now),
            progress=_parse_all(raw.get("progress"), BadgeProgress.from_dict, now),
            checkins=_parse_all(raw.get("checkins"), BadgeCheckin.from_dict, now),
        )


class BadgeStoreRepository:
    """Loads and saves the ledger document through a storage backend."""

    def __init__(
        self,
        backend: StorageBackend,
        clock: Callable[[], datetime],
        on_change: Callable[[str], None] | None = None,
    ):
        self.backend = backend
        self.clock = clock
        self.on_change = on_change

    def exists(self) -> bool:
        return isinstance(self.backend.read_data(BADGES_KEY), Mapping)

    def load(self) -> BadgeStore:
        return BadgeStore.from_dict(self.backend.read_data(BADGES_KEY), self.clock())

    def save(self, store: BadgeStore) -> None:
        self.backend.write(BADGES_KEY, BADGES_SCHEMA_VERSION, store.to_dict())
        logger.debug(
            f"Saved badge store: {len(store.selections)} selections, "
            f"{len(store.progress)} progress, {len(store.checkins)} checkins"
        )
        if self.on_change is not None:
            self.on_change(BADGES_KEY)
