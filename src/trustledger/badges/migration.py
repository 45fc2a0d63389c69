# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Upgrade of the legacy (v1) ledger document.

Legacy stores kept progress counters that could drift from their checkins.
Migration trusts the checkins where they have data, falls back to the stored
counters where they do not, keeps the best level ever recorded and then
re-applies the current rules. The legacy document is left in place.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from ..storage.backend import StorageBackend
from .models import BadgeProgress, LevelRule
from .progress import compute_level_from_counts, counts_from_checkins
from .store import BADGES_KEY, LEGACY_BADGES_KEY, BadgeStore, BadgeStoreRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationReport:
    migrated: bool
    selections: int = 0
    progress: int = 0
    checkins: int = 0
    reason: str = ""


def migrate_legacy_store(
    raw_v1: object,
    rules_for_badge: Callable[[str], Sequence[LevelRule]],
    now: datetime,
) -> BadgeStore:
    """Build a current store from a legacy document."""
    legacy = BadgeStore.from_dict(raw_v1, now)
    merged: dict[tuple, BadgeProgress] = {}

    for (role, owner_id, badge_id), (yes, no) in counts_from_checkins(legacy.checkins).items():
        merged[(role, owner_id, badge_id)] = BadgeProgress(
            badge_id=badge_id,
            owner_role=role,
            owner_id=owner_id,
            yes_count=yes,
            no_count=no,
            created_at=now,
            updated_at=now,
        )

    for stored in legacy.progress:
        existing = merged.get(stored.key)
        if existing is None:
            merged[stored.key] = stored
            continue
        existing.yes_count = existing.yes_count or stored.yes_count
        existing.no_count = existing.no_count or stored.no_count
        existing.max_level = max(existing.max_level, stored.max_level)

    for progress in merged.values():
        computed = compute_level_from_counts(rules_for_badge(progress.badge_id), progress.yes_count, progress.no_count)
        progress.max_level = max(progress.max_level, computed)

    return BadgeStore(
        selections=legacy.selections,
        progress=list(merged.values()),
        checkins=legacy.checkins,
    )


def run_migration(
    backend: StorageBackend,
    repository: BadgeStoreRepository,
    rules_for_badge: Callable[[str], Sequence[LevelRule]],
    now: datetime,
) -> MigrationReport:
    """Migrate once: only when no current store exists and a legacy one does."""
    if repository.exists():
        return MigrationReport(migrated=False, reason=f"{BADGES_KEY} already present")
    raw_v1 = backend.read_data(LEGACY_BADGES_KEY)
    if not isinstance(raw_v1, dict):
        return MigrationReport(migrated=False, reason=f"no {LEGACY_BADGES_KEY} document")

    store = migrate_legacy_store(raw_v1, rules_for_badge, now)
    repository.save(store)
    report = MigrationReport(
        migrated=True,
        selections=len(store.selections),
        progress=len(store.progress),
        checkins=len(store.checkins),
    )
    logger.info(
        f"Migrated {LEGACY_BADGES_KEY} to {BADGES_KEY}: {report.selections} selections, "
        f"{report.progress} progress records, {report.checkins} checkins"
    )
    return report
