# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Progress aggregation.

Progress records are derived from the ledger: effective YES/NO counts per
(owner, badge) plus the highest level ever achieved. ``max_level`` only goes
up; a later drop in the live ratio never revokes a level.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .catalog import BadgeCatalog
from .models import MAX_LEVEL, BadgeCheckin, BadgeDefinition, BadgeProgress, CheckinValue, LevelRule, Role
from .rules import RulesStore
from .store import BadgeStore, BadgeStoreRepository

logger = logging.getLogger(__name__)

CountsKey = tuple[Role, str, str]


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (``round`` would go to even)."""
    return math.floor(value + 0.5)


def compute_trust_percent(yes_count: int, no_count: int) -> int | None:
    total = yes_count + no_count
    if total <= 0:
        return None
    return round_half_up(yes_count / total * 100)


def compute_level_from_counts(rules: Sequence[LevelRule], yes_count: int, no_count: int) -> int:
    """Highest level whose sample and percent thresholds are both met.

    Levels are tested independently, so with non-monotonic rules a profile can
    reach level 3 without satisfying level 2.
    """
    total = yes_count + no_count
    if total <= 0:
        return 0
    percent = yes_count / total * 100
    level = 0
    for index, rule in enumerate(rules[:MAX_LEVEL], start=1):
        if total >= rule.min_samples and percent >= rule.min_percent:
            level = index
    return level


def counts_from_checkins(checkins: Iterable[BadgeCheckin]) -> dict[CountsKey, tuple[int, int]]:
    """Tally effective YES/NO per (target role, target id, badge); disputes excluded."""
    counts: dict[CountsKey, tuple[int, int]] = {}
    for checkin in checkins:
        value = checkin.effective_value
        if value is None:
            continue
        key = (checkin.target_role, checkin.target_id, checkin.badge_id)
        yes, no = counts.get(key, (0, 0))
        if value is CheckinValue.YES:
            yes += 1
        else:
            no += 1
        counts[key] = (yes, no)
    return counts


def recompute_progress_for_badge(
    store: BadgeStore,
    role: Role,
    owner_id: str,
    badge_id: str,
    rules: Sequence[LevelRule],
    now: datetime,
) -> BadgeProgress:
    """Rebuild one progress record from the full ledger (in place)."""
    yes, no = counts_from_checkins(store.checkins_for(role, owner_id, badge_id)).get((role, owner_id, badge_id), (0, 0))
    progress = store.get_or_create_progress(role, owner_id, badge_id, now)
    progress.yes_count = yes
    progress.no_count = no
    progress.max_level = max(progress.max_level, compute_level_from_counts(rules, yes, no))
    progress.updated_at = now
    return progress


@dataclass(frozen=True)
class ProgressToNext:
    max_level: int
    trust_percent: int | None
    total_confirmations: int
    next_level: int | None
    next_rule: LevelRule | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "max_level": self.max_level,
            "trust_percent": self.trust_percent,
            "total_confirmations": self.total_confirmations,
            "next_level": self.next_level,
            "next_rule": self.next_rule.to_dict() if self.next_rule else None,
        }


@dataclass(frozen=True)
class BadgeSummaryItem:
    badge: BadgeDefinition
    max_level: int
    trust_percent: int | None
    total: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "badge_id": self.badge.id,
            "title": self.badge.title,
            "kind": self.badge.kind.value,
            "max_level": self.max_level,
            "trust_percent": self.trust_percent,
            "total": self.total,
        }


class ProgressAggregator:
    """Read views over progress records."""

    def __init__(
        self,
        repository: BadgeStoreRepository,
        catalog: BadgeCatalog,
        rules: RulesStore,
        clock: Callable[[], datetime],
    ):
        self.repository = repository
        self.catalog = catalog
        self.rules = rules
        self.clock = clock

    @staticmethod
    def progress_in(store: BadgeStore, role: Role, owner_id: str, badge_id: str, now: datetime) -> BadgeProgress:
        """The stored record, or a zeroed one that is not added to the store."""
        existing = store.find_progress(role, owner_id, badge_id)
        if existing is not None:
            return existing
        return BadgeProgress(badge_id=badge_id, owner_role=role, owner_id=owner_id, created_at=now, updated_at=now)

    def get_badge_progress(self, role: Role, owner_id: str, badge_id: str) -> BadgeProgress:
        return self.progress_in(self.repository.load(), role, owner_id, badge_id, self.clock())

    def compute_progress_to_next(self, badge: BadgeDefinition | str, progress: BadgeProgress) -> ProgressToNext:
        badge_id = badge if isinstance(badge, str) else badge.id
        trust_percent = compute_trust_percent(progress.yes_count, progress.no_count)
        if progress.max_level >= MAX_LEVEL:
            return ProgressToNext(
                max_level=MAX_LEVEL,
                trust_percent=trust_percent,
                total_confirmations=progress.total,
                next_level=None,
                next_rule=None,
            )
        next_level = progress.max_level + 1
        rules = self.rules.get_rules_for_badge(badge_id)
        return ProgressToNext(
            max_level=progress.max_level,
            trust_percent=trust_percent,
            total_confirmations=progress.total,
            next_level=next_level,
            next_rule=rules[next_level - 1] if next_level <= len(rules) else None,
        )

    def get_badge_summary(self, role: Role, owner_id: str, limit: int = 6) -> list[BadgeSummaryItem]:
        """Earned badges (level > 0), best first: level, then trust, then volume."""
        store = self.repository.load()
        now = self.clock()
        items = []
        for definition in self.catalog.for_role(role):
            progress = self.progress_in(store, role, owner_id, definition.id, now)
            if progress.max_level <= 0:
                continue
            items.append(
                BadgeSummaryItem(
                    badge=definition,
                    max_level=progress.max_level,
                    trust_percent=compute_trust_percent(progress.yes_count, progress.no_count),
                    total=progress.total,
                )
            )
        items.sort(
            key=lambda item: (
                item.max_level,
                item.trust_percent if item.trust_percent is not None else -1,
                item.total,
            ),
            reverse=True,
        )
        return items[: max(1, int(limit))]
