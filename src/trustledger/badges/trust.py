# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Trust score calculator.

A profile's trust percent blends two weighted groups of badges:

- expectations: selected background badges plus every SNAP and CHECKER badge
- growth: the active selectable badges

Each badge contributes its trust-window percent, weighted by
``badge weight x kind weight x level multiplier``. The window percent is the
average of per-counterpart percents, so one prolific counterpart cannot
dominate a profile's signal.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .catalog import BadgeCatalog
from .models import MAX_LEVEL, BadgeKind, CheckinValue, Role, ensure_utc
from .periods import days_window_start, months_window_start
from .ports import PenaltyProvider
from .progress import ProgressAggregator, compute_trust_percent, round_half_up
from .scoring_config import ScoreConfigStore, ScoreSnapshot
from .selection import SelectionManager
from .store import BadgeStore, BadgeStoreRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrustWindow:
    percent: int | None
    yes: int
    no: int
    total: int
    link_count: int


@dataclass(frozen=True)
class GroupScore:
    score: float | None
    yes: int
    no: int
    weight_total: float


@dataclass(frozen=True)
class TrustRating:
    percent: int | None
    yes: int
    no: int
    total: int
    expectations_score: float | None = None
    growth_score: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "percent": self.percent,
            "yes": self.yes,
            "no": self.no,
            "total": self.total,
            "expectations_score": self.expectations_score,
            "growth_score": self.growth_score,
        }


EMPTY_RATING = TrustRating(percent=None, yes=0, no=0, total=0)


def level_multiplier(level: int, multipliers: list[float]) -> float:
    index = max(1, min(MAX_LEVEL, int(level))) - 1
    return multipliers[index] if index < len(multipliers) else 1.0


def badge_trust_window(
    store: BadgeStore,
    role: Role,
    owner_id: str,
    badge_id: str,
    start: datetime,
    end: datetime | None = None,
) -> TrustWindow:
    """Average of per-counterpart percents over checkins created in the window."""
    yes = no = 0
    per_counterpart: dict[str, list[int]] = {}
    for checkin in store.checkins_for(role, owner_id, badge_id):
        if checkin.created_at < start or (end is not None and checkin.created_at > end):
            continue
        value = checkin.effective_value
        if value is None:
            continue
        counts = per_counterpart.setdefault(checkin.counterpart_id(), [0, 0])
        if value is CheckinValue.YES:
            counts[0] += 1
            yes += 1
        else:
            counts[1] += 1
            no += 1

    percents = [p for p in (compute_trust_percent(y, n) for y, n in per_counterpart.values()) if p is not None]
    percent = round_half_up(sum(percents) / len(percents)) if percents else None
    return TrustWindow(percent=percent, yes=yes, no=no, total=yes + no, link_count=len(percents))


class TrustCalculator:
    """Computes blended trust ratings for profiles."""

    def __init__(
        self,
        repository: BadgeStoreRepository,
        catalog: BadgeCatalog,
        scoring: ScoreConfigStore,
        selection: SelectionManager,
        penalties: PenaltyProvider,
        clock: Callable[[], datetime],
        window_months: int = 12,
    ):
        self.repository = repository
        self.catalog = catalog
        self.scoring = scoring
        self.selection = selection
        self.penalties = penalties
        self.clock = clock
        self.window_months = window_months

    def _group_ids(self, store: BadgeStore, role: Role, owner_id: str) -> tuple[list[str], list[str]]:
        expectations = (
            self.selection.background_ids_in(store, role, owner_id)
            + [d.id for d in self.catalog.snap(role)]
            + [d.id for d in self.catalog.checker(role)]
        )
        growth = self.selection.active_ids_in(store, role, owner_id)
        return expectations, growth

    def _score_group(
        self,
        store: BadgeStore,
        role: Role,
        owner_id: str,
        badge_ids: Iterable[str],
        snapshot: ScoreSnapshot,
        start: datetime,
        end: datetime | None,
        now: datetime,
    ) -> GroupScore:
        weighted_sum = 0.0
        weight_total = 0.0
        yes = no = 0
        for badge_id in dict.fromkeys(badge_ids):
            definition = self.catalog.get(badge_id)
            if definition is None:
                continue
            progress = ProgressAggregator.progress_in(store, role, owner_id, badge_id, now)
            if definition.kind is BadgeKind.SNAP:
                # One-shot badges are global, not per counterpart
                percent = compute_trust_percent(progress.yes_count, progress.no_count)
                badge_yes, badge_no = progress.yes_count, progress.no_count
            else:
                window = badge_trust_window(store, role, owner_id, badge_id, start, end)
                percent = window.percent
                badge_yes, badge_no = window.yes, window.no
            if percent is None:
                continue

            weight = (
                self.scoring.get_badge_weight(badge_id, snapshot)
                * snapshot.kind_weights.get(definition.kind, 1.0)
                * level_multiplier(max(1, progress.max_level), snapshot.level_multipliers)
            )
            weighted_sum += percent * weight
            weight_total += weight
            yes += badge_yes
            no += badge_no

        score = weighted_sum / weight_total if weight_total > 0 else None
        return GroupScore(score=score, yes=yes, no=no, weight_total=weight_total)

    def _rate(
        self,
        role: Role,
        owner_id: str,
        start: datetime,
        end: datetime | None,
        apply_penalty: bool,
    ) -> TrustRating:
        if not owner_id:
            return EMPTY_RATING
        store = self.repository.load()
        snapshot = self.scoring.snapshot()
        now = self.clock()
        expectation_ids, growth_ids = self._group_ids(store, role, owner_id)
        expectations = self._score_group(store, role, owner_id, expectation_ids, snapshot, start, end, now)
        growth = self._score_group(store, role, owner_id, growth_ids, snapshot, start, end, now)

        parts = []
        if expectations.score is not None:
            parts.append((expectations.score, snapshot.expectations_weight))
        if growth.score is not None:
            parts.append((growth.score, snapshot.growth_weight))

        percent: int | None = None
        if parts:
            weight_sum = sum(weight for _, weight in parts) or 1.0
            percent = round_half_up(sum(score * weight for score, weight in parts) / weight_sum)

        if percent is not None and apply_penalty and role is Role.SEEKER:
            penalty = self.penalties.get_active_bad_exit_penalty_percent(owner_id)
            if penalty > 0:
                logger.debug(f"Applying bad-exit penalty of {penalty}% to seeker {owner_id}")
                percent = max(0, round_half_up(percent - penalty))

        yes = expectations.yes + growth.yes
        no = expectations.no + growth.no
        return TrustRating(
            percent=percent,
            yes=yes,
            no=no,
            total=yes + no,
            expectations_score=expectations.score,
            growth_score=growth.score,
        )

    def get_trust_rating(self, role: Role, owner_id: str) -> TrustRating:
        """Current rating over the trailing window, seeker penalty applied."""
        start = months_window_start(self.clock(), self.window_months)
        return self._rate(role, owner_id, start, None, apply_penalty=True)

    def get_trust_rating_as_of(
        self,
        role: Role,
        owner_id: str,
        as_of: datetime,
        window_days: int = 365,
    ) -> TrustRating:
        """Point-in-time rating over ``[as_of - window_days, as_of]``; no penalty."""
        as_of = ensure_utc(as_of)
        start = days_window_start(as_of, window_days)
        return self._rate(role, owner_id, start, as_of, apply_penalty=False)
