# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Badge engine facade.

Wires the catalog, stores, selection manager, ledger, aggregator, trust
calculator and audit controller around one storage backend and exposes the
public operations. Construction runs the one-time legacy migration.

Usage:
    engine = BadgeEngine(JsonFileBackend(path), StaticLinkProvider(links))
    engine.submit_weekly_checkin(CheckinRequest(...))
    rating = engine.get_trust_rating_for_profile(Role.SEEKER, "s-1")

The engine is synchronous and keeps no state between calls beyond what the
backend holds. Concurrent writers race on whole documents (last write wins).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from ..core.config import TrustLedgerSettings, get_settings
from ..storage.backend import StorageBackend
from .audit import AuditController
from .catalog import DEFAULT_CATALOG, BadgeCatalog
from .imports import parse_checkin_record
from .ledger import BatchResult, CheckinLedger, CheckinResult, PendingApproval
from .migration import MigrationReport, run_migration
from .models import (
    BadgeCheckin,
    BadgeDefinition,
    BadgeKind,
    BadgeProgress,
    BadgeSelection,
    Cadence,
    CheckinRequest,
    CheckinStatus,
    CheckinValue,
    LevelRule,
    Role,
    ensure_utc,
    parse_enum,
)
from .ports import Clock, LinkProvider, NoPenalties, PenaltyProvider
from .progress import BadgeSummaryItem, ProgressAggregator, ProgressToNext
from .rules import RulesSnapshot, RulesStore
from .scoring_config import ScoreConfigStore, ScoreSnapshot
from .selection import BackgroundLockStatus, SelectionManager
from .store import BadgeStoreRepository
from .trust import TrustCalculator, TrustRating

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


def utc_clock(clock: Clock) -> Clock:
    """Wrap a host clock so naive readings are taken as UTC."""

    def now() -> datetime:
        return ensure_utc(clock())

    return now


class BadgeEngine:
    """The badge and reputation scoring engine."""

    def __init__(
        self,
        backend: StorageBackend,
        links: LinkProvider,
        penalties: PenaltyProvider | None = None,
        clock: Clock | None = None,
        catalog: BadgeCatalog | None = None,
        settings: TrustLedgerSettings | None = None,
        on_change: Callable[[str], None] | None = None,
    ):
        self.backend = backend
        self.settings = settings or get_settings()
        self.clock: Clock = utc_clock(clock) if clock is not None else utc_now
        self.catalog = catalog or DEFAULT_CATALOG

        self.repository = BadgeStoreRepository(backend, self.clock, on_change)
        self.rules = RulesStore(backend, self.catalog, self.clock, on_change)
        self.scoring = ScoreConfigStore(backend, self.catalog, self.clock, on_change)
        self.selection = SelectionManager(
            self.repository, self.catalog, self.clock, lock_months=self.settings.background_lock_months
        )
        self.ledger = CheckinLedger(self.repository, self.catalog, self.rules, self.selection, links, self.clock)
        self.progress = ProgressAggregator(self.repository, self.catalog, self.rules, self.clock)
        self.trust = TrustCalculator(
            self.repository,
            self.catalog,
            self.scoring,
            self.selection,
            penalties or NoPenalties(),
            self.clock,
            window_months=self.settings.trust_window_months,
        )
        self.audit = AuditController(self.repository, self.rules, self.clock)

        self.last_migration = self.migrate()

    def migrate(self) -> MigrationReport:
        """Upgrade a legacy ledger if that is all the backend holds."""
        return run_migration(self.backend, self.repository, self.rules.rules_resolver(), self.clock())

    # -------------------------------------------------------------------------
    # Catalog
    # -------------------------------------------------------------------------

    def get_badge_definitions(self, role: Role) -> list[BadgeDefinition]:
        return self.catalog.for_role(role)

    def get_badge_definition(self, badge_id: str) -> BadgeDefinition | None:
        return self.catalog.get(badge_id)

    # -------------------------------------------------------------------------
    # Rules
    # -------------------------------------------------------------------------

    def get_badge_rules_snapshot(self) -> RulesSnapshot:
        return self.rules.snapshot()

    def get_badge_level_rules_for_role(self, role: Role) -> list[LevelRule]:
        return self.rules.get_role_rules(role)

    def set_badge_level_rules_for_role(self, role: Role, rules: Any) -> list[LevelRule]:
        return self.rules.set_role_rules(role, rules)

    def get_badge_level_rules_for_badge(self, badge_id: str) -> list[LevelRule]:
        return self.rules.get_rules_for_badge(badge_id)

    def set_badge_level_rules_for_badge(self, badge_id: str, rules: Any | None) -> list[LevelRule] | None:
        return self.rules.set_badge_rules(badge_id, rules)

    # -------------------------------------------------------------------------
    # Scoring configuration
    # -------------------------------------------------------------------------

    def get_badge_score_snapshot(self) -> ScoreSnapshot:
        return self.scoring.snapshot()

    def set_badge_score_snapshot(self, snapshot: ScoreSnapshot | Mapping[str, Any]) -> ScoreSnapshot:
        return self.scoring.set_snapshot(snapshot)

    def get_badge_score_split(self) -> tuple[float, float]:
        return self.scoring.get_split()

    def set_badge_score_split(self, expectations: float, growth: float) -> tuple[float, float]:
        return self.scoring.set_split(expectations, growth)

    def get_badge_kind_weight(self, kind: BadgeKind) -> float:
        return self.scoring.get_kind_weight(kind)

    def set_badge_kind_weight(self, kind: BadgeKind, weight: float) -> float:
        return self.scoring.set_kind_weight(kind, weight)

    def get_badge_level_multipliers(self) -> list[float]:
        return self.scoring.get_level_multipliers()

    def set_badge_level_multipliers(self, values: Sequence[float]) -> list[float]:
        return self.scoring.set_level_multipliers(values)

    def set_badge_weight_override(self, badge_id: str, weight: float | None) -> None:
        self.scoring.set_badge_weight_override(badge_id, weight)

    def get_badge_weight(self, badge_id: str) -> float:
        return self.scoring.get_badge_weight(badge_id)

    # -------------------------------------------------------------------------
    # Selections
    # -------------------------------------------------------------------------

    def get_active_badges(self, role: Role, owner_id: str) -> list[str]:
        return self.selection.get_active_badges(role, owner_id)

    def set_active_badges(self, role: Role, owner_id: str, badge_ids: Iterable[str]) -> BadgeSelection:
        return self.selection.set_active_badges(role, owner_id, badge_ids)

    def get_selected_background_badges(self, role: Role, owner_id: str) -> list[str]:
        return self.selection.get_selected_background_badges(role, owner_id)

    def get_background_lock_status(self, role: Role, owner_id: str) -> BackgroundLockStatus:
        return self.selection.get_background_lock_status(role, owner_id)

    def set_background_badges(
        self,
        role: Role,
        owner_id: str,
        badge_ids: Iterable[str],
        *,
        allow_override: bool = False,
    ) -> BadgeSelection:
        return self.selection.set_background_badges(role, owner_id, badge_ids, allow_override=allow_override)

    # -------------------------------------------------------------------------
    # Checkins
    # -------------------------------------------------------------------------

    def submit_weekly_checkin(self, request: CheckinRequest | Mapping[str, Any]) -> CheckinResult:
        if not isinstance(request, CheckinRequest):
            request = parse_checkin_record(request)
        return self.ledger.submit_checkin(request)

    def submit_weekly_checkins_batch(self, requests: Iterable[CheckinRequest | Mapping[str, Any]]) -> BatchResult:
        return self.ledger.submit_checkins_batch(requests)

    def grant_snap_badge(self, role: Role, owner_id: str, badge_id: str) -> BadgeProgress:
        return self.ledger.grant_snap_badge(role, owner_id, badge_id)

    def get_current_period_key(self, cadence: Cadence = Cadence.WEEKLY) -> str:
        return self.ledger.get_current_period_key(cadence)

    def get_checkin_for_period(self, **kwargs: Any) -> BadgeCheckin | None:
        return self.ledger.get_checkin_for_period(**kwargs)

    def get_pending_approvals(self, role: Role, owner_id: str) -> list[PendingApproval]:
        return self.ledger.get_pending_approvals(role, owner_id)

    # -------------------------------------------------------------------------
    # Progress
    # -------------------------------------------------------------------------

    def get_badge_progress(self, role: Role, owner_id: str, badge_id: str) -> BadgeProgress:
        return self.progress.get_badge_progress(role, owner_id, badge_id)

    def compute_badge_progress_to_next(
        self, badge: BadgeDefinition | str, progress: BadgeProgress
    ) -> ProgressToNext:
        return self.progress.compute_progress_to_next(badge, progress)

    def get_badge_summary_for_profile(
        self, role: Role, owner_id: str, limit: int | None = None
    ) -> list[BadgeSummaryItem]:
        return self.progress.get_badge_summary(role, owner_id, limit or self.settings.summary_limit)

    # -------------------------------------------------------------------------
    # Trust
    # -------------------------------------------------------------------------

    def get_trust_rating_for_profile(self, role: Role, owner_id: str) -> TrustRating:
        return self.trust.get_trust_rating(role, owner_id)

    def get_trust_rating_as_of(
        self, role: Role, owner_id: str, as_of: datetime, window_days: int = 365
    ) -> TrustRating:
        return self.trust.get_trust_rating_as_of(role, owner_id, as_of, window_days)

    # -------------------------------------------------------------------------
    # Audit
    # -------------------------------------------------------------------------

    def update_badge_checkin_status(
        self,
        checkin_id: str,
        status: CheckinStatus | str,
        override_value: CheckinValue | str | None = None,
        override_note: str | None = None,
    ) -> BadgeCheckin:
        status = parse_enum(CheckinStatus, status, "status")
        if override_value is not None:
            override_value = parse_enum(CheckinValue, override_value, "override_value")
        return self.audit.update_checkin_status(checkin_id, status, override_value, override_note)

    def get_badge_checkins(
        self,
        target_role: Role | None = None,
        target_id: str | None = None,
        badge_id: str | None = None,
        status: CheckinStatus | None = None,
    ) -> list[BadgeCheckin]:
        return self.audit.get_checkins(target_role, target_id, badge_id, status)
