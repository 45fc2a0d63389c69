# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Badge and reputation scoring engine."""

from .catalog import DEFAULT_CATALOG, MAX_ACTIVE_BADGES, MAX_BACKGROUND_BADGES, BadgeCatalog
from .engine import BadgeEngine
from .ledger import BatchResult, CheckinResult, PendingApproval
from .migration import MigrationReport, migrate_legacy_store
from .models import (
    MAX_LEVEL,
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
)
from .ports import (
    Link,
    LinkProvider,
    NoPenalties,
    PenaltyProvider,
    StaticLinkProvider,
    StaticPenalties,
    is_working_together,
)
from .progress import (
    BadgeSummaryItem,
    ProgressToNext,
    compute_level_from_counts,
    compute_trust_percent,
    recompute_progress_for_badge,
)
from .rules import RulesSnapshot, validate_rules
from .scoring_config import ScoreSnapshot
from .selection import BackgroundLockStatus
from .trust import TrustRating

__all__ = [
    "DEFAULT_CATALOG",
    "MAX_ACTIVE_BADGES",
    "MAX_BACKGROUND_BADGES",
    "MAX_LEVEL",
    "BackgroundLockStatus",
    "BadgeCatalog",
    "BadgeCheckin",
    "BadgeDefinition",
    "BadgeEngine",
    "BadgeKind",
    "BadgeProgress",
    "BadgeSelection",
    "BadgeSummaryItem",
    "BatchResult",
    "Cadence",
    "CheckinRequest",
    "CheckinResult",
    "CheckinStatus",
    "CheckinValue",
    "LevelRule",
    "Link",
    "LinkProvider",
    "MigrationReport",
    "NoPenalties",
    "PendingApproval",
    "PenaltyProvider",
    "ProgressToNext",
    "Role",
    "RulesSnapshot",
    "ScoreSnapshot",
    "StaticLinkProvider",
    "StaticPenalties",
    "TrustRating",
    "compute_level_from_counts",
    "compute_trust_percent",
    "is_working_together",
    "migrate_legacy_store",
    "recompute_progress_for_badge",
    "validate_rules",
]
