# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Score configuration store.

Holds the knobs of the trust blend: the expectations/growth split, a weight
per badge kind, per-badge weight overrides and the five level multipliers.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from ..storage.backend import StorageBackend
from .catalog import BadgeCatalog
from .models import MAX_LEVEL, BadgeKind, coerce_float, format_datetime, parse_datetime, pick_field

logger = logging.getLogger(__name__)

SCORING_KEY = "badge_scoring"
SCORING_SCHEMA_VERSION = 1

DEFAULT_EXPECTATIONS_WEIGHT = 0.65
DEFAULT_GROWTH_WEIGHT = 0.35
DEFAULT_KIND_WEIGHTS: dict[BadgeKind, float] = {
    BadgeKind.BACKGROUND: 3,
    BadgeKind.SELECTABLE: 1,
    BadgeKind.SNAP: 3,
    BadgeKind.CHECKER: 3,
}
DEFAULT_LEVEL_MULTIPLIERS: tuple[float, ...] = (1, 1.7, 2.5, 3.2, 4)

MIN_WEIGHT = 0.1


def normalize_split(expectations: Any, growth: Any) -> tuple[float, float]:
    """Scale the split to sum to 1; invalid input resets to the defaults."""
    exp = coerce_float(expectations)
    grow = coerce_float(growth)
    if exp is None or grow is None or exp < 0 or grow < 0 or exp + grow <= 0:
        return DEFAULT_EXPECTATIONS_WEIGHT, DEFAULT_GROWTH_WEIGHT
    total = exp + grow
    return exp / total, grow / total


def normalize_multipliers(raw: Any) -> list[float] | None:
    """Five finite positive multipliers, each at least 0.1; None otherwise."""
    if not isinstance(raw, (list, tuple)) or len(raw) != MAX_LEVEL:
        return None
    values: list[float] = []
    for item in raw:
        value = coerce_float(item)
        if value is None or value <= 0:
            return None
        values.append(max(MIN_WEIGHT, value))
    return values


def _positive(raw: Any) -> float | None:
    value = coerce_float(raw)
    return value if value is not None and value > 0 else None


@dataclass
class ScoreSnapshot:
    expectations_weight: float = DEFAULT_EXPECTATIONS_WEIGHT
    growth_weight: float = DEFAULT_GROWTH_WEIGHT
    kind_weights: dict[BadgeKind, float] = field(default_factory=lambda: dict(DEFAULT_KIND_WEIGHTS))
    badge_overrides: dict[str, float] = field(default_factory=dict)
    level_multipliers: list[float] = field(default_factory=lambda: list(DEFAULT_LEVEL_MULTIPLIERS))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        return {
            "expectations_weight": self.expectations_weight,
            "growth_weight": self.growth_weight,
            "kind_weights": {kind.value: weight for kind, weight in self.kind_weights.items()},
            "badge_overrides": dict(self.badge_overrides),
            "level_multipliers": list(self.level_multipliers),
            "updated_at": format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, raw: Any, now: datetime) -> ScoreSnapshot:
        """Normalize a stored or caller-supplied snapshot field by field."""
        if isinstance(raw, ScoreSnapshot):
            raw = raw.to_dict()
        if not isinstance(raw, Mapping):
            return cls(updated_at=now)

        exp_raw = pick_field(raw, "expectations_weight", "expectationsWeight")
        grow_raw = pick_field(raw, "growth_weight", "growthWeight")
        if exp_raw is None and grow_raw is None:
            exp_raw, grow_raw = DEFAULT_EXPECTATIONS_WEIGHT, DEFAULT_GROWTH_WEIGHT
        expectations, growth = normalize_split(exp_raw, grow_raw)

        kind_weights = dict(DEFAULT_KIND_WEIGHTS)
        kinds_raw = pick_field(raw, "kind_weights", "kindWeights")
        if isinstance(kinds_raw, Mapping):
            for kind in BadgeKind:
                weight = _positive(kinds_raw.get(kind.value))
                if weight is not None:
                    kind_weights[kind] = weight

        overrides: dict[str, float] = {}
        overrides_raw = pick_field(raw, "badge_overrides", "badgeOverrides")
        if isinstance(overrides_raw, Mapping):
            for badge_id, weight in overrides_raw.items():
                value = _positive(weight)
                if value is not None:
                    overrides[str(badge_id)] = value

        multipliers = normalize_multipliers(pick_field(raw, "level_multipliers", "levelMultipliers"))

        return cls(
            expectations_weight=expectations,
            growth_weight=growth,
            kind_weights=kind_weights,
            badge_overrides=overrides,
            level_multipliers=multipliers if multipliers is not None else list(DEFAULT_LEVEL_MULTIPLIERS),
            updated_at=parse_datetime(pick_field(raw, "updated_at", "updatedAt"), now),
        )


class ScoreConfigStore:
    """Persisted scoring configuration."""

    def __init__(
        self,
        backend: StorageBackend,
        catalog: BadgeCatalog,
        clock: Callable[[], datetime],
        on_change: Callable[[str], None] | None = None,
    ):
        self.backend = backend
        self.catalog = catalog
        self.clock = clock
        self.on_change = on_change

    def snapshot(self) -> ScoreSnapshot:
        return ScoreSnapshot.from_dict(self.backend.read_data(SCORING_KEY), self.clock())

    def _save(self, snapshot: ScoreSnapshot) -> None:
        snapshot.updated_at = self.clock()
        self.backend.write(SCORING_KEY, SCORING_SCHEMA_VERSION, snapshot.to_dict())
        if self.on_change is not None:
            self.on_change(SCORING_KEY)

    def set_snapshot(self, snapshot: ScoreSnapshot | Mapping[str, Any]) -> ScoreSnapshot:
        normalized = ScoreSnapshot.from_dict(snapshot, self.clock())
        self._save(normalized)
        return normalized

    # -------------------------------------------------------------------------
    # Split
    # -------------------------------------------------------------------------

    def get_split(self) -> tuple[float, float]:
        snapshot = self.snapshot()
        return snapshot.expectations_weight, snapshot.growth_weight

    def set_split(self, expectations: float, growth: float) -> tuple[float, float]:
        snapshot = self.snapshot()
        snapshot.expectations_weight, snapshot.growth_weight = normalize_split(expectations, growth)
        self._save(snapshot)
        logger.info(
            f"Score split set to expectations={snapshot.expectations_weight:.3f} "
            f"growth={snapshot.growth_weight:.3f}"
        )
        return snapshot.expectations_weight, snapshot.growth_weight

    # -------------------------------------------------------------------------
    # Kind weights
    # -------------------------------------------------------------------------

    def get_kind_weight(self, kind: BadgeKind) -> float:
        return self.snapshot().kind_weights.get(kind, 1.0)

    def set_kind_weight(self, kind: BadgeKind, weight: float) -> float:
        """Set a kind weight. Non-positive or non-finite weights are ignored."""
        value = _positive(weight)
        if value is None:
            logger.warning(f"Ignoring invalid weight {weight!r} for kind {kind.value}")
            return self.get_kind_weight(kind)
        snapshot = self.snapshot()
        snapshot.kind_weights[kind] = value
        self._save(snapshot)
        return value

    # -------------------------------------------------------------------------
    # Level multipliers
    # -------------------------------------------------------------------------

    def get_level_multipliers(self) -> list[float]:
        return list(self.snapshot().level_multipliers)

    def set_level_multipliers(self, values: Sequence[float]) -> list[float]:
        """Set the five multipliers; invalid input restores the defaults."""
        snapshot = self.snapshot()
        multipliers = normalize_multipliers(values)
        if multipliers is None:
            logger.warning(f"Invalid level multipliers {values!r}; restoring defaults")
            multipliers = list(DEFAULT_LEVEL_MULTIPLIERS)
        snapshot.level_multipliers = multipliers
        self._save(snapshot)
        return list(multipliers)

    # -------------------------------------------------------------------------
    # Badge weights
    # -------------------------------------------------------------------------

    def set_badge_weight_override(self, badge_id: str, weight: float | None) -> None:
        """Override one badge's weight; None (or a non-positive value) clears it."""
        snapshot = self.snapshot()
        value = _positive(weight) if weight is not None else None
        if value is None:
            snapshot.badge_overrides.pop(badge_id, None)
        else:
            snapshot.badge_overrides[badge_id] = value
        self._save(snapshot)

    def get_badge_weight(self, badge_id: str, snapshot: ScoreSnapshot | None = None) -> float:
        """Override, else the declared weight (at least 0.1), else a kind fallback."""
        snapshot = snapshot or self.snapshot()
        override = snapshot.badge_overrides.get(badge_id)
        if override is not None and override > 0:
            return override
        definition = self.catalog.get(badge_id)
        if definition is not None and definition.weight is not None and math.isfinite(definition.weight):
            return max(MIN_WEIGHT, definition.weight)
        if definition is not None and definition.kind is BadgeKind.SELECTABLE:
            return 1.0
        return 2.0
