"""Tests for the score configuration store."""

from __future__ import annotations

import math

import pytest

from trustledger.badges.catalog import DEFAULT_CATALOG, BadgeCatalog
from trustledger.badges.models import BadgeDefinition, BadgeKind, Role
from trustledger.badges.scoring_config import (
    DEFAULT_KIND_WEIGHTS,
    DEFAULT_LEVEL_MULTIPLIERS,
    SCORING_KEY,
    ScoreConfigStore,
    ScoreSnapshot,
    normalize_multipliers,
    normalize_split,
)
from trustledger.storage.backend import MemoryBackend


@pytest.fixture
def scoring(clock):
    return ScoreConfigStore(MemoryBackend(), DEFAULT_CATALOG, clock)


class TestSplit:
    """Expectations/growth split."""

    def test_default(self, scoring):
        assert scoring.get_split() == (0.65, 0.35)

    def test_normalized_to_one(self, scoring):
        assert scoring.set_split(3, 1) == (0.75, 0.25)
        assert scoring.get_split() == (0.75, 0.25)

    def test_one_sided(self, scoring):
        assert scoring.set_split(0, 5) == (0.0, 1.0)

    @pytest.mark.parametrize("exp,growth", [(-1, 1), (0, 0), (math.nan, 1), ("a", 1)])
    def test_invalid_resets_to_defaults(self, scoring, exp, growth):
        scoring.set_split(3, 1)
        assert scoring.set_split(exp, growth) == (0.65, 0.35)

    def test_normalize_split_helper(self):
        assert normalize_split(1, 1) == (0.5, 0.5)


class TestKindWeights:
    """Per-kind weights."""

    def test_defaults(self, scoring):
        for kind, weight in DEFAULT_KIND_WEIGHTS.items():
            assert scoring.get_kind_weight(kind) == weight

    def test_set(self, scoring):
        assert scoring.set_kind_weight(BadgeKind.SELECTABLE, 2.5) == 2.5
        assert scoring.get_kind_weight(BadgeKind.SELECTABLE) == 2.5

    @pytest.mark.parametrize("weight", [0, -2, math.inf])
    def test_invalid_ignored(self, scoring, weight):
        scoring.set_kind_weight(BadgeKind.SNAP, 5)
        assert scoring.set_kind_weight(BadgeKind.SNAP, weight) == 5
        assert scoring.get_kind_weight(BadgeKind.SNAP) == 5


class TestLevelMultipliers:
    """Five-entry level multipliers."""

    def test_default(self, scoring):
        assert scoring.get_level_multipliers() == list(DEFAULT_LEVEL_MULTIPLIERS)

    def test_set(self, scoring):
        assert scoring.set_level_multipliers([1, 2, 3, 4, 5]) == [1, 2, 3, 4, 5]

    def test_small_entries_clamped(self, scoring):
        assert scoring.set_level_multipliers([0.05, 1, 2, 3, 4])[0] == 0.1

    @pytest.mark.parametrize(
        "values",
        [[1, 2, 3, 4], [1, 2, 3, 4, 5, 6], [1, math.inf, 3, 4, 5], [1, 0, 3, 4, 5], [1, -2, 3, 4, 5], "12345"],
    )
    def test_invalid_restores_defaults(self, scoring, values):
        scoring.set_level_multipliers([2, 2, 2, 2, 2])
        assert scoring.set_level_multipliers(values) == list(DEFAULT_LEVEL_MULTIPLIERS)

    def test_normalize_helper(self):
        assert normalize_multipliers(None) is None


class TestBadgeWeights:
    """Badge weight resolution order."""

    def test_declared_weight(self, scoring):
        assert scoring.get_badge_weight("seeker_no_dropped_routes") == 4

    def test_override_then_clear(self, scoring):
        scoring.set_badge_weight_override("seeker_no_dropped_routes", 7)
        assert scoring.get_badge_weight("seeker_no_dropped_routes") == 7

        scoring.set_badge_weight_override("seeker_no_dropped_routes", None)
        assert scoring.get_badge_weight("seeker_no_dropped_routes") == 4

    def test_non_positive_override_clears(self, scoring):
        scoring.set_badge_weight_override("seeker_on_time", 3)
        scoring.set_badge_weight_override("seeker_on_time", 0)
        assert scoring.get_badge_weight("seeker_on_time") == 1.0

    def test_kind_fallbacks(self, scoring):
        assert scoring.get_badge_weight("seeker_on_time") == 1.0
        assert scoring.get_badge_weight("not_in_catalog") == 2.0

    def test_declared_weight_clamped(self, clock):
        catalog = BadgeCatalog(
            [
                BadgeDefinition("tiny", Role.SEEKER, BadgeKind.BACKGROUND, Role.RETAINER, weight=0.01),
                BadgeDefinition("plain", Role.SEEKER, BadgeKind.BACKGROUND, Role.RETAINER),
            ]
        )
        scoring = ScoreConfigStore(MemoryBackend(), catalog, clock)
        assert scoring.get_badge_weight("tiny") == 0.1
        assert scoring.get_badge_weight("plain") == 2.0


class TestSnapshot:
    """Whole-snapshot reads and writes."""

    def test_set_snapshot_normalizes(self, scoring):
        snapshot = scoring.set_snapshot(
            {
                "expectationsWeight": 1,
                "growthWeight": 1,
                "kindWeights": {"SNAP": 10, "CHECKER": -1},
                "badgeOverrides": {"seeker_on_time": 2, "bad": 0},
                "levelMultipliers": [1, 1, 1],
            }
        )
        assert (snapshot.expectations_weight, snapshot.growth_weight) == (0.5, 0.5)
        assert snapshot.kind_weights[BadgeKind.SNAP] == 10
        assert snapshot.kind_weights[BadgeKind.CHECKER] == DEFAULT_KIND_WEIGHTS[BadgeKind.CHECKER]
        assert snapshot.badge_overrides == {"seeker_on_time": 2}
        assert snapshot.level_multipliers == list(DEFAULT_LEVEL_MULTIPLIERS)
        assert scoring.snapshot().to_dict() == snapshot.to_dict()

    def test_accepts_snapshot_instance(self, scoring):
        snapshot = scoring.set_snapshot(ScoreSnapshot(expectations_weight=2, growth_weight=2))
        assert snapshot.expectations_weight == 0.5

    def test_missing_split_uses_defaults(self, clock):
        assert ScoreSnapshot.from_dict({}, clock()).expectations_weight == 0.65

    def test_on_change(self, clock):
        keys = []
        scoring = ScoreConfigStore(MemoryBackend(), DEFAULT_CATALOG, clock, on_change=keys.append)
        scoring.set_split(1, 1)
        scoring.set_level_multipliers([1, 2, 3, 4, 5])
        assert keys == [SCORING_KEY, SCORING_KEY]
