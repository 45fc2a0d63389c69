"""Tests for badge data models and period keys."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from trustledger.badges.models import (
    BadgeCheckin,
    BadgeProgress,
    BadgeSelection,
    Cadence,
    CheckinRequest,
    CheckinStatus,
    CheckinValue,
    LevelRule,
    Role,
    parse_enum,
)
from trustledger.badges.periods import add_months, iso_week_key, month_key, period_key_for
from trustledger.core.exceptions import ValidationException

NOW = datetime(2026, 3, 4, 12, 0, tzinfo=UTC)


def _checkin(**overrides) -> BadgeCheckin:
    fields = dict(
        id="c1",
        period_key="2026-W10",
        cadence=Cadence.WEEKLY,
        seeker_id="s-1",
        retainer_id="r-1",
        badge_id="seeker_no_dropped_routes",
        target_role=Role.SEEKER,
        target_id="s-1",
        verifier_role=Role.RETAINER,
        verifier_id="r-1",
        value=CheckinValue.YES,
    )
    fields.update(overrides)
    return BadgeCheckin(**fields)


class TestEnums:
    """Enum parsing."""

    def test_parse_enum_case_insensitive(self):
        assert parse_enum(Role, " seeker ", "role") is Role.SEEKER
        assert parse_enum(CheckinStatus, CheckinStatus.DISPUTED, "status") is CheckinStatus.DISPUTED

    def test_parse_enum_invalid(self):
        with pytest.raises(ValidationException) as exc_info:
            parse_enum(Role, "ADMIN", "role")
        assert exc_info.value.field == "role"
        assert "SEEKER, RETAINER" in exc_info.value.message

    def test_counterpart(self):
        assert Role.SEEKER.counterpart is Role.RETAINER
        assert Role.RETAINER.counterpart is Role.SEEKER


class TestLevelRule:
    """LevelRule parsing and clamping."""

    def test_clamps(self):
        assert LevelRule.from_dict({"min_samples": -3.7, "min_percent": 150}) == LevelRule(0, 100.0)
        assert LevelRule.from_dict({"minSamples": 4.9, "minPercent": -1}) == LevelRule(4, 0.0)

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            [],
            {"min_samples": 4},
            {"min_samples": "x", "min_percent": 80},
            {"min_samples": 4, "min_percent": True},
        ],
    )
    def test_rejects_non_numeric(self, raw):
        assert LevelRule.from_dict(raw) is None


class TestBadgeCheckin:
    """Effective value and persistence parsing."""

    def test_effective_value(self):
        assert _checkin().effective_value is CheckinValue.YES
        assert _checkin(override_value=CheckinValue.NO).effective_value is CheckinValue.NO
        assert _checkin(status=CheckinStatus.DISPUTED, override_value=CheckinValue.NO).effective_value is None
        assert _checkin(status=CheckinStatus.OVERRIDDEN, override_value=CheckinValue.NO).effective_value is (
            CheckinValue.NO
        )

    def test_counterpart_id(self):
        assert _checkin().counterpart_id() == "r-1"
        retainer_target = _checkin(target_role=Role.RETAINER, target_id="r-1", verifier_role=Role.SEEKER)
        assert retainer_target.counterpart_id() == "s-1"

    def test_round_trip(self):
        checkin = _checkin(override_value=CheckinValue.NO, override_note="late", created_at=NOW, updated_at=NOW)
        assert BadgeCheckin.from_dict(checkin.to_dict(), NOW) == checkin

    def test_legacy_camel_case(self):
        raw = {
            "id": "old",
            "weekKey": "2025-W01",
            "seekerId": "s-1",
            "retainerId": "r-1",
            "badgeId": "b",
            "targetRole": "SEEKER",
            "targetId": "s-1",
            "verifierRole": "RETAINER",
            "verifierId": "r-1",
            "value": "NO",
            "status": "bogus",
            "overrideValue": "yes",
        }
        checkin = BadgeCheckin.from_dict(raw, NOW)
        assert checkin.period_key == "2025-W01"
        assert checkin.cadence is Cadence.WEEKLY
        assert checkin.value is CheckinValue.NO
        assert checkin.status is CheckinStatus.ACTIVE
        assert checkin.override_value is CheckinValue.YES
        assert checkin.created_at == NOW

    def test_missing_identity_dropped(self):
        raw = _checkin().to_dict()
        del raw["target_id"]
        assert BadgeCheckin.from_dict(raw, NOW) is None
        assert BadgeCheckin.from_dict("garbage", NOW) is None


class TestProgressAndSelection:
    """Progress and selection parsing."""

    def test_progress_clamps(self):
        raw = {"badgeId": "b", "ownerRole": "RETAINER", "ownerId": "r-1", "yesCount": -2, "noCount": 3.8, "maxLevel": 9}
        progress = BadgeProgress.from_dict(raw, NOW)
        assert (progress.yes_count, progress.no_count, progress.max_level) == (0, 3, 5)
        assert progress.owner_role is Role.RETAINER
        assert progress.total == 3

    def test_progress_points_fallback(self):
        raw = {"badge_id": "b", "owner_role": "SEEKER", "owner_id": "s-1", "points": 7}
        assert BadgeProgress.from_dict(raw, NOW).yes_count == 7

    def test_selection_dedupes(self):
        raw = {"ownerRole": "SEEKER", "ownerId": "s-1", "activeBadgeIds": ["a", "a", "b"], "backgroundLockedUntil": 5}
        selection = BadgeSelection.from_dict(raw, NOW)
        assert selection.active_badge_ids == ["a", "b"]
        assert selection.background_badge_ids == []
        assert selection.background_locked_until is None

    def test_selection_without_owner(self):
        assert BadgeSelection.from_dict({"ownerRole": "SEEKER"}, NOW) is None


class TestCheckinRequest:
    """Request validation at construction."""

    def test_parses_strings(self, make_request):
        request = make_request(value="no", cadence="monthly")
        assert request.value is CheckinValue.NO
        assert request.cadence is Cadence.MONTHLY
        assert request.target_role is Role.SEEKER

    def test_invalid_value(self, make_request):
        with pytest.raises(ValidationException):
            make_request(value="MAYBE")

    def test_missing_id(self, make_request):
        with pytest.raises(ValidationException) as exc_info:
            make_request(target_id="")
        assert exc_info.value.field == "target_id"


class TestPeriods:
    """Period keys and month arithmetic."""

    def test_iso_week(self):
        assert iso_week_key(NOW) == "2026-W10"
        # ISO year differs from the calendar year at the boundary
        assert iso_week_key(datetime(2021, 1, 1, tzinfo=UTC)) == "2020-W53"
        assert iso_week_key(datetime(2024, 12, 30, tzinfo=UTC)) == "2025-W01"

    def test_month_key(self):
        assert month_key(NOW) == "2026-03"
        assert period_key_for(Cadence.MONTHLY, NOW) == "2026-03"

    def test_once_uses_week_key(self):
        assert period_key_for(Cadence.ONCE, NOW) == "2026-W10"

    def test_add_months_clamps_day(self):
        assert add_months(datetime(2024, 1, 31, tzinfo=UTC), 1) == datetime(2024, 2, 29, tzinfo=UTC)
        assert add_months(datetime(2025, 3, 31, tzinfo=UTC), -1) == datetime(2025, 2, 28, tzinfo=UTC)

    def test_add_months_across_years(self):
        assert add_months(NOW, 12) == datetime(2027, 3, 4, 12, 0, tzinfo=UTC)
        assert add_months(NOW, -14) == datetime(2025, 1, 4, 12, 0, tzinfo=UTC)
