"""Tests for the blended trust rating."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from trustledger.badges.engine import BadgeEngine
from trustledger.badges.models import Role
from trustledger.badges.ports import StaticPenalties
from trustledger.badges.trust import badge_trust_window

NO_DROPPED = "seeker_no_dropped_routes"
BASELINE = "seeker_professional_baseline"
SAFETY = "seeker_safety_standard"


@pytest.fixture
def penalized(backend, links, clock, settings):
    """Engine whose penalty provider docks s-1 by 12.5 points and r-1 by 50."""
    return BadgeEngine(
        backend,
        links,
        penalties=StaticPenalties({"s-1": 12.5, "r-1": 50}),
        clock=clock,
        settings=settings,
    )


def _rate(engine, owner_id="s-1", role=Role.SEEKER):
    return engine.get_trust_rating_for_profile(role, owner_id)


class TestEmpty:
    def test_no_data(self, engine):
        rating = _rate(engine)
        assert rating.percent is None
        assert (rating.yes, rating.no, rating.total) == (0, 0, 0)
        assert rating.to_dict()["expectations_score"] is None

    def test_blank_owner(self, engine):
        assert _rate(engine, owner_id="").percent is None


class TestPerCounterpartAveraging:
    """Each counterpart counts once, however many checkins it submits."""

    def test_average_of_counterparts(self, engine, make_request):
        for week in ("2026-W07", "2026-W08", "2026-W09"):
            engine.submit_weekly_checkin(make_request(period_key=week))
        engine.submit_weekly_checkin(make_request(period_key="2026-W09", retainer_id="r-2", value="NO"))

        rating = _rate(engine)

        # A pooled ratio would be 75
        assert rating.percent == 50
        assert (rating.yes, rating.no, rating.total) == (3, 1, 4)

    def test_window_details(self, engine, make_request, clock):
        engine.submit_weekly_checkin(make_request(period_key="2026-W09"))
        engine.submit_weekly_checkin(make_request(period_key="2026-W10", value="NO"))
        engine.submit_weekly_checkin(make_request(period_key="2026-W10", retainer_id="r-2"))

        window = badge_trust_window(
            engine.repository.load(), Role.SEEKER, "s-1", NO_DROPPED, clock() - timedelta(days=1)
        )

        assert (window.percent, window.yes, window.no, window.total, window.link_count) == (75, 2, 1, 3, 2)


class TestWeighting:
    """Badge, kind and level weights inside a group."""

    def test_badge_weights(self, engine, make_request):
        engine.submit_weekly_checkin(make_request(badge_id=NO_DROPPED))
        engine.submit_weekly_checkin(make_request(badge_id=BASELINE, value="NO"))

        # (100 * 4*3 + 0 * 2*3) / 18
        assert _rate(engine).percent == 67

    def test_badge_weight_override(self, engine, make_request):
        engine.submit_weekly_checkin(make_request(badge_id=NO_DROPPED))
        engine.submit_weekly_checkin(make_request(badge_id=BASELINE, value="NO"))
        engine.set_badge_weight_override(BASELINE, 12)

        assert _rate(engine).percent == 25

    def test_level_multiplier(self, engine, make_request):
        engine.submit_weekly_checkins_batch(
            [make_request(badge_id=NO_DROPPED, period_key=f"2026-W{week:02d}") for week in range(1, 13)]
        )
        engine.submit_weekly_checkin(make_request(badge_id=BASELINE, value="NO"))

        # Level 2 multiplies the first badge's weight by 1.7: 100 * 20.4 / 26.4
        assert _rate(engine).percent == 77


class TestBlend:
    """Expectations and growth groups."""

    def test_two_groups(self, engine, make_request):
        engine.set_active_badges(Role.SEEKER, "s-1", [SAFETY])
        engine.submit_weekly_checkin(make_request(badge_id=NO_DROPPED))
        engine.submit_weekly_checkin(make_request(badge_id=SAFETY, value="NO"))

        rating = _rate(engine)

        assert rating.percent == 65
        assert rating.expectations_score == 100
        assert rating.growth_score == 0
        assert rating.total == 2

    def test_custom_split(self, engine, make_request):
        engine.set_active_badges(Role.SEEKER, "s-1", [SAFETY])
        engine.submit_weekly_checkin(make_request(badge_id=NO_DROPPED))
        engine.submit_weekly_checkin(make_request(badge_id=SAFETY, value="NO"))
        engine.set_badge_score_split(1, 3)

        assert _rate(engine).percent == 25

    def test_growth_only(self, engine, make_request):
        engine.set_active_badges(Role.SEEKER, "s-1", [SAFETY])
        engine.submit_weekly_checkin(make_request(badge_id=SAFETY, period_key="2026-W09"))
        engine.submit_weekly_checkin(make_request(badge_id=SAFETY, period_key="2026-W10", value="NO"))

        rating = _rate(engine)

        assert rating.percent == 50
        assert rating.expectations_score is None

    def test_unselected_badge_is_ignored(self, engine, make_request):
        engine.submit_weekly_checkin(make_request(badge_id=NO_DROPPED))
        engine.submit_weekly_checkin(make_request(badge_id=SAFETY, value="NO"))

        assert _rate(engine).percent == 100

    def test_snap_only(self, engine):
        engine.grant_snap_badge(Role.SEEKER, "s-1", "seeker_snap_lane")

        rating = _rate(engine)

        assert rating.percent == 100
        assert rating.yes == 1


class TestPenalty:
    """Bad-exit penalties for seekers."""

    def test_penalty_applied(self, penalized, make_request):
        penalized.set_active_badges(Role.SEEKER, "s-1", [SAFETY])
        penalized.submit_weekly_checkin(make_request(badge_id=NO_DROPPED))
        penalized.submit_weekly_checkin(make_request(badge_id=SAFETY, value="NO"))

        # 65 - 12.5, rounded half up
        assert _rate(penalized).percent == 53

    def test_retainers_are_not_penalized(self, penalized, make_request):
        penalized.submit_weekly_checkin(
            make_request(
                badge_id="retainer_payment_baseline",
                target_role="RETAINER",
                target_id="r-1",
                verifier_role="SEEKER",
                verifier_id="s-1",
            )
        )
        assert _rate(penalized, owner_id="r-1", role=Role.RETAINER).percent == 100

    def test_floor_at_zero(self, backend, links, clock, settings, make_request):
        engine = BadgeEngine(
            backend, links, penalties=StaticPenalties({"s-1": 150}), clock=clock, settings=settings
        )
        engine.submit_weekly_checkin(make_request())
        assert _rate(engine).percent == 0

    def test_no_penalty_without_score(self, penalized):
        assert _rate(penalized).percent is None


class TestWindow:
    """Trailing window and point-in-time ratings."""

    def test_old_checkins_expire(self, engine, make_request, clock):
        engine.submit_weekly_checkin(make_request())
        clock.advance(days=400)

        rating = _rate(engine)

        assert rating.percent is None
        assert rating.total == 0

    def test_within_window(self, engine, make_request, clock):
        engine.submit_weekly_checkin(make_request())
        clock.advance(days=300)
        assert _rate(engine).percent == 100

    def test_as_of(self, penalized, make_request, clock):
        start = clock()
        penalized.submit_weekly_checkin(make_request(period_key="2026-W10"))
        clock.advance(days=30)
        penalized.submit_weekly_checkin(make_request(period_key="2026-W14", value="NO"))

        # Current: 50 minus the 12.5 penalty
        assert _rate(penalized).percent == 38
        assert penalized.get_trust_rating_as_of(Role.SEEKER, "s-1", start + timedelta(hours=1)).percent == 100
        assert penalized.get_trust_rating_as_of(Role.SEEKER, "s-1", start - timedelta(hours=1)).percent is None
        assert penalized.get_trust_rating_as_of(Role.SEEKER, "s-1", clock(), window_days=10).percent == 0

    def test_naive_as_of_is_read_as_utc(self, engine, make_request):
        engine.submit_weekly_checkin(make_request(period_key="2026-W10"))

        assert engine.get_trust_rating_as_of(Role.SEEKER, "s-1", datetime(2026, 3, 5, 12, 0)).percent == 100
        assert engine.get_trust_rating_as_of(Role.SEEKER, "s-1", datetime(2026, 3, 4, 11, 0)).percent is None


class TestNaiveClock:
    """A host clock without tzinfo is treated as UTC."""

    @pytest.fixture
    def naive_engine(self, backend, links, settings):
        return BadgeEngine(backend, links, clock=lambda: datetime(2026, 3, 4, 12, 0), settings=settings)

    def test_readings_are_utc(self, naive_engine):
        assert naive_engine.clock() == datetime(2026, 3, 4, 12, 0, tzinfo=UTC)

    def test_trust_rating(self, naive_engine, make_request):
        naive_engine.submit_weekly_checkin(make_request())

        rating = _rate(naive_engine)

        assert rating.percent == 100
        assert rating.total == 1

    def test_background_lock(self, naive_engine):
        naive_engine.set_background_badges(Role.SEEKER, "s-1", ["seeker_customer_service"])

        status = naive_engine.get_background_lock_status(Role.SEEKER, "s-1")

        assert status.is_locked is True
        assert status.locked_until == datetime(2027, 3, 4, 12, 0, tzinfo=UTC)


class TestAuditedEntries:
    def test_disputed_excluded(self, engine, make_request):
        engine.submit_weekly_checkin(make_request(period_key="2026-W09"))
        disputed = engine.submit_weekly_checkin(make_request(period_key="2026-W10", value="NO")).checkin
        engine.update_badge_checkin_status(disputed.id, "DISPUTED")

        rating = _rate(engine)

        assert rating.percent == 100
        assert rating.total == 1

    def test_override_used(self, engine, make_request):
        checkin = engine.submit_weekly_checkin(make_request()).checkin
        engine.update_badge_checkin_status(checkin.id, "OVERRIDDEN", override_value="NO")

        assert _rate(engine).percent == 0

    @pytest.mark.parametrize("values", [["YES"], ["NO"], ["YES", "NO", "NO"], ["NO", "YES", "YES", "YES"]])
    def test_percent_in_range(self, engine, make_request, values):
        for week, value in enumerate(values, start=1):
            engine.submit_weekly_checkin(make_request(period_key=f"2026-W{week:02d}", value=value))
        assert 0 <= _rate(engine).percent <= 100
