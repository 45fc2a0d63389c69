"""Tests for badge selections and the background lock."""

from __future__ import annotations

from datetime import UTC, datetime

from trustledger.badges.models import BadgeSelection, Role
from trustledger.badges.store import BADGES_KEY

SEEKER_DEFAULT_BACKGROUND = [
    "seeker_no_dropped_routes",
    "seeker_professional_baseline",
    "seeker_solid_pavement",
    "seeker_communication",
]


class TestActiveBadges:
    """Growth (selectable) badges."""

    def test_empty_by_default(self, engine):
        assert engine.get_active_badges(Role.SEEKER, "s-1") == []

    def test_filters_dedupes_and_truncates(self, engine):
        selection = engine.set_active_badges(
            Role.SEEKER,
            "s-1",
            [
                "seeker_on_time",
                "seeker_on_time",
                "retainer_clear_ops",
                "seeker_no_dropped_routes",
                "unknown",
                "seeker_safety_standard",
                "seeker_night_routes",
                "seeker_quick_response",
                "seeker_no_breakdowns",
            ],
        )

        expected = ["seeker_on_time", "seeker_safety_standard", "seeker_night_routes", "seeker_quick_response"]
        assert selection.active_badge_ids == expected
        assert engine.get_active_badges(Role.SEEKER, "s-1") == expected

    def test_keeps_background_selection(self, engine, clock):
        locked = engine.set_background_badges(Role.SEEKER, "s-1", ["seeker_customer_service"])

        selection = engine.set_active_badges(Role.SEEKER, "s-1", ["seeker_on_time"])

        assert selection.background_badge_ids == locked.background_badge_ids
        assert selection.background_locked_until == locked.background_locked_until

    def test_new_selection_gets_default_background(self, engine):
        selection = engine.set_active_badges(Role.SEEKER, "s-1", ["seeker_on_time"])
        assert selection.background_badge_ids == SEEKER_DEFAULT_BACKGROUND
        assert selection.background_locked_until is None

    def test_active_badges_can_change_freely(self, engine):
        engine.set_active_badges(Role.SEEKER, "s-1", ["seeker_on_time"])
        engine.set_active_badges(Role.SEEKER, "s-1", ["seeker_team_player"])
        assert engine.get_active_badges(Role.SEEKER, "s-1") == ["seeker_team_player"]


class TestBackgroundBadges:
    """Expectation (background) badges and the 12-month lock."""

    def test_default_without_selection(self, engine, backend):
        assert engine.get_selected_background_badges(Role.SEEKER, "s-1") == SEEKER_DEFAULT_BACKGROUND
        status = engine.get_background_lock_status(Role.SEEKER, "s-1")
        assert status.locked_until is None
        assert status.is_locked is False
        assert backend.write_count == 0

    def test_fills_remaining_slots_from_defaults(self, engine):
        selection = engine.set_background_badges(
            Role.SEEKER, "s-1", ["seeker_customer_service", "seeker_on_time", "seeker_customer_service"]
        )

        assert selection.background_badge_ids == [
            "seeker_customer_service",
            "seeker_no_dropped_routes",
            "seeker_professional_baseline",
            "seeker_solid_pavement",
        ]

    def test_sets_twelve_month_lock(self, engine):
        engine.set_background_badges(Role.SEEKER, "s-1", ["seeker_customer_service"])

        status = engine.get_background_lock_status(Role.SEEKER, "s-1")
        assert status.locked_until == datetime(2027, 3, 4, 12, 0, tzinfo=UTC)
        assert status.is_locked is True

    def test_second_call_while_locked_is_noop(self, engine, backend, clock):
        first = engine.set_background_badges(Role.SEEKER, "s-1", ["seeker_customer_service"])
        stored = backend.raw(BADGES_KEY)
        writes = backend.write_count

        clock.advance(days=200)
        second = engine.set_background_badges(Role.SEEKER, "s-1", ["seeker_communication"])

        assert second.background_badge_ids == first.background_badge_ids
        assert second.background_locked_until == first.background_locked_until
        assert backend.raw(BADGES_KEY) == stored
        assert backend.write_count == writes

    def test_allow_override_while_locked(self, engine, clock):
        engine.set_background_badges(Role.SEEKER, "s-1", ["seeker_customer_service"])
        clock.advance(days=10)

        selection = engine.set_background_badges(Role.SEEKER, "s-1", ["seeker_communication"], allow_override=True)

        # Refilled from the previous selection, not the catalog defaults
        assert selection.background_badge_ids == [
            "seeker_communication",
            "seeker_customer_service",
            "seeker_no_dropped_routes",
            "seeker_professional_baseline",
        ]
        assert selection.background_locked_until == datetime(2027, 3, 14, 12, 0, tzinfo=UTC)

    def test_change_allowed_after_lock_expires(self, engine, clock):
        engine.set_background_badges(Role.SEEKER, "s-1", ["seeker_customer_service"])
        clock.advance(days=366)

        assert engine.get_background_lock_status(Role.SEEKER, "s-1").is_locked is False
        selection = engine.set_background_badges(Role.SEEKER, "s-1", ["seeker_communication"])
        assert selection.background_badge_ids[0] == "seeker_communication"

    def test_keeps_active_badges(self, engine):
        engine.set_active_badges(Role.SEEKER, "s-1", ["seeker_on_time"])
        selection = engine.set_background_badges(Role.SEEKER, "s-1", [])
        assert selection.active_badge_ids == ["seeker_on_time"]
        assert selection.background_badge_ids == SEEKER_DEFAULT_BACKGROUND

    def test_profiles_are_independent(self, engine):
        engine.set_background_badges(Role.SEEKER, "s-1", ["seeker_customer_service"])
        assert engine.get_background_lock_status(Role.SEEKER, "s-2").is_locked is False
        assert engine.get_background_lock_status(Role.RETAINER, "s-1").is_locked is False

    def test_stale_previous_ids_are_not_carried_over(self, engine):
        store = engine.repository.load()
        store.put_selection(
            BadgeSelection(
                owner_role=Role.SEEKER,
                owner_id="s-9",
                background_badge_ids=["gone_1", "seeker_customer_service", "gone_2", "seeker_on_time"],
            )
        )
        engine.repository.save(store)

        selection = engine.set_background_badges(Role.SEEKER, "s-9", [])

        expected = [
            "seeker_customer_service",
            "seeker_no_dropped_routes",
            "seeker_professional_baseline",
            "seeker_solid_pavement",
        ]
        assert selection.background_badge_ids == expected
        assert engine.selection.get_selection(Role.SEEKER, "s-9").background_badge_ids == expected

    def test_fully_stale_selection_falls_back_to_defaults(self, engine):
        store = engine.repository.load()
        store.put_selection(
            BadgeSelection(
                owner_role=Role.SEEKER,
                owner_id="s-9",
                background_badge_ids=["gone_1", "gone_2", "gone_3", "gone_4"],
            )
        )
        engine.repository.save(store)

        selection = engine.set_background_badges(Role.SEEKER, "s-9", [])

        assert selection.background_badge_ids == SEEKER_DEFAULT_BACKGROUND
        assert engine.selection.get_selection(Role.SEEKER, "s-9").background_badge_ids == SEEKER_DEFAULT_BACKGROUND
