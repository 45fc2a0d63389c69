# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Badge catalog - the static registry of badge definitions.

Every badge is owned by one role and verified by the other. Catalog order is
significant: a profile that never chose its background badges is judged on
the first four BACKGROUND badges of its role.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from ..core.exceptions import ConfigException, UnknownBadgeError
from .models import BadgeDefinition, BadgeKind, Cadence, Role

MAX_ACTIVE_BADGES = 4
MAX_BACKGROUND_BADGES = 4


class BadgeCatalog:
    """Read-only lookup of badge definitions."""

    def __init__(self, definitions: Iterable[BadgeDefinition]):
        self._definitions: list[BadgeDefinition] = list(definitions)
        self._by_id: dict[str, BadgeDefinition] = {}
        for definition in self._definitions:
            if definition.id in self._by_id:
                raise ConfigException(f"Duplicate badge id in catalog: {definition.id}")
            if definition.verifier_role is definition.owner_role:
                raise ConfigException(f"Badge {definition.id} cannot be verified by its own role")
            self._by_id[definition.id] = definition

    def __contains__(self, badge_id: object) -> bool:
        return badge_id in self._by_id

    def __iter__(self) -> Iterator[BadgeDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def get(self, badge_id: str) -> BadgeDefinition | None:
        return self._by_id.get(badge_id)

    def require(self, badge_id: str) -> BadgeDefinition:
        definition = self._by_id.get(badge_id)
        if definition is None:
            raise UnknownBadgeError(badge_id)
        return definition

    def for_role(self, role: Role) -> list[BadgeDefinition]:
        return [d for d in self._definitions if d.owner_role is role]

    def of_kind(self, role: Role, kind: BadgeKind) -> list[BadgeDefinition]:
        return [d for d in self._definitions if d.owner_role is role and d.kind is kind]

    def selectable(self, role: Role) -> list[BadgeDefinition]:
        return self.of_kind(role, BadgeKind.SELECTABLE)

    def background(self, role: Role) -> list[BadgeDefinition]:
        return self.of_kind(role, BadgeKind.BACKGROUND)

    def snap(self, role: Role) -> list[BadgeDefinition]:
        return self.of_kind(role, BadgeKind.SNAP)

    def checker(self, role: Role) -> list[BadgeDefinition]:
        return self.of_kind(role, BadgeKind.CHECKER)

    def ids_of_kind(self, role: Role, kind: BadgeKind) -> list[str]:
        return [d.id for d in self.of_kind(role, kind)]

    def default_background_ids(self, role: Role) -> list[str]:
        return self.ids_of_kind(role, BadgeKind.BACKGROUND)[:MAX_BACKGROUND_BADGES]


# =============================================================================
# Default marketplace catalog
# =============================================================================


def _seeker(
    badge_id: str,
    kind: BadgeKind,
    title: str,
    description: str,
    weight: float | None = None,
    cadence: Cadence | None = None,
) -> BadgeDefinition:
    return BadgeDefinition(
        id=badge_id,
        owner_role=Role.SEEKER,
        kind=kind,
        verifier_role=Role.RETAINER,
        title=title,
        description=description,
        how_to_earn="Retainers you work with confirm this on each check-in.",
        prompt=f"{title}: confirmed for this period?",
        cadence=cadence,
        weight=weight,
    )


def _retainer(
    badge_id: str,
    kind: BadgeKind,
    title: str,
    description: str,
    weight: float | None = None,
    cadence: Cadence | None = None,
) -> BadgeDefinition:
    return BadgeDefinition(
        id=badge_id,
        owner_role=Role.RETAINER,
        kind=kind,
        verifier_role=Role.SEEKER,
        title=title,
        description=description,
        how_to_earn="Seekers you work with confirm this on each check-in.",
        prompt=f"{title}: confirmed for this period?",
        cadence=cadence,
        weight=weight,
    )


SEEKER_BADGES: list[BadgeDefinition] = [
    _seeker("seeker_snap_lane", BadgeKind.SNAP, "I Know My Lane", "Completed the onboarding video acknowledging independent contractor status.", weight=3, cadence=Cadence.ONCE),
    _seeker("seeker_badge_checker", BadgeKind.CHECKER, "Badge Checker", "Keeps monthly badge confirmations on time.", weight=3, cadence=Cadence.MONTHLY),
    _seeker("seeker_no_dropped_routes", BadgeKind.BACKGROUND, "Route Reliability", "Keeps commitments once scheduled.", weight=4),
    _seeker("seeker_safety_standard", BadgeKind.SELECTABLE, "Safety Standard", "Operates safely and follows route and site protocols."),
    _seeker("seeker_professional_baseline", BadgeKind.BACKGROUND, "Exception Reporting", "Flags issues early with actionable detail.", weight=2),
    _seeker("seeker_solid_pavement", BadgeKind.BACKGROUND, "Solid as the Pavement", "Stays consistent with a retainer over the long haul.", weight=2),
    _seeker("seeker_night_routes", BadgeKind.SELECTABLE, "Night Route Reliability", "Consistency and reliability on night routes."),
    _seeker("seeker_quick_response", BadgeKind.SELECTABLE, "Quick Response", "Maintains timely communication during availability windows."),
    _seeker("seeker_no_breakdowns", BadgeKind.SELECTABLE, "No Breakdowns", "Operates consistently without causing route disruptions."),
    _seeker("seeker_on_time", BadgeKind.SELECTABLE, "On-Time Execution", "Arrives and executes on schedule."),
    _seeker("seeker_professional", BadgeKind.SELECTABLE, "Professional Standard", "Maintains professionalism, appearance, and compliance."),
    _seeker("seeker_communication", BadgeKind.BACKGROUND, "Professional Communication", "Communicates clearly and proactively with dispatch and sites.", weight=3),
    _seeker("seeker_schedule_consistency", BadgeKind.SELECTABLE, "Schedule Consistency", "Keeps a stable schedule and communicates changes early."),
    _seeker("seeker_route_accuracy", BadgeKind.SELECTABLE, "Route Accuracy", "Completes routes correctly with minimal errors."),
    _seeker("seeker_careful_handling", BadgeKind.SELECTABLE, "Careful Handling", "Handles freight carefully and reduces damage claims."),
    _seeker("seeker_problem_solver", BadgeKind.SELECTABLE, "Problem Solver", "Resolves issues calmly and keeps routes moving."),
    _seeker("seeker_customer_service", BadgeKind.BACKGROUND, "Customer/Brand Professionalism", "Represents customer and brand expectations on every stop.", weight=3),
    _seeker("seeker_doc_ready", BadgeKind.SELECTABLE, "Documentation Ready", "Provides required documents promptly when requested."),
    _seeker("seeker_incident_free", BadgeKind.SELECTABLE, "Incident-Free Week", "Completes work without safety or compliance incidents."),
    _seeker("seeker_fuel_efficiency", BadgeKind.SELECTABLE, "Fuel Efficient", "Operates efficiently and avoids unnecessary miles."),
    _seeker("seeker_team_player", BadgeKind.SELECTABLE, "Team Player", "Coordinates well with dispatch and site teams."),
    _seeker("seeker_early_arrival", BadgeKind.SELECTABLE, "Early Arrival", "Arrives early and prepared for pickups."),
    _seeker("seeker_load_securement", BadgeKind.SELECTABLE, "Load Securement", "Secures loads properly and reduces in-transit issues."),
    _seeker("seeker_detail_oriented", BadgeKind.SELECTABLE, "Detail Oriented", "Pays attention to details and avoids repeated mistakes."),
]

RETAINER_BADGES: list[BadgeDefinition] = [
    _retainer("retainer_snap_lane", BadgeKind.SNAP, "I Know My Lane", "Completed the onboarding video acknowledging the broker role and work offers.", weight=3, cadence=Cadence.ONCE),
    _retainer("retainer_badge_checker", BadgeKind.CHECKER, "Badge Checker", "Keeps monthly badge confirmations on time.", weight=3, cadence=Cadence.MONTHLY),
    _retainer("retainer_clear_terms", BadgeKind.BACKGROUND, "Clear Terms", "Sets clear expectations for pay, routes, and operations.", weight=3),
    _retainer("retainer_fast_support", BadgeKind.BACKGROUND, "Support Responsiveness", "Responds quickly when drivers need help.", weight=2),
    _retainer("retainer_payment_baseline", BadgeKind.BACKGROUND, "Payment Reliability", "Meets payment expectations on schedule.", weight=4),
    _retainer("retainer_fair_chance", BadgeKind.BACKGROUND, "Fair Chance", "Gives new seekers a real shot to ramp up on routes.", weight=3),
    _retainer("retainer_on_time_payment", BadgeKind.SELECTABLE, "Payday Precision", "Pays on time according to agreed terms."),
    _retainer("retainer_payment_accuracy", BadgeKind.SELECTABLE, "Payment Accuracy", "Pays accurately and consistently."),
    _retainer("retainer_route_consistency", BadgeKind.BACKGROUND, "Route Consistency", "Provides consistent work and stable expectations.", weight=2),
    _retainer("retainer_clear_ops", BadgeKind.SELECTABLE, "Clear Playbook", "Provides clear instructions and routing expectations."),
    _retainer("retainer_driver_support", BadgeKind.SELECTABLE, "Driver Backstop", "Supports drivers when issues happen on route."),
    _retainer("retainer_fair_resolution", BadgeKind.SELECTABLE, "Fair Shake", "Handles disputes and edge cases fairly."),
    _retainer("retainer_clear_schedule", BadgeKind.SELECTABLE, "Schedule Lock", "Provides schedules early with minimal last-minute changes."),
    _retainer("retainer_fast_dispatch", BadgeKind.SELECTABLE, "Fast Dispatch", "Keeps dispatch responsive and unblocked."),
    _retainer("retainer_training_ready", BadgeKind.SELECTABLE, "Training Ready", "Provides clear onboarding and route guidance."),
    _retainer("retainer_route_quality", BadgeKind.SELECTABLE, "Route Quality", "Offers routes with clear expectations and manageable constraints."),
    _retainer("retainer_equipment_support", BadgeKind.SELECTABLE, "Equipment Support", "Helps coordinate equipment expectations and readiness."),
    _retainer("retainer_safe_sites", BadgeKind.SELECTABLE, "Safe Sites", "Maintains safe pickup and drop environments and procedures."),
    _retainer("retainer_issue_resolution_speed", BadgeKind.SELECTABLE, "Fast Issue Resolution", "Resolves problems quickly when they happen."),
    _retainer("retainer_transparency", BadgeKind.BACKGROUND, "Transparency", "Communicates changes and constraints honestly and early.", weight=2),
    _retainer("retainer_growth_opportunities", BadgeKind.SELECTABLE, "Growth Opportunities", "Creates long-term opportunities and upward paths for drivers."),
    _retainer("retainer_respectful_ops", BadgeKind.SELECTABLE, "Respectful Operations", "Treats drivers with respect and professionalism."),
    _retainer("retainer_clear_escalations", BadgeKind.BACKGROUND, "Clear Escalations", "Provides a clear escalation path when blockers occur.", weight=2),
    _retainer("retainer_consistent_feedback", BadgeKind.SELECTABLE, "Consistent Feedback", "Gives actionable feedback that helps drivers improve."),
]

DEFAULT_CATALOG = BadgeCatalog(SEEKER_BADGES + RETAINER_BADGES)
