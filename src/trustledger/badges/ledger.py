# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Checkin ledger.

A checkin is one verifier's YES/NO for one badge, one target and one period.
The ledger holds at most one entry per composite key: resubmitting updates
the entry in place, and progress moves by the difference between the old and
new values. Entries under audit (not ACTIVE) ignore ordinary resubmission.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..core.exceptions import (
    BadgeRoleMismatchError,
    CheckinPartyMismatchError,
    LinkNotActiveError,
    TrustLedgerException,
    UnknownBadgeError,
    VerifierRoleMismatchError,
    WorkingTogetherRequiredError,
)
from ..core.logging import correlation_context, ledger_logger
from .catalog import BadgeCatalog
from .imports import parse_checkin_record
from .models import (
    BadgeCheckin,
    BadgeDefinition,
    BadgeKind,
    BadgeProgress,
    Cadence,
    CheckinRequest,
    CheckinStatus,
    CheckinValue,
    LevelRule,
    Role,
    make_id,
)
from .periods import period_key_for
from .ports import Link, LinkProvider, is_working_together
from .progress import compute_level_from_counts
from .rules import RulesStore
from .selection import SelectionManager
from .store import BadgeStore, BadgeStoreRepository

logger = logging.getLogger(__name__)

RulesResolver = Callable[[str], list[LevelRule]]


@dataclass
class CheckinResult:
    checkin: BadgeCheckin
    progress: BadgeProgress
    link: Link

    def to_dict(self) -> dict[str, Any]:
        return {
            "checkin": self.checkin.to_dict(),
            "progress": self.progress.to_dict(),
            "link": self.link.to_dict(),
        }


@dataclass
class BatchResult:
    applied: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"applied": self.applied, "skipped": self.skipped, "errors": list(self.errors)}


@dataclass(frozen=True)
class PendingApproval:
    """A checkin the profile is expected to submit for the current period."""

    badge_id: str
    target_role: Role
    target_id: str
    verifier_role: Role
    verifier_id: str
    seeker_id: str
    retainer_id: str
    cadence: Cadence
    period_key: str
    link_id: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "badge_id": self.badge_id,
            "target_role": self.target_role.value,
            "target_id": self.target_id,
            "verifier_role": self.verifier_role.value,
            "verifier_id": self.verifier_id,
            "seeker_id": self.seeker_id,
            "retainer_id": self.retainer_id,
            "cadence": self.cadence.value,
            "period_key": self.period_key,
            "link_id": self.link_id,
        }


def _apply_delta(progress: BadgeProgress, value: CheckinValue | None, direction: int) -> None:
    if value is None:
        return
    if value is CheckinValue.YES:
        progress.yes_count = max(0, progress.yes_count + direction)
    else:
        progress.no_count = max(0, progress.no_count + direction)


class CheckinLedger:
    """Checkin submission, snap grants and ledger lookups."""

    def __init__(
        self,
        repository: BadgeStoreRepository,
        catalog: BadgeCatalog,
        rules: RulesStore,
        selection: SelectionManager,
        links: LinkProvider,
        clock: Callable[[], datetime],
    ):
        self.repository = repository
        self.catalog = catalog
        self.rules = rules
        self.selection = selection
        self.links = links
        self.clock = clock

    # -------------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------------

    def _authorize(self, request: CheckinRequest) -> tuple[BadgeDefinition, Link]:
        definition = self.catalog.require(request.badge_id)
        if definition.owner_role is not request.target_role:
            raise BadgeRoleMismatchError(definition.id, definition.owner_role.value, request.target_role.value)
        if definition.verifier_role is not request.verifier_role:
            raise VerifierRoleMismatchError(definition.id, definition.verifier_role.value, request.verifier_role.value)

        link = self.links.get_link(request.seeker_id, request.retainer_id)
        if link is None or not link.is_active:
            raise LinkNotActiveError(request.seeker_id, request.retainer_id)
        if not is_working_together(link):
            raise WorkingTogetherRequiredError(request.seeker_id, request.retainer_id)

        parties = {Role.SEEKER: request.seeker_id, Role.RETAINER: request.retainer_id}
        if request.target_id != parties[request.target_role] or request.verifier_id != parties[request.verifier_role]:
            raise CheckinPartyMismatchError(
                request.seeker_id, request.retainer_id, request.target_id, request.verifier_id
            )
        return definition, link

    def apply_checkin(
        self,
        store: BadgeStore,
        request: CheckinRequest,
        rules_for: RulesResolver,
        now: datetime,
    ) -> CheckinResult:
        """Validate and upsert one checkin into an in-memory store."""
        definition, link = self._authorize(request)

        cadence = request.cadence or definition.effective_cadence
        period_key = request.period_key or period_key_for(cadence, now)
        key = (
            period_key,
            cadence,
            request.badge_id,
            request.target_role,
            request.target_id,
            request.verifier_role,
            request.verifier_id,
            request.seeker_id,
            request.retainer_id,
        )
        existing = store.find_checkin(key)
        progress = store.get_or_create_progress(request.target_role, request.target_id, request.badge_id, now)

        if existing is not None and existing.status is not CheckinStatus.ACTIVE:
            logger.info(f"Checkin {existing.id} is {existing.status.value}; resubmission ignored")
            return CheckinResult(checkin=existing, progress=progress, link=link)

        if existing is not None:
            # An admin override on an ACTIVE entry keeps deciding its effective value
            _apply_delta(progress, existing.effective_value, -1)
            existing.value = request.value
            existing.updated_at = now
            checkin = existing
            event = "checkin.updated"
        else:
            checkin = BadgeCheckin(
                id=make_id("checkin"),
                period_key=period_key,
                cadence=cadence,
                seeker_id=request.seeker_id,
                retainer_id=request.retainer_id,
                badge_id=request.badge_id,
                target_role=request.target_role,
                target_id=request.target_id,
                verifier_role=request.verifier_role,
                verifier_id=request.verifier_id,
                value=request.value,
                created_at=now,
                updated_at=now,
            )
            store.checkins.append(checkin)
            event = "checkin.created"
        _apply_delta(progress, checkin.effective_value, 1)

        computed = compute_level_from_counts(rules_for(request.badge_id), progress.yes_count, progress.no_count)
        if computed > progress.max_level:
            logger.info(
                f"{request.target_role.value} {request.target_id} reached level {computed} on {request.badge_id}"
            )
            progress.max_level = computed
        progress.updated_at = now

        ledger_logger.log_event(
            event,
            {
                "checkin_id": checkin.id,
                "badge_id": checkin.badge_id,
                "period_key": checkin.period_key,
                "target": f"{checkin.target_role.value}:{checkin.target_id}",
                "verifier": f"{checkin.verifier_role.value}:{checkin.verifier_id}",
                "value": checkin.value.value,
            },
        )
        return CheckinResult(checkin=checkin, progress=progress, link=link)

    def submit_checkin(self, request: CheckinRequest) -> CheckinResult:
        """Submit one checkin; every failure propagates to the caller.

        Raises:
            UnknownBadgeError, BadgeRoleMismatchError, VerifierRoleMismatchError:
                The badge cannot be checked in this way
            LinkNotActiveError, WorkingTogetherRequiredError:
                The pair is not actively working together
        """
        store = self.repository.load()
        result = self.apply_checkin(store, request, self.rules.rules_resolver(), self.clock())
        self.repository.save(store)
        return result

    def submit_checkins_batch(self, requests: Iterable[CheckinRequest | Mapping[str, Any]]) -> BatchResult:
        """Best-effort batch: invalid items are skipped, the rest still apply.

        The store is read once and written once. Items may be requests or
        import records; only trustledger errors are absorbed.
        """
        items = list(requests)
        result = BatchResult()
        if not items:
            return result

        with correlation_context() as cid:
            store = self.repository.load()
            rules_for = self.rules.rules_resolver()
            now = self.clock()
            for index, item in enumerate(items):
                try:
                    request = item if isinstance(item, CheckinRequest) else parse_checkin_record(item)
                    self.apply_checkin(store, request, rules_for, now)
                    result.applied += 1
                except TrustLedgerException as e:
                    result.skipped += 1
                    result.errors.append(f"item {index}: {e.message}")
                    logger.debug(f"Skipped batch item {index}: {e.message}")
            self.repository.save(store)
            logger.info(f"Checkin batch {cid[:8]}: applied={result.applied} skipped={result.skipped}")
        return result

    def grant_snap_badge(self, role: Role, owner_id: str, badge_id: str) -> BadgeProgress:
        """One-shot grant of a SNAP badge; repeat grants change nothing."""
        definition = self.catalog.get(badge_id)
        if definition is None or definition.kind is not BadgeKind.SNAP or definition.owner_role is not role:
            raise UnknownBadgeError(badge_id, message="Snap badge not found")

        store = self.repository.load()
        now = self.clock()
        progress = store.get_or_create_progress(role, owner_id, badge_id, now)
        if progress.max_level >= 1:
            return progress
        progress.yes_count = max(1, progress.yes_count)
        progress.max_level = max(progress.max_level, 1)
        progress.updated_at = now
        self.repository.save(store)
        ledger_logger.log_event("snap.granted", {"badge_id": badge_id, "owner": f"{role.value}:{owner_id}"})
        return progress

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get_current_period_key(self, cadence: Cadence = Cadence.WEEKLY) -> str:
        return period_key_for(cadence, self.clock())

    def get_checkin_for_period(
        self,
        *,
        period_key: str,
        badge_id: str,
        target_role: Role,
        target_id: str,
        verifier_role: Role,
        verifier_id: str,
        seeker_id: str,
        retainer_id: str,
        cadence: Cadence = Cadence.WEEKLY,
        store: BadgeStore | None = None,
    ) -> BadgeCheckin | None:
        if store is None:
            store = self.repository.load()
        return store.find_checkin(
            (period_key, cadence, badge_id, target_role, target_id, verifier_role, verifier_id, seeker_id, retainer_id)
        )

    def get_pending_approvals(self, role: Role, owner_id: str) -> list[PendingApproval]:
        """Checkins this profile owes its working partners for the current period."""
        if not owner_id:
            return []
        store = self.repository.load()
        now = self.clock()
        counterpart_role = role.counterpart
        pending: list[PendingApproval] = []

        for link in self.links.links_for(role, owner_id):
            if not link.is_active or not is_working_together(link):
                continue
            counterpart_id = link.retainer_id if role is Role.SEEKER else link.seeker_id
            candidates = (
                self.selection.background_ids_in(store, counterpart_role, counterpart_id)
                + self.selection.active_ids_in(store, counterpart_role, counterpart_id)
                + [d.id for d in self.catalog.checker(counterpart_role)]
            )
            for badge_id in dict.fromkeys(candidates):
                definition = self.catalog.get(badge_id)
                if definition is None or definition.verifier_role is not role:
                    continue
                cadence = definition.effective_cadence
                if cadence is Cadence.ONCE:
                    continue
                period_key = period_key_for(cadence, now)
                existing = self.get_checkin_for_period(
                    period_key=period_key,
                    cadence=cadence,
                    badge_id=badge_id,
                    target_role=counterpart_role,
                    target_id=counterpart_id,
                    verifier_role=role,
                    verifier_id=owner_id,
                    seeker_id=link.seeker_id,
                    retainer_id=link.retainer_id,
                    store=store,
                )
                if existing is not None:
                    continue
                pending.append(
                    PendingApproval(
                        badge_id=badge_id,
                        target_role=counterpart_role,
                        target_id=counterpart_id,
                        verifier_role=role,
                        verifier_id=owner_id,
                        seeker_id=link.seeker_id,
                        retainer_id=link.retainer_id,
                        cadence=cadence,
                        period_key=period_key,
                        link_id=link.id,
                    )
                )
        return pending
