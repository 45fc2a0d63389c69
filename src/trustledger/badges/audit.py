# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Audit and override of ledger entries.

Any status may move to any other (ACTIVE is the reset). After every change
the affected (target, badge) progress is rebuilt from the full ledger, which
lowers counts when an entry is disputed but never lowers ``max_level``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..core.exceptions import NotFoundError
from ..core.logging import ledger_logger
from .models import BadgeCheckin, CheckinStatus, CheckinValue, Role
from .progress import recompute_progress_for_badge
from .rules import RulesStore
from .store import BadgeStoreRepository

logger = logging.getLogger(__name__)


class AuditController:
    """Admin actions over checkins."""

    def __init__(
        self,
        repository: BadgeStoreRepository,
        rules: RulesStore,
        clock: Callable[[], datetime],
    ):
        self.repository = repository
        self.rules = rules
        self.clock = clock

    def update_checkin_status(
        self,
        checkin_id: str,
        status: CheckinStatus,
        override_value: CheckinValue | None = None,
        override_note: str | None = None,
    ) -> BadgeCheckin:
        """Set status and override fields, then rebuild the badge's progress.

        Override fields are replaced, not merged: omitting them clears any
        previous override.

        Raises:
            NotFoundError: If no checkin has this id
        """
        store = self.repository.load()
        checkin = store.find_checkin_by_id(checkin_id)
        if checkin is None:
            raise NotFoundError("Checkin", checkin_id)

        now = self.clock()
        previous = checkin.status
        checkin.status = status
        checkin.override_value = override_value
        checkin.override_note = override_note
        checkin.updated_at = now

        progress = recompute_progress_for_badge(
            store,
            checkin.target_role,
            checkin.target_id,
            checkin.badge_id,
            self.rules.get_rules_for_badge(checkin.badge_id),
            now,
        )
        self.repository.save(store)

        ledger_logger.log_event(
            "checkin.audited",
            {
                "checkin_id": checkin.id,
                "badge_id": checkin.badge_id,
                "from_status": previous.value,
                "to_status": status.value,
                "override_value": override_value.value if override_value else None,
                "override_note": override_note,
                "yes_count": progress.yes_count,
                "no_count": progress.no_count,
                "max_level": progress.max_level,
            },
        )
        return checkin

    def get_checkins(
        self,
        target_role: Role | None = None,
        target_id: str | None = None,
        badge_id: str | None = None,
        status: CheckinStatus | None = None,
    ) -> list[BadgeCheckin]:
        """Ledger entries, most recently updated first."""
        checkins = [
            c
            for c in self.repository.load().checkins
            if (target_role is None or c.target_role is target_role)
            and (target_id is None or c.target_id == target_id)
            and (badge_id is None or c.badge_id == badge_id)
            and (status is None or c.status is status)
        ]
        checkins.sort(key=lambda c: c.updated_at, reverse=True)
        return checkins
