# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Selection manager.

A profile is judged on up to four SELECTABLE ("growth") badges, which it may
swap freely, and four BACKGROUND ("expectation") badges, which lock for a
year after each change so baseline metrics cannot be gamed by swapping.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from .catalog import MAX_ACTIVE_BADGES, MAX_BACKGROUND_BADGES, BadgeCatalog
from .models import BadgeSelection, Role, unique_strings
from .periods import add_months
from .store import BadgeStore, BadgeStoreRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackgroundLockStatus:
    locked_until: datetime | None
    is_locked: bool


def fill_with_fallback(primary: Sequence[str], fallback: Iterable[str], limit: int) -> list[str]:
    """Top ``primary`` up to ``limit`` entries from ``fallback``, skipping repeats."""
    out = list(primary[:limit])
    for item in fallback:
        if len(out) >= limit:
            break
        if item not in out:
            out.append(item)
    return out


class SelectionManager:
    """Reads and mutates per-profile badge selections."""

    def __init__(
        self,
        repository: BadgeStoreRepository,
        catalog: BadgeCatalog,
        clock: Callable[[], datetime],
        lock_months: int = 12,
    ):
        self.repository = repository
        self.catalog = catalog
        self.clock = clock
        self.lock_months = lock_months

    # -------------------------------------------------------------------------
    # Store-level helpers (shared with the trust calculator and ledger)
    # -------------------------------------------------------------------------

    def active_ids_in(self, store: BadgeStore, role: Role, owner_id: str) -> list[str]:
        if not owner_id:
            return []
        selection = store.find_selection(role, owner_id)
        if selection is None:
            return []
        valid = {d.id for d in self.catalog.selectable(role)}
        return [badge_id for badge_id in selection.active_badge_ids if badge_id in valid][:MAX_ACTIVE_BADGES]

    def background_ids_in(self, store: BadgeStore, role: Role, owner_id: str) -> list[str]:
        fallback = self.catalog.default_background_ids(role)
        if not owner_id:
            return fallback
        selection = store.find_selection(role, owner_id)
        if selection is None:
            return fallback
        valid = {d.id for d in self.catalog.background(role)}
        cleaned = [badge_id for badge_id in selection.background_badge_ids if badge_id in valid][:MAX_BACKGROUND_BADGES]
        return cleaned or fallback

    # -------------------------------------------------------------------------
    # Growth (selectable) badges
    # -------------------------------------------------------------------------

    def get_active_badges(self, role: Role, owner_id: str) -> list[str]:
        if not owner_id:
            return []
        return self.active_ids_in(self.repository.load(), role, owner_id)

    def set_active_badges(self, role: Role, owner_id: str, badge_ids: Iterable[str]) -> BadgeSelection:
        """Replace the growth badges; the background selection is untouched."""
        store = self.repository.load()
        valid = {d.id for d in self.catalog.selectable(role)}
        cleaned = [badge_id for badge_id in unique_strings(list(badge_ids or [])) if badge_id in valid]
        cleaned = cleaned[:MAX_ACTIVE_BADGES]

        existing = store.find_selection(role, owner_id)
        background = (
            list(existing.background_badge_ids)
            if existing is not None and existing.background_badge_ids
            else self.catalog.default_background_ids(role)
        )
        selection = BadgeSelection(
            owner_role=role,
            owner_id=owner_id,
            active_badge_ids=cleaned,
            background_badge_ids=background,
            background_locked_until=existing.background_locked_until if existing is not None else None,
            updated_at=self.clock(),
        )
        store.put_selection(selection)
        self.repository.save(store)
        logger.info(f"Set {len(cleaned)} active badge(s) for {role.value} {owner_id}")
        return selection

    # -------------------------------------------------------------------------
    # Expectation (background) badges
    # -------------------------------------------------------------------------

    def get_selected_background_badges(self, role: Role, owner_id: str) -> list[str]:
        if not owner_id:
            return self.catalog.default_background_ids(role)
        return self.background_ids_in(self.repository.load(), role, owner_id)

    def get_background_lock_status(self, role: Role, owner_id: str) -> BackgroundLockStatus:
        if not owner_id:
            return BackgroundLockStatus(locked_until=None, is_locked=False)
        selection = self.repository.load().find_selection(role, owner_id)
        locked_until = selection.background_locked_until if selection is not None else None
        return BackgroundLockStatus(
            locked_until=locked_until,
            is_locked=locked_until is not None and locked_until > self.clock(),
        )

    def set_background_badges(
        self,
        role: Role,
        owner_id: str,
        badge_ids: Iterable[str],
        *,
        allow_override: bool = False,
    ) -> BadgeSelection:
        """Replace the expectation badges and restart the lock.

        While a lock is in force (and ``allow_override`` is not set) this is a
        no-op returning the current selection. Omitted slots are refilled from
        the still-valid part of the previous selection, then the catalog
        defaults.
        """
        store = self.repository.load()
        now = self.clock()
        existing = store.find_selection(role, owner_id)
        locked_until = existing.background_locked_until if existing is not None else None
        if locked_until is not None and locked_until > now and not allow_override:
            logger.info(f"Background badges for {role.value} {owner_id} are locked until {locked_until.isoformat()}")
            if existing is not None:
                return existing
            return BadgeSelection(
                owner_role=role,
                owner_id=owner_id,
                background_badge_ids=self.background_ids_in(store, role, owner_id),
                background_locked_until=locked_until,
                updated_at=now,
            )

        valid = {d.id for d in self.catalog.background(role)}
        cleaned = [badge_id for badge_id in unique_strings(list(badge_ids or [])) if badge_id in valid]
        previous = existing.background_badge_ids if existing is not None else []
        fallback = [badge_id for badge_id in previous if badge_id in valid]
        fallback += self.catalog.default_background_ids(role)
        selection = BadgeSelection(
            owner_role=role,
            owner_id=owner_id,
            active_badge_ids=list(existing.active_badge_ids) if existing is not None else [],
            background_badge_ids=fill_with_fallback(cleaned, fallback, MAX_BACKGROUND_BADGES),
            background_locked_until=add_months(now, self.lock_months),
            updated_at=now,
        )
        store.put_selection(selection)
        self.repository.save(store)
        if locked_until is not None and locked_until > now:
            logger.warning(f"Background lock overridden for {role.value} {owner_id}")
        logger.info(f"Background badges for {role.value} {owner_id} locked until {selection.background_locked_until}")
        return selection

    def get_selection(self, role: Role, owner_id: str) -> BadgeSelection | None:
        if not owner_id:
            return None
        return self.repository.load().find_selection(role, owner_id)
