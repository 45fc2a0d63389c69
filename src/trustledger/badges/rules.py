# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Level rules store.

Each role has five default thresholds (one per level); individual badges may
override them. Rule lists are always exactly five entries long: malformed
input to a setter leaves the previous valid list in place.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from ..storage.backend import StorageBackend
from .catalog import BadgeCatalog
from .models import MAX_LEVEL, LevelRule, Role, format_datetime, parse_datetime, pick_field

logger = logging.getLogger(__name__)

RULES_KEY = "badge_rules"
RULES_SCHEMA_VERSION = 1

DEFAULT_ROLE_RULES: tuple[LevelRule, ...] = (
    LevelRule(4, 80),
    LevelRule(12, 85),
    LevelRule(24, 90),
    LevelRule(52, 92),
    LevelRule(78, 95),
)

# Monthly checker badges accumulate samples slowly
CHECKER_RULES: tuple[LevelRule, ...] = (
    LevelRule(2, 85),
    LevelRule(4, 85),
    LevelRule(6, 85),
    LevelRule(9, 85),
    LevelRule(12, 85),
)

DEFAULT_BADGE_OVERRIDES: dict[str, tuple[LevelRule, ...]] = {
    "seeker_badge_checker": CHECKER_RULES,
    "retainer_badge_checker": CHECKER_RULES,
}


def parse_rules(raw: Any) -> list[LevelRule] | None:
    """Parse a five-entry rule list; None when malformed.

    Entries past the fifth are ignored. Numbers are clamped (samples >= 0,
    percent within [0, 100]); a non-numeric field rejects the whole list.
    """
    if not isinstance(raw, (list, tuple)):
        return None
    parsed = [LevelRule.from_dict(item) for item in raw[:MAX_LEVEL]]
    if len(parsed) != MAX_LEVEL:
        return None
    rules: list[LevelRule] = []
    for rule in parsed:
        if rule is None:
            return None
        rules.append(rule)
    return rules


def normalize_rules(raw: Any, fallback: Sequence[LevelRule]) -> list[LevelRule]:
    parsed = parse_rules(raw)
    return parsed if parsed is not None else list(fallback)


def validate_rules(rules: Sequence[LevelRule]) -> list[str]:
    """Return warnings for rule lists that are not non-decreasing.

    Levels are matched independently, so a list whose thresholds go down can
    award a higher level without the lower one ever being satisfied.
    """
    warnings: list[str] = []
    for level in range(2, len(rules) + 1):
        prev, curr = rules[level - 2], rules[level - 1]
        if curr.min_samples < prev.min_samples:
            warnings.append(
                f"Level {level} requires fewer samples ({curr.min_samples}) than level {level - 1} ({prev.min_samples})"
            )
        if curr.min_percent < prev.min_percent:
            warnings.append(
                f"Level {level} requires a lower percent ({curr.min_percent:g}) "
                f"than level {level - 1} ({prev.min_percent:g})"
            )
    return warnings


@dataclass
class RulesSnapshot:
    """Role defaults plus per-badge overrides."""

    role_defaults: dict[Role, list[LevelRule]]
    badge_overrides: dict[str, list[LevelRule]] = field(default_factory=dict)
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def defaults(cls, now: datetime) -> RulesSnapshot:
        return cls(
            role_defaults={role: list(DEFAULT_ROLE_RULES) for role in Role},
            badge_overrides={badge_id: list(rules) for badge_id, rules in DEFAULT_BADGE_OVERRIDES.items()},
            updated_at=now,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "role_defaults": {role.value: [r.to_dict() for r in rules] for role, rules in self.role_defaults.items()},
            "badge_overrides": {
                badge_id: [r.to_dict() for r in rules] for badge_id, rules in self.badge_overrides.items()
            },
            "updated_at": format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, raw: Any, now: datetime) -> RulesSnapshot:
        """Normalize a stored snapshot; anything unusable becomes a default."""
        fallback = cls.defaults(now)
        if not isinstance(raw, Mapping):
            return fallback

        defaults_raw = pick_field(raw, "role_defaults", "roleDefaults")
        if not isinstance(defaults_raw, Mapping):
            defaults_raw = {}
        role_defaults = {
            role: normalize_rules(defaults_raw.get(role.value), fallback.role_defaults[role]) for role in Role
        }

        overrides: dict[str, list[LevelRule]] = {}
        overrides_raw = pick_field(raw, "badge_overrides", "badgeOverrides")
        if isinstance(overrides_raw, Mapping):
            for badge_id, rules in overrides_raw.items():
                overrides[str(badge_id)] = normalize_rules(rules, role_defaults[Role.SEEKER])
        else:
            overrides = fallback.badge_overrides

        return cls(
            role_defaults=role_defaults,
            badge_overrides=overrides,
            updated_at=parse_datetime(pick_field(raw, "updated_at", "updatedAt"), now),
        )


class RulesStore:
    """Persisted level rules."""

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

    def snapshot(self) -> RulesSnapshot:
        return RulesSnapshot.from_dict(self.backend.read_data(RULES_KEY), self.clock())

    def _save(self, snapshot: RulesSnapshot) -> None:
        snapshot.updated_at = self.clock()
        self.backend.write(RULES_KEY, RULES_SCHEMA_VERSION, snapshot.to_dict())
        if self.on_change is not None:
            self.on_change(RULES_KEY)

    def get_role_rules(self, role: Role) -> list[LevelRule]:
        return list(self.snapshot().role_defaults[role])

    def set_role_rules(self, role: Role, rules: Any) -> list[LevelRule]:
        """Replace a role's default rules; malformed input keeps the current ones."""
        snapshot = self.snapshot()
        parsed = self._parse_or_warn(f"role {role.value}", rules)
        if parsed is not None:
            snapshot.role_defaults[role] = parsed
        self._save(snapshot)
        logger.info(f"Updated default level rules for {role.value}")
        return list(snapshot.role_defaults[role])

    def get_rules_for_badge(self, badge_id: str) -> list[LevelRule]:
        """Override for the badge, else its owning role's defaults.

        Unknown badges resolve to the seeker defaults.
        """
        return self.rules_resolver()(badge_id)

    def rules_resolver(self) -> Callable[[str], list[LevelRule]]:
        """Resolve rules for many badges against a single snapshot read."""
        snapshot = self.snapshot()

        def resolve(badge_id: str) -> list[LevelRule]:
            definition = self.catalog.get(badge_id)
            if definition is None:
                return list(snapshot.role_defaults[Role.SEEKER])
            override = snapshot.badge_overrides.get(badge_id)
            if override is not None:
                return list(override)
            return list(snapshot.role_defaults[definition.owner_role])

        return resolve

    def set_badge_rules(self, badge_id: str, rules: Any | None) -> list[LevelRule] | None:
        """Set or (with None) clear a badge's override.

        Returns the override in effect afterwards.
        """
        snapshot = self.snapshot()
        if rules is None:
            snapshot.badge_overrides.pop(badge_id, None)
            self._save(snapshot)
            logger.info(f"Cleared level rule override for {badge_id}")
            return None

        parsed = self._parse_or_warn(f"badge {badge_id}", rules)
        if parsed is not None:
            snapshot.badge_overrides[badge_id] = parsed
        self._save(snapshot)
        logger.info(f"Updated level rule override for {badge_id}")
        current = snapshot.badge_overrides.get(badge_id)
        return list(current) if current is not None else None

    def _parse_or_warn(self, scope: str, rules: Any) -> list[LevelRule] | None:
        parsed = parse_rules(rules)
        if parsed is None:
            logger.warning(f"Ignoring malformed level rules for {scope}; keeping the previous rules")
            return None
        for warning in validate_rules(parsed):
            logger.warning(f"Level rules for {scope}: {warning}")
        return parsed
