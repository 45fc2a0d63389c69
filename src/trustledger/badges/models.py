# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Data models for the badge engine.

Persisted entities expose ``to_dict`` / ``from_dict``. The parsers accept both
the current snake_case layout and the camelCase layout of legacy documents;
they coerce recoverable fields to safe defaults and return ``None`` when a
record is missing its identity (such records are dropped on load).
"""

from __future__ import annotations

import math
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from ..core.exceptions import ValidationException

MAX_LEVEL = 5


class Role(StrEnum):
    """The two counterparty roles of the marketplace."""

    SEEKER = "SEEKER"
    RETAINER = "RETAINER"

    @property
    def counterpart(self) -> Role:
        return Role.RETAINER if self is Role.SEEKER else Role.SEEKER


class BadgeKind(StrEnum):
    BACKGROUND = "BACKGROUND"
    SELECTABLE = "SELECTABLE"
    SNAP = "SNAP"
    CHECKER = "CHECKER"


class Cadence(StrEnum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    ONCE = "ONCE"


class CheckinValue(StrEnum):
    YES = "YES"
    NO = "NO"


class CheckinStatus(StrEnum):
    ACTIVE = "ACTIVE"
    DISPUTED = "DISPUTED"
    OVERRIDDEN = "OVERRIDDEN"


# =============================================================================
# Parsing helpers
# =============================================================================


def parse_enum(enum_cls: type[StrEnum], raw: Any, field_name: str) -> Any:
    """Strictly parse caller input into an enum member.

    Raises:
        ValidationException: If ``raw`` is not a member value (case-insensitive)
    """
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(str(raw).strip().upper())
    except ValueError:
        valid = ", ".join(m.value for m in enum_cls)
        raise ValidationException(
            f"Invalid {field_name}: {raw!r} (expected one of {valid})", field=field_name, value=raw
        )


def coerce_role(raw: Any) -> Role:
    """Lenient role coercion for persisted data (anything unknown is a seeker)."""
    return Role.RETAINER if str(raw).upper() == "RETAINER" else Role.SEEKER


def coerce_cadence(raw: Any) -> Cadence:
    text = str(raw).upper() if raw is not None else ""
    if text == "MONTHLY":
        return Cadence.MONTHLY
    if text == "ONCE":
        return Cadence.ONCE
    return Cadence.WEEKLY


def coerce_int(raw: Any, fallback: int) -> int:
    """Floor a numeric-ish value, falling back when it is not finite."""
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(value):
        return fallback
    return math.floor(value)


def coerce_float(raw: Any) -> float | None:
    if isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def parse_datetime(raw: Any, fallback: datetime) -> datetime:
    if isinstance(raw, datetime):
        return ensure_utc(raw)
    if isinstance(raw, str) and raw:
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return fallback
        return ensure_utc(parsed)
    return fallback


def format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def unique_strings(values: Any) -> list[str]:
    """Stringify and deduplicate, keeping first-seen order."""
    if not isinstance(values, (list, tuple)):
        return []
    out: list[str] = []
    seen: set[str] = set()
    for value in values:
        text = str(value)
        if text in seen:
            continue
        seen.add(text)
        out.append(text)
    return out


def pick_field(raw: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in raw and raw[name] is not None:
            return raw[name]
    return None


def make_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4()}"


# =============================================================================
# Catalog and configuration models
# =============================================================================


DEFAULT_CADENCE_BY_KIND = {
    BadgeKind.SNAP: Cadence.ONCE,
    BadgeKind.CHECKER: Cadence.MONTHLY,
}


@dataclass(frozen=True)
class BadgeDefinition:
    """A catalog entry. Immutable."""

    id: str
    owner_role: Role
    kind: BadgeKind
    verifier_role: Role
    title: str = ""
    description: str = ""
    how_to_earn: str = ""
    prompt: str = ""
    cadence: Cadence | None = None
    weight: float | None = None

    @property
    def effective_cadence(self) -> Cadence:
        if self.cadence is not None:
            return self.cadence
        return DEFAULT_CADENCE_BY_KIND.get(self.kind, Cadence.WEEKLY)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "owner_role": self.owner_role.value,
            "kind": self.kind.value,
            "verifier_role": self.verifier_role.value,
            "cadence": self.effective_cadence.value,
            "weight": self.weight,
            "title": self.title,
            "description": self.description,
            "how_to_earn": self.how_to_earn,
            "prompt": self.prompt,
        }


@dataclass(frozen=True)
class LevelRule:
    """Threshold for one level: enough samples and a high enough YES percent."""

    min_samples: int
    min_percent: float

    def to_dict(self) -> dict[str, Any]:
        return {"min_samples": self.min_samples, "min_percent": self.min_percent}

    @classmethod
    def from_dict(cls, raw: Any) -> LevelRule | None:
        """Parse and clamp a rule; None when a field is not numeric."""
        if isinstance(raw, LevelRule):
            raw = raw.to_dict()
        if not isinstance(raw, Mapping):
            return None
        samples = coerce_float(pick_field(raw, "min_samples", "minSamples"))
        percent = coerce_float(pick_field(raw, "min_percent", "minPercent"))
        if samples is None or percent is None:
            return None
        return cls(
            min_samples=max(0, math.floor(samples)),
            min_percent=max(0.0, min(100.0, percent)),
        )


# =============================================================================
# Ledger models
# =============================================================================


@dataclass
class BadgeSelection:
    """Which badges a profile is currently judged on."""

    owner_role: Role
    owner_id: str
    active_badge_ids: list[str] = field(default_factory=list)
    background_badge_ids: list[str] = field(default_factory=list)
    background_locked_until: datetime | None = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner_role": self.owner_role.value,
            "owner_id": self.owner_id,
            "active_badge_ids": list(self.active_badge_ids),
            "background_badge_ids": list(self.background_badge_ids),
            "background_locked_until": format_datetime(self.background_locked_until),
            "updated_at": format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, raw: Any, now: datetime) -> BadgeSelection | None:
        if not isinstance(raw, Mapping):
            return None
        owner_role = pick_field(raw, "owner_role", "ownerRole")
        owner_id = pick_field(raw, "owner_id", "ownerId")
        if not owner_role or not owner_id:
            return None
        locked_raw = pick_field(raw, "background_locked_until", "backgroundLockedUntil")
        locked = parse_datetime(locked_raw, now) if isinstance(locked_raw, str) else None
        return cls(
            owner_role=coerce_role(owner_role),
            owner_id=str(owner_id),
            active_badge_ids=unique_strings(pick_field(raw, "active_badge_ids", "activeBadgeIds")),
            background_badge_ids=unique_strings(pick_field(raw, "background_badge_ids", "backgroundBadgeIds")),
            background_locked_until=locked,
            updated_at=parse_datetime(pick_field(raw, "updated_at", "updatedAt"), now),
        )


@dataclass
class BadgeProgress:
    """Derived yes/no tally and achieved level for one (owner, badge)."""

    badge_id: str
    owner_role: Role
    owner_id: str
    yes_count: int = 0
    no_count: int = 0
    max_level: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def total(self) -> int:
        return self.yes_count + self.no_count

    @property
    def key(self) -> tuple[Role, str, str]:
        return (self.owner_role, self.owner_id, self.badge_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "badge_id": self.badge_id,
            "owner_role": self.owner_role.value,
            "owner_id": self.owner_id,
            "yes_count": self.yes_count,
            "no_count": self.no_count,
            "max_level": self.max_level,
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, raw: Any, now: datetime) -> BadgeProgress | None:
        if not isinstance(raw, Mapping):
            return None
        badge_id = pick_field(raw, "badge_id", "badgeId")
        owner_role = pick_field(raw, "owner_role", "ownerRole")
        owner_id = pick_field(raw, "owner_id", "ownerId")
        if not badge_id or not owner_role or not owner_id:
            return None
        # Oldest layouts kept a single "points" counter instead of yes/no
        legacy_points = raw.get("points")
        yes_fallback = max(0, coerce_int(legacy_points, 0)) if legacy_points is not None else 0
        return cls(
            badge_id=str(badge_id),
            owner_role=coerce_role(owner_role),
            owner_id=str(owner_id),
            yes_count=max(0, coerce_int(pick_field(raw, "yes_count", "yesCount"), yes_fallback)),
            no_count=max(0, coerce_int(pick_field(raw, "no_count", "noCount"), 0)),
            max_level=max(0, min(MAX_LEVEL, coerce_int(pick_field(raw, "max_level", "maxLevel"), 0))),
            created_at=parse_datetime(pick_field(raw, "created_at", "createdAt"), now),
            updated_at=parse_datetime(pick_field(raw, "updated_at", "updatedAt"), now),
        )


LedgerKey = tuple[str, Cadence, str, Role, str, Role, str, str, str]


@dataclass
class BadgeCheckin:
    """One verifier-submitted YES/NO confirmation for one badge and period."""

    id: str
    period_key: str
    cadence: Cadence
    seeker_id: str
    retainer_id: str
    badge_id: str
    target_role: Role
    target_id: str
    verifier_role: Role
    verifier_id: str
    value: CheckinValue
    status: CheckinStatus = CheckinStatus.ACTIVE
    override_value: CheckinValue | None = None
    override_note: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def effective_value(self) -> CheckinValue | None:
        """The value that counts toward progress; None while disputed."""
        if self.status is CheckinStatus.DISPUTED:
            return None
        return self.override_value or self.value

    @property
    def ledger_key(self) -> LedgerKey:
        return (
            self.period_key,
            self.cadence,
            self.badge_id,
            self.target_role,
            self.target_id,
            self.verifier_role,
            self.verifier_id,
            self.seeker_id,
            self.retainer_id,
        )

    def counterpart_id(self) -> str:
        """The relationship partner of the evaluated profile."""
        return self.retainer_id if self.target_role is Role.SEEKER else self.seeker_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "period_key": self.period_key,
            "cadence": self.cadence.value,
            "seeker_id": self.seeker_id,
            "retainer_id": self.retainer_id,
            "badge_id": self.badge_id,
            "target_role": self.target_role.value,
            "target_id": self.target_id,
            "verifier_role": self.verifier_role.value,
            "verifier_id": self.verifier_id,
            "value": self.value.value,
            "status": self.status.value,
            "override_value": self.override_value.value if self.override_value else None,
            "override_note": self.override_note,
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, raw: Any, now: datetime) -> BadgeCheckin | None:
        if not isinstance(raw, Mapping):
            return None
        period_key = pick_field(raw, "period_key", "periodKey", "weekKey")
        required = [
            period_key,
            pick_field(raw, "seeker_id", "seekerId"),
            pick_field(raw, "retainer_id", "retainerId"),
            pick_field(raw, "badge_id", "badgeId"),
            pick_field(raw, "target_role", "targetRole"),
            pick_field(raw, "target_id", "targetId"),
            pick_field(raw, "verifier_role", "verifierRole"),
            pick_field(raw, "verifier_id", "verifierId"),
        ]
        if not all(required):
            return None
        status_raw = str(raw.get("status") or "").upper()
        status = CheckinStatus(status_raw) if status_raw in CheckinStatus.__members__ else CheckinStatus.ACTIVE
        override_raw = str(pick_field(raw, "override_value", "overrideValue") or "").upper()
        override_note = pick_field(raw, "override_note", "overrideNote")
        return cls(
            id=str(raw.get("id") or make_id("checkin")),
            period_key=str(period_key),
            cadence=coerce_cadence(raw.get("cadence")),
            seeker_id=str(required[1]),
            retainer_id=str(required[2]),
            badge_id=str(required[3]),
            target_role=coerce_role(required[4]),
            target_id=str(required[5]),
            verifier_role=coerce_role(required[6]),
            verifier_id=str(required[7]),
            value=CheckinValue.NO if str(raw.get("value")).upper() == "NO" else CheckinValue.YES,
            status=status,
            override_value=CheckinValue(override_raw) if override_raw in CheckinValue.__members__ else None,
            override_note=override_note if isinstance(override_note, str) else None,
            created_at=parse_datetime(pick_field(raw, "created_at", "createdAt"), now),
            updated_at=parse_datetime(pick_field(raw, "updated_at", "updatedAt"), now),
        )


@dataclass
class CheckinRequest:
    """Arguments of a checkin submission.

    Enum-valued fields accept strings; invalid values raise
    ``ValidationException`` at construction.
    """

    badge_id: str
    value: CheckinValue
    seeker_id: str
    retainer_id: str
    target_role: Role
    target_id: str
    verifier_role: Role
    verifier_id: str
    period_key: str | None = None
    cadence: Cadence | None = None

    def __post_init__(self) -> None:
        self.value = parse_enum(CheckinValue, self.value, "value")
        self.target_role = parse_enum(Role, self.target_role, "target_role")
        self.verifier_role = parse_enum(Role, self.verifier_role, "verifier_role")
        if self.cadence is not None:
            self.cadence = parse_enum(Cadence, self.cadence, "cadence")
        for name in ("badge_id", "seeker_id", "retainer_id", "target_id", "verifier_id"):
            if not getattr(self, name):
                raise ValidationException(f"{name} is required", field=name)

