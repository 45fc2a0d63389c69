# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Collaborator ports consumed by the badge engine.

The relationship ("link") state machine and the bad-exit penalty ledger live
outside the engine. Hosts pass implementations of these protocols to
:class:`~trustledger.badges.engine.BadgeEngine`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from ..core.exceptions import ValidationException
from .models import Role, pick_field

logger = logging.getLogger(__name__)

LINK_STATUS_ACTIVE = "ACTIVE"

Clock = Callable[[], datetime]


def parse_flag(raw: Any, field_name: str) -> bool:
    """Read a boolean flag; only true booleans and "true"/"false" strings are accepted."""
    if raw is None:
        return False
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().lower() in ("true", "false"):
        return raw.strip().lower() == "true"
    raise ValidationException(f"Invalid {field_name}: {raw!r} (expected true or false)", field=field_name, value=raw)


@dataclass(frozen=True)
class Link:
    """The relationship record between one seeker and one retainer."""

    id: str
    seeker_id: str
    retainer_id: str
    status: str = LINK_STATUS_ACTIVE
    working_together_by_seeker: bool = False
    working_together_by_retainer: bool = False

    @property
    def is_active(self) -> bool:
        return self.status.upper() == LINK_STATUS_ACTIVE

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "seeker_id": self.seeker_id,
            "retainer_id": self.retainer_id,
            "status": self.status,
            "working_together_by_seeker": self.working_together_by_seeker,
            "working_together_by_retainer": self.working_together_by_retainer,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Link:
        if not isinstance(raw, Mapping):
            raise ValidationException("Link must be an object", value=raw)
        seeker_id = pick_field(raw, "seeker_id", "seekerId")
        retainer_id = pick_field(raw, "retainer_id", "retainerId")
        if not seeker_id or not retainer_id:
            raise ValidationException("Link requires seeker_id and retainer_id", field="seeker_id")
        return cls(
            id=str(raw.get("id") or f"link_{seeker_id}_{retainer_id}"),
            seeker_id=str(seeker_id),
            retainer_id=str(retainer_id),
            status=str(raw.get("status") or LINK_STATUS_ACTIVE).upper(),
            working_together_by_seeker=parse_flag(
                pick_field(raw, "working_together_by_seeker", "workingTogetherBySeeker"), "working_together_by_seeker"
            ),
            working_together_by_retainer=parse_flag(
                pick_field(raw, "working_together_by_retainer", "workingTogetherByRetainer"),
                "working_together_by_retainer",
            ),
        )


def is_working_together(link: Link | None) -> bool:
    """True when both parties have enabled working together."""
    if link is None:
        return False
    return link.working_together_by_seeker and link.working_together_by_retainer


@runtime_checkable
class LinkProvider(Protocol):
    """Lookup of seeker/retainer relationships."""

    def get_link(self, seeker_id: str, retainer_id: str) -> Link | None: ...

    def links_for(self, role: Role, owner_id: str) -> list[Link]: ...


@runtime_checkable
class PenaltyProvider(Protocol):
    """Source of active bad-exit penalties (seekers only)."""

    def get_active_bad_exit_penalty_percent(self, seeker_id: str) -> float: ...


class StaticLinkProvider:
    """In-memory :class:`LinkProvider` backed by a fixed set of links."""

    def __init__(self, links: Iterable[Link] = ()):
        self._links: dict[tuple[str, str], Link] = {}
        for link in links:
            self.add(link)

    def add(self, link: Link) -> None:
        self._links[(link.seeker_id, link.retainer_id)] = link

    def get_link(self, seeker_id: str, retainer_id: str) -> Link | None:
        return self._links.get((seeker_id, retainer_id))

    def links_for(self, role: Role, owner_id: str) -> list[Link]:
        if role is Role.SEEKER:
            return [link for link in self._links.values() if link.seeker_id == owner_id]
        return [link for link in self._links.values() if link.retainer_id == owner_id]

    def __len__(self) -> int:
        return len(self._links)

    @classmethod
    def from_file(cls, path: str | Path) -> StaticLinkProvider:
        """Load links from a JSON array (missing file means no links)."""
        path = Path(path)
        if not path.exists():
            logger.info(f"No links file at {path}; every checkin will fail the link check")
            return cls()
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValidationException(f"Links file is not valid JSON: {e}", field="file", value=str(path)) from e
        if not isinstance(raw, list):
            raise ValidationException(f"Links file must contain a JSON array: {path}")
        return cls(Link.from_dict(item) for item in raw)


class NoPenalties:
    """:class:`PenaltyProvider` that never penalizes anyone."""

    def get_active_bad_exit_penalty_percent(self, seeker_id: str) -> float:
        return 0.0


class StaticPenalties:
    """:class:`PenaltyProvider` backed by a seeker id to percent mapping."""

    def __init__(self, penalties: Mapping[str, float] | None = None):
        self._penalties = dict(penalties or {})

    def get_active_bad_exit_penalty_percent(self, seeker_id: str) -> float:
        return max(0.0, float(self._penalties.get(seeker_id, 0.0)))
