"""Global test fixtures for the trustledger test suite."""

from __future__ import annotations

import os
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from trustledger.badges.engine import BadgeEngine
from trustledger.badges.models import CheckinRequest
from trustledger.badges.ports import Link, StaticLinkProvider, StaticPenalties
from trustledger.core.config import TrustLedgerSettings, clear_settings_cache
from trustledger.storage.backend import MemoryBackend

# Wednesday of ISO week 2026-W10
FIXED_NOW = datetime(2026, 3, 4, 12, 0, tzinfo=UTC)


class FakeClock:
    """Controllable wall clock."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, moment: datetime) -> None:
        self.now = moment


# ============================================================================
# Environment
# ============================================================================


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove TRUSTLEDGER_ environment variables and reset cached settings."""
    for key in list(os.environ.keys()):
        if key.startswith("TRUSTLEDGER_"):
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings() -> TrustLedgerSettings:
    return TrustLedgerSettings(_env_file=None)


# ============================================================================
# Engine collaborators
# ============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def links() -> StaticLinkProvider:
    """s-1 works with r-1 and r-2; s-2 has not opted in; s-3's link is closed."""
    return StaticLinkProvider(
        [
            Link("link-1", "s-1", "r-1", "ACTIVE", True, True),
            Link("link-2", "s-1", "r-2", "ACTIVE", True, True),
            Link("link-3", "s-2", "r-1", "ACTIVE", True, False),
            Link("link-4", "s-3", "r-1", "ENDED", True, True),
        ]
    )


@pytest.fixture
def penalties() -> StaticPenalties:
    return StaticPenalties()


@pytest.fixture
def changes() -> list[str]:
    """Keys reported through the engine's change callback."""
    return []


@pytest.fixture
def engine(backend, links, penalties, clock, settings, changes) -> BadgeEngine:
    return BadgeEngine(
        backend,
        links,
        penalties=penalties,
        clock=clock,
        settings=settings,
        on_change=changes.append,
    )


@pytest.fixture
def make_request() -> Callable[..., CheckinRequest]:
    """Build a retainer-verified checkin for seeker s-1 (overridable per field)."""

    def _make(**overrides: Any) -> CheckinRequest:
        fields: dict[str, Any] = {
            "badge_id": "seeker_no_dropped_routes",
            "value": "YES",
            "seeker_id": "s-1",
            "retainer_id": "r-1",
            "target_role": "SEEKER",
            "target_id": "s-1",
            "verifier_role": "RETAINER",
            "verifier_id": "r-1",
        }
        fields.update(overrides)
        if "retainer_id" in overrides and "verifier_id" not in overrides and fields["verifier_role"] == "RETAINER":
            fields["verifier_id"] = overrides["retainer_id"]
        return CheckinRequest(**fields)

    return _make
