"""Tests for trustledger.core.exceptions module."""

from __future__ import annotations

import pytest

from trustledger.core.exceptions import (
    BadgeConfigurationError,
    BadgeRoleMismatchError,
    CheckinPartyMismatchError,
    ConfigException,
    LinkNotActiveError,
    NotFoundError,
    PreconditionFailedError,
    StorageError,
    TrustLedgerException,
    UnknownBadgeError,
    ValidationException,
    VerifierRoleMismatchError,
    WorkingTogetherRequiredError,
)

# ============================================================================
# TrustLedgerException Tests
# ============================================================================


class TestTrustLedgerException:
    """Tests for base TrustLedgerException."""

    def test_create_with_message(self):
        """Create exception with just message."""
        exc = TrustLedgerException("Something went wrong")
        assert str(exc) == "Something went wrong"
        assert exc.message == "Something went wrong"
        assert exc.details == {}

    def test_to_dict(self):
        """to_dict should serialize correctly."""
        exc = TrustLedgerException("Test error", details={"info": "extra"})
        d = exc.to_dict()
        assert d["error"] == "TrustLedgerException"
        assert d["message"] == "Test error"
        assert d["details"] == {"info": "extra"}

    def test_to_dict_class_name(self):
        """to_dict should use actual class name."""
        assert StorageError("disk full").to_dict()["error"] == "StorageError"


class TestInfrastructureExceptions:
    """Tests for validation, config, not-found and storage errors."""

    def test_validation_details(self):
        exc = ValidationException("Invalid role", field="role", value="ADMIN")
        assert exc.field == "role"
        assert exc.details == {"field": "role", "value": "ADMIN"}

    def test_validation_without_field(self):
        assert ValidationException("bad").details == {}

    def test_config_missing_vars(self):
        exc = ConfigException("Missing", missing_vars=["A", "B"])
        assert exc.missing_vars == ["A", "B"]
        assert exc.details["missing_vars"] == ["A", "B"]

    def test_not_found_default_message(self):
        exc = NotFoundError("Checkin", "checkin_123")
        assert exc.message == "Checkin not found: checkin_123"
        assert exc.details == {"resource_type": "Checkin", "resource_id": "checkin_123"}

    def test_storage_key(self):
        exc = StorageError("Cannot write", key="badges_v2")
        assert exc.key == "badges_v2"
        assert exc.details == {"key": "badges_v2"}


class TestBadgeErrors:
    """Configuration errors and precondition failures."""

    def test_unknown_badge(self):
        exc = UnknownBadgeError("nope")
        assert isinstance(exc, BadgeConfigurationError)
        assert exc.badge_id == "nope"
        assert exc.message == "Unknown badge"
        assert exc.details == {"badge_id": "nope"}

    def test_role_mismatch_message(self):
        exc = BadgeRoleMismatchError("b", "SEEKER", "RETAINER")
        assert exc.message == "Badge does not match target role"
        assert exc.details == {"badge_id": "b", "owner_role": "SEEKER", "target_role": "RETAINER"}

    def test_verifier_mismatch_message(self):
        exc = VerifierRoleMismatchError("b", "RETAINER", "SEEKER")
        assert exc.message == "You cannot verify this badge"
        assert isinstance(exc, BadgeConfigurationError)

    @pytest.mark.parametrize("exc_cls", [LinkNotActiveError, WorkingTogetherRequiredError])
    def test_preconditions_carry_pair(self, exc_cls):
        exc = exc_cls("s-1", "r-1")
        assert isinstance(exc, PreconditionFailedError)
        assert exc.seeker_id == "s-1"
        assert exc.retainer_id == "r-1"
        assert exc.details == {"seeker_id": "s-1", "retainer_id": "r-1"}

    def test_party_mismatch_details(self):
        exc = CheckinPartyMismatchError("s-1", "r-1", "s-2", "r-1")
        assert isinstance(exc, PreconditionFailedError)
        assert exc.message == "Checkin target and verifier must be the linked seeker and retainer"
        assert exc.details == {"seeker_id": "s-1", "retainer_id": "r-1", "target_id": "s-2", "verifier_id": "r-1"}

    def test_all_catchable_as_base(self):
        for exc in (UnknownBadgeError("x"), LinkNotActiveError("s", "r"), NotFoundError("Checkin", "c")):
            with pytest.raises(TrustLedgerException):
                raise exc
