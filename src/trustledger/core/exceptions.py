# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Custom exception hierarchy for trustledger.

Errors fall into three groups:

- Configuration errors (unknown badge, role/verifier mismatch) point at a
  caller-side logic bug and always propagate.
- Precondition failures (no active link, "working together" not enabled by
  both parties) are expected and recoverable by the user.
- Infrastructure errors (storage, settings).

Batch checkin submission is the only place that absorbs the first two groups,
counting them as skipped items.
"""

from __future__ import annotations

from typing import Any


class TrustLedgerException(Exception):  # noqa: N818
    """Base exception for all trustledger errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(TrustLedgerException):
    """Exception for invalid caller input.

    Raised when:
    - An enum-valued field (role, kind, cadence, value, status) cannot be parsed
    - Required identifiers are missing
    """

    def __init__(self, message: str, field: str | None = None, value: Any = None):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ConfigException(TrustLedgerException):
    """Exception for configuration errors.

    Raised when:
    - A badge catalog declares the same id twice
    - Settings cannot be loaded
    """

    def __init__(self, message: str, missing_vars: list[str] | None = None):
        details = {}
        if missing_vars:
            details["missing_vars"] = missing_vars
        super().__init__(message, details)
        self.missing_vars = missing_vars or []


class NotFoundError(TrustLedgerException):
    """Exception for resource not found errors."""

    def __init__(self, resource_type: str, resource_id: str, message: str | None = None):
        message = message or f"{resource_type} not found: {resource_id}"
        details = {
            "resource_type": resource_type,
            "resource_id": resource_id,
        }
        super().__init__(message, details)
        self.resource_type = resource_type
        self.resource_id = resource_id


class StorageError(TrustLedgerException):
    """Exception for persistence failures (read or write)."""

    def __init__(self, message: str, key: str | None = None):
        details = {}
        if key:
            details["key"] = key
        super().__init__(message, details)
        self.key = key


# =============================================================================
# Badge configuration errors
# =============================================================================


class BadgeConfigurationError(TrustLedgerException):
    """A badge was used in a way its catalog definition does not allow."""

    def __init__(self, message: str, badge_id: str | None = None, details: dict | None = None):
        details = dict(details or {})
        if badge_id:
            details["badge_id"] = badge_id
        super().__init__(message, details)
        self.badge_id = badge_id


class UnknownBadgeError(BadgeConfigurationError):
    """The badge id is not in the catalog (or is not of the required kind)."""

    def __init__(self, badge_id: str, message: str = "Unknown badge"):
        super().__init__(message, badge_id=badge_id)


class BadgeRoleMismatchError(BadgeConfigurationError):
    """The badge belongs to a different role than the checkin target."""

    def __init__(self, badge_id: str, owner_role: str, target_role: str):
        super().__init__(
            "Badge does not match target role",
            badge_id=badge_id,
            details={"owner_role": owner_role, "target_role": target_role},
        )


class VerifierRoleMismatchError(BadgeConfigurationError):
    """The submitting party is not allowed to verify the badge."""

    def __init__(self, badge_id: str, verifier_role: str, submitted_role: str):
        super().__init__(
            "You cannot verify this badge",
            badge_id=badge_id,
            details={"verifier_role": verifier_role, "submitted_role": submitted_role},
        )


# =============================================================================
# Relationship preconditions
# =============================================================================


class PreconditionFailedError(TrustLedgerException):
    """The seeker/retainer relationship does not allow checkins right now."""

    def __init__(self, message: str, seeker_id: str, retainer_id: str):
        super().__init__(message, {"seeker_id": seeker_id, "retainer_id": retainer_id})
        self.seeker_id = seeker_id
        self.retainer_id = retainer_id


class LinkNotActiveError(PreconditionFailedError):
    """No link exists between the pair, or it is not ACTIVE."""

    def __init__(self, seeker_id: str, retainer_id: str):
        super().__init__("Badges require an active link", seeker_id, retainer_id)


class WorkingTogetherRequiredError(PreconditionFailedError):
    """The link is active but both sides have not enabled working together."""

    def __init__(self, seeker_id: str, retainer_id: str):
        super().__init__(
            "Badges require 'working together' to be enabled by both parties",
            seeker_id,
            retainer_id,
        )


class CheckinPartyMismatchError(PreconditionFailedError):
    """The checkin's target or verifier is not one side of the linked pair."""

    def __init__(self, seeker_id: str, retainer_id: str, target_id: str, verifier_id: str):
        super().__init__("Checkin target and verifier must be the linked seeker and retainer", seeker_id, retainer_id)
        self.details.update({"target_id": target_id, "verifier_id": verifier_id})
