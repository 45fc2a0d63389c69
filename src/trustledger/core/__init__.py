# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Core infrastructure shared by the engine and the CLI: config, logging, errors."""

from .config import TrustLedgerSettings, clear_settings_cache, get_settings
from .exceptions import (
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

__all__ = [
    "BadgeConfigurationError",
    "BadgeRoleMismatchError",
    "CheckinPartyMismatchError",
    "ConfigException",
    "LinkNotActiveError",
    "NotFoundError",
    "PreconditionFailedError",
    "StorageError",
    "TrustLedgerException",
    "TrustLedgerSettings",
    "UnknownBadgeError",
    "ValidationException",
    "VerifierRoleMismatchError",
    "WorkingTogetherRequiredError",
    "clear_settings_cache",
    "get_settings",
]
