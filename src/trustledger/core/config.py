# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Core configuration - centralized settings for the trustledger package.

All environment-based configuration flows through this module.

Usage:
    from trustledger.core.config import get_settings
    settings = get_settings()

    window = settings.trust_window_months
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TrustLedgerSettings(BaseSettings):
    """Settings for the badge engine and its CLI.

    Every field can be set through a TRUSTLEDGER_ prefixed environment
    variable or a local .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ==========================================================================
    # STORAGE SETTINGS
    # ==========================================================================

    data_dir: Path = Field(
        default=Path.home() / ".trustledger",
        description="Directory holding the JSON store documents",
        validation_alias="TRUSTLEDGER_DATA_DIR",
    )

    # ==========================================================================
    # SCORING SETTINGS
    # ==========================================================================

    trust_window_months: int = Field(
        default=12,
        description="Trailing window (months) of checkins used for trust ratings",
        validation_alias="TRUSTLEDGER_TRUST_WINDOW_MONTHS",
    )
    background_lock_months: int = Field(
        default=12,
        description="How long a background badge selection stays locked after a change",
        validation_alias="TRUSTLEDGER_BACKGROUND_LOCK_MONTHS",
    )
    summary_limit: int = Field(
        default=6,
        description="Default number of badges in a profile summary",
        validation_alias="TRUSTLEDGER_SUMMARY_LIMIT",
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="TRUSTLEDGER_LOG_LEVEL",
    )
    log_format: str = Field(
        default="",
        description="Log format: 'json', 'text', or '' (auto-detect)",
        validation_alias="TRUSTLEDGER_LOG_FORMAT",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
        validation_alias="TRUSTLEDGER_LOG_FILE",
    )

    @field_validator("trust_window_months", "background_lock_months", "summary_limit")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        return max(1, value)


# ==========================================================================
# GLOBAL SETTINGS INSTANCE (lazy loaded)
# ==========================================================================

_settings: TrustLedgerSettings | None = None


def get_settings() -> TrustLedgerSettings:
    """Get the global settings instance.

    Returns:
        The singleton TrustLedgerSettings instance.
    """
    global _settings
    if _settings is None:
        _settings = TrustLedgerSettings()
    return _settings


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    global _settings
    _settings = None
