# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Pydantic models for checkin import files.

An import file is either a JSON array of checkin records or an object with a
``checkins`` array. Records accept snake_case or camelCase keys. Each record
is validated on its own so one bad row does not reject the file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from ..core.exceptions import ValidationException
from .models import CheckinRequest


class CheckinRecord(BaseModel):
    """One row of a checkin import file."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    badge_id: str = Field(..., min_length=1, validation_alias=AliasChoices("badge_id", "badgeId"))
    value: str = Field(..., description="YES or NO")
    seeker_id: str = Field(..., min_length=1, validation_alias=AliasChoices("seeker_id", "seekerId"))
    retainer_id: str = Field(..., min_length=1, validation_alias=AliasChoices("retainer_id", "retainerId"))
    target_role: str = Field(..., validation_alias=AliasChoices("target_role", "targetRole"))
    target_id: str = Field(..., min_length=1, validation_alias=AliasChoices("target_id", "targetId"))
    verifier_role: str = Field(..., validation_alias=AliasChoices("verifier_role", "verifierRole"))
    verifier_id: str = Field(..., min_length=1, validation_alias=AliasChoices("verifier_id", "verifierId"))
    period_key: str | None = Field(
        None, validation_alias=AliasChoices("period_key", "periodKey", "week_key", "weekKey")
    )
    cadence: str | None = Field(None, description="WEEKLY, MONTHLY or ONCE")

    def to_request(self) -> CheckinRequest:
        """Convert to a request; enum fields are checked here."""
        return CheckinRequest(
            badge_id=self.badge_id,
            value=self.value,
            seeker_id=self.seeker_id,
            retainer_id=self.retainer_id,
            target_role=self.target_role,
            target_id=self.target_id,
            verifier_role=self.verifier_role,
            verifier_id=self.verifier_id,
            period_key=self.period_key,
            cadence=self.cadence,
        )


def parse_checkin_record(raw: Any) -> CheckinRequest:
    """Validate one import record.

    Raises:
        ValidationException: If the record is malformed
    """
    try:
        record = CheckinRecord.model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationException(f"Invalid checkin record: {first.get('msg', 'invalid')}", field=field) from e
    return record.to_request()


def load_import_file(path: str | Path) -> list[Any]:
    """Read the raw records of an import file.

    Raises:
        ValidationException: If the file is not JSON or has no record list
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValidationException(f"Import file is not valid JSON: {e}", field="file", value=str(path)) from e
    if isinstance(raw, dict):
        raw = raw.get("checkins")
    if not isinstance(raw, list):
        raise ValidationException("Import file must hold a list of checkins", field="file", value=str(path))
    return raw
