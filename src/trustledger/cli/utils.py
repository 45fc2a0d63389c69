# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Shared helpers for CLI commands."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from ..badges.engine import BadgeEngine
from ..badges.models import Role, parse_enum
from ..badges.ports import StaticLinkProvider
from ..core.config import get_settings
from ..core.exceptions import ValidationException
from ..storage.backend import JsonFileBackend

LINKS_FILE = "links.json"


def data_dir(args: argparse.Namespace) -> Path:
    return Path(getattr(args, "data_dir", None) or get_settings().data_dir).expanduser()


def get_engine(args: argparse.Namespace) -> BadgeEngine:
    """Build an engine over the JSON store in the selected data directory."""
    directory = data_dir(args)
    return BadgeEngine(
        JsonFileBackend(directory),
        StaticLinkProvider.from_file(directory / LINKS_FILE),
    )


def parse_role(raw: str) -> Role:
    return parse_enum(Role, raw, "role")


def parse_json_arg(raw: str, field: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationException(f"{field} must be valid JSON: {e}", field=field, value=raw) from e
