# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Output formatting for CLI commands.

Commands print either aligned text or, with ``--json``, the full payload.
"""

from __future__ import annotations

import json
import sys
from typing import Any


def output_result(data: Any, as_json: bool = False, text: str | None = None) -> None:
    """Print a command result.

    With ``as_json`` (or when no text rendering was given) the payload is
    pretty-printed as JSON; otherwise ``text`` is printed.
    """
    if as_json or text is None:
        print(json.dumps(data, indent=2, default=str))
    else:
        print(text)


def output_error(message: str) -> None:
    """Print error message to stderr."""
    print(f"Error: {message}", file=sys.stderr)


def format_percent(value: float | None) -> str:
    return "n/a" if value is None else f"{value:.0f}%"
