# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Trust rating command."""

from __future__ import annotations

import argparse
from datetime import datetime

from ...badges.models import ensure_utc
from ...core.exceptions import TrustLedgerException, ValidationException
from ..output import format_percent, output_error, output_result
from ..utils import get_engine, parse_role


def _parse_as_of(raw: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationException(f"Invalid --as-of timestamp: {raw}", field="as_of", value=raw) from e
    return ensure_utc(parsed)


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the trust command on the CLI parser."""
    trust_parser = subparsers.add_parser("trust", help="Show a profile's trust rating")
    trust_parser.add_argument("role", help="SEEKER or RETAINER")
    trust_parser.add_argument("owner_id", help="Profile id")
    trust_parser.add_argument("--as-of", help="Rate as of this ISO timestamp (no penalty applied)")
    trust_parser.add_argument("--window-days", type=int, default=365, help="Window for --as-of (default 365)")
    trust_parser.set_defaults(func=cmd_trust)


def cmd_trust(args: argparse.Namespace) -> int:
    """Show the blended trust rating for one profile."""
    try:
        role = parse_role(args.role)
        engine = get_engine(args)
        if args.as_of:
            as_of = _parse_as_of(args.as_of)
            rating = engine.get_trust_rating_as_of(role, args.owner_id, as_of, args.window_days)
        else:
            rating = engine.get_trust_rating_for_profile(role, args.owner_id)
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    text = "\n".join(
        [
            f"Trust rating for {role.value} {args.owner_id}",
            "─" * 30,
            f"  Percent:       {format_percent(rating.percent)}",
            f"  Expectations:  {format_percent(rating.expectations_score)}",
            f"  Growth:        {format_percent(rating.growth_score)}",
            f"  Confirmations: {rating.total} ({rating.yes} yes / {rating.no} no)",
        ]
    )
    output_result(rating.to_dict(), args.json, text)
    return 0
