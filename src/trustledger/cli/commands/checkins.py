# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Ledger listing commands: checkins and pending approvals."""

from __future__ import annotations

import argparse

from ...badges.models import CheckinStatus, parse_enum
from ...core.exceptions import TrustLedgerException
from ..output import output_error, output_result
from ..utils import get_engine, parse_role


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the checkins and pending commands on the CLI parser."""
    checkins_parser = subparsers.add_parser("checkins", help="List ledger entries, newest first")
    checkins_parser.add_argument("--target-role", help="Filter by target role")
    checkins_parser.add_argument("--target-id", help="Filter by target profile id")
    checkins_parser.add_argument("--badge", help="Filter by badge id")
    checkins_parser.add_argument("--status", help="Filter by status (ACTIVE, DISPUTED, OVERRIDDEN)")
    checkins_parser.add_argument("--limit", "-n", type=int, default=50, help="Max entries (default 50)")
    checkins_parser.set_defaults(func=cmd_checkins)

    pending_parser = subparsers.add_parser("pending", help="Checkins a profile still owes this period")
    pending_parser.add_argument("role", help="Role of the verifying profile")
    pending_parser.add_argument("owner_id", help="Verifying profile id")
    pending_parser.set_defaults(func=cmd_pending)


def cmd_checkins(args: argparse.Namespace) -> int:
    """List checkins matching the filters."""
    try:
        target_role = parse_role(args.target_role) if args.target_role else None
        status = parse_enum(CheckinStatus, args.status, "status") if args.status else None
        checkins = get_engine(args).get_badge_checkins(
            target_role=target_role,
            target_id=args.target_id,
            badge_id=args.badge,
            status=status,
        )
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    checkins = checkins[: max(0, args.limit)]
    lines = [f"{len(checkins)} checkin(s)"]
    for c in checkins:
        value = c.value.value if c.override_value is None else f"{c.value.value}->{c.override_value.value}"
        lines.append(
            f"  {c.id}  {c.period_key:<8}  {c.badge_id:<32}  {c.target_role.value}:{c.target_id}  "
            f"{value:<6}  {c.status.value}"
        )
    output_result([c.to_dict() for c in checkins], args.json, "\n".join(lines))
    return 0


def cmd_pending(args: argparse.Namespace) -> int:
    """List checkins the profile has not yet submitted for the current period."""
    try:
        role = parse_role(args.role)
        pending = get_engine(args).get_pending_approvals(role, args.owner_id)
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    lines = [f"{len(pending)} pending approval(s) for {role.value} {args.owner_id}"]
    for item in pending:
        lines.append(f"  {item.period_key:<8}  {item.badge_id:<32}  {item.target_role.value}:{item.target_id}")
    output_result([item.to_dict() for item in pending], args.json, "\n".join(lines))
    return 0
