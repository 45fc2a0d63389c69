# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Catalog listing and snap badge grants."""

from __future__ import annotations

import argparse

from ...core.exceptions import TrustLedgerException
from ..output import output_error, output_result
from ..utils import get_engine, parse_role


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the ``badges`` command tree."""
    badges_parser = subparsers.add_parser("badges", help="List badges or grant snap badges")
    badges_sub = badges_parser.add_subparsers(dest="badges_command", required=True)

    list_p = badges_sub.add_parser("list", help="List the badges a role can earn")
    list_p.add_argument("role", help="SEEKER or RETAINER")
    list_p.set_defaults(func=cmd_badges_list)

    grant_p = badges_sub.add_parser("grant", help="Grant a snap badge at level 1")
    grant_p.add_argument("role", help="SEEKER or RETAINER")
    grant_p.add_argument("owner_id", help="Profile id")
    grant_p.add_argument("badge_id", help="Snap badge id")
    grant_p.set_defaults(func=cmd_badges_grant)


def cmd_badges_list(args: argparse.Namespace) -> int:
    """List a role's badge definitions with their effective weight."""
    try:
        role = parse_role(args.role)
        engine = get_engine(args)
        definitions = engine.get_badge_definitions(role)
        scoring = engine.get_badge_score_snapshot()
        weights = {d.id: engine.scoring.get_badge_weight(d.id, scoring) for d in definitions}
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    lines = [f"{len(definitions)} badge(s) for {role.value}"]
    for d in definitions:
        lines.append(
            f"  {d.id:<36} {d.kind.value:<10} {d.effective_cadence.value:<8} "
            f"w={weights[d.id]:g}  {d.title}"
        )
    payload = [{**d.to_dict(), "effective_weight": weights[d.id]} for d in definitions]
    output_result(payload, args.json, "\n".join(lines))
    return 0


def cmd_badges_grant(args: argparse.Namespace) -> int:
    """Grant a snap badge; granting twice is a no-op."""
    try:
        role = parse_role(args.role)
        progress = get_engine(args).grant_snap_badge(role, args.owner_id, args.badge_id)
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    output_result(
        progress.to_dict(),
        args.json,
        f"Granted {progress.badge_id} to {role.value} {args.owner_id} (level {progress.max_level})",
    )
    return 0
