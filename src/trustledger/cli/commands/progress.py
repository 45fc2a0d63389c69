# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Badge progress and summary command."""

from __future__ import annotations

import argparse

from ...core.exceptions import TrustLedgerException
from ..output import format_percent, output_error, output_result
from ..utils import get_engine, parse_role


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the progress command on the CLI parser."""
    progress_parser = subparsers.add_parser("progress", help="Show badge progress for a profile")
    progress_parser.add_argument("role", help="SEEKER or RETAINER")
    progress_parser.add_argument("owner_id", help="Profile id")
    progress_parser.add_argument("--badge", help="Show one badge and the next level's threshold")
    progress_parser.add_argument("--limit", "-n", type=int, default=None, help="Max badges in the summary")
    progress_parser.set_defaults(func=cmd_progress)


def cmd_progress(args: argparse.Namespace) -> int:
    """Show one badge's progress, or the profile's earned-badge summary."""
    try:
        role = parse_role(args.role)
        engine = get_engine(args)
        if args.badge:
            definition = engine.catalog.require(args.badge)
            progress = engine.get_badge_progress(role, args.owner_id, definition.id)
            to_next = engine.compute_badge_progress_to_next(definition, progress)
            payload = {"progress": progress.to_dict(), "to_next": to_next.to_dict()}
            lines = [
                f"{definition.title} ({definition.id})",
                f"  Level:         {progress.max_level}",
                f"  Confirmations: {progress.total} ({progress.yes_count} yes / {progress.no_count} no)",
                f"  Trust:         {format_percent(to_next.trust_percent)}",
            ]
            if to_next.next_rule is not None:
                lines.append(
                    f"  Next level {to_next.next_level}: {to_next.next_rule.min_samples} samples "
                    f"at {to_next.next_rule.min_percent:g}%"
                )
            else:
                lines.append("  Top level reached")
            output_result(payload, args.json, "\n".join(lines))
            return 0

        summary = engine.get_badge_summary_for_profile(role, args.owner_id, args.limit)
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    if not summary:
        output_result([], args.json, f"No earned badges for {role.value} {args.owner_id}")
        return 0
    lines = [f"Earned badges for {role.value} {args.owner_id}", "─" * 30]
    for item in summary:
        lines.append(
            f"  L{item.max_level}  {format_percent(item.trust_percent):>5}  {item.total:>4}  {item.badge.title}"
        )
    output_result([item.to_dict() for item in summary], args.json, "\n".join(lines))
    return 0
