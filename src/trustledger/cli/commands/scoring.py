# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Scoring configuration commands.

    trustledger scoring show
    trustledger scoring split <expectations> <growth>
    trustledger scoring kind <KIND> <weight>
    trustledger scoring multipliers <m1> <m2> <m3> <m4> <m5>
    trustledger scoring badge-weight <badge> <weight|clear>
"""

from __future__ import annotations

import argparse

from ...badges.models import BadgeKind, parse_enum
from ...core.exceptions import TrustLedgerException, ValidationException
from ..output import output_error, output_result
from ..utils import get_engine


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the ``scoring`` command tree."""
    scoring_parser = subparsers.add_parser("scoring", help="Show or change trust scoring weights")
    scoring_sub = scoring_parser.add_subparsers(dest="scoring_command", required=True)

    show_p = scoring_sub.add_parser("show", help="Show the scoring configuration")
    show_p.set_defaults(func=cmd_scoring_show)

    split_p = scoring_sub.add_parser("split", help="Set the expectations/growth split")
    split_p.add_argument("expectations", type=float, help="Expectations group weight")
    split_p.add_argument("growth", type=float, help="Growth group weight")
    split_p.set_defaults(func=cmd_scoring_split)

    kind_p = scoring_sub.add_parser("kind", help="Set the weight of a badge kind")
    kind_p.add_argument("kind", help="BACKGROUND, SELECTABLE, SNAP or CHECKER")
    kind_p.add_argument("weight", type=float, help="Positive weight")
    kind_p.set_defaults(func=cmd_scoring_kind)

    mult_p = scoring_sub.add_parser("multipliers", help="Set the five level multipliers")
    mult_p.add_argument("values", nargs="+", type=float, help="Five positive multipliers (levels 1-5)")
    mult_p.set_defaults(func=cmd_scoring_multipliers)

    badge_p = scoring_sub.add_parser("badge-weight", help="Override or clear one badge's weight")
    badge_p.add_argument("badge_id", help="Badge id")
    badge_p.add_argument("weight", help="Positive weight, or 'clear'")
    badge_p.set_defaults(func=cmd_scoring_badge_weight)


def cmd_scoring_show(args: argparse.Namespace) -> int:
    """Show the current scoring configuration."""
    try:
        snapshot = get_engine(args).get_badge_score_snapshot()
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    lines = [
        "Scoring configuration",
        "─" * 30,
        f"  Split:        expectations {snapshot.expectations_weight:.2f} / growth {snapshot.growth_weight:.2f}",
        "  Kind weights: " + ", ".join(f"{kind.value}={w:g}" for kind, w in snapshot.kind_weights.items()),
        "  Multipliers:  " + ", ".join(f"{m:g}" for m in snapshot.level_multipliers),
    ]
    if snapshot.badge_overrides:
        lines.append("  Badge weights:")
        for badge_id, weight in sorted(snapshot.badge_overrides.items()):
            lines.append(f"    {badge_id}: {weight:g}")
    output_result(snapshot.to_dict(), args.json, "\n".join(lines))
    return 0


def cmd_scoring_split(args: argparse.Namespace) -> int:
    """Set the split; it is normalized to sum to one."""
    try:
        expectations, growth = get_engine(args).set_badge_score_split(args.expectations, args.growth)
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    output_result(
        {"expectations_weight": expectations, "growth_weight": growth},
        args.json,
        f"Split: expectations {expectations:.2f} / growth {growth:.2f}",
    )
    return 0


def cmd_scoring_kind(args: argparse.Namespace) -> int:
    """Set a kind weight; invalid weights are ignored."""
    try:
        kind = parse_enum(BadgeKind, args.kind, "kind")
        weight = get_engine(args).set_badge_kind_weight(kind, args.weight)
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    output_result({"kind": kind.value, "weight": weight}, args.json, f"{kind.value} weight: {weight:g}")
    return 0


def cmd_scoring_multipliers(args: argparse.Namespace) -> int:
    """Set the level multipliers; an invalid list restores the defaults."""
    try:
        multipliers = get_engine(args).set_badge_level_multipliers(args.values)
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    output_result(
        {"level_multipliers": multipliers},
        args.json,
        "Multipliers: " + ", ".join(f"{m:g}" for m in multipliers),
    )
    return 0


def cmd_scoring_badge_weight(args: argparse.Namespace) -> int:
    """Override one badge's weight, or clear the override."""
    try:
        engine = get_engine(args)
        definition = engine.catalog.require(args.badge_id)
        if args.weight.lower() == "clear":
            weight = None
        else:
            try:
                weight = float(args.weight)
            except ValueError as e:
                raise ValidationException(
                    f"Weight must be a number or 'clear': {args.weight}", field="weight", value=args.weight
                ) from e
        engine.set_badge_weight_override(definition.id, weight)
        effective = engine.get_badge_weight(definition.id)
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    output_result(
        {"badge_id": definition.id, "weight": effective},
        args.json,
        f"{definition.id} weight: {effective:g}",
    )
    return 0
