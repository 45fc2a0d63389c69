# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Level rule commands.

    trustledger rules show [--badge ID]
    trustledger rules set-role <role> <json>
    trustledger rules set-badge <badge> <json|clear>

Rules are given as a JSON list of five ``{"min_samples": n, "min_percent": p}``
objects, lowest level first.
"""

from __future__ import annotations

import argparse

from ...badges.models import LevelRule
from ...core.exceptions import TrustLedgerException
from ..output import output_error, output_result
from ..utils import get_engine, parse_json_arg, parse_role


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the ``rules`` command tree."""
    rules_parser = subparsers.add_parser("rules", help="Show or change level rules")
    rules_sub = rules_parser.add_subparsers(dest="rules_command", required=True)

    show_p = rules_sub.add_parser("show", help="Show role defaults and badge overrides")
    show_p.add_argument("--badge", help="Show the rules in effect for one badge")
    show_p.set_defaults(func=cmd_rules_show)

    role_p = rules_sub.add_parser("set-role", help="Replace a role's default rules")
    role_p.add_argument("role", help="SEEKER or RETAINER")
    role_p.add_argument("rules", help="JSON list of five level rules")
    role_p.set_defaults(func=cmd_rules_set_role)

    badge_p = rules_sub.add_parser("set-badge", help="Set or clear a badge's rule override")
    badge_p.add_argument("badge_id", help="Badge id")
    badge_p.add_argument("rules", help="JSON list of five level rules, or 'clear'")
    badge_p.set_defaults(func=cmd_rules_set_badge)


def _format_rules(rules: list[LevelRule]) -> str:
    return "  ".join(f"L{level}: {r.min_samples}@{r.min_percent:g}%" for level, r in enumerate(rules, start=1))


def cmd_rules_show(args: argparse.Namespace) -> int:
    """Show the stored rules, or the effective rules for one badge."""
    try:
        engine = get_engine(args)
        if args.badge:
            definition = engine.catalog.require(args.badge)
            rules = engine.get_badge_level_rules_for_badge(definition.id)
            output_result(
                {"badge_id": definition.id, "rules": [r.to_dict() for r in rules]},
                args.json,
                f"{definition.id}\n  {_format_rules(rules)}",
            )
            return 0
        snapshot = engine.get_badge_rules_snapshot()
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    lines = ["Role defaults"]
    for role, rules in snapshot.role_defaults.items():
        lines.append(f"  {role.value:<9} {_format_rules(rules)}")
    lines.append("Badge overrides")
    if not snapshot.badge_overrides:
        lines.append("  (none)")
    for badge_id, rules in sorted(snapshot.badge_overrides.items()):
        lines.append(f"  {badge_id}\n    {_format_rules(rules)}")
    output_result(snapshot.to_dict(), args.json, "\n".join(lines))
    return 0


def cmd_rules_set_role(args: argparse.Namespace) -> int:
    """Replace a role's default rules; malformed input leaves them unchanged."""
    try:
        role = parse_role(args.role)
        rules = get_engine(args).set_badge_level_rules_for_role(role, parse_json_arg(args.rules, "rules"))
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    output_result(
        {"role": role.value, "rules": [r.to_dict() for r in rules]},
        args.json,
        f"{role.value} rules: {_format_rules(rules)}",
    )
    return 0


def cmd_rules_set_badge(args: argparse.Namespace) -> int:
    """Set or clear a per-badge override."""
    try:
        engine = get_engine(args)
        definition = engine.catalog.require(args.badge_id)
        raw = None if args.rules.lower() == "clear" else parse_json_arg(args.rules, "rules")
        override = engine.set_badge_level_rules_for_badge(definition.id, raw)
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    if override is None:
        text = f"{definition.id}: override cleared, role defaults apply"
    else:
        text = f"{definition.id} override: {_format_rules(override)}"
    output_result(
        {"badge_id": definition.id, "override": None if override is None else [r.to_dict() for r in override]},
        args.json,
        text,
    )
    return 0
