# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Badge selection commands."""

from __future__ import annotations

import argparse

from ...badges.models import format_datetime
from ...core.exceptions import TrustLedgerException
from ..output import output_error, output_result
from ..utils import get_engine, parse_role


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the ``selection`` command tree."""
    selection_parser = subparsers.add_parser("selection", help="Show or change a profile's badge selection")
    selection_sub = selection_parser.add_subparsers(dest="selection_command", required=True)

    show_p = selection_sub.add_parser("show", help="Show active and background badges")
    show_p.add_argument("role", help="SEEKER or RETAINER")
    show_p.add_argument("owner_id", help="Profile id")
    show_p.set_defaults(func=cmd_selection_show)

    active_p = selection_sub.add_parser("active", help="Choose up to four selectable badges")
    active_p.add_argument("role", help="SEEKER or RETAINER")
    active_p.add_argument("owner_id", help="Profile id")
    active_p.add_argument("badge_ids", nargs="*", help="Selectable badge ids")
    active_p.set_defaults(func=cmd_selection_active)

    background_p = selection_sub.add_parser("background", help="Choose the four background badges")
    background_p.add_argument("role", help="SEEKER or RETAINER")
    background_p.add_argument("owner_id", help="Profile id")
    background_p.add_argument("badge_ids", nargs="*", help="Background badge ids")
    background_p.add_argument("--force", action="store_true", help="Change even while the selection is locked")
    background_p.set_defaults(func=cmd_selection_background)


def _render(
    role_value: str, owner_id: str, active: list[str], background: list[str], locked_until: str | None
) -> str:
    lines = [
        f"Selection for {role_value} {owner_id}",
        "─" * 30,
        "  Active:     " + (", ".join(active) or "(none)"),
        "  Background: " + (", ".join(background) or "(none)"),
    ]
    if locked_until:
        lines.append(f"  Locked until {locked_until}")
    return "\n".join(lines)


def cmd_selection_show(args: argparse.Namespace) -> int:
    """Show a profile's selection and background lock."""
    try:
        role = parse_role(args.role)
        engine = get_engine(args)
        active = engine.get_active_badges(role, args.owner_id)
        background = engine.get_selected_background_badges(role, args.owner_id)
        lock = engine.get_background_lock_status(role, args.owner_id)
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    locked_until = format_datetime(lock.locked_until) if lock.is_locked and lock.locked_until else None
    payload = {
        "owner_role": role.value,
        "owner_id": args.owner_id,
        "active_badge_ids": active,
        "background_badge_ids": background,
        "background_locked_until": format_datetime(lock.locked_until) if lock.locked_until else None,
        "background_locked": lock.is_locked,
    }
    output_result(payload, args.json, _render(role.value, args.owner_id, active, background, locked_until))
    return 0


def cmd_selection_active(args: argparse.Namespace) -> int:
    """Replace the active selectable badges."""
    try:
        role = parse_role(args.role)
        selection = get_engine(args).set_active_badges(role, args.owner_id, args.badge_ids)
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    output_result(
        selection.to_dict(),
        args.json,
        _render(role.value, args.owner_id, selection.active_badge_ids, selection.background_badge_ids, None),
    )
    return 0


def cmd_selection_background(args: argparse.Namespace) -> int:
    """Replace the background badges unless the selection is locked."""
    try:
        role = parse_role(args.role)
        engine = get_engine(args)
        lock = engine.get_background_lock_status(role, args.owner_id)
        selection = engine.set_background_badges(role, args.owner_id, args.badge_ids, allow_override=args.force)
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    if lock.is_locked and not args.force:
        output_error(f"Background badges are locked until {format_datetime(lock.locked_until)}")
        return 1

    locked_until = format_datetime(selection.background_locked_until) if selection.background_locked_until else None
    output_result(
        selection.to_dict(),
        args.json,
        _render(role.value, args.owner_id, selection.active_badge_ids, selection.background_badge_ids, locked_until),
    )
    return 0
