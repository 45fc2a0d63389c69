# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Audit command: dispute, override or reset a checkin."""

from __future__ import annotations

import argparse

from ...core.exceptions import TrustLedgerException
from ..output import output_error, output_result
from ..utils import get_engine


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the audit command on the CLI parser."""
    audit_parser = subparsers.add_parser("audit", help="Change a checkin's audit status")
    audit_parser.add_argument("checkin_id", help="Checkin id")
    audit_parser.add_argument("status", help="ACTIVE, DISPUTED or OVERRIDDEN")
    audit_parser.add_argument("--override", dest="override_value", help="Override value (YES or NO)")
    audit_parser.add_argument("--note", help="Override note")
    audit_parser.set_defaults(func=cmd_audit)


def cmd_audit(args: argparse.Namespace) -> int:
    """Apply an audit action and report the rebuilt progress."""
    try:
        engine = get_engine(args)
        checkin = engine.update_badge_checkin_status(
            args.checkin_id,
            args.status,
            override_value=args.override_value,
            override_note=args.note,
        )
        progress = engine.get_badge_progress(checkin.target_role, checkin.target_id, checkin.badge_id)
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    text = (
        f"Checkin {checkin.id} is now {checkin.status.value}\n"
        f"  {checkin.badge_id} for {checkin.target_role.value}:{checkin.target_id}: "
        f"{progress.yes_count} yes / {progress.no_count} no, level {progress.max_level}"
    )
    output_result({"checkin": checkin.to_dict(), "progress": progress.to_dict()}, args.json, text)
    return 0
