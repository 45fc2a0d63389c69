# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Checkin submission commands: one record or a batch import file.

Links are read from ``links.json`` in the data directory.
"""

from __future__ import annotations

import argparse
import logging

from ...badges.imports import load_import_file
from ...core.exceptions import TrustLedgerException
from ..output import output_error, output_result
from ..utils import get_engine, parse_json_arg

logger = logging.getLogger(__name__)


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the checkin and import commands on the CLI parser."""
    checkin_parser = subparsers.add_parser("checkin", help="Submit one checkin")
    checkin_parser.add_argument("record", help="Checkin record as a JSON object")
    checkin_parser.set_defaults(func=cmd_checkin)

    import_parser = subparsers.add_parser("import", help="Submit a batch of checkins from a JSON file")
    import_parser.add_argument("file", help="JSON list of checkins, or an object with a 'checkins' list")
    import_parser.set_defaults(func=cmd_import)


def cmd_checkin(args: argparse.Namespace) -> int:
    """Submit a single checkin record."""
    try:
        result = get_engine(args).submit_weekly_checkin(parse_json_arg(args.record, "record"))
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    checkin, progress = result.checkin, result.progress
    text = (
        f"Recorded {checkin.value.value} for {checkin.badge_id} ({checkin.period_key})\n"
        f"  {checkin.target_role.value}:{checkin.target_id} now {progress.yes_count} yes / "
        f"{progress.no_count} no, level {progress.max_level}"
    )
    output_result(result.to_dict(), args.json, text)
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    """Import a file of checkins in one batch."""
    try:
        records = load_import_file(args.file)
        result = get_engine(args).submit_weekly_checkins_batch(records)
    except FileNotFoundError:
        output_error(f"File not found: {args.file}")
        return 1
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    logger.info(f"Imported {args.file}: {result.applied} applied, {result.skipped} skipped")
    lines = [f"Applied {result.applied}, skipped {result.skipped}"]
    lines.extend(f"  - {error}" for error in result.errors)
    output_result(result.to_dict(), args.json, "\n".join(lines))
    return 0
