# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Legacy ledger migration command."""

from __future__ import annotations

import argparse
from dataclasses import asdict

from ...core.exceptions import TrustLedgerException
from ..output import output_error, output_result
from ..utils import get_engine


def register(subparsers: argparse._SubParsersAction) -> None:
    """Register the migrate command on the CLI parser."""
    migrate_parser = subparsers.add_parser("migrate", help="Upgrade a legacy badge ledger")
    migrate_parser.set_defaults(func=cmd_migrate)


def cmd_migrate(args: argparse.Namespace) -> int:
    """Run the legacy migration and report what it did.

    Opening the engine already migrates, so the construction report is the
    interesting one; a second run only confirms nothing is left to do.
    """
    try:
        report = get_engine(args).last_migration
    except TrustLedgerException as e:
        output_error(e.message)
        return 1

    if report.migrated:
        text = (
            f"Migrated legacy ledger: {report.selections} selections, "
            f"{report.progress} progress records, {report.checkins} checkins"
        )
    else:
        text = f"Nothing to migrate ({report.reason})"
    output_result(asdict(report), args.json, text)
    return 0
