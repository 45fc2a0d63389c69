#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""
trustledger CLI - badge ledger and trust ratings.

Commands:
  trustledger trust <role> <owner>          Show a trust rating
  trustledger progress <role> <owner>       Show earned badges
  trustledger checkin <json>                Submit one checkin
  trustledger import <file>                 Submit a batch of checkins
  trustledger checkins                      List ledger entries
  trustledger audit <id> <status>           Dispute or override a checkin
  trustledger rules show                    Show level rules
  trustledger scoring show                  Show scoring weights
"""

from __future__ import annotations

import argparse
import sys

from ..core.logging import configure_logging
from .commands import COMMAND_MODULES


def app() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="trustledger",
        description="Badge ledger and reputation scoring",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  trustledger badges list SEEKER                     List seeker badges
  trustledger checkin '{"badge_id": "...", ...}'     Record one confirmation
  trustledger import checkins.json                   Import a batch
  trustledger trust SEEKER s-1                       Trust rating
  trustledger trust SEEKER s-1 --as-of 2025-06-01    Historical rating
  trustledger audit <id> DISPUTED                    Exclude a checkin
  trustledger scoring split 0.7 0.3                  Reweight groups

Links between seekers and retainers are read from <data-dir>/links.json.
        """,
    )
    parser.add_argument("--data-dir", help="Directory holding the JSON store (default: TRUSTLEDGER_DATA_DIR)")
    parser.add_argument("--json", "-j", action="store_true", help="Output JSON")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)")

    subparsers = parser.add_subparsers(dest="command", required=True)
    for module in COMMAND_MODULES:
        module.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = app()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level)

    handler = getattr(args, "func", None)
    if handler is None:
        parser.print_help()
        return 1
    return handler(args)


if __name__ == "__main__":
    sys.exit(main())
