# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""CLI command modules for trustledger.

Each module exposes a ``register(subparsers)`` function that wires up
its argparse sub-commands and sets ``parser.set_defaults(func=handler)``.
"""

from . import audit, badges, checkins, io, migration, progress, rules, scoring, selection, trust
from .audit import cmd_audit
from .badges import cmd_badges_grant, cmd_badges_list
from .checkins import cmd_checkins, cmd_pending
from .io import cmd_checkin, cmd_import
from .migration import cmd_migrate
from .progress import cmd_progress
from .rules import cmd_rules_set_badge, cmd_rules_set_role, cmd_rules_show
from .scoring import (
    cmd_scoring_badge_weight,
    cmd_scoring_kind,
    cmd_scoring_multipliers,
    cmd_scoring_show,
    cmd_scoring_split,
)
from .selection import cmd_selection_active, cmd_selection_background, cmd_selection_show
from .trust import cmd_trust

# All command modules with register() functions, in registration order.
COMMAND_MODULES = [
    trust,
    progress,
    badges,
    selection,
    io,
    checkins,
    audit,
    rules,
    scoring,
    migration,
]

__all__ = [
    "COMMAND_MODULES",
    "cmd_audit",
    "cmd_badges_grant",
    "cmd_badges_list",
    "cmd_checkin",
    "cmd_checkins",
    "cmd_import",
    "cmd_migrate",
    "cmd_pending",
    "cmd_progress",
    "cmd_rules_set_badge",
    "cmd_rules_set_role",
    "cmd_rules_show",
    "cmd_scoring_badge_weight",
    "cmd_scoring_kind",
    "cmd_scoring_multipliers",
    "cmd_scoring_show",
    "cmd_scoring_split",
    "cmd_selection_active",
    "cmd_selection_background",
    "cmd_selection_show",
    "cmd_trust",
]
