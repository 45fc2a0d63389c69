# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""trustledger - Badge and reputation scoring for two-sided marketplaces.

Seekers and retainers who work together confirm each other's badges on a
weekly or monthly cadence. Those confirmations are folded into per-badge
levels and a blended trust percentage for every profile.

Architecture:
  Catalog + Rules + Scoring config (read-mostly, admin-editable)
    → Selections (which badges a profile is judged on)
    → Checkin ledger (idempotent, period-keyed YES/NO confirmations)
    → Progress (yes/no counts, monotonic levels)
    → Trust rating (weighted two-group blend)

The ledger is the single source of truth; progress is always derivable from
it, and the audit controller rebuilds progress after every dispute or
override.

CLI entry point: ``trustledger``
"""

__version__ = "1.0.0"

from .badges.engine import BadgeEngine as BadgeEngine
