# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Period keys and calendar arithmetic.

Weekly checkins are bucketed by ISO week (``YYYY-Www``, Monday-first, ISO
year), monthly checkins by calendar month (``YYYY-MM``). One-shot badges
reuse the weekly key.
"""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta

from .models import Cadence


def iso_week_key(moment: datetime) -> str:
    iso_year, iso_week, _ = moment.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def month_key(moment: datetime) -> str:
    return f"{moment.year}-{moment.month:02d}"


def period_key_for(cadence: Cadence, moment: datetime) -> str:
    if cadence is Cadence.MONTHLY:
        return month_key(moment)
    return iso_week_key(moment)


def add_months(moment: datetime, months: int) -> datetime:
    """Shift by whole calendar months, clamping the day to the target month's end."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def months_window_start(now: datetime, months: int) -> datetime:
    return add_months(now, -months)


def days_window_start(as_of: datetime, days: int) -> datetime:
    return as_of - timedelta(days=days)
