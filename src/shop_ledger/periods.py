# ShopLedger - Sales & Expense Ledger with Business Insights for small shops
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for ShopLedger.

This module provides the calendar boundary helpers used by the statistics
engine (day, week, month and their previous-period counterparts) and a
Period value object used by the reports and the CLI.

All helpers work on naive datetimes in local wall-clock time. Every boundary
pair is inclusive on both ends: the start is 00:00:00.000000 and the end is
23:59:59.999999, so that filtering with ``start <= t <= end`` never counts a
transaction twice across two consecutive periods.

Weeks start on Monday (ISO style). A Sunday belongs to the week that started
six days earlier.

``filter_frame_by_period`` applies a Period to a frame with a datetime
'date' column, using the same inclusive bounds.
"""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

import pandas as pd

# ---------------------------------------------------------------------------
# Boundary helpers
# ---------------------------------------------------------------------------


def start_of_day(t: datetime) -> datetime:
    """Midnight of the calendar day containing ``t``."""
    return datetime.combine(t.date(), time.min)


def end_of_day(t: datetime) -> datetime:
    """Last representable instant of the calendar day containing ``t``."""
    return datetime.combine(t.date(), time.max)


def start_of_week(t: datetime) -> datetime:
    """Monday 00:00 of the week containing ``t``."""
    return start_of_day(t) - timedelta(days=t.weekday())


def end_of_week(t: datetime) -> datetime:
    """Sunday 23:59:59.999999 of the week containing ``t``."""
    return end_of_day(start_of_week(t) + timedelta(days=6))


def start_of_month(t: datetime) -> datetime:
    """First day of the month containing ``t``, at midnight."""
    return datetime.combine(t.date().replace(day=1), time.min)


def end_of_month(t: datetime) -> datetime:
    """Last day of the month containing ``t``, at the end of the day."""
    last_day = monthrange(t.year, t.month)[1]
    return datetime.combine(t.date().replace(day=last_day), time.max)


def start_of_yesterday(t: datetime) -> datetime:
    return start_of_day(t) - timedelta(days=1)


def end_of_yesterday(t: datetime) -> datetime:
    return end_of_day(start_of_yesterday(t))


def start_of_last_week(t: datetime) -> datetime:
    return start_of_week(t) - timedelta(days=7)


def end_of_last_week(t: datetime) -> datetime:
    return end_of_day(start_of_week(t) - timedelta(days=1))


def start_of_last_month(t: datetime) -> datetime:
    """
    First day of the previous calendar month.

    Derived from the start of the current month rather than by subtracting
    a fixed number of days from ``t``.
    """
    return start_of_month(start_of_month(t) - timedelta(days=1))


def end_of_last_month(t: datetime) -> datetime:
    return end_of_day(start_of_month(t) - timedelta(days=1))


# ---------------------------------------------------------------------------
# Report periods
# ---------------------------------------------------------------------------


@dataclass
class Period:
    """Represents a reporting period with a human-readable label."""

    start: datetime
    end: datetime
    label: str


def _now() -> datetime:
    """Return the current local datetime (isolated for easier testing)."""
    return datetime.now()


def period_today(now: Optional[datetime] = None) -> Period:
    """From midnight today up to ``now``."""
    now = now or _now()
    return Period(start=start_of_day(now), end=now, label="Today")


def period_this_week(now: Optional[datetime] = None) -> Period:
    """Week-to-date, starting on Monday."""
    now = now or _now()
    return Period(start=start_of_week(now), end=now, label="This week")


def period_this_month(now: Optional[datetime] = None) -> Period:
    """Month-to-date."""
    now = now or _now()
    return Period(start=start_of_month(now), end=now, label="This month")


def period_custom(
    from_date: Optional[date],
    to_date: Optional[date],
    now: Optional[datetime] = None,
) -> Period:
    """
    Custom period between two calendar dates (both inclusive).

    A missing start means "since the beginning"; a missing end means "up to
    now".
    """
    now = now or _now()
    start = datetime.combine(from_date, time.min) if from_date else datetime.min
    end = datetime.combine(to_date, time.max) if to_date else now

    if end < start:
        raise ValueError("Custom period end date cannot be before start date.")

    start_label = from_date.isoformat() if from_date else "beginning"
    end_label = to_date.isoformat() if to_date else "now"
    return Period(start=start, end=end, label=f"Custom period ({start_label} → {end_label})")


def determine_period(
    name: Optional[str],
    now: Optional[datetime] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
) -> Period:
    """
    Resolve a reporting period from a period name or custom bounds.

    Priority (highest to lowest):

        1. ``name`` (today, week, month)
        2. ``from_date`` / ``to_date`` (custom period)
        3. the current week by default
    """
    if name:
        if name == "today":
            return period_today(now)
        if name == "week":
            return period_this_week(now)
        if name == "month":
            return period_this_month(now)
        raise ValueError(f"Unknown period: {name!r}")

    if from_date or to_date:
        return period_custom(from_date, to_date, now)

    return period_this_week(now)


def filter_frame_by_period(frame: pd.DataFrame, period: Period) -> pd.DataFrame:
    """
    Return the rows of ``frame`` whose 'date' falls within ``period``.

    Both bounds are inclusive. An open start (``datetime.min``) keeps every
    row up to the end. The frame index is preserved, so callers can map
    the result back to the records the frame was built from.

    Parameters
    ----------
    frame : pandas.DataFrame
        Frame with a datetime64 'date' column in local wall-clock time.
    period : Period
        Reporting period to keep.
    """
    if frame.empty:
        return frame.copy()

    mask = frame["date"] <= pd.Timestamp(period.end)
    if period.start != datetime.min:
        mask &= frame["date"] >= pd.Timestamp(period.start)
    return frame.loc[mask].copy()
