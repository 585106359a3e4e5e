"""Day arithmetic on a fixed UTC calendar.

Every day count in cycle tracking is a ceiling division of the millisecond
delta between two instants by the length of a day.  Calendar dates are pinned
to UTC midnight first, so daylight-saving transitions in the server's local
zone can never add or drop an hour and shift a count.
"""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, timezone

MS_PER_DAY = 86_400_000


def as_utc(value: date | datetime) -> datetime:
    """Pin a date (midnight) or datetime to an aware UTC datetime.

    Naive datetimes are taken to already be UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def days_between(later: date | datetime, earlier: date | datetime) -> int:
    """Ceiling day count from ``earlier`` to ``later``.

    Negative when ``later`` precedes ``earlier``.
    """
    delta = as_utc(later) - as_utc(earlier)
    # Integer milliseconds, so the ceiling is exact
    delta_ms = delta // timedelta(milliseconds=1)
    return -(-delta_ms // MS_PER_DAY)


def inclusive_span(start: date, end: date) -> int:
    """Number of calendar days touched by ``[start, end]``, both ends included."""
    return days_between(end, start) + 1


def add_days(start: date, days: int) -> date:
    return (as_utc(start) + timedelta(days=days)).date()


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity.

    Python's ``round`` uses banker's rounding (``round(28.5) == 28``); cycle
    averages round ``x.5`` up instead.
    """
    return math.floor(value + 0.5)
