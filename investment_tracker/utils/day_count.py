"""
Day-count conventions shared by every valuation and attribution formula.

Fractional months use an average 30.44-day month and fractional years a
365.25-day year. Deposit-style schedules (RD instalments, EPF contributions,
MIS payouts) count whole calendar months instead.
"""

import calendar
import math
from datetime import MAXYEAR, MINYEAR, date, timedelta
from typing import Optional, Tuple

DAYS_PER_MONTH = 30.44
DAYS_PER_YEAR = 365.25


def days_between(start: date, end: date) -> int:
    """Signed number of days from start to end."""
    return (end - start).days


def months_between(start: date, end: date) -> float:
    """Fractional months from start to end (30.44-day months)."""
    return days_between(start, end) / DAYS_PER_MONTH


def years_between(start: date, end: date) -> float:
    """Fractional years from start to end (365.25-day years)."""
    return days_between(start, end) / DAYS_PER_YEAR


def whole_months_between(start: date, end: date) -> int:
    """
    Completed calendar months from start to end, never negative.

    A month counts once the day-of-month is reached again; when the start
    day does not exist in the end month (Jan 31 -> Feb 28) the last day of
    that month completes it.
    """
    if end <= start:
        return 0
    months = (end.year - start.year) * 12 + (end.month - start.month)
    last_day = calendar.monthrange(end.year, end.month)[1]
    if end.day < start.day and end.day != last_day:
        months -= 1
    return max(0, months)


def add_months(value: date, months: int) -> Optional[date]:
    """
    Shift a date by whole months, clamping to the last day of the month.

    Returns None when the result falls outside the supported calendar
    (years 1-9999).
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    if not MINYEAR <= year <= MAXYEAR:
        return None
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def add_years(value: date, years: float) -> Optional[date]:
    """Shift a date by whole or fractional years (fractions rounded to months)."""
    months = years * 12
    if not math.isfinite(months):
        return None
    return add_months(value, int(round(months)))


def earlier(first: date, second: Optional[date]) -> date:
    """min() that tolerates a missing second date."""
    if second is None:
        return first
    return min(first, second)


def year_window(year: int) -> Tuple[date, date]:
    """Half-open window [Jan 1, Jan 1 of next year)."""
    return date(year, 1, 1), date(year + 1, 1, 1)


def month_window(year: int, month: int) -> Tuple[date, date]:
    """Half-open window [first of month, first of next month)."""
    start = date(year, month, 1)
    last_day = calendar.monthrange(year, month)[1]
    return start, start + timedelta(days=last_day)


def intersect(
    active_start: date,
    active_end: date,
    window_start: date,
    window_end: date,
) -> Optional[Tuple[date, date]]:
    """
    Overlap of an instrument's active window with a reporting window.

    The active end is inclusive (a deposit maturing on Jan 1 is still active
    that day) while the reporting window is half-open. Returns None when the
    two do not meet.
    """
    if active_start > active_end:
        return None
    if active_start >= window_end or active_end < window_start:
        return None
    start = max(active_start, window_start)
    end = min(active_end, window_end)
    return start, end
