"""Time utilities (IST)."""

from datetime import date, datetime, timezone, tzinfo
from typing import Any, Optional
from zoneinfo import ZoneInfo

IST = ZoneInfo("Asia/Kolkata")


def to_ist(dt: datetime, naive_assumed_tz: tzinfo = IST) -> datetime:
    """Convert datetime to IST timezone-aware value."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=naive_assumed_tz)
    return dt.astimezone(IST)


def as_ist_date(value: date) -> date:
    """
    Calendar date of an evaluation instant.

    Aware datetimes are moved to IST first so that "now" near midnight UTC
    lands on the date an Indian user would see. Naive datetimes are taken as
    already being local.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return to_ist(value).date()
    return value


def parse_date(value: Any) -> Optional[date]:
    """
    Best-effort conversion of a stored date field to a calendar date.

    Accepts date/datetime objects, ``YYYY-MM-DD`` strings and ISO-8601
    timestamps (including a trailing ``Z``). Anything else yields None.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_ist_date(value) if value.tzinfo else value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        return parsed.astimezone(timezone.utc).astimezone(IST).date()
    return parsed.date()
