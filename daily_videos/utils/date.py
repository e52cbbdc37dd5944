"""
Date parsing, formatting and day-boundary utilities.

The grid builder and the media index both derive calendar days through
``day_key`` so that a timestamp always lands on the same cell.
"""

from datetime import date, datetime, time, tzinfo
from typing import Any, Optional


def parse_date(date_str: Optional[str]) -> Optional[date]:
    """
    Parse a date string into a date object.

    Handles various formats:
    - ISO format (YYYY-MM-DD)
    - ISO datetime (YYYY-MM-DDTHH:MM:SS)

    Args:
        date_str: Date string to parse

    Returns:
        Parsed date object or None if invalid
    """
    if not date_str:
        return None

    # Take only date part if it's a datetime string
    if 'T' in date_str:
        date_str = date_str.split('T')[0]

    try:
        return datetime.strptime(date_str.strip(), '%Y-%m-%d').date()
    except ValueError:
        return None


def format_date(d: Optional[date]) -> Optional[str]:
    """
    Format a date object as ISO string (YYYY-MM-DD).

    Args:
        d: Date object to format

    Returns:
        ISO formatted date string or None
    """
    if not d:
        return None

    return d.strftime('%Y-%m-%d')


def to_local(moment: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Convert an aware timestamp to ``tz`` (system local when None).

    Naive timestamps are taken to be local wall-clock time already.
    """
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(tz)


def day_key(value: Any, tz: Optional[tzinfo] = None) -> date:
    """
    Truncate a value to its calendar day.

    Accepts a ``datetime`` (converted to ``tz`` first), a ``date``, or any
    object with a ``date`` attribute holding one of those (e.g. CalendarDay).
    """
    if isinstance(value, datetime):
        return to_local(value, tz).date()
    if isinstance(value, date):
        return value
    inner = getattr(value, 'date', None)
    if isinstance(inner, (date, datetime)):
        return day_key(inner, tz)
    raise TypeError(f"Cannot derive a calendar day from {value!r}")


def start_of_day(d: date, tz: Optional[tzinfo] = None) -> datetime:
    """Return the aware datetime at midnight of ``d`` in ``tz``."""
    naive = datetime.combine(d, time.min)
    if tz is None:
        return naive.astimezone()
    return naive.replace(tzinfo=tz)


def local_now(tz: Optional[tzinfo] = None) -> datetime:
    """Current aware time in ``tz`` (system local when None)."""
    return datetime.now(tz).astimezone(tz)
