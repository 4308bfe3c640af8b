"""
Date utility functions for the profile harvester.

The ledger keys its quota on the UTC calendar day; checkpoints are stored
as ISO-8601 timestamps.
"""

import calendar
from datetime import datetime, timedelta, timezone
from typing import Optional
from src.core.logging import get_logger

logger = get_logger(__name__)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_day(dt: Optional[datetime] = None) -> str:
    """
    ISO date (YYYY-MM-DD) of the UTC day containing dt.

    Example:
        >>> utc_day(datetime(2026, 1, 8, 23, 30, tzinfo=timezone.utc))
        '2026-01-08'
    """
    dt = dt or utc_now()
    return ensure_utc(dt).date().isoformat()


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def next_utc_midnight(dt: Optional[datetime] = None) -> datetime:
    """Start of the UTC day after dt."""
    dt = ensure_utc(dt or utc_now())
    start = dt.replace(hour=0, minute=0, second=0, microsecond=0)
    return start + timedelta(days=1)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO timestamp or a plain YYYY-MM-DD date into an aware datetime.

    Returns:
        Parsed UTC datetime or None if parsing fails

    Examples:
        >>> parse_timestamp("2026-01-08").isoformat()
        '2026-01-08T00:00:00+00:00'

        >>> parse_timestamp("not a date") is None
        True
    """
    if not value:
        return None

    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(text))
    except ValueError:
        pass

    try:
        return datetime.strptime(text[:10], "%Y-%m-%d").replace(tzinfo=timezone.utc)
    except ValueError:
        logger.debug(f"Could not parse timestamp: {value!r}")
        return None


def subtract_months(dt: datetime, months: int) -> datetime:
    """
    Same wall-clock time `months` calendar months earlier, clamping the day.

    Example:
        >>> subtract_months(datetime(2026, 5, 31), 3)
        datetime.datetime(2026, 2, 28, 0, 0)
    """
    month_index = dt.year * 12 + (dt.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def is_older_than_months(last: Optional[datetime], months: int, now: Optional[datetime] = None) -> bool:
    """True when last is missing or earlier than `months` months before now."""
    if last is None:
        return True
    now = ensure_utc(now or utc_now())
    return ensure_utc(last) < subtract_months(now, months)
