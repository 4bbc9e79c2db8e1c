"""Date/time helpers"""
from datetime import date, datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """
    Current UTC time as a naive datetime.

    Returns:
        datetime: UTC wall-clock time without tzinfo, the form stored in the database
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today() -> date:
    """Current UTC calendar date"""
    return datetime.now(timezone.utc).date()


def to_calendar_date(value: Optional[date | datetime | str]) -> Optional[date]:
    """
    Reduce a date-like value to its calendar date.

    Accepts date, datetime (time-of-day and offset are dropped) and ISO 8601
    strings such as "2025-03-01" or "2025-03-01T10:30:00Z". Empty strings map to None.

    Raises:
        ValueError: If a string cannot be parsed as an ISO date or datetime
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = value.strip()
    if not text:
        return None
    if len(text) == 10:
        return date.fromisoformat(text)
    # fromisoformat only understands a trailing "Z" from Python 3.11 on
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text).date()


def later_of(candidate: datetime, *previous: Optional[datetime]) -> datetime:
    """
    Return candidate unless an earlier recorded timestamp is later than it.

    Keeps mutation timestamps from moving backwards when the clock regresses.
    """
    result = candidate
    for value in previous:
        if value is not None and value > result:
            result = value
    return result
