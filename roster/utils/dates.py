"""
Calendar date helpers shared by the availability and quota services
"""
from datetime import date, datetime, timedelta
from typing import Iterator, Union

WEEKDAY_NAMES = ['Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday']
WEEKEND_DAYS = (5, 6)  # Saturday, Sunday


def parse_date(value: Union[str, date, datetime]) -> date:
    """
    Parse a stored date value.

    Stored documents hold plain ``YYYY-MM-DD`` strings, but some events carry a
    full ISO timestamp; only the calendar date is significant.

    Raises:
        ValueError: If the value cannot be read as a date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected an ISO date string, got {type(value).__name__}")
    if len(value) > 10:
        return datetime.fromisoformat(value.replace('Z', '+00:00')).date()
    return date.fromisoformat(value)


def format_date(value: date) -> str:
    return value.strftime('%Y-%m-%d')


def each_day(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day in [start, end]; nothing when end < start."""
    # Offsets from start, so a range ending on date.max never steps past it
    for offset in range((end - start).days + 1):
        yield start + timedelta(days=offset)


def is_weekend(day: date) -> bool:
    return day.weekday() in WEEKEND_DAYS


def weekday_name(day: date) -> str:
    return WEEKDAY_NAMES[day.weekday()]


def weekday_index(name: str) -> int:
    """
    Convert a weekday name to Python's weekday index (Monday=0).

    Raises:
        ValueError: If the name is not a weekday
    """
    try:
        return WEEKDAY_NAMES.index(name.capitalize())
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid weekday name: {name!r}")
