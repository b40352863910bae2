"""
Quota Calculator
Converts an inclusive date range into desiderata quota units
"""
import math
from dataclasses import dataclass
from datetime import date

from roster.error_handlers.exceptions import ValidationException
from roster.utils.dates import each_day, format_date, is_weekend

WEEKEND_DAY_UNITS = 0.5
WORKING_DAY_UNITS = 1


@dataclass(frozen=True)
class EventDays:
    weekends: float
    working_days: float

    def to_dict(self):
        return {'weekends': self.weekends, 'workingDays': self.working_days}


def calculate_event_days(start: date, end: date) -> EventDays:
    """
    Quota units consumed by one event spanning [start, end]

    Each Saturday or Sunday counts half a weekend unit and every other day one
    working-day unit. The weekend total is rounded up per event, so a single
    weekend day costs a whole unit while a full weekend also costs one.

    Raises:
        ValidationException: If end is before start
    """
    if end < start:
        raise ValidationException(
            f"End date {format_date(end)} is before start date {format_date(start)}"
        )

    weekends = 0.0
    working_days = 0
    for day in each_day(start, end):
        if is_weekend(day):
            weekends += WEEKEND_DAY_UNITS
        else:
            working_days += WORKING_DAY_UNITS

    return EventDays(weekends=math.ceil(weekends), working_days=working_days)
