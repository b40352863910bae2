"""
Week numbering and even/odd week classification

Weeks start on a configurable day (Saturday by default). Week 1 of a year is
the week that contains 1 January, so the last days of December can belong to
week 1 of the following year.
"""
from datetime import MAXYEAR, date, timedelta
from typing import List

from roster.error_handlers.exceptions import ConfigurationException
from roster.utils.dates import weekday_index

DEFAULT_WEEK_START = 'Saturday'


def start_of_week(day: date, week_start: str = DEFAULT_WEEK_START) -> date:
    offset = (day.weekday() - weekday_index(week_start)) % 7
    return day - timedelta(days=offset)


def end_of_week(day: date, week_start: str = DEFAULT_WEEK_START) -> date:
    return start_of_week(day, week_start) + timedelta(days=6)


def week_year(day: date, week_start: str = DEFAULT_WEEK_START) -> int:
    """Year that the week containing ``day`` is numbered in."""
    # date.max has no following year to roll into
    if day.year < MAXYEAR and day >= start_of_week(date(day.year + 1, 1, 1), week_start):
        return day.year + 1
    if day >= start_of_week(date(day.year, 1, 1), week_start):
        return day.year
    return day.year - 1


def week_number(day: date, week_start: str = DEFAULT_WEEK_START) -> int:
    """
    Week-of-year of ``day``.

    A week runs from ``week_start`` through the six following days and is
    numbered within the year whose 1 January it contains.

    Example (Saturday start):
        week_number(date(2026, 1, 3)) == 2   # Saturday
        week_number(date(2026, 1, 9)) == 2   # following Friday
        week_number(date(2026, 1, 10)) == 3  # next Saturday
    """
    first_week = start_of_week(date(week_year(day, week_start), 1, 1), week_start)
    return (start_of_week(day, week_start) - first_week).days // 7 + 1


def weeks_in_range(start: date, end: date, week_start: str = DEFAULT_WEEK_START) -> List[date]:
    """Start dates of every week overlapping [start, end]."""
    if end < start:
        return []
    first = start_of_week(start, week_start)
    return [first + timedelta(days=7 * n) for n in range((end - first).days // 7 + 1)]


class WeekNumberParity:
    """Parity of the date's week number; the rule's own start date plays no part"""

    name = 'week-number'

    def __init__(self, week_start: str = DEFAULT_WEEK_START):
        weekday_index(week_start)
        self.week_start = week_start

    def parity(self, day: date, rule=None) -> int:
        return week_number(day, self.week_start) % 2


class RuleStartParity:
    """Parity of the number of whole weeks elapsed since the rule started"""

    name = 'rule-start'

    def parity(self, day: date, rule=None) -> int:
        if rule is None:
            raise ValueError("rule-start parity needs the matching rule")
        return ((day - rule.start_date).days // 7) % 2


PARITY_STRATEGIES = {
    WeekNumberParity.name: WeekNumberParity,
    RuleStartParity.name: RuleStartParity,
}


def get_parity_strategy(name: str = WeekNumberParity.name, week_start: str = DEFAULT_WEEK_START):
    """
    Build a parity strategy by its configured name

    Raises:
        ConfigurationException: If the name or week start is unknown
    """
    if name not in PARITY_STRATEGIES:
        raise ConfigurationException(
            f"Unknown week parity strategy '{name}'",
            details={'available': sorted(PARITY_STRATEGIES)}
        )
    if name == WeekNumberParity.name:
        try:
            return WeekNumberParity(week_start)
        except ValueError as e:
            raise ConfigurationException(str(e))
    return RuleStartParity()
