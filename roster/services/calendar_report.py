"""
Calendar Reports
Year views of a user's resolved availability
"""
import logging
from datetime import date
from typing import Any, Dict, Optional

from roster.error_handlers.exceptions import ResourceNotFoundException
from roster.services.availability_resolver import AvailabilityResolver
from roster.services.availability_types import parse_exceptions, parse_rules
from roster.services.week_parity import DEFAULT_WEEK_START, end_of_week, week_number, weeks_in_range
from roster.utils.dates import WEEKDAY_NAMES, each_day, format_date, parse_date, weekday_name

logger = logging.getLogger(__name__)

DEFAULT_REPORT_WEEK_START = 'Sunday'
DEFAULT_WORK_WEEK_DAYS = WEEKDAY_NAMES[:5]
DEFAULT_DAY_PARTS = ['am', 'pm']


def _narrow(value: Optional[str], year_start: date, year_end: date, fallback: date) -> date:
    """Use a requested bound only when it lies inside the year."""
    if not value:
        return fallback
    try:
        requested = parse_date(value)
    except ValueError:
        return fallback
    return requested if year_start <= requested <= year_end else fallback


class CalendarReport:
    """Builds availability reports from stored rules and exceptions"""

    def __init__(self, repository, resolver: AvailabilityResolver,
                 numbering_week_start: str = DEFAULT_WEEK_START):
        self.repository = repository
        self.resolver = resolver
        self.numbering_week_start = numbering_week_start

    def _user_context(self, site: str, user_id: str):
        site_data = self.repository.read_site(site)
        user = next((u for u in site_data['users'] if u.get('id') == user_id), None)
        if user is None:
            raise ResourceNotFoundException(f"User {user_id} not found")
        settings = self.repository.read_user_settings(site, user_id)
        rules = parse_rules(settings.get('availability'))
        exceptions = parse_exceptions(settings.get('availabilityExceptions'))
        return site_data, user, rules, exceptions

    def build_calendar_report(self, site: str, user_id: str, year: int,
                              start: Optional[str] = None, end: Optional[str] = None) -> Dict[str, Any]:
        """
        Week-by-week availability of a user for a year

        Weeks follow the site's ``app.weekStartsOn`` setting; the optional
        start/end only narrow the range when they fall inside the year.

        Raises:
            ResourceNotFoundException: If the site or user does not exist
        """
        site_data, user, rules, exceptions = self._user_context(site, user_id)
        app_settings = site_data.get('app') or {}
        week_starts_on = app_settings.get('weekStartsOn') or DEFAULT_REPORT_WEEK_START
        if week_starts_on not in WEEKDAY_NAMES:
            week_starts_on = DEFAULT_REPORT_WEEK_START

        year_start, year_end = date(year, 1, 1), date(year, 12, 31)
        range_start = _narrow(start, year_start, year_end, year_start)
        range_end = _narrow(end, year_start, year_end, year_end)

        week_starts = weeks_in_range(range_start, range_end, week_starts_on)
        resolved = {}
        if week_starts:
            resolved = self.resolver.resolve_range(
                week_starts[0], end_of_week(week_starts[-1], week_starts_on), rules, exceptions
            )

        weeks = []
        for week_start in week_starts:
            days = []
            for day in each_day(week_start, end_of_week(week_start, week_starts_on)):
                days.append({
                    'date': format_date(day),
                    'day': day.day,
                    'month': day.month,
                    'year': day.year,
                    'dayOfWeek': weekday_name(day),
                    'availability': resolved[day].to_dict(),
                })
            weeks.append({
                'weekNumber': week_number(week_start, self.numbering_week_start),
                'days': days,
            })

        return {
            'year': year,
            'userId': user_id,
            'userName': f"{user.get('firstName', '')} {user.get('lastName', '')}".strip(),
            'weekStartsOn': week_starts_on,
            'workWeekDays': app_settings.get('workWeekDays') or DEFAULT_WORK_WEEK_DAYS,
            'dayParts': app_settings.get('dayParts') or DEFAULT_DAY_PARTS,
            'weeks': weeks,
            'dateRange': {
                'start': format_date(range_start),
                'end': format_date(range_end),
            },
        }

    def build_availability_report(self, site: str, user_id: str, year: int) -> Dict[str, Any]:
        """
        Resolved availability of every day of a year keyed by date

        Raises:
            ResourceNotFoundException: If the site or user does not exist
        """
        site_data, _, rules, exceptions = self._user_context(site, user_id)
        app_settings = site_data.get('app') or {}
        resolved = self.resolver.resolve_range(date(year, 1, 1), date(year, 12, 31), rules, exceptions)
        logger.debug(f"Resolved {len(resolved)} days for user {user_id} in {year}")
        return {
            'year': year,
            'userId': user_id,
            'workWeekDays': app_settings.get('workWeekDays') or DEFAULT_WORK_WEEK_DAYS,
            'dayParts': app_settings.get('dayParts') or DEFAULT_DAY_PARTS,
            'availability': {format_date(day): slot.to_dict() for day, slot in resolved.items()},
        }
