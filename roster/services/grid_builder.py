"""
Grid Builder
Per-day, per-user presence matrix for reviewing desiderata requests
"""
import logging
from typing import Any, Dict, Iterable, List

from roster.error_handlers.exceptions import ResourceNotFoundException, StorageException
from roster.services.availability_types import Period
from roster.utils.dates import each_day, format_date, parse_date

logger = logging.getLogger(__name__)

MARKED = 'X'
UNMARKED = ''


def build_grid(period: Period, events: Iterable[Dict[str, Any]], user_ids: List[str]) -> List[Dict[str, Any]]:
    """
    One row per day of the period with a column per user

    Args:
        period: Period whose days form the rows
        events: Dicts with userId, date and optional endDate
        user_ids: Column order

    Returns:
        Rows like ``{'date': '2026-07-01', 'u1': 'X', 'u2': '', 'total': 1}``
    """
    marked = set()
    for event in events:
        start = parse_date(event['date'])
        end = parse_date(event['endDate']) if event.get('endDate') else start
        for day in each_day(start, end):
            marked.add((event['userId'], day))

    rows = []
    for day in each_day(period.start_date, period.end_date):
        row = {'date': format_date(day)}
        total = 0
        for user_id in user_ids:
            present = (user_id, day) in marked
            row[user_id] = MARKED if present else UNMARKED
            total += present
        row['total'] = total
        rows.append(row)
    return rows


class DesiderataReview:
    """Collects pending desiderata requests of a whole site for one period"""

    def __init__(self, repository, periods):
        self.repository = repository
        self.periods = periods

    def pending_desiderata_by_period(self, site: str, year: int, period_id: str) -> Dict[str, Any]:
        """
        Pending requests of every site user inside a period, with the grid

        A request counts when it is a pending ``requestedDesiderata`` event
        that starts on or after the period start and ends on or before its end.

        Raises:
            ResourceNotFoundException: If the period or site does not exist
        """
        period = None
        for raw in self.periods.get_periods(site, year).get('periods', []):
            if raw.get('id') == period_id:
                period = Period.from_dict(raw)
                break
        if period is None:
            raise ResourceNotFoundException(f"Period {period_id} not found for year {year}")

        site_data = self.repository.read_site(site)
        requests = []
        for user in site_data['users']:
            user_id = user.get('id')
            try:
                events = self.repository.read_user_events(site, user_id)
                for event in events:
                    if event.get('type') != 'requestedDesiderata' or event.get('status') != 'pending':
                        continue
                    start = parse_date(event['date'])
                    end = parse_date(event['endDate']) if event.get('endDate') else start
                    if start >= period.start_date and end <= period.end_date:
                        requests.append({
                            'userId': user_id,
                            'id': event.get('id'),
                            'date': event['date'],
                            'endDate': event.get('endDate') or event['date'],
                        })
            except (StorageException, KeyError, TypeError, ValueError) as e:
                logger.error(f"Failed to get events for user {user_id}: {e}")
                continue

        user_ids = [u.get('id') for u in site_data['users']]
        return {
            'desiderata': requests,
            'grid': build_grid(period, requests, user_ids),
        }
