"""
Period Registry
Administers the named, non-overlapping date windows of a site per year
"""
import logging
import uuid
from datetime import date, datetime
from numbers import Number
from typing import Any, Dict, List, Optional

from roster.error_handlers.exceptions import ResourceNotFoundException, ValidationException
from roster.services.availability_types import EditingStatus, Period
from roster.utils.dates import format_date
from roster.utils.validators import DATE_FORMAT, validate_year

logger = logging.getLogger(__name__)

REQUIRED_PERIOD_FIELDS = ('name', 'startDate', 'endDate', 'editingStatus')
EDITING_STATUSES = [status.value for status in EditingStatus]
QUOTA_FIELDS = ('allowedWeekendDesiderata', 'allowedWorkingDayDesiderata')


def _timestamp() -> str:
    return datetime.utcnow().isoformat() + 'Z'


def _parse_period_date(period: Dict[str, Any], field: str) -> date:
    try:
        return datetime.strptime(str(period[field]), DATE_FORMAT).date()
    except ValueError:
        raise ValidationException(
            f'Invalid {field} for period "{period.get("name")}". Expected YYYY-MM-DD',
            details={'field': field, 'period': period.get('name')}
        )


def validate_periods(periods: Any) -> None:
    """
    Validate a complete set of periods for one site and year

    Checks run in a fixed order and the first failure aborts:
        1. name, startDate, endDate and editingStatus are present
        2. endDate is strictly after startDate
        3. sorted by startDate, no period ends on or after the next one starts

    Touching periods (one ends on the day the next starts) overlap.

    Raises:
        ValidationException: Naming the offending period(s)
    """
    if not isinstance(periods, list):
        raise ValidationException('Periods must be a list')

    for index, period in enumerate(periods):
        if not isinstance(period, dict):
            raise ValidationException(f'Period at position {index} must be an object')
        missing = [f for f in REQUIRED_PERIOD_FIELDS if period.get(f) in (None, '')]
        if missing:
            name = period.get('name') or f'#{index + 1}'
            raise ValidationException(
                f'Period "{name}" is missing required fields: {", ".join(missing)}',
                details={'period': period.get('name'), 'missing_fields': missing}
            )
        if period['editingStatus'] not in EDITING_STATUSES:
            raise ValidationException(
                f'Invalid editingStatus "{period["editingStatus"]}" for period "{period["name"]}"',
                details={'allowed': EDITING_STATUSES}
            )
        quotas = period.get('quotas')
        if quotas is not None:
            if not isinstance(quotas, dict):
                raise ValidationException(f'Quotas of period "{period["name"]}" must be an object')
            for field in QUOTA_FIELDS:
                value = quotas.get(field, 0)
                if isinstance(value, bool) or not isinstance(value, Number) or value < 0:
                    raise ValidationException(
                        f'{field} of period "{period["name"]}" must be a non-negative number'
                    )

    bounds = []
    for period in periods:
        start = _parse_period_date(period, 'startDate')
        end = _parse_period_date(period, 'endDate')
        if end <= start:
            raise ValidationException(
                f'End date must be after start date for period "{period["name"]}"',
                details={'period': period['name']}
            )
        bounds.append((start, end, period['name']))

    bounds.sort(key=lambda b: b[0])
    for current, following in zip(bounds, bounds[1:]):
        if current[1] >= following[0]:
            raise ValidationException(
                f'Periods "{current[2]}" and "{following[2]}" overlap',
                details={'periods': [current[2], following[2]]}
            )


def default_periods(year: int) -> List[Dict[str, Any]]:
    """The four standard periods of ``year`` without ids or timestamps"""
    return [
        {
            'name': 'Christmas to Easter',
            'startDate': format_date(date(year - 1, 12, 23)),
            'endDate': format_date(date(year, 4, 15)),
            'editingStatus': EditingStatus.CLOSED.value,
        },
        {
            'name': 'Easter to June',
            'startDate': format_date(date(year, 4, 16)),
            'endDate': format_date(date(year, 6, 30)),
            'editingStatus': EditingStatus.OPEN_HOLIDAY.value,
        },
        {
            'name': 'July to August',
            'startDate': format_date(date(year, 7, 1)),
            'endDate': format_date(date(year, 8, 31)),
            'editingStatus': EditingStatus.OPEN_DESIDERATA.value,
        },
        {
            'name': 'September to Christmas',
            'startDate': format_date(date(year, 9, 1)),
            'endDate': format_date(date(year + 1, 1, 7)),
            'editingStatus': EditingStatus.CLOSED.value,
        },
    ]


class PeriodRegistry:
    """
    Reads and writes the periods document of a site and year

    Saves validate the whole set first and then replace the document in a
    single write, so a rejected save leaves the stored periods untouched.
    """

    def __init__(self, repository, min_year: int = 2020, max_year: int = 2030):
        self.repository = repository
        self.min_year = min_year
        self.max_year = max_year

    @classmethod
    def from_config(cls, repository, config) -> 'PeriodRegistry':
        return cls(
            repository,
            min_year=config.get('PERIOD_MIN_YEAR', 2020),
            max_year=config.get('PERIOD_MAX_YEAR', 2030),
        )

    def validate_year(self, year: Any) -> int:
        return validate_year(year, self.min_year, self.max_year)

    def get_periods(self, site: str, year: int) -> Dict[str, Any]:
        return self.repository.read_periods(site, year)

    def save_periods(self, site: str, year: int, periods: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Validate and store the complete period list of a site/year

        Periods without an id get a new UUID; createdAt is kept for existing
        periods and updatedAt is refreshed on every save.

        Returns:
            The stored periods document

        Raises:
            ValidationException: If any period is invalid; nothing is written
        """
        validate_periods(periods)

        now = _timestamp()
        stored = []
        for period in periods:
            entry = dict(period)
            entry['id'] = entry.get('id') or str(uuid.uuid4())
            entry['createdAt'] = entry.get('createdAt') or now
            entry['updatedAt'] = now
            stored.append(entry)

        document = {
            'year': int(year),
            'site': site,
            'periods': stored,
            'lastUpdated': now,
        }
        self.repository.write_periods(site, year, document)
        logger.info(f"Saved {len(stored)} periods for site {site}, year {year}")
        return document

    def reset_periods(self, site: str, year: int) -> Dict[str, Any]:
        """Overwrite the periods of a site/year with the four defaults"""
        logger.info(f"Resetting periods for site {site}, year {year} to defaults")
        return self.save_periods(site, year, default_periods(int(year)))

    def find_period(self, site: str, period_id: str, year_hint: Optional[int] = None) -> Optional[Period]:
        """
        Look a period up by id

        Periods straddle year boundaries, so after the hinted year the
        previous and next years are searched too.

        Returns:
            Period, or None when no year holds the id
        """
        hint = int(year_hint) if year_hint else date.today().year
        for year in (hint, hint - 1, hint + 1):
            for raw in self.repository.read_periods(site, year).get('periods', []):
                if raw.get('id') == period_id:
                    return Period.from_dict(raw)
        return None

    def get_period(self, site: str, period_id: str, year_hint: Optional[int] = None) -> Period:
        """
        Raises:
            ResourceNotFoundException: If the period does not exist
        """
        period = self.find_period(site, period_id, year_hint)
        if period is None:
            raise ResourceNotFoundException(f"Period {period_id} not found")
        return period
