"""
Quota Validator
Checks desiderata requests against the quotas of their period and maintains
the cached per-user usage
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from roster.error_handlers.exceptions import (
    AppException,
    ConfigurationException,
    ResourceNotFoundException,
)
from roster.services.availability_types import (
    DesiderataUsage,
    Event,
    Period,
    QuotaValidationResult,
)
from roster.services.period_registry import PeriodRegistry
from roster.services.quota_calculator import calculate_event_days
from roster.utils.dates import parse_date

logger = logging.getLogger(__name__)

QUOTA_EVENT_TYPES = ('desiderata',)

QUOTAS_NOT_CONFIGURED = "Period quotas not configured"
QUOTA_EXCEEDED = "Desiderata quota exceeded"


def _timestamp() -> str:
    return datetime.utcnow().isoformat() + 'Z'


def events_in_period(raw_events: List[Dict[str, Any]], period: Period,
                     exclude_event_id: Optional[str] = None) -> List[Event]:
    """
    Quota-consuming events whose start date lies inside the period

    Raises:
        ValueError: If a relevant event carries an unreadable date
    """
    relevant = []
    for raw in raw_events:
        if raw.get('type') not in QUOTA_EVENT_TYPES:
            continue
        if exclude_event_id and raw.get('id') == exclude_event_id:
            continue
        event = Event.from_dict(raw)
        if period.contains(event.date):
            relevant.append(event)
    return relevant


def sum_event_days(events: List[Event]) -> Tuple[float, float]:
    weekends, working_days = 0, 0
    for event in events:
        days = calculate_event_days(event.date, event.effective_end)
        weekends += days.weekends
        working_days += days.working_days
    return weekends, working_days


class QuotaValidator:
    """
    Desiderata quota checks for one repository

    ``validate`` is a predicate used inline in request handling: every failure
    becomes a result with ``valid=False`` and an error message. The other
    operations raise like any service.
    """

    def __init__(self, repository, periods: PeriodRegistry):
        self.repository = repository
        self.periods = periods

    def compute_usage(self, site: str, user_id: str, period: Period,
                      exclude_event_id: Optional[str] = None) -> Tuple[float, float]:
        """Replay the user's stored events into (weekends, working days) used"""
        raw_events = self.repository.read_user_events(site, user_id)
        return sum_event_days(events_in_period(raw_events, period, exclude_event_id))

    def validate(self, site: str, user_id: str, period_id: str,
                 candidate_start, candidate_end,
                 exclude_event_id: Optional[str] = None) -> QuotaValidationResult:
        """
        Check whether a new or edited desiderata request fits the period quota

        Args:
            site: Site name
            user_id: Requesting user
            period_id: Period the request belongs to
            candidate_start: First day of the request
            candidate_end: Last day of the request
            exclude_event_id: Stored event being edited, left out of the usage

        Returns:
            QuotaValidationResult; remainings are never negative
        """
        try:
            start = parse_date(candidate_start)
            end = parse_date(candidate_end)

            period = self.periods.find_period(site, period_id, start.year)
            if period is None:
                return QuotaValidationResult.failure(f"Period {period_id} not found")
            if period.quotas is None:
                return QuotaValidationResult.failure(QUOTAS_NOT_CONFIGURED)

            candidate = calculate_event_days(start, end)
            used_weekends, used_working_days = self.compute_usage(site, user_id, period, exclude_event_id)

            total_weekends = used_weekends + candidate.weekends
            total_working_days = used_working_days + candidate.working_days
            allowed_weekends = period.quotas.allowed_weekend_desiderata
            allowed_working_days = period.quotas.allowed_working_day_desiderata
            weekends_remaining = allowed_weekends - total_weekends
            working_days_remaining = allowed_working_days - total_working_days
            valid = weekends_remaining >= 0 and working_days_remaining >= 0

            return QuotaValidationResult(
                valid=valid,
                weekends_used=total_weekends,
                working_days_used=total_working_days,
                weekends_allowed=allowed_weekends,
                working_days_allowed=allowed_working_days,
                weekends_remaining=max(0, weekends_remaining),
                working_days_remaining=max(0, working_days_remaining),
                error=None if valid else QUOTA_EXCEEDED,
            )
        except (AppException, ValueError, TypeError, KeyError) as e:
            logger.error(f"Failed to validate desiderata quota for user {user_id}: {e}")
            message = e.message if isinstance(e, AppException) else str(e)
            return QuotaValidationResult.failure(message or "Validation failed")

    def recalculate_user_desiderata(self, site: str, user_id: str, period_id: str,
                                    year_hint: Optional[int] = None) -> DesiderataUsage:
        """
        Recompute a user's usage for a period and store it on the site document

        The stored entry is only rewritten when the totals changed, so running
        this twice leaves the document byte-identical.

        Raises:
            ResourceNotFoundException: If the period or user does not exist
        """
        period = self.periods.get_period(site, period_id, year_hint)
        weekends, working_days = self.compute_usage(site, user_id, period)

        def apply(site_data):
            user = next((u for u in site_data.get('users', []) if u.get('id') == user_id), None)
            if user is None:
                raise ResourceNotFoundException(f"User {user_id} not found")
            usage = user.setdefault('desiderataUsage', {})
            current = usage.get(period_id) or {}
            if current.get('weekendsUsed') == weekends and current.get('workingDaysUsed') == working_days:
                return DesiderataUsage.from_dict(current)
            entry = DesiderataUsage(weekends, working_days, _timestamp())
            usage[period_id] = entry.to_dict()
            return entry

        result = self.repository.update_site(site, apply)
        logger.info(
            f"Recalculated desiderata for user {user_id}, period {period_id}: "
            f"{weekends} weekends, {working_days} working days"
        )
        return result

    def get_user_usage(self, site: str, user_id: str, period_id: str) -> DesiderataUsage:
        """Cached usage of a user for a period; zeros when nothing is cached"""
        user = self.repository.find_user(site, user_id)
        cached = (user.get('desiderataUsage') or {}).get(period_id)
        if not cached:
            return DesiderataUsage(0, 0, _timestamp())
        return DesiderataUsage.from_dict(cached)

    def quota_summary(self, site: str, user_id: str, period_id: str,
                      year_hint: Optional[int] = None) -> Dict[str, Any]:
        """
        Quota and cached usage of a user for a period

        Raises:
            ResourceNotFoundException: If the period does not exist
            ConfigurationException: If the period has no quotas
        """
        period = self.periods.get_period(site, period_id, year_hint or date.today().year)
        if period.quotas is None:
            raise ConfigurationException(QUOTAS_NOT_CONFIGURED, details={'periodId': period_id})

        usage = self.get_user_usage(site, user_id, period_id)
        quotas = period.quotas
        return {
            'periodId': period_id,
            'periodName': period.name,
            'quotas': quotas.to_dict(),
            'usage': {
                'weekendsUsed': usage.weekends_used,
                'workingDaysUsed': usage.working_days_used,
                'weekendsRemaining': max(0, quotas.allowed_weekend_desiderata - usage.weekends_used),
                'workingDaysRemaining': max(0, quotas.allowed_working_day_desiderata - usage.working_days_used),
            },
            'lastUpdated': usage.last_updated,
        }
