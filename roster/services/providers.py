"""
Service construction for request handlers

Services are cheap to build and hold no state between requests, so each
request builds its own from the app config and repository.
"""
from flask import current_app

from roster.storage import get_repository
from .availability_resolver import AvailabilityResolver
from .calendar_report import CalendarReport
from .grid_builder import DesiderataReview
from .period_registry import PeriodRegistry
from .quota_validator import QuotaValidator


def get_period_registry() -> PeriodRegistry:
    return PeriodRegistry.from_config(get_repository(), current_app.config)


def get_quota_validator() -> QuotaValidator:
    return QuotaValidator(get_repository(), get_period_registry())


def get_desiderata_review() -> DesiderataReview:
    return DesiderataReview(get_repository(), get_period_registry())


def get_resolver() -> AvailabilityResolver:
    return AvailabilityResolver.from_config(current_app.config)


def get_calendar_report() -> CalendarReport:
    return CalendarReport(
        get_repository(),
        get_resolver(),
        numbering_week_start=current_app.config.get('WEEK_START_DAY', 'Saturday'),
    )
