"""
Services package for availability resolution and desiderata quotas
"""

from .availability_types import (
    TimeSlot,
    WeeklySchedule,
    AvailabilityRule,
    AvailabilityException,
    RepeatPattern,
    EditingStatus,
    Period,
    PeriodQuotas,
    Event,
    DesiderataUsage,
    QuotaValidationResult,
)

from .week_parity import week_number, WeekNumberParity, RuleStartParity, get_parity_strategy
from .exception_overlay import ExceptionOverlay
from .availability_resolver import AvailabilityResolver
from .quota_calculator import EventDays, calculate_event_days
from .period_registry import PeriodRegistry, validate_periods, default_periods
from .quota_validator import QuotaValidator
from .grid_builder import DesiderataReview, build_grid
from .calendar_report import CalendarReport

__all__ = [
    # Types
    'TimeSlot',
    'WeeklySchedule',
    'AvailabilityRule',
    'AvailabilityException',
    'RepeatPattern',
    'EditingStatus',
    'Period',
    'PeriodQuotas',
    'Event',
    'DesiderataUsage',
    'QuotaValidationResult',
    'EventDays',
    # Week numbering
    'week_number',
    'WeekNumberParity',
    'RuleStartParity',
    'get_parity_strategy',
    # Services
    'ExceptionOverlay',
    'AvailabilityResolver',
    'calculate_event_days',
    'PeriodRegistry',
    'validate_periods',
    'default_periods',
    'QuotaValidator',
    'DesiderataReview',
    'build_grid',
    'CalendarReport',
]
