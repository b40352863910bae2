"""
Data classes for availability rules, periods, events and desiderata quotas

Each type reads and writes the JSON shape stored in the site documents, so
field names on the wire (startDate, weeklySchedule, ...) stay unchanged.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from roster.error_handlers.exceptions import ValidationException
from roster.utils.dates import WEEKDAY_NAMES, format_date, parse_date
from roster.utils.validators import validate_date_param, validate_optional_date_param

REQUIRED_WEEKDAYS = WEEKDAY_NAMES[:5]
OPTIONAL_WEEKDAYS = WEEKDAY_NAMES[5:]


class RepeatPattern(str, Enum):
    """How a rule's weekly schedule repeats"""
    ALL = "all"  # Same pattern every week
    EVEN_ODD = "evenodd"  # Primary pattern on even weeks, alternate on odd weeks


class EditingStatus(str, Enum):
    """What users may edit inside a period"""
    CLOSED = "closed"
    OPEN_HOLIDAY = "open-holiday"
    OPEN_DESIDERATA = "open-desiderata"


@dataclass(frozen=True)
class TimeSlot:
    """Morning/afternoon availability for one day"""
    am: bool = False
    pm: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {'am': self.am, 'pm': self.pm}


UNAVAILABLE = TimeSlot(False, False)


@dataclass
class WeeklySchedule:
    """Weekday name -> TimeSlot; weekdays without an entry are unavailable"""
    slots: Dict[str, TimeSlot] = field(default_factory=dict)

    def slot_for(self, weekday: str) -> TimeSlot:
        return self.slots.get(weekday, UNAVAILABLE)

    @classmethod
    def from_dict(cls, data: Any, field_name: str = 'weeklySchedule', strict: bool = True) -> 'WeeklySchedule':
        """
        Build a schedule from ``{"Monday": {"am": true, "pm": false}, ...}``.

        With ``strict`` the five working days are required and every slot must
        carry boolean ``am``/``pm`` values.

        Raises:
            ValidationException: If strict validation fails
        """
        if not isinstance(data, dict):
            if strict:
                raise ValidationException(f"{field_name} must be an object", details={'field': field_name})
            return cls()

        errors = []
        slots = {}
        for weekday in WEEKDAY_NAMES:
            raw = data.get(weekday)
            if raw is None:
                if weekday in REQUIRED_WEEKDAYS:
                    errors.append(f"{field_name}.{weekday} is required")
                continue
            if not isinstance(raw, dict):
                errors.append(f"{field_name}.{weekday} must be an object")
                continue
            am, pm = raw.get('am'), raw.get('pm')
            if not isinstance(am, bool) or not isinstance(pm, bool):
                errors.append(f"{field_name}.{weekday} needs boolean am and pm")
                am, pm = bool(am), bool(pm)
            slots[weekday] = TimeSlot(am, pm)

        if strict and errors:
            raise ValidationException('Validation error', details={'errors': errors})
        return cls(slots)

    def to_dict(self) -> Dict[str, Dict[str, bool]]:
        return {weekday: self.slots[weekday].to_dict() for weekday in WEEKDAY_NAMES if weekday in self.slots}


@dataclass
class AvailabilityRule:
    """
    A recurring weekly availability schedule valid between two dates

    ``alternate_week_schedule`` is the pattern used on odd weeks when
    ``repeat_pattern`` is ``evenodd``. It is stored as ``oddWeeklySchedule``;
    ``alternateWeekSchedule`` is accepted as an input alias.
    """
    start_date: date
    weekly_schedule: WeeklySchedule
    end_date: Optional[date] = None  # None = open-ended
    alternate_week_schedule: Optional[WeeklySchedule] = None
    repeat_pattern: RepeatPattern = RepeatPattern.ALL

    def covers(self, day: date, open_ended_end: date) -> bool:
        end = self.end_date or open_ended_end
        return self.start_date <= day <= end

    @property
    def alternates(self) -> bool:
        return self.repeat_pattern == RepeatPattern.EVEN_ODD and self.alternate_week_schedule is not None

    @classmethod
    def from_dict(cls, data: Any, strict: bool = True) -> 'AvailabilityRule':
        """
        Parse a rule from its JSON form.

        ``strict`` validates a client payload; stored rules are read leniently
        so one damaged entry degrades to "unavailable" instead of failing.

        Raises:
            ValidationException: If strict validation fails
        """
        if not isinstance(data, dict):
            raise ValidationException('Availability rule must be an object')

        if strict:
            start = validate_date_param(data.get('startDate'), 'startDate')
            end = validate_optional_date_param(data.get('endDate'), 'endDate')
            if end is not None and end < start:
                raise ValidationException(
                    'endDate must not be before startDate',
                    details={'field': 'endDate'}
                )
            pattern_value = data.get('repeatPattern')
            try:
                pattern = RepeatPattern(pattern_value)
            except ValueError:
                raise ValidationException(
                    "repeatPattern must be 'all' or 'evenodd'",
                    details={'field': 'repeatPattern'}
                )
        else:
            start = parse_date(data['startDate'])
            end = parse_date(data['endDate']) if data.get('endDate') else None
            try:
                pattern = RepeatPattern(data.get('repeatPattern', 'all'))
            except ValueError:
                pattern = RepeatPattern.ALL

        weekly = WeeklySchedule.from_dict(data.get('weeklySchedule'), 'weeklySchedule', strict=strict)

        alternate_raw = data.get('oddWeeklySchedule')
        alternate_field = 'oddWeeklySchedule'
        if alternate_raw is None:
            alternate_raw = data.get('alternateWeekSchedule')
            alternate_field = 'alternateWeekSchedule'
        alternate = None
        if alternate_raw is not None:
            alternate = WeeklySchedule.from_dict(alternate_raw, alternate_field, strict=strict)

        return cls(
            start_date=start,
            weekly_schedule=weekly,
            end_date=end,
            alternate_week_schedule=alternate,
            repeat_pattern=pattern,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'weeklySchedule': self.weekly_schedule.to_dict(),
            'startDate': format_date(self.start_date),
            'repeatPattern': self.repeat_pattern.value,
        }
        if self.end_date:
            result['endDate'] = format_date(self.end_date)
        if self.alternate_week_schedule is not None:
            result['oddWeeklySchedule'] = self.alternate_week_schedule.to_dict()
        return result


@dataclass
class AvailabilityException:
    """Per-date override; a half-day left as None falls through to the rule"""
    date: date
    am: Optional[bool] = None
    pm: Optional[bool] = None

    @property
    def is_empty(self) -> bool:
        return self.am is None and self.pm is None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AvailabilityException':
        am, pm = data.get('am'), data.get('pm')
        return cls(
            date=parse_date(data['date']),
            am=am if isinstance(am, bool) else None,
            pm=pm if isinstance(pm, bool) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {'date': format_date(self.date)}
        if self.am is not None:
            result['am'] = self.am
        if self.pm is not None:
            result['pm'] = self.pm
        return result


@dataclass
class PeriodQuotas:
    """Desiderata allowance of a period"""
    allowed_weekend_desiderata: float
    allowed_working_day_desiderata: float

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PeriodQuotas':
        return cls(
            allowed_weekend_desiderata=data.get('allowedWeekendDesiderata', 0),
            allowed_working_day_desiderata=data.get('allowedWorkingDayDesiderata', 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'allowedWeekendDesiderata': self.allowed_weekend_desiderata,
            'allowedWorkingDayDesiderata': self.allowed_working_day_desiderata,
        }


@dataclass
class Period:
    """An administered date window of a site, inclusive of both ends"""
    id: str
    name: str
    start_date: date
    end_date: date
    editing_status: str
    quotas: Optional[PeriodQuotas] = None

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Period':
        quotas = data.get('quotas')
        return cls(
            id=data.get('id'),
            name=data.get('name'),
            start_date=parse_date(data['startDate']),
            end_date=parse_date(data['endDate']),
            editing_status=data.get('editingStatus'),
            quotas=PeriodQuotas.from_dict(quotas) if isinstance(quotas, dict) else None,
        )


@dataclass
class Event:
    """The desiderata-relevant part of a stored calendar event"""
    id: Optional[str]
    user_id: Optional[str]
    type: Optional[str]
    date: date
    end_date: Optional[date] = None
    status: Optional[str] = None

    @property
    def effective_end(self) -> date:
        return self.end_date or self.date

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Event':
        return cls(
            id=data.get('id'),
            user_id=data.get('userId'),
            type=data.get('type'),
            date=parse_date(data['date']),
            end_date=parse_date(data['endDate']) if data.get('endDate') else None,
            status=data.get('status'),
        )


@dataclass
class DesiderataUsage:
    """Cached quota consumption of one user in one period"""
    weekends_used: float = 0
    working_days_used: float = 0
    last_updated: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DesiderataUsage':
        return cls(
            weekends_used=data.get('weekendsUsed', 0),
            working_days_used=data.get('workingDaysUsed', 0),
            last_updated=data.get('lastUpdated'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'weekendsUsed': self.weekends_used,
            'workingDaysUsed': self.working_days_used,
            'lastUpdated': self.last_updated,
        }


@dataclass
class QuotaValidationResult:
    """Outcome of checking a desiderata request against its period quota"""
    valid: bool
    weekends_used: float = 0
    working_days_used: float = 0
    weekends_allowed: float = 0
    working_days_allowed: float = 0
    weekends_remaining: float = 0
    working_days_remaining: float = 0
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> 'QuotaValidationResult':
        return cls(valid=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'valid': self.valid,
            'weekendsUsed': self.weekends_used,
            'workingDaysUsed': self.working_days_used,
            'weekendsAllowed': self.weekends_allowed,
            'workingDaysAllowed': self.working_days_allowed,
            'weekendsRemaining': self.weekends_remaining,
            'workingDaysRemaining': self.working_days_remaining,
        }
        if self.error is not None:
            result['error'] = self.error
        return result


def parse_rules(raw_rules: Any) -> List[AvailabilityRule]:
    """Leniently parse stored rules, skipping entries that cannot be read."""
    rules = []
    for raw in raw_rules or []:
        try:
            rules.append(AvailabilityRule.from_dict(raw, strict=False))
        except (KeyError, TypeError, ValueError, ValidationException):
            continue
    return rules


def parse_exceptions(raw_exceptions: Any) -> List[AvailabilityException]:
    """Leniently parse stored exceptions, skipping entries without a usable date."""
    exceptions = []
    for raw in raw_exceptions or []:
        try:
            exceptions.append(AvailabilityException.from_dict(raw))
        except (KeyError, TypeError, ValueError):
            continue
    return exceptions
