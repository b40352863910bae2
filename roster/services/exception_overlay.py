"""
Per-date availability overrides layered on top of rule-derived availability
"""
from datetime import date
from typing import Dict, Iterable, List, Optional

from roster.error_handlers.exceptions import ValidationException
from roster.services.availability_types import AvailabilityException, TimeSlot
from roster.utils.dates import parse_date

DAY_PARTS = ('am', 'pm')


class ExceptionOverlay:
    """
    Index of a user's exceptions by date

    Only one exception per date is honoured; when stored data holds several,
    the first one wins.
    """

    def __init__(self, exceptions: Iterable[AvailabilityException] = ()):
        self._by_date: Dict[date, AvailabilityException] = {}
        for exception in exceptions:
            self._by_date.setdefault(exception.date, exception)

    def for_date(self, day: date) -> Optional[AvailabilityException]:
        return self._by_date.get(day)

    def apply(self, day: date, slot: TimeSlot) -> TimeSlot:
        exception = self._by_date.get(day)
        if exception is None:
            return slot
        return TimeSlot(
            am=slot.am if exception.am is None else exception.am,
            pm=slot.pm if exception.pm is None else exception.pm,
        )

    def __len__(self):
        return len(self._by_date)


def upsert(exceptions: List[AvailabilityException], day, part: str,
           value: Optional[bool]) -> List[AvailabilityException]:
    """
    Set or clear one half-day override and return the new exception list.

    ``value=None`` clears the half-day. An exception left with neither half
    set is removed. Other dates keep their position in the list.

    Raises:
        ValidationException: If part is not 'am'/'pm' or value is not a bool/None
    """
    if part not in DAY_PARTS:
        raise ValidationException("part must be 'am' or 'pm'", details={'field': 'part'})
    if value is not None and not isinstance(value, bool):
        raise ValidationException("value must be true, false or null", details={'field': 'value'})

    day = parse_date(day)
    result = []
    found = False
    for exception in exceptions:
        if exception.date != day:
            result.append(exception)
            continue
        if found:
            # Collapse duplicate entries for the same date
            continue
        found = True
        updated = AvailabilityException(date=day, am=exception.am, pm=exception.pm)
        setattr(updated, part, value)
        if not updated.is_empty:
            result.append(updated)

    if not found and value is not None:
        created = AvailabilityException(date=day)
        setattr(created, part, value)
        result.append(created)

    return result
