"""
Availability Resolver
Computes a user's effective morning/afternoon availability for a date
"""
from datetime import date
from typing import Dict, Iterable, Optional, Sequence, Tuple

from roster.services.availability_types import (
    UNAVAILABLE,
    AvailabilityException,
    AvailabilityRule,
    TimeSlot,
)
from roster.services.exception_overlay import ExceptionOverlay
from roster.services.week_parity import WeekNumberParity, get_parity_strategy
from roster.utils.dates import each_day, parse_date, weekday_name

OPEN_ENDED_RULE_END = date(2100, 1, 1)


class AvailabilityResolver:
    """
    Resolves availability from an ordered list of rules plus date exceptions

    Rule order is precedence: when several rules cover a date, the one that
    comes last in the list applies. Missing configuration resolves to
    unavailable; resolution never raises.
    """

    def __init__(self, parity_strategy=None, open_ended_end: date = OPEN_ENDED_RULE_END):
        self.parity_strategy = parity_strategy or WeekNumberParity()
        self.open_ended_end = open_ended_end

    @classmethod
    def from_config(cls, config) -> 'AvailabilityResolver':
        """Build a resolver from Flask config values"""
        strategy = get_parity_strategy(
            config.get('WEEK_PARITY_STRATEGY', WeekNumberParity.name),
            config.get('WEEK_START_DAY', 'Saturday'),
        )
        open_ended = config.get('OPEN_ENDED_RULE_END')
        return cls(strategy, parse_date(open_ended) if open_ended else OPEN_ENDED_RULE_END)

    def matching_rule(self, day: date, rules: Sequence[AvailabilityRule]) -> Optional[Tuple[int, AvailabilityRule]]:
        """Index and rule that governs ``day``, or None"""
        match = None
        for index, rule in enumerate(rules):
            if rule.covers(day, self.open_ended_end):
                match = (index, rule)
        return match

    def _rule_slot(self, day: date, rule: AvailabilityRule) -> TimeSlot:
        schedule = rule.weekly_schedule
        if rule.alternates and self.parity_strategy.parity(day, rule) == 1:
            schedule = rule.alternate_week_schedule
        return schedule.slot_for(weekday_name(day))

    def _resolve(self, day: date, rules: Sequence[AvailabilityRule], overlay: ExceptionOverlay) -> TimeSlot:
        match = self.matching_rule(day, rules)
        slot = self._rule_slot(day, match[1]) if match else UNAVAILABLE
        return overlay.apply(day, slot)

    def resolve(self, day: date, rules: Sequence[AvailabilityRule],
                exceptions: Iterable[AvailabilityException] = ()) -> TimeSlot:
        """
        Effective availability of one date

        Args:
            day: Date to resolve
            rules: Rules in precedence order (last wins)
            exceptions: Per-date overrides

        Returns:
            TimeSlot with the resolved am/pm flags
        """
        return self._resolve(day, rules, ExceptionOverlay(exceptions))

    def resolve_range(self, start: date, end: date, rules: Sequence[AvailabilityRule],
                      exceptions: Iterable[AvailabilityException] = ()) -> Dict[date, TimeSlot]:
        """Resolve every date of [start, end] in order"""
        overlay = ExceptionOverlay(exceptions)
        rules = list(rules)
        return {day: self._resolve(day, rules, overlay) for day in each_day(start, end)}
