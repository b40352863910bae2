"""
Unit tests for quota unit calculation.
"""
import pytest
from datetime import date

from roster.error_handlers.exceptions import ValidationException
from roster.services.quota_calculator import calculate_event_days


class TestCalculateEventDays:
    """2026-07-04 is a Saturday."""

    @pytest.mark.unit
    def test_single_saturday_rounds_up(self):
        days = calculate_event_days(date(2026, 7, 4), date(2026, 7, 4))
        assert days.weekends == 1
        assert days.working_days == 0

    @pytest.mark.unit
    def test_full_weekend_is_one_unit(self):
        days = calculate_event_days(date(2026, 7, 4), date(2026, 7, 5))
        assert (days.weekends, days.working_days) == (1, 0)

    @pytest.mark.unit
    def test_working_week(self):
        days = calculate_event_days(date(2026, 7, 6), date(2026, 7, 10))
        assert (days.weekends, days.working_days) == (0, 5)

    @pytest.mark.unit
    def test_friday_to_monday(self):
        days = calculate_event_days(date(2026, 7, 3), date(2026, 7, 6))
        assert (days.weekends, days.working_days) == (1, 2)

    @pytest.mark.unit
    def test_three_weekend_days_round_up(self):
        # Sat, Sun, then the following Saturday: 1.5 rounds to 2
        days = calculate_event_days(date(2026, 7, 4), date(2026, 7, 11))
        assert (days.weekends, days.working_days) == (2, 5)

    @pytest.mark.unit
    def test_end_before_start_is_rejected(self):
        with pytest.raises(ValidationException):
            calculate_event_days(date(2026, 7, 6), date(2026, 7, 5))

    @pytest.mark.unit
    def test_to_dict_uses_wire_names(self):
        assert calculate_event_days(date(2026, 7, 6), date(2026, 7, 6)).to_dict() == {
            'weekends': 0,
            'workingDays': 1,
        }
