"""
Unit tests for ExceptionOverlay and exception upserts.
"""
import pytest
from datetime import date

from roster.error_handlers.exceptions import ValidationException
from roster.services.availability_types import AvailabilityException, TimeSlot
from roster.services.exception_overlay import ExceptionOverlay, upsert

DAY = date(2026, 3, 2)


class TestOverlay:

    @pytest.mark.unit
    def test_unset_fields_fall_through(self):
        overlay = ExceptionOverlay([AvailabilityException(DAY, pm=False)])
        assert overlay.apply(DAY, TimeSlot(True, True)) == TimeSlot(True, False)

    @pytest.mark.unit
    def test_first_exception_per_date_wins(self):
        overlay = ExceptionOverlay([
            AvailabilityException(DAY, am=True),
            AvailabilityException(DAY, am=False),
        ])
        assert overlay.for_date(DAY).am is True
        assert len(overlay) == 1

    @pytest.mark.unit
    def test_no_exception_returns_slot_unchanged(self):
        slot = TimeSlot(True, False)
        assert ExceptionOverlay().apply(DAY, slot) is slot


class TestUpsert:

    @pytest.mark.unit
    def test_creates_exception(self):
        result = upsert([], '2026-03-02', 'am', False)
        assert [e.to_dict() for e in result] == [{'date': '2026-03-02', 'am': False}]

    @pytest.mark.unit
    def test_updates_existing_exception_in_place(self):
        existing = [AvailabilityException(date(2026, 3, 1), am=True), AvailabilityException(DAY, am=False)]
        result = upsert(existing, DAY, 'pm', True)

        assert [e.to_dict() for e in result] == [
            {'date': '2026-03-01', 'am': True},
            {'date': '2026-03-02', 'am': False, 'pm': True},
        ]

    @pytest.mark.unit
    def test_clearing_last_half_removes_exception(self):
        result = upsert([AvailabilityException(DAY, am=False)], DAY, 'am', None)
        assert result == []

    @pytest.mark.unit
    def test_clearing_missing_exception_is_noop(self):
        assert upsert([], DAY, 'pm', None) == []

    @pytest.mark.unit
    def test_duplicates_collapse(self):
        existing = [AvailabilityException(DAY, am=True), AvailabilityException(DAY, pm=True)]
        result = upsert(existing, DAY, 'pm', False)
        assert [e.to_dict() for e in result] == [{'date': '2026-03-02', 'am': True, 'pm': False}]

    @pytest.mark.unit
    def test_invalid_part(self):
        with pytest.raises(ValidationException):
            upsert([], DAY, 'evening', True)

    @pytest.mark.unit
    def test_invalid_value(self):
        with pytest.raises(ValidationException):
            upsert([], DAY, 'am', 'yes')
