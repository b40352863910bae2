"""
Unit tests for the review grid and pending desiderata collection.
"""
import pytest
from datetime import date

from roster.error_handlers.exceptions import ResourceNotFoundException
from roster.services.availability_types import Period
from roster.services.grid_builder import DesiderataReview, build_grid
from roster.services.period_registry import PeriodRegistry
from conftest import SITE, make_event, make_period


def short_period():
    return Period(id='p', name='Short', start_date=date(2026, 7, 1), end_date=date(2026, 7, 5),
                  editing_status='open-desiderata')


class TestBuildGrid:

    @pytest.mark.unit
    def test_event_covering_whole_period(self):
        events = [{'userId': 'u1', 'date': '2026-07-01', 'endDate': '2026-07-05'}]
        rows = build_grid(short_period(), events, ['u1', 'u2', 'u3'])

        assert len(rows) == 5
        assert all(row['total'] == 1 for row in rows)
        assert all(row['u1'] == 'X' for row in rows)
        assert all(row['u2'] == '' and row['u3'] == '' for row in rows)

    @pytest.mark.unit
    def test_rows_in_date_order_with_totals(self):
        events = [
            {'userId': 'u2', 'date': '2026-07-03'},
            {'userId': 'u1', 'date': '2026-06-30', 'endDate': '2026-07-02'},
        ]
        rows = build_grid(short_period(), events, ['u1', 'u2'])

        assert [row['date'] for row in rows] == [
            '2026-07-01', '2026-07-02', '2026-07-03', '2026-07-04', '2026-07-05',
        ]
        assert [row['total'] for row in rows] == [1, 1, 1, 0, 0]
        assert rows[2] == {'date': '2026-07-03', 'u1': '', 'u2': 'X', 'total': 1}

    @pytest.mark.unit
    def test_events_of_unlisted_users_are_ignored(self):
        rows = build_grid(short_period(), [{'userId': 'ghost', 'date': '2026-07-01'}], ['u1'])
        assert rows[0] == {'date': '2026-07-01', 'u1': '', 'total': 0}


class TestPendingDesiderata:

    @pytest.fixture
    def review(self, file_repository, site_factory, period_factory):
        site_factory(file_repository, users=['u1', 'u2'])
        period_factory(file_repository, [make_period('summer')])
        file_repository.write_user_events(SITE, 'u1', [
            make_event('r1', '2026-07-06', end='2026-07-08', type='requestedDesiderata', status='pending'),
            make_event('r2', '2026-07-20', end='2026-07-20', type='requestedDesiderata', status='approved'),
            make_event('r3', '2026-08-30', end='2026-09-02', type='requestedDesiderata', status='pending'),
            make_event('d1', '2026-07-13', type='desiderata'),
        ])
        file_repository.write_user_events(SITE, 'u2', [
            make_event('r4', '2026-07-07', end='2026-07-07', type='requestedDesiderata', status='pending',
                       user_id='u2'),
        ])
        return DesiderataReview(file_repository, PeriodRegistry(file_repository))

    @pytest.mark.unit
    def test_collects_pending_requests_inside_period(self, review):
        result = review.pending_desiderata_by_period(SITE, 2026, 'summer')

        assert result['desiderata'] == [
            {'userId': 'u1', 'id': 'r1', 'date': '2026-07-06', 'endDate': '2026-07-08'},
            {'userId': 'u2', 'id': 'r4', 'date': '2026-07-07', 'endDate': '2026-07-07'},
        ]

    @pytest.mark.unit
    def test_grid_marks_pending_requests(self, review):
        grid = review.pending_desiderata_by_period(SITE, 2026, 'summer')['grid']
        by_date = {row['date']: row for row in grid}

        assert len(grid) == 62
        assert by_date['2026-07-07'] == {'date': '2026-07-07', 'u1': 'X', 'u2': 'X', 'total': 2}
        assert by_date['2026-07-20']['total'] == 0

    @pytest.mark.unit
    def test_unknown_period(self, review):
        with pytest.raises(ResourceNotFoundException):
            review.pending_desiderata_by_period(SITE, 2026, 'missing')
