"""
Integration tests for API endpoints.

Tests cover:
- Health check endpoints
- Availability rule endpoints
- Availability exception endpoints
- Period administration endpoints
- Desiderata quota endpoints
- Report endpoints
- Conflict responses for lost updates
"""
import pytest
import json

from roster.error_handlers.exceptions import ConcurrentModificationException
from roster.storage.repository import settings_key
from conftest import OFF, SITE, identity_headers, make_event, make_period, make_rule, make_schedule


@pytest.fixture
def seeded(repository, site_factory, period_factory):
    """Site 'north' with users u1/u2 and a July-August period."""
    site_factory(repository, users=['u1', 'u2'])
    period_factory(repository, [make_period('summer', weekends=2, working_days=5)])
    return repository


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    @pytest.mark.integration
    def test_ping(self, client):
        response = client.get('/health/ping')
        assert response.status_code == 200
        assert json.loads(response.data)['status'] == 'ok'

    @pytest.mark.integration
    def test_live(self, client):
        response = client.get('/health/live')
        assert response.status_code == 200
        assert json.loads(response.data)['status'] == 'alive'

    @pytest.mark.integration
    def test_ready(self, client):
        response = client.get('/health/ready')
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['checks'] == {'database': True, 'storage': True}


class TestAuthentication:

    @pytest.mark.integration
    def test_missing_identity(self, client):
        response = client.get('/api/availability/u1')
        assert response.status_code == 401
        assert json.loads(response.data)['error'] == 'AuthenticationError'

    @pytest.mark.integration
    def test_other_users_rules_are_forbidden(self, client, seeded, user_headers):
        response = client.get('/api/availability/u2', headers=user_headers)
        assert response.status_code == 403

    @pytest.mark.integration
    def test_admin_may_read_any_user(self, client, seeded, admin_headers):
        response = client.get('/api/availability/u2', headers=admin_headers)
        assert response.status_code == 200
        assert json.loads(response.data) == []


class TestAvailabilityAPI:

    @pytest.mark.integration
    def test_insert_and_list(self, client, seeded, user_headers):
        response = client.post('/api/availability/u1/0', json=make_rule(), headers=user_headers)
        assert response.status_code == 201

        later = make_rule(start='2026-06-01', schedule=make_schedule(Monday=OFF))
        client.post('/api/availability/u1/1', json=later, headers=user_headers)

        rules = json.loads(client.get('/api/availability/u1', headers=user_headers).data)
        assert [r['startDate'] for r in rules] == ['2026-01-01', '2026-06-01']
        assert rules[1]['weeklySchedule']['Monday'] == OFF

    @pytest.mark.integration
    def test_invalid_rule(self, client, seeded, user_headers):
        rule = make_rule()
        del rule['weeklySchedule']['Tuesday']
        response = client.post('/api/availability/u1/0', json=rule, headers=user_headers)

        assert response.status_code == 400
        data = json.loads(response.data)
        assert data['message'] == 'Validation error'
        assert data['errors']

    @pytest.mark.integration
    def test_replace_rule(self, client, seeded, user_headers):
        client.post('/api/availability/u1/0', json=make_rule(), headers=user_headers)
        response = client.put(
            '/api/availability/u1/0', json=make_rule(start='2026-02-01'), headers=user_headers
        )
        assert response.status_code == 200
        assert json.loads(response.data)['startDate'] == '2026-02-01'

    @pytest.mark.integration
    def test_replace_missing_rule(self, client, seeded, user_headers):
        response = client.put('/api/availability/u1/3', json=make_rule(), headers=user_headers)
        assert response.status_code == 404
        assert json.loads(response.data)['message'] == 'Schedule not found'

    @pytest.mark.integration
    def test_delete_rule(self, client, seeded, user_headers):
        client.post('/api/availability/u1/0', json=make_rule(), headers=user_headers)
        assert client.delete('/api/availability/u1/0', headers=user_headers).status_code == 204
        assert client.delete('/api/availability/u1/0', headers=user_headers).status_code == 404

    @pytest.mark.integration
    def test_reorder(self, client, seeded, user_headers):
        schedules = [make_rule(start='2026-06-01'), make_rule(start='2026-01-01')]
        response = client.put(
            '/api/availability/u1/reorder', json={'schedules': schedules}, headers=user_headers
        )
        assert response.status_code == 200
        stored = seeded.read_user_settings(SITE, 'u1')['availability']
        assert [r['startDate'] for r in stored] == ['2026-06-01', '2026-01-01']

    @pytest.mark.integration
    def test_reorder_requires_list(self, client, seeded, user_headers):
        response = client.put('/api/availability/u1/reorder', json={'schedules': {}}, headers=user_headers)
        assert response.status_code == 400

    @pytest.mark.integration
    def test_end_before_start(self, client, seeded, user_headers):
        rule = make_rule(start='2026-06-01', end='2026-05-01')
        response = client.post('/api/availability/u1/0', json=rule, headers=user_headers)

        assert response.status_code == 400
        data = json.loads(response.data)
        assert data['message'] == 'Validation error'
        assert data['errors'] == ['endDate must not be before startDate']

    @pytest.mark.integration
    def test_unknown_user_insert(self, client, seeded, admin_headers):
        response = client.post('/api/availability/ghost/0', json=make_rule(), headers=admin_headers)
        assert response.status_code == 404
        assert seeded.store.read(settings_key(SITE, 'ghost')) is None

    @pytest.mark.integration
    def test_unknown_user_replace(self, client, seeded, admin_headers):
        response = client.put('/api/availability/ghost/0', json=make_rule(), headers=admin_headers)
        assert response.status_code == 404
        assert seeded.store.read(settings_key(SITE, 'ghost')) is None

    @pytest.mark.integration
    def test_unknown_user_reorder(self, client, seeded, admin_headers):
        response = client.put(
            '/api/availability/ghost/reorder', json={'schedules': [make_rule()]}, headers=admin_headers
        )
        assert response.status_code == 404
        assert seeded.store.read(settings_key(SITE, 'ghost')) is None

    @pytest.mark.integration
    def test_unknown_user_delete(self, client, seeded, admin_headers):
        response = client.delete('/api/availability/ghost/0', headers=admin_headers)
        assert response.status_code == 404
        assert json.loads(response.data)['message'] == 'User ghost not found'


class TestExceptionsAPI:

    @pytest.mark.integration
    def test_set_and_clear(self, client, seeded, user_headers):
        response = client.put('/api/users/u1/exceptions', json={
            'date': '2026-03-03', 'part': 'am', 'value': False,
        }, headers=user_headers)
        assert response.status_code == 200
        assert json.loads(response.data) == {
            'userId': 'u1',
            'availabilityExceptions': [{'date': '2026-03-03', 'am': False}],
        }

        client.put('/api/users/u1/exceptions', json={
            'date': '2026-03-03', 'part': 'am', 'value': None,
        }, headers=user_headers)
        listed = json.loads(client.get('/api/users/u1/exceptions', headers=user_headers).data)
        assert listed == []

    @pytest.mark.integration
    def test_bad_part(self, client, seeded, user_headers):
        response = client.put('/api/users/u1/exceptions', json={
            'date': '2026-03-03', 'part': 'evening', 'value': True,
        }, headers=user_headers)
        assert response.status_code == 400

    @pytest.mark.integration
    def test_unknown_user(self, client, seeded, admin_headers):
        response = client.put('/api/users/ghost/exceptions', json={
            'date': '2026-03-03', 'part': 'pm', 'value': True,
        }, headers=admin_headers)
        assert response.status_code == 404

    @pytest.mark.integration
    def test_lost_update_is_conflict(self, client, seeded, user_headers, monkeypatch):
        def always_conflicts(key, content, expected_version=None):
            raise ConcurrentModificationException(f"Document {key} was modified concurrently")

        monkeypatch.setattr(seeded.store, 'write', always_conflicts)
        response = client.put('/api/users/u1/exceptions', json={
            'date': '2026-03-03', 'part': 'am', 'value': False,
        }, headers=user_headers)

        assert response.status_code == 409
        assert json.loads(response.data)['error'] == 'ConcurrentModification'


class TestPeriodsAPI:

    @pytest.mark.integration
    def test_get_periods(self, client, seeded, user_headers):
        response = client.get(f'/api/sites/{SITE}/periods/2026', headers=user_headers)
        assert response.status_code == 200
        assert [p['id'] for p in json.loads(response.data)['periods']] == ['summer']

    @pytest.mark.integration
    def test_other_site_is_forbidden(self, client, seeded, user_headers):
        response = client.get('/api/sites/south/periods/2026', headers=user_headers)
        assert response.status_code == 403

    @pytest.mark.integration
    def test_year_out_of_range(self, client, seeded, user_headers):
        response = client.get(f'/api/sites/{SITE}/periods/1999', headers=user_headers)
        assert response.status_code == 400

    @pytest.mark.integration
    def test_save_requires_admin(self, client, seeded, user_headers):
        response = client.put(f'/api/sites/{SITE}/periods/2026', json={'periods': []}, headers=user_headers)
        assert response.status_code == 403

    @pytest.mark.integration
    def test_save_and_reject_overlap(self, client, seeded, admin_headers):
        periods = [
            {'name': 'A', 'startDate': '2026-01-01', 'endDate': '2026-03-31', 'editingStatus': 'closed'},
            {'name': 'B', 'startDate': '2026-04-01', 'endDate': '2026-06-30', 'editingStatus': 'open-holiday'},
        ]
        response = client.put(f'/api/sites/{SITE}/periods/2026', json={'periods': periods}, headers=admin_headers)
        assert response.status_code == 200
        assert all(p['id'] for p in json.loads(response.data)['periods'])

        periods[1]['startDate'] = '2026-03-31'
        response = client.put(f'/api/sites/{SITE}/periods/2026', json={'periods': periods}, headers=admin_headers)
        assert response.status_code == 400
        assert 'overlap' in json.loads(response.data)['message']

    @pytest.mark.integration
    def test_reset(self, client, seeded, admin_headers):
        response = client.post(f'/api/sites/{SITE}/periods/2026/reset', headers=admin_headers)
        assert response.status_code == 200
        assert len(json.loads(response.data)['periods']) == 4


class TestDesiderataAPI:

    @pytest.mark.integration
    def test_validate(self, client, seeded, user_headers):
        seeded.write_user_events(SITE, 'u1', [make_event('e1', '2026-07-04'), make_event('e2', '2026-07-11')])
        response = client.post('/api/desiderata/validate', json={
            'periodId': 'summer', 'startDate': '2026-07-18', 'endDate': '2026-07-18',
        }, headers=user_headers)

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['valid'] is False
        assert data['weekendsUsed'] == 3
        assert data['weekendsRemaining'] == 0

    @pytest.mark.integration
    def test_validate_requires_fields(self, client, seeded, user_headers):
        response = client.post('/api/desiderata/validate', json={'periodId': 'summer'}, headers=user_headers)
        assert response.status_code == 400

    @pytest.mark.integration
    def test_quota(self, client, seeded, user_headers):
        response = client.get('/api/desiderata/quota/summer?year=2026', headers=user_headers)
        assert response.status_code == 200
        assert json.loads(response.data)['usage']['weekendsRemaining'] == 2

    @pytest.mark.integration
    def test_quota_unknown_period(self, client, seeded, user_headers):
        response = client.get('/api/desiderata/quota/missing?year=2026', headers=user_headers)
        assert response.status_code == 404

    @pytest.mark.integration
    def test_recalculate(self, client, seeded, admin_headers, user_headers):
        seeded.write_user_events(SITE, 'u1', [make_event('e1', '2026-07-06', end='2026-07-07')])
        assert client.post('/api/desiderata/recalculate/u1/summer?year=2026',
                           headers=user_headers).status_code == 403

        response = client.post('/api/desiderata/recalculate/u1/summer?year=2026', headers=admin_headers)
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['message'] == 'Desiderata usage recalculated successfully'
        assert data['usage']['workingDaysUsed'] == 2

    @pytest.mark.integration
    def test_pending(self, client, seeded, user_headers):
        seeded.write_user_events(SITE, 'u2', [
            make_event('r1', '2026-07-06', end='2026-07-07', type='requestedDesiderata',
                       status='pending', user_id='u2'),
        ])
        response = client.get('/api/desiderata/pending/2026/summer', headers=user_headers)

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['count'] == 1
        assert data['requests']['desiderata'][0]['userId'] == 'u2'
        assert len(data['requests']['grid']) == 62


class TestReportsAPI:

    @pytest.fixture
    def with_rules(self, seeded):
        seeded.write_json(settings_key(SITE, 'u1'), {'availability': [make_rule()]})
        return seeded

    @pytest.mark.integration
    def test_calendar(self, client, with_rules, user_headers):
        response = client.get(
            f'/api/reports/calendar/{SITE}/u1/2026?startDate=2026-03-02&endDate=2026-03-02',
            headers=user_headers,
        )
        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['weekStartsOn'] == 'Sunday'
        assert data['weeks'][0]['days'][1]['availability'] == {'am': True, 'pm': True}

    @pytest.mark.integration
    def test_availability(self, client, with_rules, user_headers):
        response = client.get(f'/api/reports/availability/{SITE}/u1/2026', headers=user_headers)
        assert response.status_code == 200
        assert len(json.loads(response.data)['availability']) == 365

    @pytest.mark.integration
    @pytest.mark.parametrize('year', ['abcd', '1899', '9999', '10000'])
    def test_invalid_year(self, client, with_rules, user_headers, year):
        response = client.get(f'/api/reports/availability/{SITE}/u1/{year}', headers=user_headers)
        assert response.status_code == 400
        assert json.loads(response.data)['message'] == 'Invalid year format'

    @pytest.mark.integration
    def test_calendar_for_last_supported_year(self, client, with_rules, user_headers):
        response = client.get(f'/api/reports/calendar/{SITE}/u1/9998', headers=user_headers)
        assert response.status_code == 200
        weeks = json.loads(response.data)['weeks']
        assert weeks[-1]['days'][-1]['date'].startswith('9999-01')

    @pytest.mark.integration
    def test_other_site_is_forbidden(self, client, with_rules):
        headers = identity_headers('u1', site='south')
        response = client.get(f'/api/reports/availability/{SITE}/u1/2026', headers=headers)
        assert response.status_code == 403

    @pytest.mark.integration
    def test_unknown_user(self, client, with_rules, admin_headers):
        response = client.get(f'/api/reports/availability/{SITE}/ghost/2026', headers=admin_headers)
        assert response.status_code == 404


class TestConcurrency:

    @pytest.mark.integration
    def test_stale_write_is_conflict(self, client, seeded):
        key = settings_key(SITE, 'u1')
        seeded.write_json(key, {'availability': []})
        seeded.write_json(key, {'availability': []}, expected_version=1)

        with pytest.raises(ConcurrentModificationException) as exc_info:
            seeded.write_json(key, {'availability': []}, expected_version=1)
        assert exc_info.value.status_code == 409
