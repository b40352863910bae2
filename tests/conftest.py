"""
Pytest configuration and fixtures for the duty roster tests.

This module provides shared fixtures for:
- Flask application with test configuration
- Database setup and teardown
- Document stores and repositories (database and filesystem backends)
- Factories for site documents, rules, events and periods
"""
import pytest

from roster import create_app
from roster.extensions import db as _db
from roster.storage import FileDocumentStore, SiteRepository
from roster.storage.repository import site_key

SITE = 'north'

FULL_DAY = {'am': True, 'pm': True}
OFF = {'am': False, 'pm': False}


@pytest.fixture(scope='session')
def app():
    """
    Create application for the tests.

    Uses TestingConfig with in-memory SQLite database.
    Scope is 'session' to reuse the same app across all tests.
    """
    app = create_app('testing')
    app.config.update({
        'TESTING': True,
        'RATELIMIT_ENABLED': False,
    })

    return app


@pytest.fixture(scope='function')
def db(app):
    """
    Create database for the tests.

    Creates all tables before each test function and drops them after.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope='function')
def client(app, db):
    """Test client bound to a fresh database."""
    with app.test_client() as client:
        yield client


@pytest.fixture(scope='function')
def repository(app, db):
    """Repository of the app, backed by the test database."""
    return app.extensions['roster_repository']


@pytest.fixture(scope='function')
def file_repository(tmp_path):
    """Repository on the filesystem backend under a temporary directory."""
    return SiteRepository(FileDocumentStore(tmp_path / 'data'), retries=3)


# =============================================================================
# Auth headers
# =============================================================================

def identity_headers(user_id='u1', site=SITE, role='user'):
    return {'X-User-Id': user_id, 'X-User-Site': site, 'X-User-Role': role}


@pytest.fixture
def user_headers():
    return identity_headers('u1')


@pytest.fixture
def admin_headers():
    return identity_headers('admin1', role='admin')


# =============================================================================
# Data factories
# =============================================================================

def make_schedule(**days):
    """
    Weekly schedule with every working day available unless overridden.

    Usage:
        make_schedule(Monday=OFF, Saturday=FULL_DAY)
    """
    schedule = {day: dict(FULL_DAY) for day in ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday')}
    schedule.update(days)
    return schedule


def make_rule(start='2026-01-01', end=None, schedule=None, odd=None, pattern='all'):
    rule = {
        'startDate': start,
        'weeklySchedule': schedule if schedule is not None else make_schedule(),
        'repeatPattern': pattern,
    }
    if end:
        rule['endDate'] = end
    if odd is not None:
        rule['oddWeeklySchedule'] = odd
    return rule


@pytest.fixture
def site_factory():
    """
    Factory writing a site document with the given users.

    Usage:
        site_factory(repository, users=['u1', 'u2'])
    """
    def _create_site(repo, users=('u1', 'u2'), site=SITE, app_settings=None):
        data = {
            'users': [
                {'id': uid, 'firstName': uid.upper(), 'lastName': 'Tester', 'role': 'user'}
                for uid in users
            ],
            'events': [],
            'app': app_settings or {},
        }
        repo.write_json(site_key(site), data)
        return data

    return _create_site


@pytest.fixture
def period_factory():
    """
    Factory storing periods for a site/year, bypassing validation.

    Usage:
        period_factory(repository, [{'id': 'summer', ...}], year=2026)
    """
    def _create_periods(repo, periods, year=2026, site=SITE):
        document = {'year': year, 'site': site, 'periods': periods, 'lastUpdated': None}
        repo.write_periods(site, year, document)
        return document

    return _create_periods


def make_period(period_id='summer', start='2026-07-01', end='2026-08-31',
                weekends=2, working_days=5, name='July to August', status='open-desiderata'):
    period = {
        'id': period_id,
        'name': name,
        'startDate': start,
        'endDate': end,
        'editingStatus': status,
    }
    if weekends is not None:
        period['quotas'] = {
            'allowedWeekendDesiderata': weekends,
            'allowedWorkingDayDesiderata': working_days,
        }
    return period


def make_event(event_id, date, end=None, type='desiderata', status=None, user_id='u1'):
    event = {'id': event_id, 'userId': user_id, 'type': type, 'date': date}
    if end:
        event['endDate'] = end
    if status:
        event['status'] = status
    return event
