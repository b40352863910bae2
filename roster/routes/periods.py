"""
Period administration endpoints
Readable by every user of the site; writes require the admin role
"""
from flask import Blueprint, jsonify, request, current_app, g

from roster.error_handlers import handle_errors
from roster.error_handlers.exceptions import AuthorizationException, ValidationException
from roster.routes.auth import require_authentication
from roster.services.providers import get_period_registry

periods_bp = Blueprint('periods', __name__, url_prefix='/api/sites')


def _check_site(site):
    if g.current_user['site'] != site and g.current_user['role'] != 'admin':
        raise AuthorizationException('Unauthorized')


@periods_bp.route('/<site>/periods/<year>', methods=['GET'])
@handle_errors
@require_authentication()
def get_periods(site, year):
    _check_site(site)
    registry = get_period_registry()
    year_num = registry.validate_year(year)
    return jsonify(registry.get_periods(site, year_num))


@periods_bp.route('/<site>/periods/<year>', methods=['PUT'])
@handle_errors
@require_authentication(role='admin')
def save_periods(site, year):
    """
    Replace all periods of a site/year.

    Request body: {"periods": [{name, startDate, endDate, editingStatus, quotas?}, ...]}
    """
    registry = get_period_registry()
    year_num = registry.validate_year(year)
    data = request.get_json(silent=True) or {}
    periods = data.get('periods')
    if not isinstance(periods, list):
        raise ValidationException('Invalid period data: periods must be a list')

    document = registry.save_periods(site, year_num, periods)
    current_app.logger.info(f"User {g.current_user['id']} saved periods for {site}/{year_num}")
    return jsonify(document)


@periods_bp.route('/<site>/periods/<year>/reset', methods=['POST'])
@handle_errors
@require_authentication(role='admin')
def reset_periods(site, year):
    registry = get_period_registry()
    year_num = registry.validate_year(year)
    document = registry.reset_periods(site, year_num)
    current_app.logger.info(f"User {g.current_user['id']} reset periods for {site}/{year_num}")
    return jsonify(document)
