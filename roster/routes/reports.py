"""
Availability report endpoints
"""
from flask import Blueprint, jsonify, request, g

from roster.error_handlers import handle_errors
from roster.error_handlers.exceptions import AuthorizationException, ValidationException
from roster.routes.auth import require_authentication, require_self_or_admin
from roster.services.providers import get_calendar_report

reports_bp = Blueprint('reports', __name__, url_prefix='/api/reports')

MIN_REPORT_YEAR = 1900
# Calendar weeks are padded to whole weeks, which can reach into the following year
MAX_REPORT_YEAR = 9998


def _report_year(year):
    try:
        year_num = int(year)
    except ValueError:
        raise ValidationException('Invalid year format')
    if year_num < MIN_REPORT_YEAR or year_num > MAX_REPORT_YEAR:
        raise ValidationException('Invalid year format')
    return year_num


def _check_access(site, user_id):
    user = g.current_user
    if user['site'] != site and user['role'] != 'admin':
        raise AuthorizationException('Unauthorized')
    require_self_or_admin(user, user_id)


@reports_bp.route('/calendar/<site>/<user_id>/<year>', methods=['GET'])
@handle_errors
@require_authentication()
def calendar_report(site, user_id, year):
    """
    Week-by-week availability of a user.

    Query Parameters:
        startDate: Narrow the range start (YYYY-MM-DD, ignored outside the year)
        endDate: Narrow the range end (YYYY-MM-DD, ignored outside the year)
    """
    year_num = _report_year(year)
    _check_access(site, user_id)
    report = get_calendar_report().build_calendar_report(
        site, user_id, year_num,
        request.args.get('startDate'),
        request.args.get('endDate'),
    )
    return jsonify(report)


@reports_bp.route('/availability/<site>/<user_id>/<year>', methods=['GET'])
@handle_errors
@require_authentication()
def availability_report(site, user_id, year):
    year_num = _report_year(year)
    _check_access(site, user_id)
    return jsonify(get_calendar_report().build_availability_report(site, user_id, year_num))
