"""
Desiderata quota endpoints
"""
from datetime import date

from flask import Blueprint, jsonify, request, current_app, g

from roster.error_handlers import handle_errors
from roster.routes.auth import require_authentication
from roster.services.providers import get_desiderata_review, get_period_registry, get_quota_validator
from roster.utils.validators import validate_required_fields

desiderata_bp = Blueprint('desiderata', __name__, url_prefix='/api/desiderata')


def _year_arg():
    registry = get_period_registry()
    year = request.args.get('year')
    return registry.validate_year(year) if year else date.today().year


@desiderata_bp.route('/quota/<period_id>', methods=['GET'])
@handle_errors
@require_authentication()
def get_quota(period_id):
    """
    Quota and cached usage of the caller for a period.

    Query Parameters:
        year: Year whose periods are searched first (default: current year)
    """
    user = g.current_user
    summary = get_quota_validator().quota_summary(user['site'], user['id'], period_id, _year_arg())
    return jsonify(summary)


@desiderata_bp.route('/validate', methods=['POST'])
@handle_errors
@require_authentication()
def validate_desiderata():
    """
    Check a desiderata request of the caller against the period quota.

    Request body: {periodId, startDate, endDate, excludeEventId?}
    Returns the validation result as-is; quota failures are reported in the
    body with valid=false, not as an HTTP error.
    """
    user = g.current_user
    data = request.get_json(silent=True)
    validate_required_fields(data, ['periodId', 'startDate', 'endDate'])

    result = get_quota_validator().validate(
        user['site'],
        user['id'],
        data['periodId'],
        data['startDate'],
        data['endDate'],
        data.get('excludeEventId'),
    )
    return jsonify(result.to_dict())


@desiderata_bp.route('/recalculate/<user_id>/<period_id>', methods=['POST'])
@handle_errors
@require_authentication(role='admin')
def recalculate(user_id, period_id):
    usage = get_quota_validator().recalculate_user_desiderata(
        g.current_user['site'], user_id, period_id, _year_arg()
    )
    current_app.logger.info(f"Recalculated desiderata usage of {user_id} for period {period_id}")
    return jsonify({
        'message': 'Desiderata usage recalculated successfully',
        'usage': usage.to_dict(),
    })


@desiderata_bp.route('/pending/<year>/<period_id>', methods=['GET'])
@handle_errors
@require_authentication()
def pending_desiderata(year, period_id):
    """Pending desiderata requests of the caller's site for a period, with the review grid."""
    site = g.current_user['site']
    year_num = get_period_registry().validate_year(year)
    pending = get_desiderata_review().pending_desiderata_by_period(site, year_num, period_id)
    return jsonify({
        'site': site,
        'year': year_num,
        'periodId': period_id,
        'count': len(pending['desiderata']),
        'requests': pending,
    })
