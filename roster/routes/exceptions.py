"""
Availability exception endpoints
Per-date am/pm overrides stored in the user's settings document
"""
from flask import Blueprint, jsonify, request, current_app, g

from roster.error_handlers import handle_errors
from roster.routes.auth import require_authentication, require_self_or_admin
from roster.services.availability_types import parse_exceptions
from roster.services.exception_overlay import upsert
from roster.storage import get_repository
from roster.utils.validators import validate_date_param, validate_required_fields

exceptions_bp = Blueprint('exceptions', __name__, url_prefix='/api/users')


@exceptions_bp.route('/<user_id>/exceptions', methods=['GET'])
@handle_errors
@require_authentication()
def get_exceptions(user_id):
    user = g.current_user
    require_self_or_admin(user, user_id)
    settings = get_repository().read_user_settings(user['site'], user_id)
    return jsonify(settings.get('availabilityExceptions') or [])


@exceptions_bp.route('/<user_id>/exceptions', methods=['PUT'])
@handle_errors
@require_authentication()
def update_exception(user_id):
    """
    Set or clear one half-day override.

    Request body: {"date": "2026-03-02", "part": "am", "value": false}
    A null value clears the override for that half-day.
    """
    user = g.current_user
    require_self_or_admin(user, user_id)
    data = request.get_json(silent=True)
    validate_required_fields(data, ['date', 'part'])
    day = validate_date_param(data['date'], 'date')
    part, value = data['part'], data.get('value')

    # Make sure the user exists before creating a settings document for them
    get_repository().find_user(user['site'], user_id)

    def apply(settings):
        current = parse_exceptions(settings.get('availabilityExceptions'))
        updated = upsert(current, day, part, value)
        settings['availabilityExceptions'] = [e.to_dict() for e in updated]
        return settings['availabilityExceptions']

    exceptions = get_repository().update_user_settings(user['site'], user_id, apply)
    current_app.logger.info(f"Updated {part} exception on {data['date']} for user {user_id}")
    return jsonify({'userId': user_id, 'availabilityExceptions': exceptions})
