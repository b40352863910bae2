"""
Availability rule endpoints
A user's rules are an ordered list; later rules take precedence
"""
from flask import Blueprint, jsonify, request, current_app, g

from roster.error_handlers import handle_errors
from roster.error_handlers.exceptions import ResourceNotFoundException, ValidationException
from roster.routes.auth import require_authentication, require_self_or_admin
from roster.services.availability_types import AvailabilityRule
from roster.storage import get_repository

availability_bp = Blueprint('availability', __name__, url_prefix='/api/availability')


def _parse_rule(data):
    """
    Raises:
        ValidationException: 'Validation error' with the list of problems
    """
    try:
        return AvailabilityRule.from_dict(data, strict=True)
    except ValidationException as e:
        errors = e.details.get('errors') or [e.message]
        raise ValidationException('Validation error', details={'errors': errors})


def _require_user(site, user_id):
    """
    Raises:
        ResourceNotFoundException: If the user is not part of the site
    """
    get_repository().find_user(site, user_id)


def _rules_of(settings):
    settings.setdefault('availability', [])
    return settings['availability']


@availability_bp.route('/<user_id>', methods=['GET'])
@handle_errors
@require_authentication()
def get_rules(user_id):
    """
    List a user's availability rules in precedence order.

    Returns:
        JSON array of rules
    """
    user = g.current_user
    require_self_or_admin(user, user_id)
    settings = get_repository().read_user_settings(user['site'], user_id)
    return jsonify(settings.get('availability') or [])


@availability_bp.route('/<user_id>/<int:index>', methods=['POST'])
@handle_errors
@require_authentication()
def insert_rule(user_id, index):
    """
    Insert a rule at a position of the list.

    Request body: rule JSON (weeklySchedule, startDate, endDate?, repeatPattern,
    oddWeeklySchedule?)
    """
    user = g.current_user
    require_self_or_admin(user, user_id)
    rule = _parse_rule(request.get_json(silent=True)).to_dict()
    _require_user(user['site'], user_id)

    def apply(settings):
        _rules_of(settings).insert(index, rule)

    get_repository().update_user_settings(user['site'], user_id, apply)
    current_app.logger.info(f"Inserted availability rule at {index} for user {user_id}")
    return jsonify(rule), 201


@availability_bp.route('/<user_id>/<int:index>', methods=['PUT'])
@handle_errors
@require_authentication()
def replace_rule(user_id, index):
    """Replace the rule at a position; 404 when there is none."""
    user = g.current_user
    require_self_or_admin(user, user_id)
    rule = _parse_rule(request.get_json(silent=True)).to_dict()
    _require_user(user['site'], user_id)

    def apply(settings):
        rules = _rules_of(settings)
        if index >= len(rules):
            raise ResourceNotFoundException('Schedule not found')
        rules[index] = rule

    get_repository().update_user_settings(user['site'], user_id, apply)
    current_app.logger.info(f"Replaced availability rule {index} for user {user_id}")
    return jsonify(rule)


@availability_bp.route('/<user_id>/<int:index>', methods=['DELETE'])
@handle_errors
@require_authentication()
def delete_rule(user_id, index):
    user = g.current_user
    require_self_or_admin(user, user_id)
    _require_user(user['site'], user_id)

    def apply(settings):
        rules = _rules_of(settings)
        if index >= len(rules):
            raise ResourceNotFoundException('Schedule not found')
        del rules[index]

    get_repository().update_user_settings(user['site'], user_id, apply)
    current_app.logger.info(f"Deleted availability rule {index} for user {user_id}")
    return '', 204


@availability_bp.route('/<user_id>/reorder', methods=['PUT'])
@handle_errors
@require_authentication()
def reorder_rules(user_id):
    """
    Replace the whole rule list, which sets a new precedence order.

    Request body: {"schedules": [rule, ...]}
    """
    user = g.current_user
    require_self_or_admin(user, user_id)
    data = request.get_json(silent=True) or {}
    schedules = data.get('schedules')
    if not isinstance(schedules, list):
        raise ValidationException('Validation error', details={'errors': ['schedules must be a list']})
    rules = [_parse_rule(item).to_dict() for item in schedules]
    _require_user(user['site'], user_id)

    def apply(settings):
        settings['availability'] = rules

    get_repository().update_user_settings(user['site'], user_id, apply)
    current_app.logger.info(f"Reordered {len(rules)} availability rules for user {user_id}")
    return jsonify(rules)
