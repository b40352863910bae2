"""
Health Check Endpoints
Liveness and readiness probes for the container orchestrator
"""
from flask import Blueprint, jsonify, current_app
from datetime import datetime
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from roster.error_handlers.exceptions import StorageException
from roster.extensions import db
from roster.storage import get_repository

health_bp = Blueprint('health', __name__, url_prefix='/health')


@health_bp.route('/ping', methods=['GET'])
def ping():
    """
    Simple ping endpoint for basic connectivity checks.
    Returns: 200 OK with pong message
    """
    return jsonify({
        'status': 'ok',
        'message': 'pong',
        'timestamp': datetime.utcnow().isoformat()
    }), 200


@health_bp.route('/live', methods=['GET'])
def liveness():
    """Liveness probe - the process is up and serving requests."""
    return jsonify({
        'status': 'alive',
        'timestamp': datetime.utcnow().isoformat()
    }), 200


@health_bp.route('/ready', methods=['GET'])
def readiness():
    """
    Readiness probe - checks the database and the document store.

    Returns:
        200: Application is ready
        503: Application is not ready
    """
    checks = {
        'database': False,
        'storage': False,
    }
    errors = []

    try:
        db.session.execute(text('SELECT 1'))
        checks['database'] = True
    except SQLAlchemyError as e:
        errors.append(f"Database: {str(e)}")

    try:
        get_repository().store.exists('health/probe.json')
        checks['storage'] = True
    except (StorageException, RuntimeError) as e:
        errors.append(f"Storage: {str(e)}")

    all_checks_passed = all(checks.values())
    status_code = 200 if all_checks_passed else 503

    response = {
        'status': 'ready' if all_checks_passed else 'not_ready',
        'checks': checks,
        'storage_backend': current_app.config.get('STORAGE_BACKEND'),
        'timestamp': datetime.utcnow().isoformat()
    }

    if errors:
        response['errors'] = errors

    return jsonify(response), status_code
