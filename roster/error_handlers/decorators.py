"""
Error handling decorators

Provides decorators for consistent error handling across endpoints.
"""
from functools import wraps
from flask import jsonify, current_app, request
from datetime import datetime
from .exceptions import AppException, ConcurrentModificationException


def handle_errors(f):
    """
    Universal error handler decorator - use on all endpoints

    Provides:
    - Consistent JSON error responses
    - Automatic logging with error IDs
    - Exception type hierarchy support

    Usage:
        @periods_bp.route('/<site>/periods/<int:year>')
        @handle_errors
        def get_periods(site, year):
            if not valid:
                raise ValidationException('Invalid year')
            return jsonify(data)

    Args:
        f: Function to decorate

    Returns:
        Decorated function with error handling
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            return f(*args, **kwargs)

        except ConcurrentModificationException as e:
            # Lost every compare-and-swap retry; the client may resubmit
            current_app.logger.warning(
                f"Write conflict on {request.method} {request.path}: {e.message}",
                extra={'details': e.details}
            )
            return jsonify(e.to_dict()), e.status_code

        except AppException as e:
            log = current_app.logger.error if e.status_code >= 500 else current_app.logger.info
            log(
                f"{e.error_type} ({e.status_code}) on {request.method} {request.path}: {e.message}",
                extra={'details': e.details} if e.details else {}
            )
            return jsonify(e.to_dict()), e.status_code

        except Exception as e:
            error_id = datetime.utcnow().strftime('%Y%m%d_%H%M%S_%f')

            current_app.logger.error(
                f"Unexpected error [{error_id}] on {request.method} {request.path}: {str(e)}",
                exc_info=True
            )

            # Don't expose internal error details
            return jsonify({
                'error': 'InternalError',
                'message': 'An unexpected error occurred',
                'error_id': error_id,
                'status_code': 500
            }), 500

    return decorated
