"""
Unified Error Handling System

Provides centralized, consistent error handling across the application.

Usage:
    from roster.error_handlers import handle_errors
    from roster.error_handlers.exceptions import ValidationException

    @desiderata_bp.route('/validate', methods=['POST'])
    @handle_errors
    def validate_desiderata():
        if not valid:
            raise ValidationException('Invalid data')
        return jsonify(result)
"""
from .exceptions import (
    AppException,
    ValidationException,
    ConfigurationException,
    AuthenticationException,
    AuthorizationException,
    ResourceNotFoundException,
    ConcurrentModificationException,
    StorageException,
)
from .decorators import handle_errors


__all__ = [
    # Exceptions
    'AppException',
    'ValidationException',
    'ConfigurationException',
    'AuthenticationException',
    'AuthorizationException',
    'ResourceNotFoundException',
    'ConcurrentModificationException',
    'StorageException',
    # Decorators
    'handle_errors',
    # Setup
    'setup_logging',
    'register_error_handlers',
    'storage_logger',
]


def setup_logging(app):
    """Configure application logging"""
    from roster.error_handlers import logging as eh_logging
    return eh_logging.setup_logging(app)


def register_error_handlers(app):
    """Register global error handlers for the Flask app"""
    from roster.error_handlers import logging as eh_logging
    eh_logging.register_error_handlers(app)


from roster.error_handlers import logging as eh_logging
storage_logger = eh_logging.storage_logger
