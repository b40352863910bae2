"""
Custom exception hierarchy for type-safe error handling

Maps every failure the roster service can report to an HTTP status code so
routes can raise and let @handle_errors build the response.

Usage:
    from roster.error_handlers.exceptions import ValidationException

    def save_periods(periods):
        if not periods:
            raise ValidationException('At least one period is required')

Exception Hierarchy:
    AppException (base, 500)
    ├── ValidationException (400)
    ├── ConfigurationException (400)
    ├── AuthenticationException (401)
    ├── AuthorizationException (403)
    ├── ResourceNotFoundException (404)
    ├── ConcurrentModificationException (409)
    └── StorageException (500)
"""
from typing import Dict, Any, Optional


class AppException(Exception):
    """
    Base exception for all application errors

    Attributes:
        status_code: HTTP status code for the error
        error_type: String identifier for the error type
        message: Human-readable error message
        details: Additional context about the error
    """
    status_code = 500
    error_type = 'ApplicationError'

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        if status_code:
            self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to JSON-serializable dictionary

        Returns:
            Dictionary suitable for JSON response
        """
        result = {
            'error': self.error_type,
            'message': self.message,
            'status_code': self.status_code
        }

        if self.details:
            result.update(self.details)

        return result

    def __str__(self) -> str:
        return f"{self.error_type}: {self.message}"

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}('{self.message}', status_code={self.status_code})>"


class ValidationException(AppException):
    """
    Validation errors (HTTP 400)

    Raised for malformed dates, period ordering and overlap, and invalid
    availability rules. The message names the offending field or period.

    Example:
        >>> raise ValidationException('End date must be after start date for period "Summer"')
    """
    status_code = 400
    error_type = 'ValidationError'


class ConfigurationException(AppException):
    """
    Configuration errors (HTTP 400)

    Raised when a period has no desiderata quotas configured or an unknown
    week parity strategy is requested.
    """
    status_code = 400
    error_type = 'ConfigurationError'


class AuthenticationException(AppException):
    """Caller identity missing (HTTP 401)"""
    status_code = 401
    error_type = 'AuthenticationError'


class AuthorizationException(AppException):
    """
    Authorization errors (HTTP 403)

    Example:
        >>> if user.role != 'admin':
        ...     raise AuthorizationException('Admin access required')
    """
    status_code = 403
    error_type = 'AuthorizationError'


class ResourceNotFoundException(AppException):
    """
    Resource not found (HTTP 404)

    Example:
        >>> raise ResourceNotFoundException(f'User {user_id} not found')
    """
    status_code = 404
    error_type = 'NotFound'


class ConcurrentModificationException(AppException):
    """
    Compare-and-swap write lost a race (HTTP 409)

    Raised by the document store when the stored version no longer matches
    the version the caller read.
    """
    status_code = 409
    error_type = 'ConcurrentModification'


class StorageException(AppException):
    """
    Document storage failures (HTTP 500)

    Raised when a stored document cannot be read, parsed or written.
    """
    status_code = 500
    error_type = 'StorageError'
