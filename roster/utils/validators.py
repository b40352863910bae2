"""
Validation utilities for the duty roster service
Provides reusable request validation helpers for API endpoints

All functions include type hints for better IDE support and type checking.
"""
import re
from datetime import datetime, date
from typing import Any, Dict, List, Optional

from roster.error_handlers.exceptions import ValidationException

DATE_FORMAT = '%Y-%m-%d'
_DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def validate_date_param(date_str: Any, param_name: str = 'date') -> date:
    """
    Validate and parse a date parameter from string.

    Args:
        date_str: Date string in YYYY-MM-DD format
        param_name: Name of parameter for error messages (default: 'date')

    Returns:
        date: Parsed date object

    Raises:
        ValidationException: If date format is invalid

    Examples:
        >>> validate_date_param('2026-07-04')
        datetime.date(2026, 7, 4)
        >>> validate_date_param('04/07/2026', 'startDate')
        ValidationException: Invalid startDate format. Use YYYY-MM-DD (e.g., 2026-07-04)
    """
    if not isinstance(date_str, str) or not _DATE_PATTERN.match(date_str):
        raise ValidationException(
            f"Invalid {param_name} format. Use YYYY-MM-DD (e.g., 2026-07-04)",
            details={'field': param_name}
        )
    try:
        return datetime.strptime(date_str, DATE_FORMAT).date()
    except ValueError:
        raise ValidationException(
            f"Invalid {param_name} format. Use YYYY-MM-DD (e.g., 2026-07-04)",
            details={'field': param_name}
        )


def validate_optional_date_param(date_str: Any, param_name: str) -> Optional[date]:
    """Parse an optional date; None and empty string mean 'not given'."""
    if date_str is None or date_str == '':
        return None
    return validate_date_param(date_str, param_name)


def validate_required_fields(data: Optional[Dict[str, Any]], required_fields: List[str]) -> None:
    """
    Validate that all required fields are present and non-empty in request data.

    Args:
        data: Request data dictionary
        required_fields: List of required field names

    Raises:
        ValidationException: If the body is missing or any required field is missing
    """
    if not isinstance(data, dict):
        raise ValidationException('Request body must be a JSON object')

    missing = [field for field in required_fields if data.get(field) in (None, '')]
    if missing:
        raise ValidationException(
            f"Missing required fields: {', '.join(missing)}",
            details={'missing': missing}
        )


def validate_year(year: Any, min_year: int, max_year: int) -> int:
    """
    Validate a year path/query parameter against an accepted range.

    Raises:
        ValidationException: If the year is not an integer inside the range
    """
    try:
        year_num = int(year)
    except (TypeError, ValueError):
        raise ValidationException(f"Invalid year '{year}'")
    if year_num < min_year or year_num > max_year:
        raise ValidationException(
            f"Invalid year {year_num}. Expected a year between {min_year} and {max_year}"
        )
    return year_num


def sanitize_request_data(data: str) -> str:
    """
    Remove sensitive data from request strings for safe logging.

    Args:
        data: Request data as string

    Returns:
        Sanitized string with sensitive data replaced with [REDACTED]

    Examples:
        >>> sanitize_request_data('{"password": "secret123"}')
        '{"password": "[REDACTED]"}'
    """
    for field_name in ('password', 'token', 'api_key', 'secret', 'credential'):
        data = re.sub(
            rf'("{field_name}"\s*:\s*")[^"]*(")',
            r'\1[REDACTED]\2',
            data,
            flags=re.IGNORECASE
        )
    return data
