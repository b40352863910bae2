"""
Utility modules for the duty roster service
"""
from .dates import each_day, format_date, parse_date, weekday_name
from .validators import validate_date_param, validate_required_fields, validate_year

__all__ = [
    'each_day',
    'format_date',
    'parse_date',
    'weekday_name',
    'validate_date_param',
    'validate_required_fields',
    'validate_year',
]
