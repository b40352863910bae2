"""
Routes package for the duty roster service
Centralizes all route blueprints
"""
from .auth import (
    get_current_user,
    require_authentication
)
from .health import health_bp
from .availability import availability_bp
from .exceptions import exceptions_bp
from .periods import periods_bp
from .desiderata import desiderata_bp
from .reports import reports_bp

__all__ = [
    'health_bp',
    'availability_bp',
    'exceptions_bp',
    'periods_bp',
    'desiderata_bp',
    'reports_bp',
    'get_current_user',
    'require_authentication'
]
