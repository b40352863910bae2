"""
Caller identity for API routes

Authentication happens in the fronting gateway, which forwards the caller as
request headers. Routes only read that identity and check roles.
"""
from flask import request, g, current_app
from functools import wraps

from roster.error_handlers.exceptions import AuthenticationException, AuthorizationException

USER_ID_HEADER = 'X-User-Id'
USER_SITE_HEADER = 'X-User-Site'
USER_ROLE_HEADER = 'X-User-Role'

ROLES = ('admin', 'user')


def get_current_user():
    """
    Get the caller forwarded by the gateway

    Returns:
        dict with id, site and role, or None when headers are missing
    """
    user_id = request.headers.get(USER_ID_HEADER)
    site = request.headers.get(USER_SITE_HEADER)
    if not user_id or not site:
        return None
    role = request.headers.get(USER_ROLE_HEADER, 'user')
    if role not in ROLES:
        role = 'user'
    return {'id': user_id, 'site': site, 'role': role}


def require_authentication(role=None):
    """
    Decorator requiring a caller identity, and optionally a role

    The caller is available as ``g.current_user`` inside the view. Raised
    errors are turned into JSON by @handle_errors, so place this decorator
    below it.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = get_current_user()
            if user is None:
                raise AuthenticationException('Authentication required')
            if role and user['role'] != role:
                current_app.logger.warning(
                    f"User {user['id']} denied access to {request.path} (requires {role})"
                )
                raise AuthorizationException('Unauthorized')
            g.current_user = user
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def can_manage_user(user, target_user_id):
    """Admins manage everyone; users only themselves"""
    return user['role'] == 'admin' or user['id'] == target_user_id


def require_self_or_admin(user, target_user_id):
    """
    Raises:
        AuthorizationException: If the caller may not act for target_user_id
    """
    if not can_manage_user(user, target_user_id):
        raise AuthorizationException('Unauthorized')
