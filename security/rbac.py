import logging
from functools import wraps

from flask import current_app, g, jsonify

from models.admin_permissions import AdminPermissions, PERMISSION_KEYS

logger = logging.getLogger(__name__)


def has_role(role_name: str) -> bool:
    user = getattr(g, "user", None)
    if not user:
        return False
    return role_name in user.role_names


def require_roles(*role_names: str):
    """
    Usage: @require_roles("ADMIN")
    SUPER_ADMIN passes every role check.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = getattr(g, "user", None)
            if user is None:
                return jsonify(error="Authentication required"), 401

            user_roles = user.role_names
            if "SUPER_ADMIN" not in user_roles and not user_roles.intersection(set(role_names)):
                return jsonify(error="Forbidden"), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator


def check_permission(user, key: str):
    """
    Returns (allowed, error). SUPER_ADMIN is always allowed; an ADMIN is
    judged by the AdminPermissions row.
    """
    if user is None:
        return False, "Authentication required"
    if user.is_super_admin:
        return True, None
    if "ADMIN" not in user.role_names:
        return False, "Forbidden"
    if key not in PERMISSION_KEYS:
        return False, f"Unknown permission: {key}"

    permissions = AdminPermissions.load()
    if permissions is None:
        if current_app.config.get("PERMISSIONS_FAIL_OPEN", True):
            logger.warning("No admin permissions configured; allowing %s for user %s", key, user.id)
            return True, None
        return False, "No permissions configured"

    if not getattr(permissions, key):
        return False, f"Permission denied: {key}"
    return True, None


def require_permission(key: str):
    """
    Usage: @require_permission("can_freeze_slots")
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = getattr(g, "user", None)
            if user is None:
                return jsonify(error="Authentication required"), 401

            allowed, error = check_permission(user, key)
            if not allowed:
                return jsonify(error=error or "Forbidden"), 403
            return fn(*args, **kwargs)
        return wrapper
    return decorator


def get_or_create_permissions() -> AdminPermissions:
    return AdminPermissions.get_or_create_default()
