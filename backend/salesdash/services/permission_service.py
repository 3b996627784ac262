# Overview: Service-layer operations for permission; encapsulates business logic and database work.

"""
Capability checks for customers, sales and sale lines.

WHY: Every mutating operation checks the acting user's capability before any
validation or write happens.

DESIGN PRINCIPLES:
- Fail closed: a user with no user_permissions row holds nothing
- Administrators hold every code regardless of stored flags
- Admin-only codes (restore, view deleted, user management) have no flag
- Log denials only: grants are not logged
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Profile, UserPermission
from ..models.auth import PERMISSION_FLAGS
from ..models.lifecycle import ACTION_INSERT, ACTION_UPDATE
from ..permissions import (
    get_all_permission_codes,
    get_flag_for_code,
    validate_permission_code,
)
from ..validation import ValidationError, NotFoundError
from . import activity_log_service
from salesdash.time_utils import utcnow


class PermissionDeniedError(Exception):
    """Raised when user lacks required permission."""
    pass


def get_user_permissions(user_id: int | None) -> set[str]:
    """
    Get all permission codes for a user.

    Returns set of permission codes (e.g., {"ADD_CUSTOMERS", "EDIT_SALES"}).
    """
    if user_id is None:
        return set()

    user = db.session.get(Profile, user_id)
    if user is None or not user.is_active:
        return set()

    if user.is_admin:
        return set(get_all_permission_codes())

    row = db.session.query(UserPermission).filter_by(user_id=user_id).first()
    if row is None:
        return set()

    codes: set[str] = set()
    for code in get_all_permission_codes():
        flag = get_flag_for_code(code)
        if flag is not None and getattr(row, flag):
            codes.add(code)
    return codes


def user_has_permission(user_id: int | None, permission_code: str) -> bool:
    return permission_code in get_user_permissions(user_id)


def require_permission(
    user_id: int | None,
    permission_code: str,
    resource: str | None = None,
) -> None:
    """
    Require user to have permission, raise PermissionDeniedError if not.

    Usage:
        require_permission(actor_id, "ADD_CUSTOMERS", resource="customer")
    """
    if not validate_permission_code(permission_code):
        raise ValueError(f"Unknown permission code: {permission_code}")
    if not user_has_permission(user_id, permission_code):
        current_app.logger.warning(
            "Permission denied: user=%s permission=%s resource=%s",
            user_id, permission_code, resource,
        )
        raise PermissionDeniedError(f"Permission denied: {permission_code}")


def get_permission_flags(user_id: int) -> dict[str, bool]:
    """Flag view used by the UI; administrators report every flag as set."""
    user = db.session.get(Profile, user_id)
    if user is None:
        raise NotFoundError("User not found")
    if user.is_admin:
        return {flag: True for flag in PERMISSION_FLAGS}

    row = db.session.query(UserPermission).filter_by(user_id=user_id).first()
    if row is None:
        return {flag: False for flag in PERMISSION_FLAGS}
    return row.flags()


def set_user_permissions(user_id: int, flags: dict, actor_id: int) -> UserPermission:
    """
    Create or update a non-admin user's capability flags.

    Flags not mentioned keep their current value (False for a new row).
    """
    require_permission(actor_id, "MANAGE_USERS", resource="user_permissions")

    if not isinstance(flags, dict) or not flags:
        raise ValidationError("Permission flags are required")
    for flag, value in flags.items():
        if flag not in PERMISSION_FLAGS:
            raise ValidationError(f"Unknown permission flag: {flag}")
        if not isinstance(value, bool):
            raise ValidationError(f"{flag} must be true or false")

    target = db.session.get(Profile, user_id)
    if target is None:
        raise NotFoundError("User not found")
    if target.is_admin:
        raise ValidationError("Admin users automatically have all permissions")

    row = db.session.query(UserPermission).filter_by(user_id=user_id).first()
    action = ACTION_UPDATE
    if row is None:
        row = UserPermission(user_id=user_id, created_at=utcnow())
        for flag in PERMISSION_FLAGS:
            setattr(row, flag, False)
        db.session.add(row)
        action = ACTION_INSERT

    for flag, value in flags.items():
        setattr(row, flag, value)
    row.updated_at = utcnow()

    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    activity_log_service.log_activity(
        action=action,
        table_name="user_permissions",
        record_id=user_id,
        details={"user_id": user_id, **row.flags()},
        user_id=actor_id,
    )
    return row
