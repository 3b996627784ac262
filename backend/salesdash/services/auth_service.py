# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication and user administration.

WHY: Every action must be attributable. Uses bcrypt for secure password
hashing and validates password strength.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Minimum 8 characters, upper, lower, digit and special char required
- Session tokens managed separately (see session_service.py)
- The very first account created becomes the administrator
"""

from __future__ import annotations

import re

import bcrypt

from ..extensions import db
from ..models import Profile
from ..models.auth import ROLE_ADMIN, ROLE_CUSTOMER, VALID_ROLES
from ..models.lifecycle import ACTION_INSERT, ACTION_UPDATE
from ..formatting import DATE_FORMATS
from ..validation import ValidationError, ConflictError, NotFoundError
from . import activity_log_service, permission_service, session_service
from .transactions import commit_or_rollback
from salesdash.time_utils import utcnow


EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class AuthError(Exception):
    """Authentication failure; status_code is the HTTP status to report."""
    def __init__(self, message: str, status_code: int = 401):
        super().__init__(message)
        self.status_code = status_code


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character (!@#$%^&*(),.'":{}|<>)
    """
    if not isinstance(password, str) or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str) -> str:
    """Hash password using bcrypt with cost factor 12 (strength checked first)."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt comparison; malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def _normalize_email(email) -> str:
    if not isinstance(email, str) or not EMAIL_RE.match(email.strip()):
        raise ValidationError("A valid email address is required")
    return email.strip().lower()


def create_user(
    email: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
    role: str | None = None,
) -> Profile:
    """
    Create a profile with a bcrypt password hash.

    role=None assigns admin to the first account ever created and customer
    to every later one.
    """
    email = _normalize_email(email)
    if role is not None and role not in VALID_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(VALID_ROLES)}")

    password_hash = hash_password(password)

    if db.session.query(Profile).filter_by(email=email).first():
        raise ConflictError("Email already registered")

    if role is None:
        role = ROLE_ADMIN if db.session.query(Profile).count() == 0 else ROLE_CUSTOMER

    user = Profile(
        email=email,
        password_hash=password_hash,
        first_name=(first_name or "").strip() or None,
        last_name=(last_name or "").strip() or None,
        role=role,
        created_at=utcnow(),
    )
    db.session.add(user)
    commit_or_rollback(conflict_message="Email already registered")

    activity_log_service.log_activity(
        action=ACTION_INSERT,
        table_name="profiles",
        record_id=user.id,
        details={"email": user.email, "role": user.role},
        user_id=user.id,
    )
    return user


def signup(email: str, password: str, first_name: str | None = None, last_name: str | None = None) -> Profile:
    return create_user(email, password, first_name=first_name, last_name=last_name)


def authenticate(email: str, password: str) -> Profile | None:
    """
    Returns Profile if credentials valid, None otherwise.
    Updates last_login_at timestamp on successful authentication.
    """
    if not isinstance(email, str) or not isinstance(password, str):
        return None

    user = db.session.query(Profile).filter(
        Profile.email == email.strip().lower(),
        Profile.is_active.is_(True),
    ).first()

    if not user:
        return None

    if verify_password(password, user.password_hash):
        user.last_login_at = utcnow()
        db.session.commit()
        return user

    return None


def login(
    email: str,
    password: str,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[Profile, str]:
    """Authenticate and open a session. Returns (profile, plaintext_token)."""
    if not email or not password:
        raise AuthError("Email and password are required", status_code=400)

    user = authenticate(email, password)
    if user is None:
        raise AuthError("Invalid email or password")

    _session, token = session_service.create_session(
        user.id, user_agent=user_agent, ip_address=ip_address
    )
    return user, token


def update_user_role(user_id: int, role: str, actor_id: int) -> Profile:
    permission_service.require_permission(actor_id, "MANAGE_USERS", resource="profiles")

    if role not in VALID_ROLES:
        raise ValidationError(f"role must be one of: {', '.join(VALID_ROLES)}")

    user = db.session.get(Profile, user_id)
    if user is None:
        raise NotFoundError("User not found")

    old_role = user.role
    if old_role == role:
        return user

    if old_role == ROLE_ADMIN:
        admins = db.session.query(Profile).filter_by(role=ROLE_ADMIN, is_active=True).count()
        if admins <= 1:
            raise ConflictError("Cannot remove the last administrator")

    user.role = role
    commit_or_rollback()

    activity_log_service.log_activity(
        action=ACTION_UPDATE,
        table_name="profiles",
        record_id=user.id,
        details={"old_role": old_role, "new_role": role},
        user_id=actor_id,
    )
    return user


def list_users() -> list[dict]:
    users = db.session.query(Profile).order_by(Profile.id.asc()).all()
    out = []
    for user in users:
        row = user.to_dict()
        row["permissions"] = permission_service.get_permission_flags(user.id)
        out.append(row)
    return out


def update_profile(user_id: int, payload: dict) -> Profile:
    """
    Name and display preference changes made by the user themselves.

    The whole payload is checked before the profile is touched, so a
    rejected request changes nothing.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    allowed = {"first_name", "last_name", "date_format", "dark_mode"}
    unknown = sorted(set(payload) - allowed)
    if unknown:
        raise ValidationError(f"Field not allowed: {unknown[0]}")

    changes: dict = {}
    for key in ("first_name", "last_name"):
        if key in payload:
            value = payload[key]
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"{key} must be a string")
            value = (value or "").strip() or None
            if value and len(value) > 64:
                raise ValidationError(f"{key} exceeds max length 64")
            changes[key] = value

    if "date_format" in payload:
        if payload["date_format"] not in DATE_FORMATS:
            raise ValidationError(f"date_format must be one of: {', '.join(DATE_FORMATS)}")
        changes["date_format"] = payload["date_format"]

    if "dark_mode" in payload:
        if not isinstance(payload["dark_mode"], bool):
            raise ValidationError("dark_mode must be true or false")
        changes["dark_mode"] = payload["dark_mode"]

    user = db.session.get(Profile, user_id)
    if user is None:
        raise NotFoundError("User not found")

    for key, value in changes.items():
        setattr(user, key, value)
    commit_or_rollback()
    return user
