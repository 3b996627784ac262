# Overview: Bearer-token sessions for signed-in SalesDash users.

"""
Sessions

The client holds a random 64-char hex token; the database keeps only its
SHA-256 digest. A session ends when it is revoked (logout), when it outlives
SESSION_ABSOLUTE_TIMEOUT_HOURS, or when it sits unused for longer than
SESSION_IDLE_TIMEOUT_HOURS.
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import Profile, SessionToken
from ..validation import NotFoundError
from salesdash.time_utils import utcnow


REASON_LOGOUT = "Logout"
REASON_IDLE = "Idle timeout"
REASON_INACTIVE = "Profile deactivated"


@dataclass
class SessionContext:
    user: Profile
    session: SessionToken


def _hours(key: str, default: int) -> timedelta:
    return timedelta(hours=current_app.config.get(key, default))


def generate_token() -> str:
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    # Tokens carry 256 bits of entropy; a fast digest is enough here.
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _lookup(token: str | None) -> SessionToken | None:
    if not token:
        return None
    return (
        db.session.query(SessionToken)
        .filter(SessionToken.token_hash == hash_token(token), SessionToken.is_revoked.is_(False))
        .first()
    )


def _end(session: SessionToken, reason: str) -> None:
    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason
    db.session.commit()


def create_session(
    user_id: int,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """Open a session for an active profile. Returns (row, plaintext token)."""
    user = db.session.get(Profile, user_id)
    if user is None or not user.is_active:
        raise NotFoundError("User not found")

    token = generate_token()
    now = utcnow()
    session = SessionToken(
        user_id=user.id,
        token_hash=hash_token(token),
        created_at=now,
        last_used_at=now,
        expires_at=now + _hours("SESSION_ABSOLUTE_TIMEOUT_HOURS", 24),
        user_agent=user_agent[:512] if user_agent else None,
        ip_address=ip_address,
        is_revoked=False,
    )
    db.session.add(session)
    db.session.commit()
    return session, token


def validate_session(token: str | None) -> SessionContext | None:
    """
    Resolve a bearer token to its user, touching last_used_at.

    Idle sessions and sessions of deactivated profiles are revoked on the way
    out; expired ones are simply refused.
    """
    session = _lookup(token)
    if session is None:
        return None

    now = utcnow()
    if session.expires_at < now:
        return None
    if now - session.last_used_at > _hours("SESSION_IDLE_TIMEOUT_HOURS", 2):
        _end(session, REASON_IDLE)
        return None
    if session.user is None or not session.user.is_active:
        _end(session, REASON_INACTIVE)
        return None

    session.last_used_at = now
    db.session.commit()
    return SessionContext(user=session.user, session=session)


def revoke_session(token: str | None, reason: str = REASON_LOGOUT) -> bool:
    session = _lookup(token)
    if session is None:
        return False
    _end(session, reason)
    return True
