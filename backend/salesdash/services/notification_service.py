# Overview: Service-layer operations for notifications; per-user inbox with read tracking.

"""
Notifications

Clients poll get_unread_count for new items; there is no push channel here.
Users can only read and mark their own notifications.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Notification, Profile
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    NotFoundError,
)
from . import permission_service
from .transactions import commit_or_rollback
from salesdash.time_utils import utcnow


NOTIFICATION_POLICY = ModelValidationPolicy(
    writable_fields={"user_id", "title", "message"},
    required_on_create={"user_id", "title", "message"},
)


def list_notifications(user_id: int, unread_only: bool = False, limit: int = 50) -> list[Notification]:
    query = db.session.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
        .all()
    )


def get_unread_count(user_id: int) -> int:
    return (
        db.session.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .count()
    )


def mark_as_read(notification_id: int, user_id: int) -> Notification:
    notification = db.session.get(Notification, notification_id)
    if notification is None or notification.user_id != user_id:
        raise NotFoundError("Notification not found")

    if not notification.is_read:
        notification.is_read = True
        commit_or_rollback()
    return notification


def mark_all_as_read(user_id: int) -> int:
    updated = (
        db.session.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    commit_or_rollback()
    return updated


def create_notification(user_id: int, title: str, message: str, actor_id: int | None) -> Notification:
    permission_service.require_permission(actor_id, "SEND_NOTIFICATIONS", resource="notifications")

    patch = validate_payload(
        model=Notification,
        payload={"user_id": user_id, "title": title, "message": message},
        policy=NOTIFICATION_POLICY,
        partial=False,
    )
    if db.session.get(Profile, patch["user_id"]) is None:
        raise NotFoundError("User not found")

    notification = Notification(**patch, is_read=False, created_at=utcnow())
    db.session.add(notification)
    commit_or_rollback()
    return notification
