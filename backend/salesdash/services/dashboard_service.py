# Overview: Service-layer operations for the dashboard summary cards.

from __future__ import annotations

from ..extensions import db
from ..models import Customer, Sale, Profile
from . import activity_log_service, notification_service


def get_dashboard_stats(user_id: int) -> dict:
    """Counts shown on the dashboard; soft-deleted rows are excluded."""
    return {
        "customers": db.session.query(Customer).filter(Customer.deleted_at.is_(None)).count(),
        "sales": db.session.query(Sale).filter(Sale.deleted_at.is_(None)).count(),
        "users": db.session.query(Profile).count(),
        "unread_notifications": notification_service.get_unread_count(user_id),
    }


def get_recent_activity(limit: int = 5) -> list[dict]:
    return activity_log_service.get_recent_activity(limit=limit)
