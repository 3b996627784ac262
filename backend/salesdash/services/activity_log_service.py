# Overview: Service-layer operations for the activity log; append and paginated reads.

"""
Activity Log (audit trail)

WHY: Every mutating lifecycle operation is attributable. Entries record
{action, table_name, record_id, details} plus the acting user.

BEST-EFFORT: log_activity runs after the business change has committed. A
failure to write the log entry is rolled back, logged, and swallowed; it never
undoes or fails the operation it describes.
"""

from __future__ import annotations

import json
import math

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import ActivityLog, Profile
from ..models.lifecycle import LIFECYCLE_ACTIONS
from salesdash.time_utils import utcnow


SYSTEM_USER_NAME = "System"
UNKNOWN_USER_NAME = "Unknown User"


def _serialize_details(details) -> str | None:
    if details is None:
        return None
    return json.dumps(details, default=str, sort_keys=True)


def log_activity(
    *,
    action: str,
    table_name: str,
    record_id,
    details=None,
    user_id: int | None = None,
) -> ActivityLog | None:
    """
    Append an activity log entry.

    Returns the entry, or None when the store rejected the write.
    Raises ValueError for an action outside insert/update/delete/restore.
    """
    if action not in LIFECYCLE_ACTIONS:
        raise ValueError(f"Unknown activity action: {action}")

    try:
        entry = ActivityLog(
            user_id=user_id,
            action=action,
            table_name=table_name,
            record_id=str(record_id),
            details=_serialize_details(details),
            created_at=utcnow(),
        )
        db.session.add(entry)
        db.session.commit()
        return entry
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(
            "Failed to write activity log (%s %s %s)", action, table_name, record_id
        )
        return None


def resolve_user_names(user_ids) -> dict:
    """
    Map user ids to display names in one query.

    None maps to "System"; ids with no profile map to "Unknown User".
    """
    ids = {uid for uid in user_ids if uid is not None}
    names: dict = {None: SYSTEM_USER_NAME}
    if ids:
        profiles = db.session.query(Profile).filter(Profile.id.in_(ids)).all()
        found = {p.id: p.display_name for p in profiles}
        for uid in ids:
            names[uid] = found.get(uid, UNKNOWN_USER_NAME)
    return names


def _enrich(entries: list[ActivityLog]) -> list[dict]:
    names = resolve_user_names(e.user_id for e in entries)
    out = []
    for e in entries:
        row = e.to_dict()
        row["user_name"] = names.get(e.user_id, UNKNOWN_USER_NAME)
        out.append(row)
    return out


def list_activity_logs(page: int = 1, per_page: int | None = None) -> dict:
    """Newest-first page of log entries with user names attached."""
    if per_page is None:
        per_page = current_app.config.get("ACTIVITY_LOG_PAGE_SIZE", 10)
    page = max(int(page), 1)
    per_page = min(max(int(per_page), 1), 100)

    query = db.session.query(ActivityLog)
    total = query.count()
    entries = (
        query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )

    return {
        "items": _enrich(entries),
        "page": page,
        "per_page": per_page,
        "total": total,
        "pages": math.ceil(total / per_page) if total else 0,
    }


def get_recent_activity(limit: int = 5) -> list[dict]:
    entries = (
        db.session.query(ActivityLog)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )
    return _enrich(entries)
