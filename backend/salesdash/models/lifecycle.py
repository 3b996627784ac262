from __future__ import annotations

from ..extensions import db
from salesdash.time_utils import to_utc_z


# Values stored in last_action; also the activity log action vocabulary
ACTION_INSERT = "insert"
ACTION_UPDATE = "update"
ACTION_DELETE = "delete"
ACTION_RESTORE = "restore"
LIFECYCLE_ACTIONS = (ACTION_INSERT, ACTION_UPDATE, ACTION_DELETE, ACTION_RESTORE)


class LifecycleMixin:
    """
    Audit stamps and soft-delete marker shared by customers, sales and sale lines.

    A row is logically deleted while deleted_at is set. Rows are never hard
    deleted by the application. last_action records the most recent lifecycle
    operation so status derivation does not have to guess from timestamps.
    """
    created_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_by = db.Column(db.Integer, nullable=True)
    modified_at = db.Column(db.DateTime(timezone=True), nullable=True)
    modified_by = db.Column(db.Integer, nullable=True)
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True, index=True)
    deleted_by = db.Column(db.Integer, nullable=True)
    last_action = db.Column(db.String(16), nullable=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def stamp_created(self, user_id: int | None, now) -> None:
        self.created_at = now
        self.created_by = user_id
        self.last_action = ACTION_INSERT

    def stamp_modified(self, user_id: int | None, now, action: str = ACTION_UPDATE) -> None:
        self.modified_at = now
        self.modified_by = user_id
        self.last_action = action

    def mark_deleted(self, user_id: int | None, now) -> None:
        self.deleted_at = now
        self.deleted_by = user_id
        self.last_action = ACTION_DELETE

    def mark_restored(self, user_id: int | None, now) -> None:
        self.deleted_at = None
        self.deleted_by = None
        self.stamp_modified(user_id, now, action=ACTION_RESTORE)

    def lifecycle_dict(self) -> dict:
        return {
            "created_at": to_utc_z(self.created_at),
            "created_by": self.created_by,
            "modified_at": to_utc_z(self.modified_at),
            "modified_by": self.modified_by,
            "deleted_at": to_utc_z(self.deleted_at),
            "deleted_by": self.deleted_by,
            "last_action": self.last_action,
        }
