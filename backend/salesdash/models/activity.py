from __future__ import annotations

import json

from ..extensions import db
from salesdash.time_utils import to_utc_z


class ActivityLog(db.Model):
    """
    Append-only audit trail of mutating actions.

    action is one of insert/update/delete/restore. details holds a JSON
    snapshot of the payload or record involved. user_id is NULL for system
    actions.

    IMMUTABLE: Never update or delete.
    """
    __tablename__ = "activity_logs"
    __table_args__ = (
        db.Index("ix_activity_logs_table_record", "table_name", "record_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("profiles.id"), nullable=True, index=True)
    action = db.Column(db.String(16), nullable=False, index=True)
    table_name = db.Column(db.String(64), nullable=False)
    record_id = db.Column(db.String(64), nullable=False)
    details = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    def details_dict(self):
        if not self.details:
            return None
        try:
            return json.loads(self.details)
        except ValueError:
            return self.details

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "action": self.action,
            "table_name": self.table_name,
            "record_id": self.record_id,
            "details": self.details_dict(),
            "created_at": to_utc_z(self.created_at),
        }
