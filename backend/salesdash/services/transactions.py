# Overview: Commit helpers shared by the lifecycle services.

from __future__ import annotations

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..extensions import db
from ..validation import ConflictError


def commit_or_rollback(*, conflict_message: str | None = None) -> None:
    """
    Commit the current unit of work as a whole, or leave nothing behind.

    A unique-key violation becomes ConflictError(conflict_message) when a
    message is given. Other store errors are re-raised after rollback; they
    are reported to the caller, not retried.
    """
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        if conflict_message:
            raise ConflictError(conflict_message) from exc
        raise
    except SQLAlchemyError:
        db.session.rollback()
        raise
