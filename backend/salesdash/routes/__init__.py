# Overview: Shared mapping from service-layer exceptions to JSON error responses.

from flask import jsonify, current_app, request
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..services.auth_service import AuthError
from ..services.permission_service import PermissionDeniedError
from ..validation import ValidationError, ConflictError, NotFoundError


DOMAIN_ERRORS = (
    AuthError,
    PermissionDeniedError,
    ValidationError,
    ConflictError,
    NotFoundError,
    SQLAlchemyError,
)


def domain_error_response(e: Exception):
    """
    HTTP response for an exception listed in DOMAIN_ERRORS.

    Store errors are reported as 503 with a generic message; the session was
    already rolled back by the service.
    """
    if isinstance(e, AuthError):
        return jsonify({"error": str(e)}), e.status_code
    if isinstance(e, PermissionDeniedError):
        return jsonify({"error": str(e)}), 403
    if isinstance(e, ValidationError):
        return jsonify({"error": str(e)}), 400
    if isinstance(e, NotFoundError):
        return jsonify({"error": str(e)}), 404
    if isinstance(e, ConflictError):
        return jsonify({"error": str(e)}), 409
    db.session.rollback()
    current_app.logger.exception("Data store error")
    return jsonify({"error": "Data store unavailable, please retry"}), 503


def flag_arg(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes"}


def json_body() -> dict:
    """Request JSON as a dict; a missing body is {}, any other shape is a 400."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    return data
