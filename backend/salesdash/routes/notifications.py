# Overview: Flask API routes for notifications; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g, current_app

from ..services import notification_service
from ..decorators import require_auth
from . import DOMAIN_ERRORS, domain_error_response, flag_arg, json_body


notifications_bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")


@notifications_bp.get("")
@require_auth
def list_notifications_route():
    items = notification_service.list_notifications(
        g.current_user.id,
        unread_only=flag_arg(request.args.get("unread")),
    )
    return jsonify({"items": [n.to_dict() for n in items], "count": len(items)})


@notifications_bp.get("/unread-count")
@require_auth
def unread_count_route():
    """Polled by the dashboard header badge."""
    return jsonify({"unread": notification_service.get_unread_count(g.current_user.id)})


@notifications_bp.post("")
@require_auth
def create_notification_route():
    try:
        data = json_body()
        notification = notification_service.create_notification(
            data.get("user_id"),
            data.get("title"),
            data.get("message"),
            g.current_user.id,
        )
        return jsonify({"notification": notification.to_dict()}), 201
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create notification")
        return jsonify({"error": "Internal server error"}), 500


@notifications_bp.post("/<int:notification_id>/read")
@require_auth
def mark_read_route(notification_id: int):
    try:
        notification = notification_service.mark_as_read(notification_id, g.current_user.id)
        return jsonify({"notification": notification.to_dict()})
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)


@notifications_bp.post("/read-all")
@require_auth
def mark_all_read_route():
    try:
        updated = notification_service.mark_all_as_read(g.current_user.id)
        return jsonify({"updated": updated})
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
