# Overview: Flask API routes for the activity log; paginated read-only access.

from flask import Blueprint, request, jsonify

from ..services import activity_log_service
from ..decorators import require_auth


activity_bp = Blueprint("activity", __name__, url_prefix="/api/activity-logs")


@activity_bp.get("")
@require_auth
def list_activity_route():
    """
    Query params:
    - page: int (1-indexed, default 1)
    - per_page: int (default ACTIVITY_LOG_PAGE_SIZE, max 100)
    """
    page = request.args.get("page", default=1, type=int)
    per_page = request.args.get("per_page", type=int)
    return jsonify(activity_log_service.list_activity_logs(page=page, per_page=per_page))
