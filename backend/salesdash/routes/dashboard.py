# Overview: Flask API routes for the dashboard summary.

from flask import Blueprint, jsonify, g

from ..services import dashboard_service
from ..decorators import require_auth


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("/stats")
@require_auth
def stats_route():
    return jsonify({
        "stats": dashboard_service.get_dashboard_stats(g.current_user.id),
        "recent_activity": dashboard_service.get_recent_activity(limit=5),
    })
