# Overview: Flask API routes for user administration; parses input and returns JSON responses.

# backend/salesdash/routes/users.py
"""
User management routes.

SECURITY: Requires MANAGE_USERS, which only administrators hold. Role and
permission changes are recorded in the activity log by the services.
"""

from flask import Blueprint, jsonify, g, current_app

from ..services import auth_service, permission_service
from ..decorators import require_auth, require_permission
from . import DOMAIN_ERRORS, domain_error_response, json_body


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_permission("MANAGE_USERS")
def list_users_route():
    items = auth_service.list_users()
    return jsonify({"items": items, "count": len(items)})


@users_bp.put("/<int:user_id>/role")
@require_auth
@require_permission("MANAGE_USERS")
def update_role_route(user_id: int):
    try:
        data = json_body()
        user = auth_service.update_user_role(user_id, data.get("role"), g.current_user.id)
        return jsonify({"user": user.to_dict()})
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update user role")
        return jsonify({"error": "Internal server error"}), 500


@users_bp.get("/<int:user_id>/permissions")
@require_auth
@require_permission("MANAGE_USERS")
def get_permissions_route(user_id: int):
    try:
        return jsonify({
            "user_id": user_id,
            "permissions": permission_service.get_permission_flags(user_id),
        })
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)


@users_bp.put("/<int:user_id>/permissions")
@require_auth
@require_permission("MANAGE_USERS")
def set_permissions_route(user_id: int):
    """Body: any subset of the nine can_* flags, e.g. {"can_add_customers": true}."""
    try:
        data = json_body()
        row = permission_service.set_user_permissions(user_id, data, g.current_user.id)
        return jsonify({"user_id": user_id, "permissions": row.flags()})
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update user permissions")
        return jsonify({"error": "Internal server error"}), 500
