# Overview: Flask API routes for the signed-in user's profile and display settings.

from flask import Blueprint, jsonify, g

from ..formatting import DisplayPreferences
from ..services import auth_service
from ..decorators import require_auth
from . import DOMAIN_ERRORS, domain_error_response, json_body


profile_bp = Blueprint("profile", __name__, url_prefix="/api/profile")


@profile_bp.get("")
@require_auth
def get_profile_route():
    return jsonify({"profile": g.current_user.to_dict()})


@profile_bp.put("")
@require_auth
def update_profile_route():
    try:
        data = json_body()
        payload = {k: data[k] for k in ("first_name", "last_name") if k in data}
        user = auth_service.update_profile(g.current_user.id, payload)
        return jsonify({"profile": user.to_dict()})
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)


@profile_bp.get("/settings")
@require_auth
def get_settings_route():
    return jsonify({"settings": DisplayPreferences.from_profile(g.current_user).to_dict()})


@profile_bp.put("/settings")
@require_auth
def update_settings_route():
    """Body: {"date_format": "MM/DD/YYYY" | "DD/MM/YYYY" | "YYYY-MM-DD", "dark_mode": bool}"""
    try:
        data = json_body()
        payload = {k: data[k] for k in ("date_format", "dark_mode") if k in data}
        user = auth_service.update_profile(g.current_user.id, payload)
        return jsonify({"settings": DisplayPreferences.from_profile(user).to_dict()})
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
