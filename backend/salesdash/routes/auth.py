# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/salesdash/routes/auth.py
"""
Authentication API routes

- Sign-up with password strength validation (first account becomes admin)
- Login returns an opaque bearer token
- Logout revokes the presented token
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service, session_service, permission_service
from ..decorators import require_auth, bearer_token
from . import DOMAIN_ERRORS, domain_error_response, json_body


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _user_payload(user) -> dict:
    return {
        **user.to_dict(),
        "permissions": sorted(permission_service.get_user_permissions(user.id)),
    }


@auth_bp.post("/signup")
def signup_route():
    try:
        data = json_body()
        user = auth_service.signup(
            data.get("email"),
            data.get("password"),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
        )
        return jsonify({"user": user.to_dict()}), 201
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to sign up user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Token must be included in Authorization header for protected routes.
    """
    try:
        data = json_body()
        user, token = auth_service.login(
            data.get("email"),
            data.get("password"),
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )
        return jsonify({"user": _user_payload(user), "token": token})
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to log in")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
@require_auth
def logout_route():
    session_service.revoke_session(bearer_token())
    return jsonify({"message": "Logged out"})


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"user": _user_payload(g.current_user)})
