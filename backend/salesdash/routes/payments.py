# Overview: Flask API routes for payment operations; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g, current_app

from ..services import payment_service
from ..decorators import require_auth
from . import DOMAIN_ERRORS, domain_error_response, json_body


payments_bp = Blueprint("payments", __name__, url_prefix="/api/payments")


@payments_bp.get("")
@require_auth
def list_payments_route():
    payments = payment_service.list_payments(
        transno=request.args.get("transno"),
        custno=request.args.get("custno"),
    )
    return jsonify({"items": [p.to_dict() for p in payments], "count": len(payments)})


@payments_bp.post("")
@require_auth
def record_payment_route():
    """Body: {"orno", "transno", "amount_cents", "paydate"}; paydate defaults to today."""
    try:
        payload = json_body()
        payment = payment_service.record_payment(payload, g.current_user.id)
        return jsonify({"payment": payment.to_dict()}), 201
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to record payment")
        return jsonify({"error": "Internal server error"}), 500
