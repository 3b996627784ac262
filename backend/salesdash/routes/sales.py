# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

# backend/salesdash/routes/sales.py
"""Sales and sale line API routes. Capability checks live in sales_service."""

from flask import Blueprint, request, jsonify, g, current_app

from ..formatting import DisplayPreferences
from ..services import sales_service, permission_service
from ..decorators import require_auth
from . import DOMAIN_ERRORS, domain_error_response, flag_arg, json_body


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.get("")
@require_auth
def list_sales_route():
    deleted = flag_arg(request.args.get("deleted"))
    try:
        if deleted:
            permission_service.require_permission(
                g.current_user.id, "VIEW_DELETED", resource=request.path
            )
        items = sales_service.list_sales(
            deleted=deleted,
            prefs=DisplayPreferences.from_profile(g.current_user),
        )
        return jsonify({"items": items, "count": len(items)})
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list sales")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/next-number")
@require_auth
def next_number_route():
    return jsonify({"transno": sales_service.generate_next_transno()})


@sales_bp.post("")
@require_auth
def create_sale_route():
    """
    Create a sale with its initial lines in one transaction.

    Body: {"transno", "salesdate", "custno", "empno", "items": [{"prodcode", "quantity"}]}
    """
    try:
        payload = json_body()
        sale = sales_service.create_sale(payload, g.current_user.id)
        return jsonify(sales_service.get_sale_details(sale.transno, g.current_user.id)), 201
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/<transno>")
@require_auth
def get_sale_route(transno: str):
    try:
        return jsonify(sales_service.get_sale_details(transno, g.current_user.id))
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to load sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.put("/<transno>")
@require_auth
def update_sale_route(transno: str):
    try:
        payload = json_body()
        sale = sales_service.update_sale(transno, payload, g.current_user.id)
        return jsonify({"sale": sale.to_dict()})
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.delete("/<transno>")
@require_auth
def delete_sale_route(transno: str):
    try:
        sale = sales_service.soft_delete_sale(transno, g.current_user.id)
        return jsonify({"sale": sale.to_dict()})
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.post("/<transno>/restore")
@require_auth
def restore_sale_route(transno: str):
    try:
        sale = sales_service.restore_sale(transno, g.current_user.id)
        return jsonify({"sale": sale.to_dict()})
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to restore sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.post("/<transno>/items")
@require_auth
def add_item_route(transno: str):
    try:
        payload = json_body()
        item = sales_service.add_line_item(transno, payload, g.current_user.id)
        return jsonify({"item": item.to_dict()}), 201
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add sale item")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.put("/<transno>/items/<int:item_id>")
@require_auth
def update_item_route(transno: str, item_id: int):
    try:
        payload = json_body()
        item = sales_service.update_line_item(transno, item_id, payload, g.current_user.id)
        return jsonify({"item": item.to_dict()})
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update sale item")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.delete("/<transno>/items/<int:item_id>")
@require_auth
def delete_item_route(transno: str, item_id: int):
    try:
        item = sales_service.soft_delete_line_item(transno, item_id, g.current_user.id)
        return jsonify({"item": item.to_dict()})
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete sale item")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.post("/<transno>/items/<int:item_id>/restore")
@require_auth
def restore_item_route(transno: str, item_id: int):
    try:
        item = sales_service.restore_line_item(transno, item_id, g.current_user.id)
        return jsonify({"item": item.to_dict()})
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to restore sale item")
        return jsonify({"error": "Internal server error"}), 500
