# Overview: Flask API routes for customer operations; parses input and returns JSON responses.

# backend/salesdash/routes/customers.py
"""
Customer API routes.

SECURITY: All routes require authentication. Capability checks happen in
customer_service so the same rules apply to every caller. Listing deleted
customers requires VIEW_DELETED.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..services import customer_service, permission_service
from ..decorators import require_auth
from . import DOMAIN_ERRORS, domain_error_response, flag_arg, json_body


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
@require_auth
def list_customers_route():
    """
    Query params:
    - deleted: 1 to list soft-deleted customers instead of active ones
    - search: substring match on number, name or address
    - status: Added, Edited, Restored or Deleted (derived status)
    - sort: custno (default), custname or payterm
    - direction: asc (default) or desc
    """
    deleted = flag_arg(request.args.get("deleted"))
    try:
        if deleted:
            permission_service.require_permission(
                g.current_user.id, "VIEW_DELETED", resource=request.path
            )
        items = customer_service.list_customers(
            deleted=deleted,
            search=request.args.get("search"),
            status=request.args.get("status"),
            sort=request.args.get("sort"),
            direction=request.args.get("direction"),
        )
        return jsonify({"items": items, "count": len(items)})
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list customers")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.get("/next-number")
@require_auth
def next_number_route():
    return jsonify({"custno": customer_service.generate_next_custno()})


@customers_bp.post("")
@require_auth
def create_customer_route():
    try:
        payload = json_body()
        customer = customer_service.create_customer(payload, g.current_user.id)
        return jsonify({"customer": customer.to_dict()}), 201
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.get("/<custno>")
@require_auth
def get_customer_route(custno: str):
    try:
        return jsonify(customer_service.get_customer_details(custno, g.current_user.id))
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to load customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.put("/<custno>")
@require_auth
def update_customer_route(custno: str):
    try:
        payload = json_body()
        customer = customer_service.update_customer(custno, payload, g.current_user.id)
        return jsonify({"customer": customer.to_dict()})
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.delete("/<custno>")
@require_auth
def delete_customer_route(custno: str):
    try:
        customer = customer_service.soft_delete_customer(custno, g.current_user.id)
        return jsonify({"customer": customer.to_dict()})
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.post("/<custno>/restore")
@require_auth
def restore_customer_route(custno: str):
    try:
        customer = customer_service.restore_customer(custno, g.current_user.id)
        return jsonify({"customer": customer.to_dict()})
    except DOMAIN_ERRORS as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to restore customer")
        return jsonify({"error": "Internal server error"}), 500
