# Overview: Read-only product and employee lookups for the sale form.

from flask import Blueprint, request, jsonify

from ..extensions import db
from ..models import Employee
from ..services import pricing_service
from ..decorators import require_auth
from salesdash.time_utils import parse_iso_date


catalog_bp = Blueprint("catalog", __name__, url_prefix="/api")


@catalog_bp.get("/products")
@require_auth
def list_products_route():
    """
    Query params:
    - as_of: YYYY-MM-DD; unit prices effective on that date (latest if omitted)
    """
    try:
        as_of = parse_iso_date(request.args.get("as_of"))
    except ValueError:
        return jsonify({"error": "as_of must be an ISO-8601 date"}), 400

    items = pricing_service.list_products_with_prices(as_of)
    return jsonify({"items": items, "count": len(items)})


@catalog_bp.get("/employees")
@require_auth
def list_employees_route():
    employees = db.session.query(Employee).order_by(Employee.empno.asc()).all()
    return jsonify({"items": [e.to_dict() for e in employees], "count": len(employees)})
