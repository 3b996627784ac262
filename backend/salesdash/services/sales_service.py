# Overview: Service-layer operations for sales and sale lines; lifecycle, totals and audit.

"""
Sales Service

WHY: A sale header and its product lines each carry their own soft-delete
lifecycle. Deleting a line never touches its siblings or the parent sale;
deleting a sale never touches its lines.

ATOMICITY: create_sale writes the header and every initial line in one
commit. A failure leaves neither behind.

TOTALS: the expected total sums the active lines at the unit price in effect
on the sale date. Payment status compares it with the sum of payments.
"""

from __future__ import annotations

import re

from ..extensions import db
from ..formatting import DisplayPreferences, format_modifier_info
from ..models import Customer, Employee, Product, Sale, SaleLineItem
from ..models.lifecycle import ACTION_INSERT, ACTION_UPDATE, ACTION_DELETE, ACTION_RESTORE
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_line_item,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from . import activity_log_service, permission_service
from .payment_service import get_paid_total_cents, list_payments
from .pricing_service import resolve_unit_price_cents
from .status_service import (
    derive_record_status,
    derive_payment_status,
    derive_total_amount,
)
from .transactions import commit_or_rollback
from salesdash.time_utils import utcnow, today


TRANSNO_PREFIX = "TR"
TRANSNO_RE = re.compile(r"^TR(\d+)$")
DUPLICATE_TRANSNO = "Transaction number already exists."

SALE_CREATE_POLICY = ModelValidationPolicy(
    writable_fields={"transno", "salesdate", "custno", "empno"},
    required_on_create={"transno", "custno"},
)

SALE_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"salesdate", "custno", "empno"},
)

LINE_ITEM_CREATE_POLICY = ModelValidationPolicy(
    writable_fields={"prodcode", "quantity"},
    required_on_create={"prodcode", "quantity"},
)

LINE_ITEM_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"quantity"},
    required_on_create={"quantity"},
)


# -- Numbering and totals --

def generate_next_transno() -> str:
    """TR000001 for an empty table, else one past the highest TR-number ever issued."""
    highest = 0
    rows = db.session.query(Sale.transno).filter(Sale.transno.like(f"{TRANSNO_PREFIX}%")).all()
    for (transno,) in rows:
        m = TRANSNO_RE.match(transno or "")
        if m:
            highest = max(highest, int(m.group(1)))
    return f"{TRANSNO_PREFIX}{highest + 1:06d}"


def active_line_items(sale: Sale) -> list[SaleLineItem]:
    return (
        db.session.query(SaleLineItem)
        .filter(SaleLineItem.transno == sale.transno, SaleLineItem.deleted_at.is_(None))
        .order_by(SaleLineItem.id.asc())
        .all()
    )


def compute_expected_total_cents(sale: Sale) -> int:
    return sum(
        item.quantity * resolve_unit_price_cents(item.prodcode, sale.salesdate)
        for item in active_line_items(sale)
    )


def summarize_sale(sale: Sale) -> dict:
    paid = get_paid_total_cents(sale.transno)
    expected = compute_expected_total_cents(sale)
    return {
        "paid_total_cents": paid,
        "expected_total_cents": expected,
        "total_amount_cents": derive_total_amount(paid, expected),
        "payment_status": derive_payment_status(paid, expected),
    }


# -- Reads --

def get_sale(transno: str) -> Sale | None:
    return db.session.get(Sale, transno)


def _get_active_sale(transno: str) -> Sale:
    sale = get_sale(transno)
    if sale is None or sale.is_deleted:
        raise NotFoundError("Sale not found")
    return sale


def _sale_row(sale: Sale, names: dict, prefs: DisplayPreferences | None = None) -> dict:
    row = sale.to_dict()
    row["status"] = derive_record_status(sale)
    row["custname"] = sale.customer.custname if sale.customer else None
    row["empname"] = sale.employee.full_name if sale.employee else None
    row["modifier_name"] = names.get(sale.modified_by) if sale.modified_by else None
    if prefs is not None:
        row["modifier_info"] = format_modifier_info(row["modifier_name"], sale.modified_at, prefs)
    row.update(summarize_sale(sale))
    return row


def _line_row(item: SaleLineItem, salesdate) -> dict:
    row = item.to_dict()
    unit_price = resolve_unit_price_cents(item.prodcode, salesdate)
    row["status"] = derive_record_status(item)
    row["description"] = item.product.description if item.product else None
    row["unit"] = item.product.unit if item.product else None
    row["unitprice_cents"] = unit_price
    row["line_total_cents"] = unit_price * item.quantity
    return row


def list_sales(deleted: bool = False, prefs: DisplayPreferences | None = None) -> list[dict]:
    query = db.session.query(Sale)
    if deleted:
        query = query.filter(Sale.deleted_at.isnot(None))
    else:
        query = query.filter(Sale.deleted_at.is_(None))
    sales = query.order_by(Sale.transno.desc()).all()

    names = activity_log_service.resolve_user_names(s.modified_by for s in sales)
    return [_sale_row(s, names, prefs) for s in sales]


def get_sale_details(transno: str, actor_id: int | None = None) -> dict:
    sale = get_sale(transno)
    if sale is None:
        raise NotFoundError("Sale not found")
    if sale.is_deleted:
        permission_service.require_permission(actor_id, "VIEW_DELETED", resource="sales")

    items = (
        db.session.query(SaleLineItem)
        .filter(SaleLineItem.transno == transno)
        .order_by(SaleLineItem.id.asc())
        .all()
    )
    names = activity_log_service.resolve_user_names([sale.modified_by])

    return {
        "sale": _sale_row(sale, names),
        "items": [_line_row(i, sale.salesdate) for i in items if not i.is_deleted],
        "deleted_items": [_line_row(i, sale.salesdate) for i in items if i.is_deleted],
        "payments": [p.to_dict() for p in list_payments(transno=transno)],
    }


# -- Reference checks --

def _require_active_customer(custno: str | None) -> None:
    if not custno:
        raise ValidationError("custno is required")
    customer = db.session.get(Customer, custno)
    if customer is None or customer.is_deleted:
        raise ValidationError(f"Customer {custno} does not exist or is deleted")


def _require_employee(empno: str | None) -> None:
    if empno and db.session.get(Employee, empno) is None:
        raise ValidationError(f"Employee {empno} does not exist")


def _require_product(prodcode: str) -> None:
    if db.session.get(Product, prodcode) is None:
        raise ValidationError(f"Product {prodcode} does not exist")


def _validate_items(items_raw) -> list[dict]:
    if not isinstance(items_raw, list) or not items_raw:
        raise ValidationError("At least one sale item is required")

    items: list[dict] = []
    seen: set[str] = set()
    for raw in items_raw:
        item = validate_payload(
            model=SaleLineItem,
            payload=raw,
            policy=LINE_ITEM_CREATE_POLICY,
            partial=False,
        )
        enforce_rules_line_item(item)
        if item["prodcode"] in seen:
            raise ValidationError(f"Product {item['prodcode']} appears more than once")
        seen.add(item["prodcode"])
        _require_product(item["prodcode"])
        items.append(item)
    return items


# -- Sale lifecycle --

def create_sale(payload: dict, actor_id: int | None) -> Sale:
    permission_service.require_permission(actor_id, "ADD_SALES", resource="sales")

    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    header = dict(payload)
    items_raw = header.pop("items", None)
    if items_raw:
        permission_service.require_permission(actor_id, "ADD_SALESDETAILS", resource="salesdetail")

    patch = validate_payload(
        model=Sale,
        payload=header,
        policy=SALE_CREATE_POLICY,
        partial=False,
    )
    items = _validate_items(items_raw)

    _require_active_customer(patch.get("custno"))
    _require_employee(patch.get("empno"))
    if patch.get("salesdate") is None:
        patch["salesdate"] = today()

    if get_sale(patch["transno"]) is not None:
        raise ConflictError(DUPLICATE_TRANSNO)

    now = utcnow()
    sale = Sale(**patch)
    sale.stamp_created(actor_id, now)
    db.session.add(sale)
    for item in items:
        line = SaleLineItem(transno=sale.transno, **item)
        line.stamp_created(actor_id, now)
        db.session.add(line)
    commit_or_rollback(conflict_message=DUPLICATE_TRANSNO)

    activity_log_service.log_activity(
        action=ACTION_INSERT,
        table_name="sales",
        record_id=sale.transno,
        details={
            **patch,
            "items": items,
            "expected_total_cents": compute_expected_total_cents(sale),
        },
        user_id=actor_id,
    )
    return sale


def update_sale(transno: str, payload: dict, actor_id: int | None) -> Sale:
    permission_service.require_permission(actor_id, "EDIT_SALES", resource="sales")

    if isinstance(payload, dict) and "transno" in payload:
        raise ValidationError("transno cannot be changed")

    patch = validate_payload(
        model=Sale,
        payload=payload,
        policy=SALE_UPDATE_POLICY,
        partial=True,
    )
    if not patch:
        raise ValidationError("No fields to update")
    if "custno" in patch:
        _require_active_customer(patch["custno"])
    if "empno" in patch:
        _require_employee(patch["empno"])

    sale = _get_active_sale(transno)

    for k, v in patch.items():
        setattr(sale, k, v)
    sale.stamp_modified(actor_id, utcnow())
    commit_or_rollback()

    activity_log_service.log_activity(
        action=ACTION_UPDATE,
        table_name="sales",
        record_id=sale.transno,
        details=patch,
        user_id=actor_id,
    )
    return sale


def soft_delete_sale(transno: str, actor_id: int | None) -> Sale:
    permission_service.require_permission(actor_id, "DELETE_SALES", resource="sales")

    sale = _get_active_sale(transno)
    sale.mark_deleted(actor_id, utcnow())
    commit_or_rollback()

    activity_log_service.log_activity(
        action=ACTION_DELETE,
        table_name="sales",
        record_id=sale.transno,
        details=sale.to_dict(),
        user_id=actor_id,
    )
    return sale


def restore_sale(transno: str, actor_id: int | None) -> Sale:
    permission_service.require_permission(actor_id, "RESTORE_RECORDS", resource="sales")

    sale = get_sale(transno)
    if sale is None:
        raise NotFoundError("Sale not found")
    if not sale.is_deleted:
        raise ConflictError("Sale is not deleted")

    sale.mark_restored(actor_id, utcnow())
    commit_or_rollback()

    activity_log_service.log_activity(
        action=ACTION_RESTORE,
        table_name="sales",
        record_id=sale.transno,
        details=sale.to_dict(),
        user_id=actor_id,
    )
    return sale


# -- Line item lifecycle --

def _find_active_line(transno: str, prodcode: str) -> SaleLineItem | None:
    return (
        db.session.query(SaleLineItem)
        .filter(
            SaleLineItem.transno == transno,
            SaleLineItem.prodcode == prodcode,
            SaleLineItem.deleted_at.is_(None),
        )
        .first()
    )


def _get_line(transno: str, item_id: int) -> SaleLineItem:
    line = db.session.get(SaleLineItem, item_id)
    if line is None or line.transno != transno:
        raise NotFoundError("Sale item not found")
    return line


def add_line_item(transno: str, payload: dict, actor_id: int | None) -> SaleLineItem:
    permission_service.require_permission(actor_id, "ADD_SALESDETAILS", resource="salesdetail")

    patch = validate_payload(
        model=SaleLineItem,
        payload=payload,
        policy=LINE_ITEM_CREATE_POLICY,
        partial=False,
    )
    enforce_rules_line_item(patch)

    sale = _get_active_sale(transno)
    _require_product(patch["prodcode"])
    if _find_active_line(transno, patch["prodcode"]) is not None:
        raise ConflictError(f"Product {patch['prodcode']} is already on this sale")

    line = SaleLineItem(transno=sale.transno, **patch)
    line.stamp_created(actor_id, utcnow())
    db.session.add(line)
    commit_or_rollback()

    activity_log_service.log_activity(
        action=ACTION_INSERT,
        table_name="salesdetail",
        record_id=line.record_key,
        details=patch,
        user_id=actor_id,
    )
    return line


def update_line_item(transno: str, item_id: int, payload: dict, actor_id: int | None) -> SaleLineItem:
    permission_service.require_permission(actor_id, "EDIT_SALESDETAILS", resource="salesdetail")

    patch = validate_payload(
        model=SaleLineItem,
        payload=payload,
        policy=LINE_ITEM_UPDATE_POLICY,
        partial=False,
    )
    enforce_rules_line_item(patch)

    line = _get_line(transno, item_id)
    if line.is_deleted:
        raise NotFoundError("Sale item not found")

    old_quantity = line.quantity
    line.quantity = patch["quantity"]
    line.stamp_modified(actor_id, utcnow())
    commit_or_rollback()

    activity_log_service.log_activity(
        action=ACTION_UPDATE,
        table_name="salesdetail",
        record_id=line.record_key,
        details={"old_quantity": old_quantity, "quantity": line.quantity},
        user_id=actor_id,
    )
    return line


def soft_delete_line_item(transno: str, item_id: int, actor_id: int | None) -> SaleLineItem:
    permission_service.require_permission(actor_id, "DELETE_SALESDETAILS", resource="salesdetail")

    line = _get_line(transno, item_id)
    if line.is_deleted:
        raise NotFoundError("Sale item not found")

    line.mark_deleted(actor_id, utcnow())
    commit_or_rollback()

    activity_log_service.log_activity(
        action=ACTION_DELETE,
        table_name="salesdetail",
        record_id=line.record_key,
        details=line.to_dict(),
        user_id=actor_id,
    )
    return line


def restore_line_item(transno: str, item_id: int, actor_id: int | None) -> SaleLineItem:
    permission_service.require_permission(actor_id, "RESTORE_RECORDS", resource="salesdetail")

    line = _get_line(transno, item_id)
    if not line.is_deleted:
        raise ConflictError("Sale item is not deleted")
    if _find_active_line(transno, line.prodcode) is not None:
        raise ConflictError(f"Product {line.prodcode} is already on this sale")

    line.mark_restored(actor_id, utcnow())
    commit_or_rollback()

    activity_log_service.log_activity(
        action=ACTION_RESTORE,
        table_name="salesdetail",
        record_id=line.record_key,
        details=line.to_dict(),
        user_id=actor_id,
    )
    return line
