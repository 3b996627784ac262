# Overview: Service-layer operations for customers; soft-delete lifecycle with audit.

"""
Customer lifecycle.

Every mutation runs in the same order: capability check, payload validation,
lookup, single commit, then a best-effort activity log entry. A failure before
the commit leaves the store untouched.

custno is never reused: uniqueness is checked against active AND soft-deleted
customers. Deleting a customer does not touch its sales.
"""

from __future__ import annotations

import re

from ..extensions import db
from ..models import Customer, Sale, Payment
from ..models.lifecycle import ACTION_INSERT, ACTION_UPDATE, ACTION_DELETE, ACTION_RESTORE
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_customer,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from . import activity_log_service, permission_service
from .sales_service import summarize_sale
from .status_service import derive_record_status, RECORD_STATUSES
from .transactions import commit_or_rollback
from salesdash.time_utils import utcnow


CUSTNO_PREFIX = "C"
CUSTNO_RE = re.compile(r"^C(\d+)$")
DUPLICATE_CUSTNO = "Customer number already exists."

CUSTOMER_CREATE_POLICY = ModelValidationPolicy(
    writable_fields={"custno", "custname", "address", "payterm"},
    required_on_create={"custno", "custname"},
)

CUSTOMER_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"custname", "address", "payterm"},
)


CUSTOMER_SORT_FIELDS = ("custno", "custname", "payterm")
SORT_DIRECTIONS = ("asc", "desc")
ALL_STATUSES = "All Status"


def _customer_row(customer: Customer, names: dict) -> dict:
    row = customer.to_dict()
    row["status"] = derive_record_status(customer)
    row["modifier_name"] = names.get(customer.modified_by) if customer.modified_by else None
    return row


def list_customers(
    deleted: bool = False,
    search: str | None = None,
    status: str | None = None,
    sort: str | None = None,
    direction: str | None = None,
) -> list[dict]:
    """
    Active (or soft-deleted) customers with their derived status.

    status keeps only rows whose derived status matches; "All Status" or
    None keeps everything. sort is custno, custname or payterm; ties fall
    back to custno ascending.
    """
    if status == ALL_STATUSES:
        status = None
    if status is not None and status not in RECORD_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(RECORD_STATUSES)}")
    sort = sort or "custno"
    if sort not in CUSTOMER_SORT_FIELDS:
        raise ValidationError(f"sort must be one of: {', '.join(CUSTOMER_SORT_FIELDS)}")
    direction = (direction or "asc").lower()
    if direction not in SORT_DIRECTIONS:
        raise ValidationError("direction must be asc or desc")

    query = db.session.query(Customer)
    if deleted:
        query = query.filter(Customer.deleted_at.isnot(None))
    else:
        query = query.filter(Customer.deleted_at.is_(None))

    if search:
        term = f"%{search.strip()}%"
        query = query.filter(db.or_(
            Customer.custno.ilike(term),
            Customer.custname.ilike(term),
            Customer.address.ilike(term),
        ))

    key = db.func.coalesce(getattr(Customer, sort), "")
    key = key.desc() if direction == "desc" else key.asc()
    customers = query.order_by(key, Customer.custno.asc()).all()

    names = activity_log_service.resolve_user_names(c.modified_by for c in customers)
    rows = [_customer_row(c, names) for c in customers]
    if status is not None:
        rows = [r for r in rows if r["status"] == status]
    return rows


def generate_next_custno() -> str:
    """C0001 for an empty table, else one past the highest C-number ever issued."""
    highest = 0
    rows = db.session.query(Customer.custno).filter(Customer.custno.like(f"{CUSTNO_PREFIX}%")).all()
    for (custno,) in rows:
        m = CUSTNO_RE.match(custno or "")
        if m:
            highest = max(highest, int(m.group(1)))
    return f"{CUSTNO_PREFIX}{highest + 1:04d}"


def get_customer(custno: str) -> Customer | None:
    return db.session.get(Customer, custno)


def _get_active_customer(custno: str) -> Customer:
    customer = get_customer(custno)
    if customer is None or customer.is_deleted:
        raise NotFoundError("Customer not found")
    return customer


def create_customer(payload: dict, actor_id: int | None) -> Customer:
    permission_service.require_permission(actor_id, "ADD_CUSTOMERS", resource="customer")

    patch = validate_payload(
        model=Customer,
        payload=payload,
        policy=CUSTOMER_CREATE_POLICY,
        partial=False,
    )
    enforce_rules_customer(patch, creating=True)

    if get_customer(patch["custno"]) is not None:
        raise ConflictError(DUPLICATE_CUSTNO)

    customer = Customer(**patch)
    customer.stamp_created(actor_id, utcnow())
    db.session.add(customer)
    commit_or_rollback(conflict_message=DUPLICATE_CUSTNO)

    activity_log_service.log_activity(
        action=ACTION_INSERT,
        table_name="customer",
        record_id=customer.custno,
        details=patch,
        user_id=actor_id,
    )
    return customer


def update_customer(custno: str, payload: dict, actor_id: int | None) -> Customer:
    permission_service.require_permission(actor_id, "EDIT_CUSTOMERS", resource="customer")

    if isinstance(payload, dict) and "custno" in payload:
        raise ValidationError("custno cannot be changed")

    patch = validate_payload(
        model=Customer,
        payload=payload,
        policy=CUSTOMER_UPDATE_POLICY,
        partial=True,
    )
    if not patch:
        raise ValidationError("No fields to update")
    enforce_rules_customer(patch, creating=False)

    customer = _get_active_customer(custno)

    for k, v in patch.items():
        setattr(customer, k, v)
    customer.stamp_modified(actor_id, utcnow())
    commit_or_rollback()

    activity_log_service.log_activity(
        action=ACTION_UPDATE,
        table_name="customer",
        record_id=customer.custno,
        details=patch,
        user_id=actor_id,
    )
    return customer


def soft_delete_customer(custno: str, actor_id: int | None) -> Customer:
    permission_service.require_permission(actor_id, "DELETE_CUSTOMERS", resource="customer")

    customer = _get_active_customer(custno)
    customer.mark_deleted(actor_id, utcnow())
    commit_or_rollback()

    activity_log_service.log_activity(
        action=ACTION_DELETE,
        table_name="customer",
        record_id=customer.custno,
        details=customer.to_dict(),
        user_id=actor_id,
    )
    return customer


def restore_customer(custno: str, actor_id: int | None) -> Customer:
    permission_service.require_permission(actor_id, "RESTORE_RECORDS", resource="customer")

    customer = get_customer(custno)
    if customer is None:
        raise NotFoundError("Customer not found")
    if not customer.is_deleted:
        raise ConflictError("Customer is not deleted")

    customer.mark_restored(actor_id, utcnow())
    commit_or_rollback()

    activity_log_service.log_activity(
        action=ACTION_RESTORE,
        table_name="customer",
        record_id=customer.custno,
        details=customer.to_dict(),
        user_id=actor_id,
    )
    return customer


def get_customer_details(custno: str, actor_id: int | None = None) -> dict:
    """
    Customer with its active sales (totals and payment status) and their payments.

    A soft-deleted customer is only shown to holders of VIEW_DELETED.
    """
    customer = get_customer(custno)
    if customer is None:
        raise NotFoundError("Customer not found")
    if customer.is_deleted:
        permission_service.require_permission(actor_id, "VIEW_DELETED", resource="customer")

    sales = (
        db.session.query(Sale)
        .filter(Sale.custno == custno, Sale.deleted_at.is_(None))
        .order_by(Sale.salesdate.desc(), Sale.transno.desc())
        .all()
    )
    sale_rows = []
    for sale in sales:
        row = sale.to_dict()
        row["status"] = derive_record_status(sale)
        row.update(summarize_sale(sale))
        sale_rows.append(row)

    transnos = [s.transno for s in sales]
    payments = []
    if transnos:
        payments = (
            db.session.query(Payment)
            .filter(Payment.transno.in_(transnos))
            .order_by(Payment.paydate.desc(), Payment.orno.asc())
            .all()
        )

    names = activity_log_service.resolve_user_names([customer.modified_by])
    return {
        "customer": _customer_row(customer, names),
        "sales": sale_rows,
        "payments": [p.to_dict() for p in payments],
    }
