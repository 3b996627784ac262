# Overview: Service-layer operations for payment; append-only receipts against sales.

"""
Payments

IMMUTABLE: payments are inserted once and never updated or deleted. The paid
total of a sale is the sum of its payments.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Payment, Sale
from ..models.lifecycle import ACTION_INSERT
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_payment,
    ConflictError,
    NotFoundError,
)
from . import activity_log_service, permission_service
from .transactions import commit_or_rollback
from salesdash.time_utils import utcnow, today


DUPLICATE_ORNO = "Official receipt number already exists."

PAYMENT_POLICY = ModelValidationPolicy(
    writable_fields={"orno", "transno", "amount_cents", "paydate"},
    required_on_create={"orno", "transno", "amount_cents"},
)


def get_paid_total_cents(transno: str) -> int:
    total = (
        db.session.query(db.func.coalesce(db.func.sum(Payment.amount_cents), 0))
        .filter(Payment.transno == transno)
        .scalar()
    )
    return int(total or 0)


def record_payment(payload: dict, actor_id: int | None) -> Payment:
    permission_service.require_permission(actor_id, "EDIT_SALES", resource="payment")

    patch = validate_payload(
        model=Payment,
        payload=payload,
        policy=PAYMENT_POLICY,
        partial=False,
    )
    enforce_rules_payment(patch)

    sale = db.session.get(Sale, patch["transno"])
    if sale is None or sale.is_deleted:
        raise NotFoundError("Sale not found")

    if db.session.get(Payment, patch["orno"]) is not None:
        raise ConflictError(DUPLICATE_ORNO)

    if patch.get("paydate") is None:
        patch["paydate"] = today()

    payment = Payment(**patch, created_at=utcnow(), created_by=actor_id)
    db.session.add(payment)
    commit_or_rollback(conflict_message=DUPLICATE_ORNO)

    activity_log_service.log_activity(
        action=ACTION_INSERT,
        table_name="payment",
        record_id=payment.orno,
        details=patch,
        user_id=actor_id,
    )
    return payment


def list_payments(transno: str | None = None, custno: str | None = None) -> list[Payment]:
    query = db.session.query(Payment)
    if transno:
        query = query.filter(Payment.transno == transno)
    if custno:
        query = query.join(Sale, Sale.transno == Payment.transno).filter(Sale.custno == custno)
    return query.order_by(Payment.paydate.desc(), Payment.orno.asc()).all()
