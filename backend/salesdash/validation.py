"""
Payload validation for customer, sale, line item and payment writes.

validate_payload checks an incoming JSON object against a model's column
metadata (type, nullability, String length) and a per-operation allowlist,
and returns the cleaned patch. Business rules the columns cannot express
live in the enforce_rules_* functions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from sqlalchemy import Boolean, Date, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta

from salesdash.time_utils import parse_iso_date, parse_iso_datetime


# 9,999,999.99 in cents
MAX_AMOUNT_CENTS = 999_999_999

PAYMENT_TERMS = ("COD", "30D", "45D")
DEFAULT_PAYMENT_TERM = "COD"


class ValidationError(ValueError):
    """400: malformed or disallowed input."""


class ConflictError(ValueError):
    """409: duplicate key or a lifecycle state that forbids the operation."""


class NotFoundError(LookupError):
    """404: record absent, or not in the lifecycle set the operation acts on."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    writable_fields: keys a client may send for this operation.
    required_on_create: keys that must be present when partial=False.
    """
    writable_fields: frozenset
    required_on_create: frozenset = field(default_factory=frozenset)


def _parse_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    if isinstance(value, str):
        text = value.strip()
        # int() accepts "1_000"; digits only
        if text.lstrip("-").isdecimal():
            return int(text)
    raise ValidationError(f"{key} must be an integer")


def _parse_when(key: str, value: Any, *, as_date: bool):
    kind = "date" if as_date else "datetime"
    if isinstance(value, datetime):
        return value.date() if as_date else value
    if isinstance(value, date) and as_date:
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be an ISO-8601 {kind}")
    try:
        parsed = parse_iso_date(value) if as_date else parse_iso_datetime(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"{key} must be an ISO-8601 {kind}")
    return parsed


def _coerce_value(col, value: Any):
    coltype = col.type
    if isinstance(coltype, Boolean):
        if not isinstance(value, bool):
            raise ValidationError(f"{col.key} must be true or false")
        return value
    if isinstance(coltype, Integer):
        return _parse_int(col.key, value)
    if isinstance(coltype, DateTime):
        return _parse_when(col.key, value, as_date=False)
    if isinstance(coltype, Date):
        return _parse_when(col.key, value, as_date=True)
    if isinstance(coltype, (String, Text)):
        if isinstance(value, (dict, list)):
            raise ValidationError(f"{col.key} must be text")
        return str(value).strip()
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Returns a patch containing only allowlisted, coerced fields.

    partial=False is create: every required_on_create key must be present.
    partial=True is update: only the keys sent are checked.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(k for k in policy.required_on_create if k not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    columns = {c.key: c for c in model.__mapper__.columns}
    patch: dict = {}

    for key, raw in payload.items():
        if key not in policy.writable_fields or key not in columns:
            raise ValidationError(f"Field not allowed: {key}")
        col = columns[key]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{key} cannot be null")
            patch[key] = None
            continue

        value = _coerce_value(col, raw)
        if isinstance(value, str):
            if value == "" and not col.nullable:
                raise ValidationError(f"{key} cannot be blank")
            length = getattr(col.type, "length", None)
            if length and len(value) > length:
                raise ValidationError(f"{key} exceeds max length {length}")
        patch[key] = value

    return patch


def enforce_rules_customer(patch: dict, *, creating: bool) -> None:
    """
    On create a missing or blank payterm becomes COD. On update payterm, when
    sent, must name one of the terms.
    """
    if creating or "custname" in patch:
        if not patch.get("custname"):
            raise ValidationError("custname is required")

    if creating and not patch.get("payterm"):
        patch["payterm"] = DEFAULT_PAYMENT_TERM
    if "payterm" in patch and patch["payterm"] not in PAYMENT_TERMS:
        raise ValidationError(f"payterm must be one of: {', '.join(PAYMENT_TERMS)}")


def enforce_rules_line_item(patch: dict) -> None:
    if "quantity" in patch and (patch["quantity"] is None or patch["quantity"] < 1):
        raise ValidationError("quantity must be at least 1")


def enforce_rules_payment(patch: dict) -> None:
    amount = patch.get("amount_cents")
    if amount is None:
        raise ValidationError("amount_cents is required")
    if amount <= 0:
        raise ValidationError("amount_cents must be > 0")
    if amount > MAX_AMOUNT_CENTS:
        raise ValidationError(f"amount_cents cannot exceed {MAX_AMOUNT_CENTS}")
