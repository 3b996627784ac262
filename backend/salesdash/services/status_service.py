# Overview: Pure status derivation for lifecycle records and sale payments.

"""
Record and payment status derivation.

Every customer, sale and sale line displays exactly one of four lifecycle
statuses. The status is computed from the record's lifecycle fields; it is
never stored.

PRIORITY (first match wins):
1. deleted_at is a valid timestamp              -> Deleted
2. the effective last action is "restore"       -> Restored
3. modified_at is valid and modified_by is set  -> Edited
4. otherwise                                    -> Added

The effective last action is the explicit argument when given, otherwise the
last_action persisted on the row. Unparsable timestamps count as absent.
These functions never raise.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime

from salesdash.time_utils import parse_iso_datetime
from salesdash.models.lifecycle import ACTION_RESTORE


STATUS_ADDED = "Added"
STATUS_EDITED = "Edited"
STATUS_DELETED = "Deleted"
STATUS_RESTORED = "Restored"
RECORD_STATUSES = (STATUS_ADDED, STATUS_EDITED, STATUS_DELETED, STATUS_RESTORED)

PAYMENT_UNPAID = "Unpaid"
PAYMENT_PARTIAL = "Partial"
PAYMENT_PAID = "Paid"


def _field(record, name: str):
    if record is None:
        return None
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def _as_timestamp(value) -> datetime | date | None:
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value
    if isinstance(value, str):
        try:
            return parse_iso_datetime(value)
        except ValueError:
            return None
    return None


def derive_record_status(record, last_action: str | None = None) -> str:
    """Lifecycle status of a model instance or a plain mapping."""
    if _as_timestamp(_field(record, "deleted_at")) is not None:
        return STATUS_DELETED

    action = last_action if last_action is not None else _field(record, "last_action")
    if action == ACTION_RESTORE:
        return STATUS_RESTORED

    modified_by = _field(record, "modified_by")
    if _as_timestamp(_field(record, "modified_at")) is not None and modified_by not in (None, ""):
        return STATUS_EDITED

    return STATUS_ADDED


def derive_payment_status(paid_total_cents: int, expected_total_cents: int) -> str:
    paid = paid_total_cents or 0
    expected = expected_total_cents or 0
    if paid <= 0 or expected <= 0:
        return PAYMENT_UNPAID
    if paid >= expected:
        return PAYMENT_PAID
    return PAYMENT_PARTIAL


def derive_total_amount(paid_total_cents: int, expected_total_cents: int) -> int:
    """Amount shown for a sale: what was paid once anything was, else what is owed."""
    paid = paid_total_cents or 0
    if paid > 0:
        return paid
    return expected_total_cents or 0
