"""
Sale totals and payment status tests.

Covers date-effective price resolution, the Unpaid/Partial/Paid rule and
append-only payments.
"""

from datetime import date

import pytest

from salesdash.extensions import db
from salesdash.models import Payment
from salesdash.services import payment_service, pricing_service, sales_service
from salesdash.services.permission_service import PermissionDeniedError
from salesdash.services.status_service import (
    derive_payment_status,
    derive_total_amount,
    PAYMENT_UNPAID,
    PAYMENT_PARTIAL,
    PAYMENT_PAID,
)
from salesdash.validation import ValidationError, ConflictError, NotFoundError


class TestPaymentStatusRule:

    @pytest.mark.parametrize(
        "paid,expected,status",
        [
            (0, 10000, PAYMENT_UNPAID),
            (4000, 10000, PAYMENT_PARTIAL),
            (10000, 10000, PAYMENT_PAID),
            (12000, 10000, PAYMENT_PAID),
            (5000, 0, PAYMENT_UNPAID),
            (-100, 10000, PAYMENT_UNPAID),
            (None, None, PAYMENT_UNPAID),
        ],
    )
    def test_status(self, paid, expected, status):
        assert derive_payment_status(paid, expected) == status

    def test_total_amount_prefers_paid(self):
        assert derive_total_amount(12000, 10000) == 12000
        assert derive_total_amount(0, 10000) == 10000
        assert derive_total_amount(0, 0) == 0


class TestPriceResolution:

    @pytest.mark.parametrize(
        "as_of,cents",
        [
            (date(2023, 12, 31), 0),
            (date(2024, 1, 1), 4500),
            (date(2024, 5, 31), 4500),
            (date(2024, 6, 1), 4900),
            (date(2025, 1, 1), 4900),
            (None, 4900),
        ],
    )
    def test_effective_price(self, catalog, as_of, cents):
        assert pricing_service.resolve_unit_price_cents("AK0001", as_of) == cents

    def test_unknown_product_has_no_price(self, catalog):
        assert pricing_service.resolve_unit_price_cents("ZZ9999", date(2024, 1, 1)) == 0

    def test_product_list(self, catalog):
        rows = pricing_service.list_products_with_prices(date(2024, 3, 1))
        assert [(r["prodcode"], r["unitprice_cents"]) for r in rows] == [
            ("AK0001", 4500),
            ("NB0001", 5000),
        ]


@pytest.fixture
def sale(admin_user, customer, catalog):
    # 2 x 50.00 = 100.00 expected
    return sales_service.create_sale(
        {
            "transno": "TR000001",
            "salesdate": "2024-03-01",
            "custno": "C0001",
            "items": [{"prodcode": "NB0001", "quantity": 2}],
        },
        admin_user.id,
    )


class TestPayments:

    def test_partial_then_paid(self, sale, admin_user):
        assert sales_service.summarize_sale(sale)["payment_status"] == PAYMENT_UNPAID

        payment_service.record_payment(
            {"orno": "OR0001", "transno": "TR000001", "amount_cents": 4000}, admin_user.id
        )
        summary = sales_service.summarize_sale(sale)
        assert summary["payment_status"] == PAYMENT_PARTIAL
        assert summary["total_amount_cents"] == 4000

        payment_service.record_payment(
            {"orno": "OR0002", "transno": "TR000001", "amount_cents": 8000, "paydate": "2024-03-10"},
            admin_user.id,
        )
        summary = sales_service.summarize_sale(sale)
        assert summary["paid_total_cents"] == 12000
        assert summary["payment_status"] == PAYMENT_PAID
        assert summary["total_amount_cents"] == 12000

    def test_paydate_defaults_to_today(self, sale, admin_user):
        payment = payment_service.record_payment(
            {"orno": "OR0001", "transno": "TR000001", "amount_cents": 100}, admin_user.id
        )
        assert payment.paydate is not None
        assert payment.created_by == admin_user.id

    @pytest.mark.parametrize("amount", [0, -5, "12.50", 1_000_000_000])
    def test_invalid_amount(self, sale, admin_user, amount):
        with pytest.raises(ValidationError):
            payment_service.record_payment(
                {"orno": "OR0001", "transno": "TR000001", "amount_cents": amount}, admin_user.id
            )
        assert db.session.query(Payment).count() == 0

    def test_duplicate_orno(self, sale, admin_user):
        payload = {"orno": "OR0001", "transno": "TR000001", "amount_cents": 100}
        payment_service.record_payment(payload, admin_user.id)
        with pytest.raises(ConflictError):
            payment_service.record_payment(payload, admin_user.id)

    def test_deleted_sale_rejected(self, sale, admin_user):
        sales_service.soft_delete_sale("TR000001", admin_user.id)
        with pytest.raises(NotFoundError):
            payment_service.record_payment(
                {"orno": "OR0001", "transno": "TR000001", "amount_cents": 100}, admin_user.id
            )

    def test_viewer_denied(self, sale, viewer_user):
        with pytest.raises(PermissionDeniedError):
            payment_service.record_payment(
                {"orno": "OR0001", "transno": "TR000001", "amount_cents": 100}, viewer_user.id
            )

    def test_list_by_customer(self, sale, admin_user):
        payment_service.record_payment(
            {"orno": "OR0001", "transno": "TR000001", "amount_cents": 100}, admin_user.id
        )
        assert [p.orno for p in payment_service.list_payments(custno="C0001")] == ["OR0001"]
        assert payment_service.list_payments(custno="C0404") == []

    def test_api(self, client, admin_headers, sale):
        resp = client.post(
            "/api/payments",
            json={"orno": "OR0001", "transno": "TR000001", "amount_cents": 10000},
            headers=admin_headers,
        )
        assert resp.status_code == 201

        resp = client.get("/api/sales/TR000001", headers=admin_headers)
        assert resp.json["sale"]["payment_status"] == PAYMENT_PAID
        assert [p["orno"] for p in resp.json["payments"]] == ["OR0001"]
