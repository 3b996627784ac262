"""
Sale and sale line lifecycle tests.

Verifies:
- A sale and its initial lines are created together or not at all
- Line soft-delete/restore never touches sibling lines or the parent sale
- Sale soft-delete never touches its lines
- Only one active line per product on a sale
"""

import pytest
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from salesdash.extensions import db
from salesdash.models import ActivityLog, Sale, SaleLineItem
from salesdash.services import sales_service
from salesdash.services.permission_service import PermissionDeniedError
from salesdash.services.status_service import (
    STATUS_ADDED,
    STATUS_EDITED,
    STATUS_DELETED,
    STATUS_RESTORED,
    derive_record_status,
)
from salesdash.validation import ValidationError, ConflictError, NotFoundError


def _sale_payload(**overrides):
    payload = {
        "transno": "TR000001",
        "salesdate": "2024-03-01",
        "custno": "C0001",
        "empno": "E001",
        "items": [
            {"prodcode": "AK0001", "quantity": 2},
            {"prodcode": "NB0001", "quantity": 1},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def sale(admin_user, customer, catalog):
    return sales_service.create_sale(_sale_payload(), admin_user.id)


def _lines(transno="TR000001"):
    return {
        line.prodcode: line
        for line in db.session.query(SaleLineItem).filter_by(transno=transno).all()
    }


class TestCreateSale:

    def test_creates_header_and_lines(self, sale):
        assert sale.last_action == "insert"
        lines = _lines()
        assert set(lines) == {"AK0001", "NB0001"}
        assert all(derive_record_status(line) == STATUS_ADDED for line in lines.values())

    def test_expected_total_uses_price_on_sale_date(self, sale):
        summary = sales_service.summarize_sale(sale)
        # 2 x 45.00 (price effective 2024-01-01) + 1 x 50.00
        assert summary["expected_total_cents"] == 14000
        assert summary["paid_total_cents"] == 0
        assert summary["total_amount_cents"] == 14000
        assert summary["payment_status"] == "Unpaid"

    def test_insert_is_audited_with_total(self, sale):
        entry = db.session.query(ActivityLog).filter_by(table_name="sales").one()
        assert entry.action == "insert"
        assert entry.record_id == "TR000001"
        assert entry.details_dict()["expected_total_cents"] == 14000

    def test_next_transno(self, sale):
        assert sales_service.generate_next_transno() == "TR000002"

    def test_first_transno(self, db_session):
        assert sales_service.generate_next_transno() == "TR000001"

    def test_unknown_product_creates_nothing(self, admin_user, customer, catalog):
        payload = _sale_payload(items=[
            {"prodcode": "AK0001", "quantity": 1},
            {"prodcode": "ZZ9999", "quantity": 1},
        ])
        with pytest.raises(ValidationError):
            sales_service.create_sale(payload, admin_user.id)
        assert db.session.query(Sale).count() == 0
        assert db.session.query(SaleLineItem).count() == 0

    def test_store_failure_creates_nothing(self, admin_user, customer, catalog, monkeypatch):
        def failing_commit(self):
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(Session, "commit", failing_commit)
        with pytest.raises(SQLAlchemyError):
            sales_service.create_sale(_sale_payload(), admin_user.id)
        monkeypatch.undo()

        assert db.session.query(Sale).count() == 0
        assert db.session.query(SaleLineItem).count() == 0

    @pytest.mark.parametrize(
        "overrides",
        [
            {"items": []},
            {"items": [{"prodcode": "AK0001", "quantity": 0}]},
            {"items": [{"prodcode": "AK0001"}]},
            {"items": [{"prodcode": "AK0001", "quantity": 1}, {"prodcode": "AK0001", "quantity": 2}]},
            {"custno": "C0404"},
            {"empno": "E404"},
            {"salesdate": "03/01/2024"},
        ],
    )
    def test_invalid_sale_rejected(self, admin_user, customer, catalog, overrides):
        with pytest.raises(ValidationError):
            sales_service.create_sale(_sale_payload(**overrides), admin_user.id)
        assert db.session.query(Sale).count() == 0

    def test_deleted_customer_rejected(self, admin_user, customer, catalog):
        customer.mark_deleted(admin_user.id, customer.created_at)
        db.session.commit()
        with pytest.raises(ValidationError):
            sales_service.create_sale(_sale_payload(), admin_user.id)

    def test_duplicate_transno(self, sale, admin_user):
        with pytest.raises(ConflictError, match="Transaction number already exists."):
            sales_service.create_sale(_sale_payload(), admin_user.id)

    def test_viewer_denied(self, viewer_user, customer, catalog):
        with pytest.raises(PermissionDeniedError):
            sales_service.create_sale(_sale_payload(), viewer_user.id)
        assert db.session.query(Sale).count() == 0


class TestLineItemLifecycle:

    def test_delete_line_leaves_siblings_and_parent(self, sale, admin_user):
        lines = _lines()
        sales_service.soft_delete_line_item("TR000001", lines["AK0001"].id, admin_user.id)

        db.session.expire_all()
        lines = _lines()
        assert derive_record_status(lines["AK0001"]) == STATUS_DELETED
        assert lines["NB0001"].deleted_at is None
        assert lines["NB0001"].modified_at is None
        assert derive_record_status(lines["NB0001"]) == STATUS_ADDED

        parent = db.session.get(Sale, "TR000001")
        assert parent.modified_at is None
        assert parent.deleted_at is None
        assert derive_record_status(parent) == STATUS_ADDED

    def test_deleted_line_drops_out_of_total(self, sale, admin_user):
        lines = _lines()
        sales_service.soft_delete_line_item("TR000001", lines["AK0001"].id, admin_user.id)
        assert sales_service.summarize_sale(sale)["expected_total_cents"] == 5000

    def test_restore_line(self, sale, admin_user):
        line_id = _lines()["AK0001"].id
        sales_service.soft_delete_line_item("TR000001", line_id, admin_user.id)
        restored = sales_service.restore_line_item("TR000001", line_id, admin_user.id)
        assert derive_record_status(restored) == STATUS_RESTORED

        entries = db.session.query(ActivityLog).filter_by(table_name="salesdetail").all()
        assert {(e.action, e.record_id) for e in entries} == {
            ("delete", "TR000001:AK0001"),
            ("restore", "TR000001:AK0001"),
        }

    def test_update_quantity(self, sale, admin_user):
        line_id = _lines()["NB0001"].id
        line = sales_service.update_line_item("TR000001", line_id, {"quantity": 3}, admin_user.id)
        assert line.quantity == 3
        assert derive_record_status(line) == STATUS_EDITED
        assert sales_service.summarize_sale(sale)["expected_total_cents"] == 9000 + 15000

    def test_update_rejects_product_change(self, sale, admin_user):
        line_id = _lines()["NB0001"].id
        with pytest.raises(ValidationError):
            sales_service.update_line_item("TR000001", line_id, {"prodcode": "AK0001"}, admin_user.id)

    def test_second_active_line_for_product(self, sale, admin_user):
        with pytest.raises(ConflictError):
            sales_service.add_line_item("TR000001", {"prodcode": "AK0001", "quantity": 1}, admin_user.id)

    def test_add_after_delete_then_restore_conflicts(self, sale, admin_user):
        line_id = _lines()["AK0001"].id
        sales_service.soft_delete_line_item("TR000001", line_id, admin_user.id)
        sales_service.add_line_item("TR000001", {"prodcode": "AK0001", "quantity": 5}, admin_user.id)
        with pytest.raises(ConflictError):
            sales_service.restore_line_item("TR000001", line_id, admin_user.id)

    def test_line_from_other_sale_not_found(self, sale, admin_user):
        line_id = _lines()["AK0001"].id
        with pytest.raises(NotFoundError):
            sales_service.soft_delete_line_item("TR999999", line_id, admin_user.id)

    def test_clerk_cannot_restore_line(self, sale, admin_user, clerk_user):
        line_id = _lines()["AK0001"].id
        sales_service.soft_delete_line_item("TR000001", line_id, clerk_user.id)
        with pytest.raises(PermissionDeniedError):
            sales_service.restore_line_item("TR000001", line_id, clerk_user.id)


class TestSaleLifecycle:

    def test_delete_sale_leaves_lines(self, sale, admin_user):
        sales_service.soft_delete_sale("TR000001", admin_user.id)
        lines = _lines()
        assert all(line.deleted_at is None for line in lines.values())
        assert [s["transno"] for s in sales_service.list_sales(deleted=True)] == ["TR000001"]
        assert sales_service.list_sales() == []

    def test_update_then_restore(self, sale, admin_user):
        sales_service.update_sale("TR000001", {"salesdate": "2024-07-01"}, admin_user.id)
        assert derive_record_status(db.session.get(Sale, "TR000001")) == STATUS_EDITED
        # AK0001 now resolves to the 2024-06-01 price
        assert sales_service.summarize_sale(sale)["expected_total_cents"] == 2 * 4900 + 5000

        sales_service.soft_delete_sale("TR000001", admin_user.id)
        sales_service.restore_sale("TR000001", admin_user.id)
        assert derive_record_status(db.session.get(Sale, "TR000001")) == STATUS_RESTORED

    def test_restore_active_sale(self, sale, admin_user):
        with pytest.raises(ConflictError):
            sales_service.restore_sale("TR000001", admin_user.id)

    def test_details(self, sale, admin_user):
        line_id = _lines()["NB0001"].id
        sales_service.soft_delete_line_item("TR000001", line_id, admin_user.id)

        details = sales_service.get_sale_details("TR000001")
        assert details["sale"]["custname"] == "Acme"
        assert details["sale"]["empname"] == "Maria Santos"
        assert [i["prodcode"] for i in details["items"]] == ["AK0001"]
        assert details["items"][0]["line_total_cents"] == 9000
        assert [i["prodcode"] for i in details["deleted_items"]] == ["NB0001"]
        assert details["deleted_items"][0]["status"] == STATUS_DELETED


class TestSalesPermissions:
    """Denied writes raise before anything is stored or audited."""

    def _audit_count(self, table_name):
        return db.session.query(ActivityLog).filter_by(table_name=table_name).count()

    def test_denied_update_sale(self, sale, viewer_user):
        with pytest.raises(PermissionDeniedError):
            sales_service.update_sale("TR000001", {"salesdate": "2024-07-01"}, viewer_user.id)
        db.session.expire_all()
        row = db.session.get(Sale, "TR000001")
        assert str(row.salesdate) == "2024-03-01"
        assert row.modified_at is None
        assert self._audit_count("sales") == 1

    def test_denied_delete_sale(self, sale, viewer_user):
        with pytest.raises(PermissionDeniedError):
            sales_service.soft_delete_sale("TR000001", viewer_user.id)
        db.session.expire_all()
        row = db.session.get(Sale, "TR000001")
        assert row.deleted_at is None
        assert row.modified_at is None
        assert self._audit_count("sales") == 1

    def test_denied_add_line(self, sale, viewer_user):
        with pytest.raises(PermissionDeniedError):
            sales_service.add_line_item("TR000001", {"prodcode": "ZZ0001", "quantity": 1}, viewer_user.id)
        assert set(_lines()) == {"AK0001", "NB0001"}
        assert self._audit_count("salesdetail") == 0

    def test_denied_update_line(self, sale, viewer_user):
        line_id = _lines()["AK0001"].id
        with pytest.raises(PermissionDeniedError):
            sales_service.update_line_item("TR000001", line_id, {"quantity": 9}, viewer_user.id)
        db.session.expire_all()
        line = _lines()["AK0001"]
        assert line.quantity == 2
        assert line.modified_at is None
        assert self._audit_count("salesdetail") == 0

    def test_denied_delete_line(self, sale, viewer_user):
        line_id = _lines()["NB0001"].id
        with pytest.raises(PermissionDeniedError):
            sales_service.soft_delete_line_item("TR000001", line_id, viewer_user.id)
        db.session.expire_all()
        line = _lines()["NB0001"]
        assert line.deleted_at is None
        assert line.modified_at is None
        assert self._audit_count("salesdetail") == 0

    def test_denied_restore_sale(self, sale, admin_user, clerk_user):
        sales_service.soft_delete_sale("TR000001", admin_user.id)
        with pytest.raises(PermissionDeniedError):
            sales_service.restore_sale("TR000001", clerk_user.id)
        assert db.session.get(Sale, "TR000001").deleted_at is not None

    def test_deleted_sale_details_need_view_deleted(self, client, sale, admin_user, clerk_user, clerk_headers, admin_headers):
        sales_service.soft_delete_sale("TR000001", admin_user.id)

        with pytest.raises(PermissionDeniedError):
            sales_service.get_sale_details("TR000001", clerk_user.id)
        assert client.get("/api/sales/TR000001", headers=clerk_headers).status_code == 403

        resp = client.get("/api/sales/TR000001", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["sale"]["status"] == STATUS_DELETED


class TestSalesApi:

    def test_create_and_list(self, client, admin_headers, customer, catalog):
        resp = client.post("/api/sales", json=_sale_payload(), headers=admin_headers)
        assert resp.status_code == 201
        assert resp.json["sale"]["expected_total_cents"] == 14000

        resp = client.get("/api/sales", headers=admin_headers)
        assert resp.status_code == 200
        row = resp.json["items"][0]
        assert row["transno"] == "TR000001"
        assert row["status"] == STATUS_ADDED
        assert row["modifier_info"] == "N/A"

    def test_line_delete_via_api(self, client, admin_headers, sale):
        line_id = _lines()["AK0001"].id
        resp = client.delete(f"/api/sales/TR000001/items/{line_id}", headers=admin_headers)
        assert resp.status_code == 200

        resp = client.post(f"/api/sales/TR000001/items/{line_id}/restore", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["item"]["last_action"] == "restore"

    def test_missing_sale_404(self, client, admin_headers):
        resp = client.get("/api/sales/TR404404", headers=admin_headers)
        assert resp.status_code == 404

    def test_next_number(self, client, admin_headers):
        resp = client.get("/api/sales/next-number", headers=admin_headers)
        assert resp.json == {"transno": "TR000001"}
