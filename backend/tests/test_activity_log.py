"""
Activity log tests.

The log is best-effort: a failed append must not undo or fail the change it
describes. Reads are paginated newest-first with user names resolved.
"""

import pytest
from sqlalchemy.exc import SQLAlchemyError

from salesdash.extensions import db
from salesdash.models import ActivityLog, Customer
from salesdash.services import activity_log_service, customer_service


class TestBestEffortAppend:

    def test_log_failure_does_not_fail_operation(self, admin_user, monkeypatch):
        def broken_log(**kwargs):
            raise SQLAlchemyError("activity_logs is unavailable")

        monkeypatch.setattr(activity_log_service, "ActivityLog", broken_log)

        customer = customer_service.create_customer(
            {"custno": "C0001", "custname": "Acme"}, admin_user.id
        )
        monkeypatch.undo()

        assert customer.custno == "C0001"
        assert db.session.get(Customer, "C0001") is not None
        assert db.session.query(ActivityLog).filter_by(table_name="customer").count() == 0

    def test_returns_none_on_failure(self, db_session, monkeypatch):
        def broken_log(**kwargs):
            raise SQLAlchemyError("boom")

        monkeypatch.setattr(activity_log_service, "ActivityLog", broken_log)
        assert activity_log_service.log_activity(
            action="insert", table_name="customer", record_id="C0001"
        ) is None

    def test_unknown_action(self, db_session):
        with pytest.raises(ValueError):
            activity_log_service.log_activity(action="purge", table_name="customer", record_id="C0001")

    def test_details_round_trip(self, admin_user):
        entry = activity_log_service.log_activity(
            action="update",
            table_name="customer",
            record_id="C0001",
            details={"custname": "Acme"},
            user_id=admin_user.id,
        )
        assert entry.to_dict()["details"] == {"custname": "Acme"}


class TestListing:

    def test_pagination_newest_first(self, admin_user):
        for i in range(12):
            activity_log_service.log_activity(
                action="insert", table_name="customer", record_id=f"C{i:04d}", user_id=admin_user.id
            )

        page1 = activity_log_service.list_activity_logs(page=1)
        page2 = activity_log_service.list_activity_logs(page=2)

        # admin_user's own profile insert is the thirteenth entry
        assert page1["total"] == 13
        assert page1["pages"] == 2
        assert len(page1["items"]) == 10
        assert len(page2["items"]) == 3
        assert page1["items"][0]["record_id"] == "C0011"

    def test_user_names(self, admin_user):
        activity_log_service.log_activity(action="insert", table_name="customer", record_id="A")
        activity_log_service.log_activity(action="insert", table_name="customer", record_id="B", user_id=99999)
        activity_log_service.log_activity(action="insert", table_name="customer", record_id="C", user_id=admin_user.id)

        names = {
            e["record_id"]: e["user_name"]
            for e in activity_log_service.list_activity_logs(per_page=50)["items"]
        }
        assert names["A"] == "System"
        assert names["B"] == "Unknown User"
        assert names["C"] == "Admin User"

    def test_email_when_no_name(self, db_session):
        from salesdash.services import auth_service

        user = auth_service.create_user("noname@salesdash.test", "Password123!")
        assert activity_log_service.resolve_user_names([user.id])[user.id] == "noname@salesdash.test"

    def test_api(self, client, admin_headers):
        resp = client.get("/api/activity-logs?page=1&per_page=5", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json["per_page"] == 5
        assert resp.json["items"][0]["table_name"] == "profiles"
