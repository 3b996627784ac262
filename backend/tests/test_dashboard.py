"""Dashboard summary counts."""

from salesdash.services import customer_service, dashboard_service, notification_service


def test_stats_exclude_deleted(admin_user, customer):
    customer_service.create_customer({"custno": "C0002", "custname": "Beta"}, admin_user.id)
    customer_service.soft_delete_customer("C0002", admin_user.id)

    stats = dashboard_service.get_dashboard_stats(admin_user.id)
    assert stats["customers"] == 1
    assert stats["sales"] == 0
    assert stats["users"] == 1


def test_stats_route(client, admin_user, admin_headers, customer):
    notification_service.create_notification(admin_user.id, "Hello", "Welcome aboard", admin_user.id)

    resp = client.get("/api/dashboard/stats", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json["stats"]["customers"] == 1
    assert resp.json["stats"]["unread_notifications"] == 1
    assert len(resp.json["recent_activity"]) <= 5
