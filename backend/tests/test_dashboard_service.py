# Overview: Pytest coverage for dashboard aggregates and the activity feed.

from datetime import datetime, timedelta

from storedesk.extensions import db
from storedesk.models import Order
from storedesk.services.audit_service import list_recent_actions
from storedesk.services.dashboard_service import get_dashboard_stats, one_month_before
from storedesk.services.orders_service import update_order_status
from storedesk.time_utils import utcnow


class TestOneMonthBefore:
    def test_plain(self):
        assert one_month_before(datetime(2025, 4, 17, 9, 30)) == datetime(2025, 3, 17, 9, 30)

    def test_clamps_to_month_end(self):
        assert one_month_before(datetime(2025, 3, 31)) == datetime(2025, 2, 28)

    def test_january(self):
        assert one_month_before(datetime(2025, 1, 15)) == datetime(2024, 12, 15)


class TestDashboardStats:
    """Counts, revenue, status distribution and 7-day trend."""

    def test_empty_database(self, db_session):
        stats = get_dashboard_stats()
        assert stats["total_products"] == 0
        assert stats["pending_orders"] == 0
        assert stats["monthly_revenue"] == "0.00"
        assert stats["order_stats"] == []
        assert len(stats["sales_trend"]) == 7
        assert all(day["amount"] == "0.00" for day in stats["sales_trend"])

    def test_aggregates(self, db_session, make_order, product, shirt, customer):
        a = make_order([{"product_id": product.id, "quantity": 1}], tax_rate=0, shipping_amount=0)
        b = make_order([{"product_id": product.id, "quantity": 2}], tax_rate=0, shipping_amount=0)
        old = make_order([{"product_id": product.id, "quantity": 5}], tax_rate=0, shipping_amount=0)
        update_order_status(order_id=b["id"], status="shipped")

        now = utcnow()
        db.session.get(Order, old["id"]).created_at = now - timedelta(days=60)
        db.session.get(Order, a["id"]).created_at = now - timedelta(days=1)
        db.session.get(Order, b["id"]).created_at = now
        db_session.commit()

        stats = get_dashboard_stats(now=now)

        assert stats["total_products"] == 2
        assert stats["active_customers"] == 1
        assert stats["pending_orders"] == 2
        assert stats["monthly_revenue"] == "30.00"

        distribution = {row["status"]: row for row in stats["order_stats"]}
        assert distribution["pending"]["count"] == 1
        assert distribution["shipped"]["count"] == 1
        assert distribution["pending"]["percentage"] == 50.0

        trend = stats["sales_trend"]
        assert trend[-1]["date"] == now.date().isoformat()
        assert trend[-1]["label"] == now.strftime("%a")
        assert trend[-1]["amount"] == "20.00"
        assert trend[-2]["amount"] == "10.00"

        assert [o["id"] for o in stats["recent_orders"]][:2] == [b["id"], a["id"]]
        assert stats["recent_orders"][0]["customer_name"] == customer.name

    def test_low_stock_and_actions(self, db_session, make_product):
        for i in range(8):
            make_product(name=f"Empty {i}", initial_stock=0)
        stats = get_dashboard_stats()
        assert len(stats["low_stock"]) == 6
        assert len(stats["recent_actions"]) == 8
        assert stats["recent_actions"][0]["description"].startswith("Created new products - ")


class TestActivityFeed:
    def test_limit_and_actor(self, app, db_session, client):
        for i in range(12):
            client.post("/api/categories", json={"name": f"Cat {i}"}, headers={"X-Actor-Id": "admin-7"})
        actions = list_recent_actions(limit=10)
        assert len(actions) == 10
        assert {a["admin_id"] for a in actions} == {"admin-7"}
