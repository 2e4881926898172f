# Overview: Read-only aggregates for the back-office dashboard.

from __future__ import annotations

import calendar
from collections import Counter
from datetime import datetime, timedelta, timezone

from ..extensions import db
from ..models import Customer, Order, Product
from ..money import ZERO, amount_str, to_decimal
from ..time_utils import to_utc_z, utcnow
from .audit_service import list_recent_actions
from .inventory_service import low_stock_variants

TREND_DAYS = 7
RECENT_ORDERS = 5
RECENT_ACTIONS = 10
LOW_STOCK_LIMIT = 6


def one_month_before(now: datetime) -> datetime:
    """Same clock time one calendar month earlier (day clamped to month end)."""
    year, month = (now.year, now.month - 1) if now.month > 1 else (now.year - 1, 12)
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def _naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def _status_distribution(statuses: list[str]) -> list[dict]:
    counts = Counter(statuses)
    total = sum(counts.values())
    return [
        {
            "status": status,
            "count": count,
            "percentage": round(count * 100 / total, 2),
        }
        for status, count in counts.items()
    ]


def _sales_trend(rows: list[tuple[datetime, object]], now: datetime) -> list[dict]:
    """Daily order totals for the last 7 calendar days, oldest first."""
    per_day: dict = {}
    for created_at, total in rows:
        day = created_at.date()
        per_day[day] = per_day.get(day, ZERO) + to_decimal(total)

    trend = []
    for offset in range(TREND_DAYS - 1, -1, -1):
        day = (now - timedelta(days=offset)).date()
        trend.append({
            "date": day.isoformat(),
            "label": day.strftime("%a"),
            "amount": amount_str(per_day.get(day, ZERO)),
        })
    return trend


def get_dashboard_stats(now: datetime | None = None) -> dict:
    """
    Dashboard snapshot. "Last month" means the window starting one calendar
    month before now.
    """
    now = now or utcnow()
    since = one_month_before(now)

    total_products = db.session.query(db.func.count(Product.id)).scalar() or 0
    pending_orders = (
        db.session.query(db.func.count(Order.id)).filter(Order.status == "pending").scalar() or 0
    )
    customers = db.session.query(db.func.count(Customer.id)).scalar() or 0

    recent_window = [
        (_naive_utc(created_at), total, status)
        for created_at, total, status in (
            db.session.query(Order.created_at, Order.total_amount, Order.status)
            .filter(Order.created_at >= since)
            .all()
        )
    ]
    monthly_revenue = sum((to_decimal(total) for _, total, _ in recent_window), ZERO)

    recent_orders = (
        db.session.query(Order)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(RECENT_ORDERS)
        .all()
    )

    return {
        "total_products": total_products,
        "pending_orders": pending_orders,
        "monthly_revenue": amount_str(monthly_revenue),
        "active_customers": customers,
        "low_stock": low_stock_variants(limit=LOW_STOCK_LIMIT),
        "recent_orders": [
            {
                "id": o.id,
                "status": o.status,
                "total_amount": amount_str(o.total_amount),
                "customer_name": o.customer.name if o.customer else None,
                "created_at": to_utc_z(o.created_at),
            }
            for o in recent_orders
        ],
        "order_stats": _status_distribution([status for _, _, status in recent_window]),
        "sales_trend": _sales_trend(
            [(created_at, total) for created_at, total, _ in recent_window if created_at >= now - timedelta(days=TREND_DAYS)],
            now,
        ),
        "recent_actions": list_recent_actions(limit=RECENT_ACTIONS),
    }
