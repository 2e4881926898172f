# Overview: Read-only dashboard and activity feed endpoints.

from flask import Blueprint, request

from ..services.audit_service import list_recent_actions
from ..services.dashboard_service import get_dashboard_stats

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api")


@dashboard_bp.get("/dashboard")
def dashboard():
    return get_dashboard_stats()


@dashboard_bp.get("/activity")
def activity():
    """Most recent admin actions, newest first (limit 1..100, default 10)."""
    limit = request.args.get("limit", default=10, type=int)
    if limit < 1 or limit > 100:
        return {"error": "limit must be between 1 and 100"}, 400
    items = list_recent_actions(limit=limit)
    return {"items": items, "count": len(items)}
