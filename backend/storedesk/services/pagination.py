# Overview: Shared paging and search helpers for list endpoints.

from __future__ import annotations

from flask import current_app, has_app_context
from sqlalchemy import or_


def like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def apply_search(query, term: str | None, *columns):
    """Case-insensitive substring match on any of the given columns."""
    if term is None:
        return query
    term = term.strip()
    if not term:
        return query
    pattern = like_pattern(term)
    return query.filter(or_(*(col.ilike(pattern, escape="\\") for col in columns)))


def _page_size_limits() -> tuple[int, int]:
    if has_app_context():
        return current_app.config["DEFAULT_PAGE_SIZE"], current_app.config["MAX_PAGE_SIZE"]
    return 10, 100


def paginate(query, *, page: int | None, per_page: int | None, serialize) -> dict:
    """
    Run a list query with optional pagination.

    page=None returns every row. Otherwise page is 1-indexed and per_page is
    clamped to the configured maximum.
    """
    if page is None:
        rows = query.all()
        return {
            "items": [serialize(r) for r in rows],
            "count": len(rows),
        }

    default_size, max_size = _page_size_limits()
    per_page = min(per_page or default_size, max_size)
    per_page = max(per_page, 1)
    page = max(page, 1)

    total = query.order_by(None).count()
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1

    rows = query.offset((page - 1) * per_page).limit(per_page).all()

    return {
        "items": [serialize(r) for r in rows],
        "count": len(rows),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }
