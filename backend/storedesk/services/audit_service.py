# Overview: Append-only activity log for catalog and customer writes.

from __future__ import annotations

from flask import g, has_request_context

from ..extensions import db
from ..models import AdminAction
from ..models.audit import ACTION_TYPES, AUDITED_ENTITIES

"""
Activity log invariants

- One AdminAction per create/update/delete of a product, customer or category.
- Appended inside the same transaction as the write it describes: callers
  record the action before they commit, so both land or neither does.
- Rows are never updated or deleted.
"""

_VERBS = {
    "insert": "Created new",
    "update": "Updated",
    "delete": "Deleted",
}


def current_actor_id() -> str | None:
    if has_request_context():
        return getattr(g, "actor_id", None)
    return None


def describe(action_type: str, entity_type: str, entity_name: str | None) -> str:
    return f"{_VERBS[action_type]} {entity_type} - {entity_name or 'Unknown'}"


def record_action(
    *,
    action_type: str,
    entity_type: str,
    entity_id: str | None,
    entity_name: str | None,
    actor_id: str | None = None,
) -> AdminAction:
    """Stage an AdminAction in the current session (no commit)."""
    if action_type not in ACTION_TYPES:
        raise ValueError(f"Unknown action_type {action_type!r}")
    if entity_type not in AUDITED_ENTITIES:
        raise ValueError(f"Entity type {entity_type!r} is not audited")

    action = AdminAction(
        admin_id=actor_id if actor_id is not None else current_actor_id(),
        action_type=action_type,
        entity_type=entity_type,
        entity_id=entity_id,
        description=describe(action_type, entity_type, entity_name),
    )
    db.session.add(action)
    db.session.flush()
    return action


def list_recent_actions(limit: int = 10) -> list[dict]:
    rows = (
        db.session.query(AdminAction)
        .order_by(AdminAction.created_at.desc(), AdminAction.id.desc())
        .limit(limit)
        .all()
    )
    return [r.to_dict() for r in rows]
