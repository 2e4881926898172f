from __future__ import annotations

from ..extensions import db
from ..ids import new_id
from storedesk.time_utils import to_utc_z


ACTION_TYPES = ("insert", "update", "delete")
AUDITED_ENTITIES = ("products", "customers", "categories")


class AdminAction(db.Model):
    """
    Append-only activity record for writes on products, customers and
    categories. Rows are written in the same transaction as the change they
    describe and are never updated or deleted by the application.
    """
    __tablename__ = "admin_actions"
    __table_args__ = (
        db.CheckConstraint("action_type IN ('insert', 'update', 'delete')", name="ck_admin_actions_type"),
        db.Index("ix_admin_actions_created", "created_at"),
        db.Index("ix_admin_actions_entity", "entity_type", "entity_id"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    # Caller id supplied by the authenticating gateway (no local user table)
    admin_id = db.Column(db.String(64), nullable=True, index=True)
    action_type = db.Column(db.String(16), nullable=False)
    entity_type = db.Column(db.String(32), nullable=False)
    entity_id = db.Column(db.String(36), nullable=True)
    description = db.Column(db.Text, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "admin_id": self.admin_id,
            "action_type": self.action_type,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "created_at": to_utc_z(self.created_at),
        }
