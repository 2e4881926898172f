from __future__ import annotations

from ..extensions import db
from ..ids import new_id
from storedesk.time_utils import to_utc_z


ADDRESS_FIELDS = ("address_line1", "address_line2", "city", "state", "postal_code", "country")


class Customer(db.Model):
    """
    Customer master data.

    Deleting a customer deletes their orders (and, through the orders,
    every order item).
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.Index("ix_customers_name", "name"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True)
    phone = db.Column(db.String(32), nullable=True)

    address_line1 = db.Column(db.String(255), nullable=True)
    address_line2 = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(128), nullable=True)
    state = db.Column(db.String(128), nullable=True)
    postal_code = db.Column(db.String(32), nullable=True)
    country = db.Column(db.String(128), nullable=True)

    company_name = db.Column(db.String(255), nullable=True)
    tax_id = db.Column(db.String(64), nullable=True)

    date_of_birth = db.Column(db.Date, nullable=True)
    gender = db.Column(db.String(32), nullable=True)

    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    orders = db.relationship(
        "Order",
        back_populates="customer",
        cascade="all, delete-orphan",
        order_by="Order.created_at.desc()",
        lazy=True,
    )

    def __repr__(self) -> str:
        return f"<Customer id={self.id} email={self.email!r}>"

    def address(self) -> dict:
        return {field: getattr(self, field) for field in ADDRESS_FIELDS}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            **self.address(),
            "company_name": self.company_name,
            "tax_id": self.tax_id,
            "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "gender": self.gender,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
