from __future__ import annotations

from sqlalchemy.ext.hybrid import hybrid_property

from ..extensions import db
from ..ids import new_id
from ..money import amount_str
from .catalog import MONEY
from storedesk.time_utils import to_utc_z


ORDER_STATUSES = ("pending", "confirmed", "shipped", "delivered", "cancelled")

DELIVERY_FIELDS = (
    "delivery_address_line1",
    "delivery_address_line2",
    "delivery_city",
    "delivery_state",
    "delivery_postal_code",
    "delivery_country",
)


class Order(db.Model):
    """
    Customer order.

    The four charge components are stored; total_amount is derived from
    them on every read (Python attribute and SQL expression alike) and has
    no column of its own, so it can never drift from its inputs.

    The delivery_* fields are a snapshot taken when the order is placed,
    not a live view of the customer's address.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.CheckConstraint(
            "status IN ('pending', 'confirmed', 'shipped', 'delivered', 'cancelled')",
            name="ck_orders_status",
        ),
        db.CheckConstraint("subtotal_amount >= 0", name="ck_orders_subtotal_not_negative"),
        db.CheckConstraint("tax_amount >= 0", name="ck_orders_tax_not_negative"),
        db.CheckConstraint("shipping_amount >= 0", name="ck_orders_shipping_not_negative"),
        db.CheckConstraint("discount_amount >= 0", name="ck_orders_discount_not_negative"),
        db.Index("ix_orders_status_created", "status", "created_at"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    customer_id = db.Column(
        db.String(36),
        db.ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    status = db.Column(db.String(16), nullable=False, default="pending", index=True)

    subtotal_amount = db.Column(MONEY, nullable=False)
    tax_amount = db.Column(MONEY, nullable=False, default=0)
    shipping_amount = db.Column(MONEY, nullable=False, default=0)
    discount_amount = db.Column(MONEY, nullable=False, default=0)

    delivery_address_line1 = db.Column(db.String(255), nullable=True)
    delivery_address_line2 = db.Column(db.String(255), nullable=True)
    delivery_city = db.Column(db.String(128), nullable=True)
    delivery_state = db.Column(db.String(128), nullable=True)
    delivery_postal_code = db.Column(db.String(32), nullable=True)
    delivery_country = db.Column(db.String(128), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    customer = db.relationship("Customer", back_populates="orders")
    items = db.relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
        lazy=True,
    )

    @hybrid_property
    def total_amount(self):
        return self.subtotal_amount + self.tax_amount + self.shipping_amount - self.discount_amount

    def __repr__(self) -> str:
        return f"<Order id={self.id} status={self.status} customer_id={self.customer_id}>"

    def delivery_address(self) -> dict:
        return {field: getattr(self, field) for field in DELIVERY_FIELDS}

    def to_dict(self, include_items: bool = False) -> dict:
        data = {
            "id": self.id,
            "customer_id": self.customer_id,
            "customer_name": self.customer.name if self.customer else None,
            "status": self.status,
            "subtotal_amount": amount_str(self.subtotal_amount),
            "tax_amount": amount_str(self.tax_amount),
            "shipping_amount": amount_str(self.shipping_amount),
            "discount_amount": amount_str(self.discount_amount),
            "total_amount": amount_str(self.total_amount),
            **self.delivery_address(),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class OrderItem(db.Model):
    """
    Order line. price is the unit price captured when the order was placed;
    later product or variant price changes do not touch it.
    """
    __tablename__ = "order_items"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
        db.CheckConstraint("price >= 0", name="ck_order_items_price_not_negative"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    order_id = db.Column(
        db.String(36),
        db.ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = db.Column(db.String(36), db.ForeignKey("products.id"), nullable=False, index=True)
    variant_id = db.Column(db.String(36), db.ForeignKey("product_variants.id"), nullable=True, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(MONEY, nullable=False)

    # Line number within the order (0-based)
    position = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    order = db.relationship("Order", back_populates="items")
    product = db.relationship("Product")
    variant = db.relationship("ProductVariant")

    @property
    def line_amount(self):
        return self.price * self.quantity

    def description(self) -> str:
        """Product name plus the variant label, if any."""
        name = self.product.name if self.product else ""
        if self.variant is not None and self.variant.display_name:
            return f"{name} ({self.variant.display_name})"
        return name

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "product_name": self.product.name if self.product else None,
            "product_sku": self.product.sku if self.product else None,
            "variant_name": self.variant.display_name if self.variant else None,
            "quantity": self.quantity,
            "price": amount_str(self.price),
            "line_amount": amount_str(self.line_amount),
            "created_at": to_utc_z(self.created_at),
        }
