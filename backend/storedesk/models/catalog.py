from __future__ import annotations

from ..extensions import db
from ..ids import new_id
from ..money import amount_str
from storedesk.time_utils import to_utc_z

# Numeric(18, 6): prices carry at most 2 decimals and tax rates at most 4,
# so every derived amount fits the scale exactly.
MONEY = db.Numeric(18, 6)


class Category(db.Model):
    """Product category; categories nest through parent_id."""
    __tablename__ = "categories"
    __table_args__ = (
        db.Index("ix_categories_name", "name"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    parent_id = db.Column(db.String(36), db.ForeignKey("categories.id"), nullable=True, index=True)
    icon_url = db.Column(db.String(1024), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    parent = db.relationship("Category", remote_side=[id], backref=db.backref("children", lazy=True))

    def __repr__(self) -> str:
        return f"<Category id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "parent_id": self.parent_id,
            "icon_url": self.icon_url,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Product(db.Model):
    """
    Product master data.

    Stock is never held on the product itself: every product owns at least
    one ProductVariant, and variant quantities are the authoritative stock
    counts. initial_stock / minimum_stock only seed the first variant.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("price >= 0", name="ck_products_price_not_negative"),
        db.CheckConstraint("initial_stock >= 0", name="ck_products_initial_stock_not_negative"),
        db.CheckConstraint("minimum_stock >= 0", name="ck_products_minimum_stock_not_negative"),
        db.Index("ix_products_name", "name"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    sku = db.Column(db.String(64), nullable=False, unique=True)
    price = db.Column(MONEY, nullable=False)
    category_id = db.Column(db.String(36), db.ForeignKey("categories.id"), nullable=True, index=True)
    image_url = db.Column(db.String(1024), nullable=True)

    initial_stock = db.Column(db.Integer, nullable=False, default=0)
    minimum_stock = db.Column(db.Integer, nullable=False, default=5)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    category = db.relationship("Category", backref=db.backref("products", lazy=True))
    variants = db.relationship(
        "ProductVariant",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductVariant.position",
        lazy=True,
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} name={self.name!r}>"

    @property
    def total_quantity(self) -> int:
        return sum(v.quantity for v in self.variants)

    def to_dict(self, include_variants: bool = False) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "sku": self.sku,
            "price": amount_str(self.price),
            "category_id": self.category_id,
            "image_url": self.image_url,
            "initial_stock": self.initial_stock,
            "minimum_stock": self.minimum_stock,
            "total_quantity": self.total_quantity,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_variants:
            data["variants"] = [v.to_dict() for v in self.variants]
        return data


class ProductVariant(db.Model):
    """
    A stocked configuration of a product (size / color / named variant).

    quantity is the authoritative on-hand count. version_id backs optimistic
    locking so concurrent stock writes fail loudly instead of losing updates.
    """
    __tablename__ = "product_variants"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_variants_quantity_not_negative"),
        db.CheckConstraint("minimum_quantity >= 0", name="ck_variants_minimum_quantity_not_negative"),
        db.CheckConstraint("price >= 0", name="ck_variants_price_not_negative"),
        # At most one default variant per product
        db.Index(
            "uq_variants_one_default_per_product",
            "product_id",
            unique=True,
            sqlite_where=db.text("is_default = 1"),
            postgresql_where=db.text("is_default"),
        ),
        db.Index("ix_variants_product_size_color", "product_id", "size", "color"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    product_id = db.Column(
        db.String(36),
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    size = db.Column(db.String(64), nullable=True)
    color = db.Column(db.String(64), nullable=True)
    variant_name = db.Column(db.String(255), nullable=True)

    # NULL means "use the product price"
    price = db.Column(MONEY, nullable=True)

    quantity = db.Column(db.Integer, nullable=False, default=0)
    minimum_quantity = db.Column(db.Integer, nullable=False, default=5)
    is_default = db.Column(db.Boolean, nullable=False, default=False)

    # Creation order within the product; "first variant" means lowest position
    position = db.Column(db.Integer, nullable=False, default=0)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    product = db.relationship("Product", back_populates="variants")
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return (
            f"<ProductVariant id={self.id} product_id={self.product_id} "
            f"size={self.size!r} color={self.color!r} qty={self.quantity}>"
        )

    @property
    def effective_price(self):
        return self.price if self.price is not None else self.product.price

    @property
    def display_name(self) -> str:
        if self.variant_name:
            return self.variant_name
        return " - ".join(p for p in (self.size, self.color) if p)

    @property
    def stock_status(self) -> str:
        if self.quantity == 0:
            return "out_of_stock"
        if self.quantity <= self.minimum_quantity:
            return "low_stock"
        return "in_stock"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "size": self.size,
            "color": self.color,
            "variant_name": self.variant_name,
            "display_name": self.display_name or None,
            "price": amount_str(self.price),
            "effective_price": amount_str(self.effective_price),
            "quantity": self.quantity,
            "minimum_quantity": self.minimum_quantity,
            "is_default": self.is_default,
            "position": self.position,
            "stock_status": self.stock_status,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
