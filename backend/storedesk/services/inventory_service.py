# Overview: Service-layer operations for inventory; encapsulates business logic and database work.

# backend/storedesk/services/inventory_service.py

from __future__ import annotations

from flask import current_app
from sqlalchemy import case, func

from ..extensions import db
from ..models import Product, ProductVariant
from ..validation import (
    INT32_MAX,
    NotFoundError,
    ValidationError,
    validate_stock_level,
    validate_stock_receipt_quantity,
)
from .concurrency import lock_for_update, run_with_retry
from .pagination import apply_search, paginate

"""
Stock ledger invariants (authoritative)

- ProductVariant.quantity is the on-hand count; it is never negative.
- A stock receipt adds a positive whole number of units to the variant
  matching the exact (size, color) pair, or creates that variant.
  NULL matches NULL; blank strings are treated as NULL.
- A resulting quantity above the 32-bit INTEGER range is rejected, never
  truncated.
- A manual override sets any non-negative quantity.
- Every rule is checked before the write; failures leave the DB untouched.

Concurrency:
- Stock rows are read with SELECT ... FOR UPDATE and carry an optimistic
  version_id; conflicting writers are retried instead of losing updates.
"""


def _normalize_attr(value) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _match_attr(column, value):
    return column.is_(None) if value is None else column == value


def find_variant(product_id: str, size: str | None, color: str | None, *, lock: bool = False) -> ProductVariant | None:
    """
    Variant with exactly this (size, color) pair.

    When several variants share the pair the default wins, then the oldest.
    """
    query = (
        db.session.query(ProductVariant)
        .filter(
            ProductVariant.product_id == product_id,
            _match_attr(ProductVariant.size, size),
            _match_attr(ProductVariant.color, color),
        )
        .order_by(ProductVariant.is_default.desc(), ProductVariant.position.asc())
    )
    if lock:
        query = lock_for_update(query)
    return query.first()


def receive_stock(
    *,
    product_id: str,
    quantity,
    size: str | None = None,
    color: str | None = None,
) -> dict:
    """
    Add received units to a product's stock.

    Returns the variant dict plus "created": True when a new variant row
    was opened for an unseen (size, color) pair.
    """
    amount = validate_stock_receipt_quantity(quantity)
    size = _normalize_attr(size)
    color = _normalize_attr(color)

    def _op():
        product = db.session.get(Product, product_id)
        if product is None:
            raise NotFoundError("Product not found")

        variant = find_variant(product.id, size, color, lock=True)
        created = False
        if variant is not None:
            new_quantity = variant.quantity + amount
            if new_quantity > INT32_MAX:
                raise ValidationError(
                    f"Resulting quantity {new_quantity} exceeds the maximum of {INT32_MAX}"
                )
            variant.quantity = new_quantity
        else:
            next_position = (
                db.session.query(func.coalesce(func.max(ProductVariant.position), -1))
                .filter(ProductVariant.product_id == product.id)
                .scalar()
            ) + 1
            variant = ProductVariant(
                product=product,
                size=size,
                color=color,
                quantity=amount,
                minimum_quantity=product.minimum_stock,
                is_default=False,
                position=next_position,
            )
            db.session.add(variant)
            created = True

        db.session.commit()
        current_app.logger.info(
            "Stock received product=%s size=%s color=%s qty=%d on_hand=%d",
            product.sku, size, color, amount, variant.quantity,
        )
        result = variant.to_dict()
        result["created"] = created
        return result

    try:
        return run_with_retry(_op)
    except (ValidationError, NotFoundError):
        db.session.rollback()
        raise


def set_variant_quantity(*, variant_id: str, quantity) -> dict:
    """Manual override: set a variant's on-hand quantity to a non-negative value."""
    new_quantity = validate_stock_level(quantity)

    def _op():
        variant = lock_for_update(
            db.session.query(ProductVariant).filter(ProductVariant.id == variant_id)
        ).first()
        if variant is None:
            raise NotFoundError("Variant not found")

        previous = variant.quantity
        variant.quantity = new_quantity
        db.session.commit()
        current_app.logger.info(
            "Stock override variant=%s %d -> %d", variant.id, previous, new_quantity,
        )
        return variant.to_dict()

    return run_with_retry(_op)


def _inventory_row(variant: ProductVariant) -> dict:
    row = variant.to_dict()
    row["product_name"] = variant.product.name
    row["product_sku"] = variant.product.sku
    return row


def list_inventory(search: str | None = None, page: int | None = None, per_page: int | None = None) -> dict:
    """Variant rows with their product, ordered by product name."""
    query = (
        db.session.query(ProductVariant)
        .join(Product, ProductVariant.product_id == Product.id)
        .order_by(Product.name.asc(), ProductVariant.position.asc(), ProductVariant.id.asc())
    )
    query = apply_search(query, search, Product.name, Product.sku, ProductVariant.variant_name)
    result = paginate(query, page=page, per_page=per_page, serialize=_inventory_row)
    result["summary"] = inventory_summary()
    return result


def inventory_summary() -> dict:
    out_of_stock, low_stock, in_stock = db.session.query(
        func.coalesce(func.sum(case((ProductVariant.quantity == 0, 1), else_=0)), 0),
        func.coalesce(func.sum(case(
            ((ProductVariant.quantity > 0) & (ProductVariant.quantity <= ProductVariant.minimum_quantity), 1),
            else_=0,
        )), 0),
        func.coalesce(func.sum(case((ProductVariant.quantity > ProductVariant.minimum_quantity, 1), else_=0)), 0),
    ).one()
    return {
        "out_of_stock": int(out_of_stock),
        "low_stock": int(low_stock),
        "in_stock": int(in_stock),
    }


def low_stock_variants(limit: int = 6) -> list[dict]:
    """
    Variants below their alert threshold (quantity < minimum_quantity).

    minimum_quantity is only an alert level; nothing blocks stock from
    falling below it.
    """
    rows = (
        db.session.query(ProductVariant)
        .join(Product, ProductVariant.product_id == Product.id)
        .filter(ProductVariant.quantity < ProductVariant.minimum_quantity)
        .order_by(ProductVariant.quantity.asc(), Product.name.asc())
        .limit(limit)
        .all()
    )
    return [
        {
            "id": v.id,
            "product_id": v.product_id,
            "name": v.product.name,
            "variant": v.display_name or None,
            "quantity": v.quantity,
            "minimum_quantity": v.minimum_quantity,
        }
        for v in rows
    ]
