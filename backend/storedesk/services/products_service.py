# Overview: Service-layer operations for products and their variants; encapsulates business logic and database work.

"""
Products Service

Every product owns at least one ProductVariant. A product created without
explicit variants gets a single unnamed default variant seeded from
initial_stock / minimum_stock; that variant is where its stock lives.

Explicit variant sets must flag exactly one variant as default.
"""
from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Category, OrderItem, Product, ProductVariant
from ..validation import (
    ConflictError,
    NotFoundError,
    ValidationError,
    enforce_rules_product,
    enforce_rules_variant,
)
from .audit_service import record_action
from .concurrency import lock_for_update, run_with_retry
from .pagination import apply_search, paginate
from .variant_service import selectable_variants, suggest_default_variant

PRODUCT_MUTABLE_FIELDS = {
    "name", "description", "sku", "price", "category_id", "image_url",
    "initial_stock", "minimum_stock",
}
VARIANT_MUTABLE_FIELDS = {
    "size", "color", "variant_name", "price", "quantity", "minimum_quantity", "is_default",
}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def _get_or_404(product_id: str, *, lock: bool = False) -> Product:
    query = db.session.query(Product).filter(Product.id == product_id)
    if lock:
        query = lock_for_update(query)
    product = query.first()
    if product is None:
        raise NotFoundError("Product not found")
    return product


def _check_category(category_id: str | None) -> None:
    if category_id is not None and db.session.get(Category, category_id) is None:
        raise ValidationError("category_id does not reference an existing category")


def sku_exists(sku: str, exclude_id: str | None = None) -> bool:
    query = db.session.query(Product.id).filter(Product.sku == sku)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    return query.first() is not None


def list_products(
    search: str | None = None,
    category_id: str | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """
    Product listing with optional search and pagination.

    search matches name or SKU, case-insensitively.
    """
    query = db.session.query(Product).order_by(Product.name.asc(), Product.id.asc())
    query = apply_search(query, search, Product.name, Product.sku)
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    return paginate(query, page=page, per_page=per_page, serialize=lambda p: p.to_dict())


def get_product(product_id: str) -> dict:
    return _get_or_404(product_id).to_dict(include_variants=True)


def _validate_variant_set(variants: list[dict]) -> None:
    for v in variants:
        enforce_rules_variant(v)
    defaults = sum(1 for v in variants if v.get("is_default"))
    if defaults == 0:
        raise ValidationError("One variant must be marked as default")
    if defaults > 1:
        raise ValidationError("Only one variant can be marked as default")


def build_default_variant(product: Product) -> ProductVariant:
    """The bookkeeping variant for a product without explicit variants."""
    return ProductVariant(
        product=product,
        size=None,
        color=None,
        variant_name=None,
        quantity=product.initial_stock,
        minimum_quantity=product.minimum_stock,
        is_default=True,
        position=0,
    )


def _build_variant(product: Product, data: dict, position: int) -> ProductVariant:
    variant = ProductVariant(product=product, position=position)
    for k, v in data.items():
        if k in VARIANT_MUTABLE_FIELDS:
            setattr(variant, k, v)
    if data.get("quantity") is None:
        variant.quantity = product.initial_stock
    if data.get("minimum_quantity") is None:
        variant.minimum_quantity = product.minimum_stock
    variant.is_default = bool(data.get("is_default"))
    return variant


def create_product(*, patch: dict, variants: list[dict] | None = None) -> dict:
    """
    Create a product and its variants in one transaction.

    Raises:
        ValidationError: invalid values or default-variant rules violated
        ConflictError: SKU already in use
    """
    for field in ("name", "sku", "price"):
        if patch.get(field) is None:
            raise ValidationError(f"{field} is required")
    patch.setdefault("initial_stock", 0)
    patch.setdefault("minimum_stock", 5)
    enforce_rules_product(patch)
    _check_category(patch.get("category_id"))

    if variants:
        _validate_variant_set(variants)

    if sku_exists(patch["sku"]):
        raise ConflictError("This SKU is already in use. Please enter a unique SKU.")

    p = Product()
    apply_product_patch(p, patch)
    db.session.add(p)

    if variants:
        for position, data in enumerate(variants):
            db.session.add(_build_variant(p, data, position))
    else:
        db.session.add(build_default_variant(p))

    db.session.flush()  # ensure p.id exists before the activity record

    record_action(action_type="insert", entity_type="products", entity_id=p.id, entity_name=p.name)
    db.session.commit()

    current_app.logger.info("Product created sku=%s variants=%d", p.sku, len(p.variants))
    return p.to_dict(include_variants=True)


def _apply_variant_updates(product: Product, variants: list[dict]) -> None:
    existing = {v.id: v for v in product.variants}

    for data in variants:
        variant_id = data.get("id")
        if variant_id is not None and variant_id not in existing:
            raise ValidationError(f"Variant {variant_id} does not belong to this product")

    # Resulting default flags: listed variants take their new flag, others keep theirs
    final_flags = {vid: v.is_default for vid, v in existing.items()}
    new_defaults = 0
    for data in variants:
        enforce_rules_variant(data)
        flag = bool(data.get("is_default"))
        if data.get("id") is not None:
            final_flags[data["id"]] = flag
        elif flag:
            new_defaults += 1
    defaults = sum(1 for f in final_flags.values() if f) + new_defaults
    if defaults == 0:
        raise ValidationError("One variant must be marked as default")
    if defaults > 1:
        raise ValidationError("Only one variant can be marked as default")

    # Clear every flag first so the one-default index holds at each flush
    for v in existing.values():
        v.is_default = False
    db.session.flush()

    next_position = max((v.position for v in existing.values()), default=-1) + 1
    for data in variants:
        variant_id = data.get("id")
        if variant_id is None:
            db.session.add(_build_variant(product, data, next_position))
            next_position += 1
            continue
        variant = existing[variant_id]
        for k, v in data.items():
            if k in VARIANT_MUTABLE_FIELDS and k != "is_default":
                setattr(variant, k, v)
    db.session.flush()

    for vid, flag in final_flags.items():
        existing[vid].is_default = flag
    db.session.flush()


def update_product(*, product_id: str, patch: dict, variants: list[dict] | None = None) -> dict:
    """
    Update product fields and, optionally, upsert variants.

    Listed variants with an id are updated, those without are created;
    unlisted variants are left untouched. Exactly one default must remain.
    """
    p = _get_or_404(product_id, lock=True)
    enforce_rules_product(patch)
    if "category_id" in patch:
        _check_category(patch["category_id"])

    if "sku" in patch and patch["sku"] != p.sku:
        if sku_exists(patch["sku"], exclude_id=p.id):
            raise ConflictError("This SKU is already in use by another product")

    apply_product_patch(p, patch)
    if variants:
        try:
            _apply_variant_updates(p, variants)
        except ValidationError:
            db.session.rollback()
            raise

    record_action(action_type="update", entity_type="products", entity_id=p.id, entity_name=p.name)
    db.session.commit()
    return p.to_dict(include_variants=True)


def delete_product(*, product_id: str) -> None:
    """
    Delete a product and, by cascade, all of its variants.

    Products that appear on orders are kept: order lines reference them.
    """
    p = _get_or_404(product_id)

    if db.session.query(OrderItem.id).filter(OrderItem.product_id == p.id).first():
        raise ConflictError("Product appears on existing orders and cannot be deleted.")

    sku = p.sku
    record_action(action_type="delete", entity_type="products", entity_id=p.id, entity_name=p.name)
    db.session.delete(p)
    db.session.commit()
    current_app.logger.info("Product deleted sku=%s", sku)


def set_default_variant(*, product_id: str, variant_id: str) -> dict:
    """Move the default flag to variant_id; the previous default is cleared first."""

    def _op():
        p = _get_or_404(product_id, lock=True)
        variants = lock_for_update(
            db.session.query(ProductVariant).filter(ProductVariant.product_id == p.id)
        ).all()
        target = next((v for v in variants if v.id == variant_id), None)
        if target is None:
            raise ValidationError(f"Variant {variant_id} does not belong to this product")

        if not target.is_default:
            for v in variants:
                v.is_default = False
            db.session.flush()
            target.is_default = True

        record_action(action_type="update", entity_type="products", entity_id=p.id, entity_name=p.name)
        db.session.commit()
        current_app.logger.info("Default variant product=%s variant=%s", p.sku, target.id)
        return p.to_dict(include_variants=True)

    try:
        return run_with_retry(_op)
    except (ValidationError, NotFoundError):
        db.session.rollback()
        raise


def default_variant_suggestion(product_id: str) -> dict:
    p = _get_or_404(product_id)
    suggested = suggest_default_variant(p)
    return {
        "product_id": p.id,
        "variant": suggested.to_dict() if suggested is not None else None,
        "selectable": [v.to_dict() for v in selectable_variants(p)],
    }
