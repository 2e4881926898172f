# Overview: Flask API routes for products and variants; parses input and returns JSON responses.

# backend/storedesk/routes/products.py
"""
Product catalog routes.

A create/update payload may carry a "variants" array next to the product
fields. Each entry is validated against the ProductVariant columns; on
update, entries with an "id" modify that variant and entries without one
add a new variant.
"""
from flask import Blueprint, request

from ..models import Product, ProductVariant
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from ..decorators import with_actor
from ..services import products_service

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "description", "sku", "price", "category_id", "image_url",
        "initial_stock", "minimum_stock",
    },
    required_on_create={"name", "sku", "price"},
)

VARIANT_POLICY = ModelValidationPolicy(
    writable_fields={
        "id", "size", "color", "variant_name", "price", "quantity", "minimum_quantity", "is_default",
    },
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _split_payload(payload: dict, *, partial: bool):
    payload = dict(payload)
    raw_variants = payload.pop("variants", None)

    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=partial)
    enforce_rules_product(patch)

    if raw_variants is None:
        return patch, None
    if not isinstance(raw_variants, list):
        raise ValidationError("variants must be a list")

    variants = []
    for raw in raw_variants:
        if not isinstance(raw, dict):
            raise ValidationError("Each variant must be an object")
        if not partial and "id" in raw:
            raise ValidationError("Field not allowed: id")
        variants.append(validate_payload(model=ProductVariant, payload=raw, policy=VARIANT_POLICY, partial=True))
    return patch, variants


@products_bp.get("")
def list_products():
    """
    Query params:
    - search: str (optional) - matches name or SKU
    - category_id: str (optional)
    - page: int (optional) - 1-indexed; omitted returns every product
    - per_page: int (optional) - default 10, max 100
    """
    return products_service.list_products(
        search=request.args.get("search"),
        category_id=request.args.get("category_id"),
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    )


@products_bp.get("/sku-check")
def sku_check():
    sku = (request.args.get("sku") or "").strip()
    if not sku:
        return {"error": "sku is required"}, 400
    exclude_id = request.args.get("exclude_id")
    taken = products_service.sku_exists(sku, exclude_id=exclude_id)
    return {"sku": sku, "available": not taken}


@products_bp.get("/<product_id>")
def get_product(product_id: str):
    try:
        return products_service.get_product(product_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@products_bp.post("")
@with_actor
def create_product_route():
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return {"error": "Invalid JSON payload"}, 400

    try:
        patch, variants = _split_payload(payload, partial=False)
        created = products_service.create_product(patch=patch, variants=variants)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except ConflictError as e:
        return {"error": str(e)}, 409

    return created, 201


@products_bp.put("/<product_id>")
@with_actor
def update_product_route(product_id: str):
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return {"error": "Invalid JSON payload"}, 400

    try:
        patch, variants = _split_payload(payload, partial=True)
        return products_service.update_product(product_id=product_id, patch=patch, variants=variants)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except ConflictError as e:
        return {"error": str(e)}, 409


@products_bp.delete("/<product_id>")
@with_actor
def delete_product_route(product_id: str):
    try:
        products_service.delete_product(product_id=product_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except ConflictError as e:
        return {"error": str(e)}, 409
    return {"ok": True}, 200


@products_bp.get("/<product_id>/default-variant")
def default_variant_suggestion(product_id: str):
    """Variant pre-selected when this product is added to an order."""
    try:
        return products_service.default_variant_suggestion(product_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@products_bp.post("/<product_id>/default-variant")
@with_actor
def set_default_variant(product_id: str):
    payload = request.get_json(silent=True) or {}
    variant_id = payload.get("variant_id") if isinstance(payload, dict) else None
    if not variant_id:
        return {"error": "variant_id is required"}, 400

    try:
        return products_service.set_default_variant(product_id=product_id, variant_id=variant_id)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
