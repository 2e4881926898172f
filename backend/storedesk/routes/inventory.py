# backend/storedesk/routes/inventory.py
"""
Inventory routes.

Stock lives on product variants. Receiving stock adds to the variant with
the matching (size, color) pair, opening a new variant when none matches.
The manual override sets an absolute on-hand quantity.
"""
from flask import Blueprint, request

from ..validation import ValidationError, NotFoundError
from ..services import inventory_service


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("")
def list_inventory():
    return inventory_service.list_inventory(
        search=request.args.get("search"),
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    )


@inventory_bp.post("/receive")
def receive_inventory_route():
    """
    Receive stock.

    Body: {"product_id": str, "quantity": int > 0, "size": str?, "color": str?}
    Returns 201 when a new variant was created, 200 otherwise.
    """
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        return {"error": "Invalid JSON payload"}, 400

    unknown = set(payload) - {"product_id", "quantity", "size", "color"}
    if unknown:
        return {"error": f"Field not allowed: {sorted(unknown)[0]}"}, 400
    if not payload.get("product_id"):
        return {"error": "Please select a product"}, 400
    if "quantity" not in payload:
        return {"error": "Missing required fields: quantity"}, 400

    try:
        result = inventory_service.receive_stock(
            product_id=payload["product_id"],
            quantity=payload["quantity"],
            size=payload.get("size"),
            color=payload.get("color"),
        )
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404

    return result, 201 if result["created"] else 200


@inventory_bp.put("/variants/<variant_id>/quantity")
def set_variant_quantity_route(variant_id: str):
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict) or "quantity" not in payload:
        return {"error": "Missing required fields: quantity"}, 400

    try:
        return inventory_service.set_variant_quantity(variant_id=variant_id, quantity=payload["quantity"])
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404


@inventory_bp.get("/low-stock")
def low_stock_route():
    limit = request.args.get("limit", default=6, type=int)
    if limit < 1:
        return {"error": "limit must be >= 1"}, 400
    items = inventory_service.low_stock_variants(limit=min(limit, 100))
    return {"items": items, "count": len(items)}
