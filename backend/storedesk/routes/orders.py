# Overview: Flask API routes for orders and invoices; parses input and returns JSON responses.

# backend/storedesk/routes/orders.py
"""
Order entry routes.

Create body:
{
  "customer_id": str,
  "items": [{"product_id": str, "variant_id": str?, "quantity": int, "price": number?}],
  "tax_rate": number?,          # fraction, defaults to DEFAULT_TAX_RATE
  "shipping_amount": number?,   # defaults to DEFAULT_SHIPPING_AMOUNT
  "discount_amount": number?,   # defaults to 0
  "delivery_address": {...}?    # defaults to the customer's address
}

Amounts are returned as decimal strings.
"""
from flask import Blueprint, Response, request

from ..validation import ValidationError, NotFoundError
from ..services import orders_service
from ..services.invoice_service import invoice_for_order, render_invoice_html

ORDER_FIELDS = {
    "customer_id", "items", "tax_rate", "shipping_amount", "discount_amount", "delivery_address",
}

orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _order_payload() -> dict:
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    for k in payload:
        if k not in ORDER_FIELDS:
            raise ValidationError(f"Field not allowed: {k}")
    return payload


@orders_bp.get("")
def list_orders():
    """
    Query params:
    - search: str (optional) - order id prefix or customer name
    - status: str (optional)
    - page / per_page: int (optional)
    """
    try:
        return orders_service.list_orders(
            search=request.args.get("search"),
            status=request.args.get("status"),
            page=request.args.get("page", type=int),
            per_page=request.args.get("per_page", type=int),
        )
    except ValidationError as e:
        return {"error": str(e)}, 400


@orders_bp.post("/quote")
def quote_order():
    """Totals for a prospective order; nothing is written."""
    try:
        payload = _order_payload()
        totals = orders_service.quote_order(
            items=payload.get("items"),
            tax_rate=payload.get("tax_rate"),
            shipping_amount=payload.get("shipping_amount"),
            discount_amount=payload.get("discount_amount"),
        )
    except ValidationError as e:
        return {"error": str(e)}, 400
    return totals.to_dict()


@orders_bp.post("")
def create_order():
    try:
        payload = _order_payload()
        created = orders_service.create_order(
            customer_id=payload.get("customer_id"),
            items=payload.get("items"),
            tax_rate=payload.get("tax_rate"),
            shipping_amount=payload.get("shipping_amount"),
            discount_amount=payload.get("discount_amount"),
            delivery_address=payload.get("delivery_address"),
        )
    except ValidationError as e:
        return {"error": str(e)}, 400
    return created, 201


@orders_bp.get("/<order_id>")
def get_order(order_id: str):
    try:
        return orders_service.get_order(order_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@orders_bp.patch("/<order_id>/status")
def update_order_status(order_id: str):
    payload = request.get_json(silent=True) or {}
    status = payload.get("status") if isinstance(payload, dict) else None
    if not status:
        return {"error": "status is required"}, 400

    try:
        return orders_service.update_order_status(order_id=order_id, status=status)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404


@orders_bp.delete("/<order_id>")
def delete_order(order_id: str):
    try:
        orders_service.delete_order(order_id=order_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    return {"ok": True}, 200


@orders_bp.get("/<order_id>/invoice")
def get_invoice(order_id: str):
    """
    Invoice for an order.

    ?format=html returns the printable document; the default is JSON.
    InvoiceIntegrityError is left to the app-level handler (500).
    """
    fmt = request.args.get("format", "json")
    if fmt not in ("json", "html"):
        return {"error": "format must be json or html"}, 400

    try:
        invoice = invoice_for_order(order_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404

    if fmt == "html":
        return Response(render_invoice_html(invoice), mimetype="text/html")
    return invoice.to_dict()
