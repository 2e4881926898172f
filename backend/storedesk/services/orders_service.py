# Overview: Service-layer operations for orders; encapsulates business logic and database work.

"""
Orders Service - pricing and order entry

Totals:
    subtotal = sum(unit_price * quantity)
    tax      = subtotal * tax_rate
    total    = subtotal + tax + shipping - discount

All arithmetic is Decimal with no intermediate rounding. tax_rate is an
input of order creation only; the order keeps the resulting tax amount.
total is never stored (see Order.total_amount).

Placing an order does not move stock.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from flask import current_app

from ..extensions import db
from ..models import Customer, Order, Product
from ..models.customers import ADDRESS_FIELDS
from ..models.orders import ORDER_STATUSES, OrderItem
from ..money import ZERO, amount_str, to_decimal
from ..validation import (
    MAX_AMOUNT,
    NotFoundError,
    ValidationError,
    validate_charges,
    validate_line_quantity,
    validate_unit_price,
)
from .pagination import like_pattern, paginate
from .variant_service import resolve_line

REQUIRED_DELIVERY_FIELDS = ("address_line1", "city", "postal_code")


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    discount: Decimal
    total: Decimal

    def to_dict(self) -> dict:
        return {
            "subtotal_amount": amount_str(self.subtotal),
            "tax_amount": amount_str(self.tax),
            "shipping_amount": amount_str(self.shipping),
            "discount_amount": amount_str(self.discount),
            "total_amount": amount_str(self.total),
        }


def compute_order_totals(
    lines: Iterable[tuple[Decimal, int]],
    tax_rate: Decimal,
    shipping: Decimal,
    discount: Decimal,
) -> OrderTotals:
    """
    Pure order pricing over (unit_price, quantity) pairs.

    Negative inputs are rejected, never clamped. A discount larger than
    subtotal + tax + shipping is rejected so a total never goes below zero.
    """
    subtotal = ZERO
    for unit_price, quantity in lines:
        unit_price = to_decimal(unit_price)
        if unit_price < 0:
            raise ValidationError("price must be >= 0")
        if quantity <= 0:
            raise ValidationError("quantity must be > 0")
        subtotal += unit_price * quantity

    tax_rate = to_decimal(tax_rate)
    shipping = to_decimal(shipping)
    discount = to_decimal(discount)
    if tax_rate < 0:
        raise ValidationError("tax_rate must be >= 0")
    if shipping < 0:
        raise ValidationError("shipping_amount must be >= 0")
    if discount < 0:
        raise ValidationError("discount_amount must be >= 0")

    tax = subtotal * tax_rate
    gross = subtotal + tax + shipping
    if discount > gross:
        raise ValidationError(
            f"discount_amount ({discount}) cannot exceed subtotal + tax + shipping ({gross})"
        )
    if subtotal > MAX_AMOUNT:
        raise ValidationError(f"Order subtotal cannot exceed {MAX_AMOUNT}")
    total = gross - discount
    # Invoices spell the total in words, which stops below one billion
    if total > MAX_AMOUNT:
        raise ValidationError(f"Order total cannot exceed {MAX_AMOUNT}")

    return OrderTotals(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        discount=discount,
        total=total,
    )


def _get_or_404(order_id: str) -> Order:
    order = db.session.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found")
    return order


def _default_charges() -> tuple[str, str]:
    return current_app.config["DEFAULT_TAX_RATE"], current_app.config["DEFAULT_SHIPPING_AMOUNT"]


def _resolve_delivery_address(customer: Customer, delivery_address: dict | None) -> dict:
    """Snapshot of the delivery address: given explicitly or copied from the customer."""
    if delivery_address is None:
        source = customer.address()
    else:
        if not isinstance(delivery_address, dict):
            raise ValidationError("delivery_address must be an object")
        unknown = set(delivery_address) - set(ADDRESS_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown delivery_address fields: {', '.join(sorted(unknown))}")
        source = delivery_address

    address = {}
    for field in ADDRESS_FIELDS:
        value = source.get(field)
        value = str(value).strip() if value is not None else ""
        address[field] = value or None

    missing = [f for f in REQUIRED_DELIVERY_FIELDS if not address[f]]
    if missing:
        raise ValidationError(
            f"Please provide a complete delivery address (missing: {', '.join(missing)})"
        )
    return address


def _prepare_lines(items) -> list[dict]:
    if not isinstance(items, list) or not items:
        raise ValidationError("An order needs at least one item")

    prepared = []
    for index, raw in enumerate(items, start=1):
        if not isinstance(raw, dict):
            raise ValidationError(f"Item {index} must be an object")
        product_id = raw.get("product_id")
        if not product_id:
            raise ValidationError(f"Item {index}: product_id is required")
        product = db.session.get(Product, product_id)
        if product is None:
            raise ValidationError(f"Item {index}: product not found")

        quantity = validate_line_quantity(raw.get("quantity"))
        resolved = resolve_line(product, raw.get("variant_id"))

        # The order form lets the operator edit the unit rate
        if raw.get("price") is not None:
            unit_price = validate_unit_price(raw["price"])
        else:
            unit_price = to_decimal(resolved.unit_price)

        prepared.append({
            "product": product,
            "variant": resolved.variant,
            "quantity": quantity,
            "price": unit_price,
        })
    return prepared


def quote_order(*, items, tax_rate=None, shipping_amount=None, discount_amount=0) -> OrderTotals:
    """Price an order without writing anything."""
    default_rate, default_shipping = _default_charges()
    rate, shipping, discount = validate_charges(
        default_rate if tax_rate is None else tax_rate,
        default_shipping if shipping_amount is None else shipping_amount,
        0 if discount_amount is None else discount_amount,
    )
    lines = _prepare_lines(items)
    return compute_order_totals(((l["price"], l["quantity"]) for l in lines), rate, shipping, discount)


def create_order(
    *,
    customer_id: str,
    items,
    tax_rate=None,
    shipping_amount=None,
    discount_amount=0,
    delivery_address: dict | None = None,
) -> dict:
    """
    Create an order with its items in one transaction.

    Everything is validated before the first write. Unit prices are
    captured from the resolved product/variant unless explicitly given.
    """
    customer = db.session.get(Customer, customer_id) if customer_id else None
    if customer is None:
        raise ValidationError("Please select a customer")

    default_rate, default_shipping = _default_charges()
    rate, shipping, discount = validate_charges(
        default_rate if tax_rate is None else tax_rate,
        default_shipping if shipping_amount is None else shipping_amount,
        0 if discount_amount is None else discount_amount,
    )
    lines = _prepare_lines(items)
    address = _resolve_delivery_address(customer, delivery_address)
    totals = compute_order_totals(((l["price"], l["quantity"]) for l in lines), rate, shipping, discount)

    order = Order(
        customer=customer,
        status="pending",
        subtotal_amount=totals.subtotal,
        tax_amount=totals.tax,
        shipping_amount=totals.shipping,
        discount_amount=totals.discount,
        **{f"delivery_{k}": v for k, v in address.items()},
    )
    for position, line in enumerate(lines):
        order.items.append(OrderItem(
            product=line["product"],
            variant=line["variant"],
            quantity=line["quantity"],
            price=line["price"],
            position=position,
        ))

    db.session.add(order)
    db.session.commit()

    current_app.logger.info(
        "Order created id=%s customer=%s items=%d total=%s",
        order.id, customer.id, len(lines), totals.total,
    )
    return order.to_dict(include_items=True)


def get_order(order_id: str) -> dict:
    order = _get_or_404(order_id)
    data = order.to_dict(include_items=True)
    data["customer"] = order.customer.to_dict()
    return data


def list_orders(
    search: str | None = None,
    status: str | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """Newest first; search matches an order id prefix or the customer name."""
    query = (
        db.session.query(Order)
        .join(Customer, Order.customer_id == Customer.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    if status is not None:
        if status not in ORDER_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(ORDER_STATUSES)}")
        query = query.filter(Order.status == status)
    if search and search.strip():
        term = search.strip()
        escaped = like_pattern(term)[1:]  # drop the leading % for a prefix match
        query = query.filter(
            Order.id.ilike(escaped, escape="\\") | Customer.name.ilike(like_pattern(term), escape="\\")
        )
    return paginate(query, page=page, per_page=per_page, serialize=lambda o: o.to_dict())


def update_order_status(*, order_id: str, status: str) -> dict:
    """Any status may be set at any time; there is no transition guard."""
    if status not in ORDER_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(ORDER_STATUSES)}")
    order = _get_or_404(order_id)
    previous = order.status
    order.status = status
    db.session.commit()
    current_app.logger.info("Order %s status %s -> %s", order.id, previous, status)
    return order.to_dict()


def delete_order(*, order_id: str) -> None:
    order = _get_or_404(order_id)
    db.session.delete(order)
    db.session.commit()
