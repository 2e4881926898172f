# Overview: Invoice document building and rendering for orders.

"""
Invoice Service

An invoice is a read-only view over one order plus the company profile:

- number:   first 8 characters of the order id, upper-cased
- date:     order creation date, calendar date only ("Apr 17, 2025")
- lines:    description, quantity, unit rate, amount = rate * quantity
- footer:   sum of line amounts; must equal the stored subtotal_amount
- tax:      stored tax_amount split into two equal halves
- total:    grand total in figures and in words

Amounts are only rounded for display (2 decimals, half-up).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from flask import current_app, render_template

from ..extensions import db
from ..models import CompanySettings, Order
from ..money import ZERO, format_currency, round_display, to_decimal
from ..validation import NotFoundError
from .settings_service import load_company_settings

_ONES = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine"]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]
_TEENS = [
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen",
    "Fifteen", "Sixteen", "Seventeen", "Eighteen", "Nineteen",
]

_BILLION = 1_000_000_000


class InvoiceIntegrityError(RuntimeError):
    """Stored order amounts disagree with the order's lines."""


def _below_thousand(n: int) -> list[str]:
    words = []
    if n >= 100:
        words += [_ONES[n // 100], "Hundred"]
        n %= 100
    if n >= 20:
        words.append(_TENS[n // 10])
        n %= 10
    elif n >= 10:
        words.append(_TEENS[n - 10])
        return words
    if n > 0:
        words.append(_ONES[n])
    return words


def number_to_words(value) -> str:
    """
    Spell out the integer part of an amount in English.

    0 -> "Zero"; 1234.56 -> "One Thousand Two Hundred Thirty Four Only".
    Cents are dropped. Supports 0 <= value < 1,000,000,000.
    """
    amount = to_decimal(value)
    if amount < 0:
        raise ValueError("number_to_words does not accept negative amounts")
    n = int(amount)  # truncates toward zero
    if n >= _BILLION:
        raise ValueError("number_to_words supports amounts below one billion")
    if n == 0:
        return "Zero"

    words = []
    if n >= 1_000_000:
        words += _below_thousand(n // 1_000_000) + ["Million"]
        n %= 1_000_000
    if n >= 1000:
        words += _below_thousand(n // 1000) + ["Thousand"]
        n %= 1000
    words += _below_thousand(n)
    return " ".join(words) + " Only"


@dataclass(frozen=True)
class InvoiceLine:
    number: int
    description: str
    sku: str | None
    quantity: int
    rate: Decimal
    amount: Decimal


@dataclass(frozen=True)
class Invoice:
    number: str
    reference: str
    date: date
    company: dict
    bill_to: dict
    lines: list[InvoiceLine] = field(default_factory=list)
    total_quantity: int = 0
    subtotal: Decimal = ZERO
    tax_half: Decimal = ZERO
    tax_half_rate: Decimal = ZERO
    tax_total: Decimal = ZERO
    shipping: Decimal = ZERO
    discount: Decimal = ZERO
    grand_total: Decimal = ZERO
    amount_in_words: str = ""

    @property
    def date_display(self) -> str:
        return self.date.strftime("%b %d, %Y")

    @property
    def tax_half_rate_display(self) -> str:
        return f"{self.tax_half_rate.normalize():f}%"

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "reference": self.reference,
            "date": self.date.isoformat(),
            "date_display": self.date_display,
            "company": self.company,
            "bill_to": self.bill_to,
            "lines": [
                {
                    "number": l.number,
                    "description": l.description,
                    "sku": l.sku,
                    "quantity": l.quantity,
                    "rate": format_currency(l.rate),
                    "amount": format_currency(l.amount),
                }
                for l in self.lines
            ],
            "total_quantity": self.total_quantity,
            "subtotal": format_currency(self.subtotal),
            "tax_half": format_currency(self.tax_half),
            "tax_half_rate": self.tax_half_rate_display,
            "tax_total": format_currency(self.tax_total),
            "shipping": format_currency(self.shipping),
            "discount": format_currency(self.discount),
            "grand_total": format_currency(self.grand_total),
            "amount_in_words": self.amount_in_words,
        }


def _half_rate_percent(subtotal: Decimal, tax: Decimal) -> Decimal:
    # Each half as a percentage of the taxable value
    if subtotal == 0:
        return ZERO
    return round_display(tax / subtotal * 50)


def build_invoice(order: Order, company: CompanySettings) -> Invoice:
    """
    Assemble the invoice for an order.

    Raises InvoiceIntegrityError when the line amounts do not add up to the
    stored subtotal.
    """
    lines = []
    footer = ZERO
    quantity_total = 0
    for number, item in enumerate(order.items, start=1):
        rate = to_decimal(item.price)
        amount = rate * item.quantity
        footer += amount
        quantity_total += item.quantity
        lines.append(InvoiceLine(
            number=number,
            description=item.description(),
            sku=item.product.sku if item.product else None,
            quantity=item.quantity,
            rate=rate,
            amount=amount,
        ))

    subtotal = to_decimal(order.subtotal_amount)
    if footer != subtotal:
        current_app.logger.error(
            "Invoice integrity mismatch order=%s lines=%s subtotal=%s", order.id, footer, subtotal,
        )
        raise InvoiceIntegrityError(
            f"Order {order.id}: line amounts total {footer} but subtotal is {subtotal}"
        )

    tax = to_decimal(order.tax_amount)
    total = to_decimal(order.total_amount)
    customer = order.customer

    return Invoice(
        number=order.id[:8].upper(),
        reference=order.id,
        date=order.created_at.date(),
        company=company.to_dict(),
        bill_to={
            "name": customer.name if customer else None,
            "phone": customer.phone if customer else None,
            "email": customer.email if customer else None,
            "address_line1": order.delivery_address_line1,
            "address_line2": order.delivery_address_line2,
            "city": order.delivery_city,
            "state": order.delivery_state,
            "postal_code": order.delivery_postal_code,
            "country": order.delivery_country,
        },
        lines=lines,
        total_quantity=quantity_total,
        subtotal=subtotal,
        tax_half=tax / 2,
        tax_half_rate=_half_rate_percent(subtotal, tax),
        tax_total=tax,
        shipping=to_decimal(order.shipping_amount),
        discount=to_decimal(order.discount_amount),
        grand_total=total,
        amount_in_words=number_to_words(total),
    )


def render_invoice_html(invoice: Invoice) -> str:
    return render_template("invoice.html", invoice=invoice, money=format_currency)


def invoice_for_order(order_id: str) -> Invoice:
    order = db.session.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found")
    return build_invoice(order, load_company_settings())
