# Overview: Decimal helpers for monetary amounts.

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value) -> Decimal:
    """Convert a stored or computed amount to Decimal (None -> 0)."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # go through repr so 0.1 stays 0.1
        return Decimal(repr(value))
    return Decimal(value)


def amount_str(value) -> Optional[str]:
    """
    Serialize an amount for JSON without losing precision.

    Values with at most two decimals render with exactly two ("37.50");
    anything more precise keeps its significant digits ("2.749725").
    """
    if value is None:
        return None
    d = to_decimal(value)
    cents = d.quantize(CENT, rounding=ROUND_HALF_UP)
    if cents == d:
        return str(cents)
    return format(d.normalize(), "f")


def round_display(value) -> Decimal:
    """Two-decimal half-up rounding, for presentation only."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(value, symbol: str = "$") -> str:
    d = round_display(value)
    sign = "-" if d < 0 else ""
    return f"{sign}{symbol}{abs(d):,.2f}"
