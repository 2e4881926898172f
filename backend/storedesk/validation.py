from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Boolean, Date, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

from storedesk.time_utils import parse_iso_date, parse_iso_datetime


# Integer columns map to a signed 32-bit INTEGER in the schema
INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

# Maximum single amount: 999,999,999.99
MAX_AMOUNT = Decimal("999999999.99")

PRICE_PLACES = 2
TAX_RATE_PLACES = 4
MAX_TAX_RATE = Decimal("1")


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate SKU)."""


class NotFoundError(LookupError):
    """404-level missing entity."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def coerce_int(value: Any, field: str) -> int:
    """
    Strict integer parsing: rejects floats, scientific notation and values
    outside the signed 32-bit range (never truncates).
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            result = int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    elif isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    else:
        raise ValidationError(f"{field} must be an integer")

    if result < INT32_MIN or result > INT32_MAX:
        raise ValidationError(f"{field} is out of range ({INT32_MIN}..{INT32_MAX})")
    return result


def coerce_decimal(value: Any, field: str, *, max_places: int | None = None) -> Decimal:
    """Parse a JSON number or numeric string into an exact Decimal."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        # repr keeps the shortest round-tripping form: 0.1 -> "0.1"
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise ValidationError(f"{field} must be a number")
    else:
        raise ValidationError(f"{field} must be a number")

    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number")

    if max_places is not None and result.as_tuple().exponent < -max_places:
        raise ValidationError(f"{field} must have at most {max_places} decimal places")
    return result


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        return coerce_int(value, col.key)

    if isinstance(coltype, Numeric):
        return coerce_decimal(value, col.key)

    # Booleans
    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise ValidationError(f"{col.key} must be a boolean")

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            if dt is None:
                raise ValidationError(f"{col.key} must be an ISO-8601 datetime")
            return dt
        raise ValidationError(f"{col.key} must be a datetime")

    if isinstance(coltype, Date):
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return parse_iso_date(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be an ISO-8601 date (YYYY-MM-DD)")
        raise ValidationError(f"{col.key} must be a date")

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        # NULL handling
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)):
            if isinstance(val, str) and val == "":
                if not col.nullable:
                    raise ValidationError(f"{k} cannot be blank")
                val = None

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def _check_price(field: str, value: Decimal) -> None:
    if value < 0:
        raise ValidationError(f"{field} must be >= 0")
    if value > MAX_AMOUNT:
        raise ValidationError(f"{field} cannot exceed {MAX_AMOUNT}")
    if value.as_tuple().exponent < -PRICE_PLACES:
        raise ValidationError(f"{field} must have at most {PRICE_PLACES} decimal places")


def _check_non_negative_int(patch: dict, field: str) -> None:
    if field in patch and patch[field] is not None and patch[field] < 0:
        raise ValidationError(f"{field} must be >= 0")


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    if "price" in patch and patch["price"] is not None:
        _check_price("price", patch["price"])
    _check_non_negative_int(patch, "initial_stock")
    _check_non_negative_int(patch, "minimum_stock")


def enforce_rules_variant(patch: dict) -> None:
    if "price" in patch and patch["price"] is not None:
        _check_price("price", patch["price"])
    _check_non_negative_int(patch, "quantity")
    _check_non_negative_int(patch, "minimum_quantity")


def enforce_rules_category(patch: dict) -> None:
    if "name" in patch and not patch["name"]:
        raise ValidationError("name cannot be blank")


def validate_stock_receipt_quantity(value: Any) -> int:
    # RECEIVE requires a positive whole number of units
    quantity = coerce_int(value, "quantity")
    if quantity <= 0:
        raise ValidationError("quantity must be > 0 for a stock receipt")
    return quantity


def validate_stock_level(value: Any) -> int:
    quantity = coerce_int(value, "quantity")
    if quantity < 0:
        raise ValidationError("quantity must be >= 0")
    return quantity


def validate_line_quantity(value: Any) -> int:
    quantity = coerce_int(value, "quantity")
    if quantity <= 0:
        raise ValidationError("quantity must be > 0")
    return quantity


def validate_unit_price(value: Any, field: str = "price") -> Decimal:
    price = coerce_decimal(value, field)
    _check_price(field, price)
    return price


def validate_charges(tax_rate: Any, shipping_amount: Any, discount_amount: Any) -> tuple[Decimal, Decimal, Decimal]:
    """Order charge inputs: each must be a non-negative number; never clamped."""
    rate = coerce_decimal(tax_rate, "tax_rate", max_places=TAX_RATE_PLACES)
    if rate < 0:
        raise ValidationError("tax_rate must be >= 0")
    if rate > MAX_TAX_RATE:
        raise ValidationError("tax_rate must be a fraction between 0 and 1 (e.g. 0.10 for 10%)")

    shipping = coerce_decimal(shipping_amount, "shipping_amount")
    if shipping < 0:
        raise ValidationError("shipping_amount must be >= 0")
    _check_price("shipping_amount", shipping)

    discount = coerce_decimal(discount_amount, "discount_amount")
    if discount < 0:
        raise ValidationError("discount_amount must be >= 0")
    _check_price("discount_amount", discount)

    return rate, shipping, discount
