# Overview: Order-line variant resolution and default-variant suggestion.

"""
Variant resolution for order lines.

A product "has selectable variants" when at least one of its variants has a
display name and stock on hand. For such products the caller must pick a
variant explicitly and that variant's price governs the line. Other
products are sold at their own base price.

Stock levels here are advisory: a line may still reference a variant that
is out of stock.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..extensions import db
from ..models import Product, ProductVariant
from ..validation import ValidationError


@dataclass(frozen=True)
class ResolvedLine:
    unit_price: Decimal
    variant: ProductVariant | None


def is_selectable(variant: ProductVariant) -> bool:
    return bool((variant.variant_name or "").strip()) and variant.quantity > 0


def selectable_variants(product: Product) -> list[ProductVariant]:
    return [v for v in product.variants if is_selectable(v)]


def suggest_default_variant(product: Product) -> ProductVariant | None:
    """
    Initial variant suggestion for a new order line.

    The default variant when it is selectable, otherwise the first
    selectable variant, otherwise None (the operator picks manually).
    """
    candidates = selectable_variants(product)
    if not candidates:
        return None
    for v in candidates:
        if v.is_default:
            return v
    return candidates[0]


def resolve_line(product: Product, variant_id: str | None = None) -> ResolvedLine:
    """
    Effective unit price and stock target for one order line.

    Raises ValidationError when a product with selectable variants is given
    no variant, or when the variant belongs to another product.
    """
    variant = None
    if variant_id is not None:
        variant = db.session.get(ProductVariant, variant_id)
        if variant is None or variant.product_id != product.id:
            raise ValidationError(f"Variant {variant_id} does not belong to product {product.sku}")

    if variant is None:
        if selectable_variants(product):
            raise ValidationError(f"Product {product.sku} has variants; choose one for this line")
        return ResolvedLine(unit_price=product.price, variant=None)

    return ResolvedLine(unit_price=variant.effective_price, variant=variant)
