# Overview: Pytest coverage for order total computation.

from decimal import Decimal

import pytest

from storedesk.services.orders_service import compute_order_totals
from storedesk.validation import ValidationError

D = Decimal


class TestComputeOrderTotals:
    """subtotal = sum(price * qty); tax = subtotal * rate; total = subtotal + tax + shipping - discount."""

    def test_basic_order(self):
        totals = compute_order_totals(
            [(D("10.00"), 2), (D("5.50"), 1)], D("0.10"), D("10"), D("0"),
        )
        assert totals.subtotal == D("25.50")
        assert totals.tax == D("2.55")
        assert totals.shipping == D("10")
        assert totals.discount == D("0")
        assert totals.total == D("38.05")

    def test_no_intermediate_rounding(self):
        totals = compute_order_totals([(D("0.99"), 3)], D("0.0825"), D("0"), D("0"))
        assert totals.subtotal == D("2.97")
        assert totals.tax == D("0.245025")
        assert totals.total == D("3.215025")

    def test_discount_reduces_total(self):
        totals = compute_order_totals([(D("100"), 1)], D("0.05"), D("10"), D("15"))
        assert totals.total == D("100")

    def test_discount_equal_to_gross_gives_zero_total(self):
        totals = compute_order_totals([(D("20"), 1)], D("0"), D("5"), D("25"))
        assert totals.total == D("0")

    def test_discount_above_gross_rejected(self):
        with pytest.raises(ValidationError, match="cannot exceed"):
            compute_order_totals([(D("20"), 1)], D("0"), D("5"), D("25.01"))

    @pytest.mark.parametrize(
        "rate, shipping, discount",
        [(D("-0.1"), D("0"), D("0")), (D("0"), D("-1"), D("0")), (D("0"), D("0"), D("-1"))],
    )
    def test_negative_charges_rejected(self, rate, shipping, discount):
        with pytest.raises(ValidationError):
            compute_order_totals([(D("10"), 1)], rate, shipping, discount)

    def test_non_positive_quantity_rejected(self):
        with pytest.raises(ValidationError):
            compute_order_totals([(D("10"), 0)], D("0"), D("0"), D("0"))

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            compute_order_totals([(D("-1"), 1)], D("0"), D("0"), D("0"))

    def test_same_inputs_same_totals(self):
        lines = [(D("3.33"), 3), (D("1.01"), 7)]
        first = compute_order_totals(lines, D("0.18"), D("4.99"), D("1"))
        second = compute_order_totals(lines, D("0.18"), D("4.99"), D("1"))
        assert first == second

    def test_serialized_amounts(self):
        totals = compute_order_totals([(D("12.50"), 3)], D("0.10"), D("10"), D("0"))
        assert totals.to_dict() == {
            "subtotal_amount": "37.50",
            "tax_amount": "3.75",
            "shipping_amount": "10.00",
            "discount_amount": "0.00",
            "total_amount": "51.25",
        }

    def test_largest_total_is_accepted(self):
        totals = compute_order_totals([(D("999999989.99"), 1)], D("0"), D("10"), D("0"))
        assert totals.total == D("999999999.99")

    def test_total_past_amount_limit_rejected(self):
        # Subtotal is within limits; tax and shipping push the total over
        with pytest.raises(ValidationError, match="Order total cannot exceed"):
            compute_order_totals([(D("999999999.99"), 1)], D("0.10"), D("10"), D("0"))

    def test_discount_can_bring_total_back_under_limit(self):
        totals = compute_order_totals([(D("999999999.99"), 1)], D("0"), D("10"), D("10"))
        assert totals.total == D("999999999.99")
