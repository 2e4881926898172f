# Overview: Pytest coverage for invoice building, rendering, and amount-in-words.

from decimal import Decimal

import pytest

from storedesk.extensions import db
from storedesk.models import Order
from storedesk.services.invoice_service import (
    InvoiceIntegrityError,
    build_invoice,
    invoice_for_order,
    number_to_words,
    render_invoice_html,
)
from storedesk.services.settings_service import load_company_settings, update_company_settings
from storedesk.validation import NotFoundError


class TestNumberToWords:
    """Integer part only, short-scale English, "Only" suffix except for zero."""

    @pytest.mark.parametrize("value, words", [
        (0, "Zero"),
        (1, "One Only"),
        (7, "Seven Only"),
        (10, "Ten Only"),
        (13, "Thirteen Only"),
        (19, "Nineteen Only"),
        (20, "Twenty Only"),
        (21, "Twenty One Only"),
        (99, "Ninety Nine Only"),
        (100, "One Hundred Only"),
        (110, "One Hundred Ten Only"),
        (1000, "One Thousand Only"),
        (1234, "One Thousand Two Hundred Thirty Four Only"),
        (20015, "Twenty Thousand Fifteen Only"),
        (1000000, "One Million Only"),
        (1002003, "One Million Two Thousand Three Only"),
        (999999999, "Nine Hundred Ninety Nine Million Nine Hundred Ninety Nine Thousand "
                    "Nine Hundred Ninety Nine Only"),
    ])
    def test_words(self, value, words):
        assert number_to_words(value) == words

    def test_cents_are_dropped(self):
        assert number_to_words(Decimal("1234.99")) == "One Thousand Two Hundred Thirty Four Only"
        assert number_to_words(Decimal("0.75")) == "Zero"

    def test_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            number_to_words(-1)
        with pytest.raises(ValueError):
            number_to_words(1_000_000_000)

    def test_round_million(self):
        assert number_to_words(Decimal("1000000.50")) == "One Million Only"


class TestBuildInvoice:
    """Invoice document built from an order plus the company profile."""

    def _order(self, make_order, product, shirt):
        medium = shirt.variants[0]
        created = make_order([
            {"product_id": product.id, "quantity": 3},
            {"product_id": shirt.id, "variant_id": medium.id, "quantity": 2},
        ])
        return db.session.get(Order, created["id"])

    def test_header_and_lines(self, db_session, make_order, product, shirt):
        order = self._order(make_order, product, shirt)
        invoice = build_invoice(order, load_company_settings())

        assert invoice.number == order.id[:8].upper()
        assert len(invoice.number) == 8
        assert invoice.date == order.created_at.date()
        assert invoice.date_display == order.created_at.strftime("%b %d, %Y")

        assert [l.description for l in invoice.lines] == ["Widget", "T-Shirt (Medium Blue)"]
        assert [l.amount for l in invoice.lines] == [Decimal("30.00"), Decimal("40.00")]
        assert invoice.total_quantity == 5
        assert invoice.subtotal == Decimal("70.00")

    def test_tax_split_and_total(self, db_session, make_order, product, shirt):
        order = self._order(make_order, product, shirt)
        invoice = build_invoice(order, load_company_settings())

        # default tax rate 10% and shipping 10
        assert invoice.tax_total == Decimal("7.00")
        assert invoice.tax_half == Decimal("3.50")
        assert invoice.tax_half * 2 == invoice.tax_total
        assert invoice.tax_half_rate_display == "5%"
        assert invoice.grand_total == Decimal("87.00")
        assert invoice.amount_in_words == "Eighty Seven Only"

    def test_bill_to_uses_delivery_snapshot(self, db_session, make_order, product, customer):
        created = make_order(
            [{"product_id": product.id, "quantity": 1}],
            delivery_address={"address_line1": "1 Dock Rd", "city": "Leeds", "postal_code": "LS1"},
        )
        customer.address_line1 = "Moved Away"
        db_session.commit()

        invoice = build_invoice(db.session.get(Order, created["id"]), load_company_settings())
        assert invoice.bill_to["name"] == "Ada Lovelace"
        assert invoice.bill_to["address_line1"] == "1 Dock Rd"
        assert invoice.bill_to["city"] == "Leeds"

    def test_subtotal_mismatch_is_integrity_error(self, db_session, make_order, product, shirt):
        order = self._order(make_order, product, shirt)
        order.subtotal_amount = Decimal("69.99")
        db_session.commit()

        with pytest.raises(InvoiceIntegrityError):
            build_invoice(order, load_company_settings())

    def test_invoice_for_missing_order(self, db_session):
        with pytest.raises(NotFoundError):
            invoice_for_order("00000000-0000-0000-0000-000000000000")

    def test_largest_accepted_total_is_spelled_out(self, db_session, make_order, make_product):
        pricey = make_product(name="Yacht", price="999999989.99")
        created = make_order([{"product_id": pricey.id, "quantity": 1}], tax_rate="0", shipping_amount="10")

        invoice = invoice_for_order(created["id"])
        assert invoice.grand_total == Decimal("999999999.99")
        assert invoice.amount_in_words == (
            "Nine Hundred Ninety Nine Million Nine Hundred Ninety Nine Thousand "
            "Nine Hundred Ninety Nine Only"
        )


class TestRenderInvoice:
    """Printable HTML rendering."""

    def test_html_contains_key_fields(self, app, db_session, make_order, product):
        update_company_settings({"name": "Acme Traders", "tax_id": "TAX-42"})
        created = make_order([{"product_id": product.id, "quantity": 100}], shipping_amount=0)

        invoice = invoice_for_order(created["id"])
        with app.test_request_context():
            html = render_invoice_html(invoice)

        assert invoice.number in html
        assert "Acme Traders" in html
        assert "TAX-42" in html
        assert "$1,000.00" in html
        assert "$1,100.00" in html
        assert "One Thousand One Hundred Only" in html
        assert "Ada Lovelace" in html

    def test_html_is_escaped(self, app, db_session, make_product, make_order):
        nasty = make_product(name="<script>alert(1)</script>", price="1.00")
        created = make_order([{"product_id": nasty.id, "quantity": 1}])

        with app.test_request_context():
            html = render_invoice_html(invoice_for_order(created["id"]))

        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;" in html
