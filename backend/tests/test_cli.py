# Overview: Pytest coverage for the operator CLI commands.

from decimal import Decimal

from storedesk.extensions import db
from storedesk.models import Order, ProductVariant


class TestInventoryCommands:
    def test_receive_by_sku(self, app, db_session, shirt):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "inventory", "receive", "--sku", shirt.sku, "--quantity", "3", "--size", "S", "--color", "Red",
        ])
        assert result.exit_code == 0, result.output
        assert "Updated variant" in result.output

        db_session.expire_all()
        small_red = db_session.query(ProductVariant).filter_by(product_id=shirt.id, size="S").one()
        assert small_red.quantity == 3

    def test_receive_unknown_sku(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["inventory", "receive", "--sku", "NOPE", "--quantity", "1"])
        assert result.exit_code != 0
        assert "No product with SKU NOPE" in result.output

    def test_receive_rejects_zero(self, app, db_session, product):
        result = app.test_cli_runner().invoke(args=["inventory", "receive", "--sku", product.sku, "--quantity", "0"])
        assert result.exit_code != 0

    def test_low_stock(self, app, db_session, shirt):
        result = app.test_cli_runner().invoke(args=["inventory", "low-stock"])
        assert result.exit_code == 0
        assert "Small Red" in result.output


class TestCompanyCommands:
    def test_set_and_show(self, app, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["company", "set", "--name", "Acme Traders", "--tax-id", "TX-9"])
        assert result.exit_code == 0, result.output

        shown = runner.invoke(args=["company", "show"])
        assert "Acme Traders" in shown.output
        assert "TX-9" in shown.output

    def test_set_requires_an_option(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["company", "set"])
        assert result.exit_code != 0


class TestOrderCommands:
    def test_invoice_to_file(self, app, db_session, make_order, product, tmp_path):
        order = make_order([{"product_id": product.id, "quantity": 1}])
        out = tmp_path / "invoice.html"

        result = app.test_cli_runner().invoke(args=["orders", "invoice", order["id"], "--out", str(out)])
        assert result.exit_code == 0, result.output
        assert "Tax Invoice" in out.read_text(encoding="utf-8")

    def test_invoice_unknown_order(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["orders", "invoice", "missing"])
        assert result.exit_code != 0

    def test_invoice_with_inconsistent_amounts(self, app, db_session, make_order, product):
        order = make_order([{"product_id": product.id, "quantity": 1}])
        db.session.get(Order, order["id"]).subtotal_amount = Decimal("9.99")
        db_session.commit()

        result = app.test_cli_runner().invoke(args=["orders", "invoice", order["id"]])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "line amounts total" in result.output
