# Overview: Flask CLI command groups for bootstrap, stock intake, and invoice export.

# backend/storedesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create tables (if missing) and the company settings row.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Company profile:
# - python -m flask company show
# - python -m flask company set --name "Acme Traders" --tax-id "29ABCDE1234F1Z5"
#
# Inventory:
# - python -m flask inventory receive --sku TSHIRT-01 --quantity 25 --size M --color Blue
#   Add received units to the matching variant (or open a new one).
# - python -m flask inventory low-stock
#   List variants below their minimum quantity.
#
# Orders:
# - python -m flask orders invoice <order-id> --out invoice.html
#   Render the printable invoice for an order.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Product
from .services import inventory_service
from .services.invoice_service import InvoiceIntegrityError, invoice_for_order, render_invoice_html
from .services.settings_service import get_company_settings, update_company_settings
from .validation import NotFoundError, ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create missing tables and make sure the company profile exists."""
    click.echo("START Initializing StoreDesk...")
    db.create_all()
    settings = get_company_settings()
    click.echo(f"PASS Schema ready; company profile: {settings['name']}")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('company')
def company_group():
    """Company profile printed on invoices."""


@company_group.command('show')
@with_appcontext
def show_company():
    settings = get_company_settings()
    for key, value in settings.items():
        click.echo(f"{key:<15} {value if value is not None else '-'}")


@company_group.command('set')
@click.option('--name', help='Company name')
@click.option('--address-line1')
@click.option('--address-line2')
@click.option('--city')
@click.option('--state')
@click.option('--postal-code')
@click.option('--country')
@click.option('--phone')
@click.option('--email')
@click.option('--website')
@click.option('--tax-id')
@with_appcontext
def set_company(**options):
    """Update only the fields that were given."""
    patch = {k: v for k, v in options.items() if v is not None}
    if not patch:
        raise click.UsageError("Nothing to update; pass at least one option.")
    try:
        settings = update_company_settings(patch)
    except ValidationError as e:
        raise click.ClickException(str(e))
    click.echo(f"PASS Company profile updated: {settings['name']}")


@click.group('inventory')
def inventory_group():
    """Stock intake and alerts."""


@inventory_group.command('receive')
@click.option('--sku', required=True, help='Product SKU')
@click.option('--quantity', type=int, required=True, help='Units received (> 0)')
@click.option('--size', help='Variant size')
@click.option('--color', help='Variant color')
@with_appcontext
def receive_cli(sku, quantity, size, color):
    product = db.session.query(Product).filter(Product.sku == sku).first()
    if product is None:
        raise click.ClickException(f"No product with SKU {sku}")
    try:
        result = inventory_service.receive_stock(
            product_id=product.id, quantity=quantity, size=size, color=color,
        )
    except (ValidationError, NotFoundError) as e:
        raise click.ClickException(str(e))

    verb = "Created variant" if result["created"] else "Updated variant"
    click.echo(f"PASS {verb} {result['display_name'] or '(default)'}: on hand {result['quantity']}")


@inventory_group.command('low-stock')
@click.option('--limit', type=int, default=50, show_default=True)
@with_appcontext
def low_stock_cli(limit):
    rows = inventory_service.low_stock_variants(limit=limit)
    if not rows:
        click.echo("No variants below their minimum quantity.")
        return

    click.echo(f"{'Product':<40} {'Variant':<25} {'Qty':>6} {'Min':>6}")
    click.echo("-" * 80)
    for row in rows:
        click.echo(
            f"{row['name'][:40]:<40} {(row['variant'] or '-')[:25]:<25} "
            f"{row['quantity']:>6} {row['minimum_quantity']:>6}"
        )


@click.group('orders')
def orders_group():
    """Order documents."""


@orders_group.command('invoice')
@click.argument('order_id')
@click.option('--out', type=click.Path(dir_okay=False, writable=True), help='Write HTML to this file')
@with_appcontext
def invoice_cli(order_id, out):
    try:
        invoice = invoice_for_order(order_id)
    except (NotFoundError, InvoiceIntegrityError) as e:
        raise click.ClickException(str(e))

    html = render_invoice_html(invoice)
    if out:
        with open(out, "w", encoding="utf-8") as fh:
            fh.write(html)
        click.echo(f"PASS Invoice {invoice.number} written to {out}")
    else:
        click.echo(html)


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(company_group)
    app.cli.add_command(inventory_group)
    app.cli.add_command(orders_group)
