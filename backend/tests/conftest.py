"""
Pytest fixtures for StoreDesk backend tests.

Provides an in-memory database, a test client, and small factories for the
catalog, customers and orders.
"""

from decimal import Decimal

import pytest
from storedesk import create_app
from storedesk.extensions import db
from storedesk.models import Category, Customer, Product
from storedesk.services import orders_service, products_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        db.session.expunge_all()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def category(db_session):
    """A top-level category."""
    c = Category(name="Apparel")
    db_session.add(c)
    db_session.commit()
    return c


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory: create a product through the service and return the model."""
    counter = {"n": 0}

    def _make(name="Widget", price="10.00", variants=None, **fields):
        counter["n"] += 1
        patch = {
            "name": name,
            "sku": fields.pop("sku", f"SKU-{counter['n']:03d}"),
            "price": Decimal(price),
            **fields,
        }
        created = products_service.create_product(patch=patch, variants=variants)
        return db_session.get(Product, created["id"])

    return _make


@pytest.fixture(scope='function')
def product(make_product):
    """Plain product with a single default variant holding 20 units."""
    return make_product(name="Widget", price="10.00", initial_stock=20, minimum_stock=5)


@pytest.fixture(scope='function')
def shirt(make_product):
    """Product with named size/color variants."""
    return make_product(
        name="T-Shirt",
        price="20.00",
        variants=[
            {"size": "M", "color": "Blue", "variant_name": "Medium Blue", "quantity": 10, "is_default": True},
            {"size": "L", "color": "Blue", "variant_name": "Large Blue", "quantity": 4,
             "price": Decimal("22.50")},
            {"size": "S", "color": "Red", "variant_name": "Small Red", "quantity": 0},
        ],
    )


@pytest.fixture(scope='function')
def customer(db_session):
    c = Customer(
        name="Ada Lovelace",
        email="ada@example.com",
        phone="555-0100",
        address_line1="12 Analytical Row",
        city="London",
        state="Greater London",
        postal_code="NW1 6XE",
        country="UK",
    )
    db_session.add(c)
    db_session.commit()
    return c


@pytest.fixture(scope='function')
def make_order(customer):
    """Factory: place an order for the default customer and return its dict."""

    def _make(items, **charges):
        return orders_service.create_order(customer_id=customer.id, items=items, **charges)

    return _make

