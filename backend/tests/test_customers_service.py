# Overview: Pytest coverage for customer records.

from datetime import date

import pytest

from storedesk.models import AdminAction
from storedesk.services import customers_service
from storedesk.validation import ConflictError, NotFoundError, ValidationError


class TestCustomers:
    """CRUD with unique email and activity records."""

    def test_create_and_get(self, db_session):
        created = customers_service.create_customer(patch={
            "name": "Grace Hopper",
            "email": "Grace@Example.com",
            "date_of_birth": date(1906, 12, 9),
        })
        assert created["email"] == "grace@example.com"
        assert created["date_of_birth"] == "1906-12-09"

        fetched = customers_service.get_customer(created["id"])
        assert fetched["name"] == "Grace Hopper"
        assert fetched["orders"] == []

        action = db_session.query(AdminAction).filter_by(entity_id=created["id"]).one()
        assert action.description == "Created new customers - Grace Hopper"

    def test_email_must_be_unique(self, db_session, customer):
        with pytest.raises(ConflictError):
            customers_service.create_customer(patch={"name": "Imposter", "email": "ADA@example.com"})

    def test_update_email_conflict(self, db_session, customer):
        other = customers_service.create_customer(patch={"name": "Alan", "email": "alan@example.com"})
        with pytest.raises(ConflictError):
            customers_service.update_customer(customer_id=other["id"], patch={"email": customer.email})

    def test_update_records_action(self, db_session, customer):
        updated = customers_service.update_customer(customer_id=customer.id, patch={"phone": "555-0199"})
        assert updated["phone"] == "555-0199"
        assert db_session.query(AdminAction).filter_by(
            entity_id=customer.id, action_type="update",
        ).count() == 1

    def test_required_fields(self, db_session):
        with pytest.raises(ValidationError):
            customers_service.create_customer(patch={"name": "No Email"})

    def test_history_newest_first(self, db_session, make_order, product, customer):
        make_order([{"product_id": product.id, "quantity": 1}])
        make_order([{"product_id": product.id, "quantity": 2}])

        orders = customers_service.get_customer(customer.id)["orders"]
        assert len(orders) == 2
        assert orders[0]["created_at"] >= orders[1]["created_at"]

    def test_search(self, db_session, customer):
        customers_service.create_customer(patch={"name": "Charles Babbage", "email": "cb@example.com"})
        result = customers_service.list_customers(search="ada")
        assert [c["name"] for c in result["items"]] == ["Ada Lovelace"]

    def test_delete(self, db_session, customer):
        customers_service.delete_customer(customer_id=customer.id)
        with pytest.raises(NotFoundError):
            customers_service.get_customer(customer.id)
        assert db_session.query(AdminAction).filter_by(action_type="delete").one().description == \
            "Deleted customers - Ada Lovelace"
