# Overview: Service-layer operations for customers; encapsulates business logic and database work.

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Customer
from ..validation import ConflictError, NotFoundError, ValidationError
from .audit_service import record_action
from .pagination import apply_search, paginate

CUSTOMER_MUTABLE_FIELDS = {
    "name", "email", "phone",
    "address_line1", "address_line2", "city", "state", "postal_code", "country",
    "company_name", "tax_id", "date_of_birth", "gender", "notes",
}


def _get_or_404(customer_id: str) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError("Customer not found")
    return customer


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def email_exists(email: str, exclude_id: str | None = None) -> bool:
    query = db.session.query(Customer.id).filter(db.func.lower(Customer.email) == _normalize_email(email))
    if exclude_id is not None:
        query = query.filter(Customer.id != exclude_id)
    return query.first() is not None


def _apply_patch(customer: Customer, patch: dict) -> None:
    for k, v in patch.items():
        if k in CUSTOMER_MUTABLE_FIELDS:
            setattr(customer, k, v)


def list_customers(search: str | None = None, page: int | None = None, per_page: int | None = None) -> dict:
    query = db.session.query(Customer).order_by(Customer.name.asc(), Customer.id.asc())
    query = apply_search(query, search, Customer.name, Customer.email)
    return paginate(query, page=page, per_page=per_page, serialize=lambda c: c.to_dict())


def get_customer(customer_id: str) -> dict:
    """Customer profile plus order history, newest order first."""
    customer = _get_or_404(customer_id)
    data = customer.to_dict()
    data["orders"] = [o.to_dict() for o in customer.orders]
    return data


def create_customer(*, patch: dict) -> dict:
    for field in ("name", "email"):
        if not patch.get(field):
            raise ValidationError(f"{field} is required")
    patch["email"] = _normalize_email(patch["email"])
    if email_exists(patch["email"]):
        raise ConflictError("A customer with this email already exists")

    customer = Customer()
    _apply_patch(customer, patch)
    db.session.add(customer)
    db.session.flush()

    record_action(action_type="insert", entity_type="customers", entity_id=customer.id, entity_name=customer.name)
    db.session.commit()
    return customer.to_dict()


def update_customer(*, customer_id: str, patch: dict) -> dict:
    customer = _get_or_404(customer_id)
    if patch.get("email") is not None:
        patch["email"] = _normalize_email(patch["email"])
        if email_exists(patch["email"], exclude_id=customer.id):
            raise ConflictError("A customer with this email already exists")

    _apply_patch(customer, patch)
    record_action(action_type="update", entity_type="customers", entity_id=customer.id, entity_name=customer.name)
    db.session.commit()
    return customer.to_dict()


def delete_customer(*, customer_id: str) -> None:
    """Deletes the customer together with all of their orders."""
    customer = _get_or_404(customer_id)
    order_count = len(customer.orders)

    record_action(action_type="delete", entity_type="customers", entity_id=customer.id, entity_name=customer.name)
    db.session.delete(customer)
    db.session.commit()
    current_app.logger.info("Customer deleted id=%s orders_removed=%d", customer_id, order_count)
