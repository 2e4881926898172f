# Overview: Flask API routes for customers; parses input and returns JSON responses.

from flask import Blueprint, request

from ..models import Customer
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from ..decorators import with_actor
from ..services import customers_service

CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "email", "phone",
        "address_line1", "address_line2", "city", "state", "postal_code", "country",
        "company_name", "tax_id", "date_of_birth", "gender", "notes",
    },
    required_on_create={"name", "email"},
)

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
def list_customers():
    return customers_service.list_customers(
        search=request.args.get("search"),
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    )


@customers_bp.get("/<customer_id>")
def get_customer(customer_id: str):
    try:
        return customers_service.get_customer(customer_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@customers_bp.post("")
@with_actor
def create_customer():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=False)
        created = customers_service.create_customer(patch=patch)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except ConflictError as e:
        return {"error": str(e)}, 409
    return created, 201


@customers_bp.put("/<customer_id>")
@with_actor
def update_customer(customer_id: str):
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=True)
        return customers_service.update_customer(customer_id=customer_id, patch=patch)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except ConflictError as e:
        return {"error": str(e)}, 409


@customers_bp.delete("/<customer_id>")
@with_actor
def delete_customer(customer_id: str):
    """Deletes the customer and, by cascade, all of their orders."""
    try:
        customers_service.delete_customer(customer_id=customer_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    return {"ok": True}, 200
