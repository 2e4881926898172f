# Overview: Flask API routes for categories; parses input and returns JSON responses.

from flask import Blueprint, request

from ..models import Category
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_category,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from ..decorators import with_actor
from ..services import category_service

CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields={"name", "parent_id", "icon_url"},
    required_on_create={"name"},
)

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


@categories_bp.get("")
def list_categories():
    """
    Query params:
    - search: str (optional) - case-insensitive name match
    - page: int (optional) - 1-indexed; omitted returns every category
    - per_page: int (optional)
    """
    return category_service.list_categories(
        search=request.args.get("search"),
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    )


@categories_bp.get("/<category_id>")
def get_category(category_id: str):
    try:
        return category_service.get_category(category_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404


@categories_bp.post("")
@with_actor
def create_category():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=False)
        enforce_rules_category(patch)
        created = category_service.create_category(patch=patch)
    except ValidationError as e:
        return {"error": str(e)}, 400
    return created, 201


@categories_bp.put("/<category_id>")
@with_actor
def update_category(category_id: str):
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=True)
        enforce_rules_category(patch)
        return category_service.update_category(category_id=category_id, patch=patch)
    except ValidationError as e:
        return {"error": str(e)}, 400
    except NotFoundError as e:
        return {"error": str(e)}, 404


@categories_bp.delete("/<category_id>")
@with_actor
def delete_category(category_id: str):
    try:
        category_service.delete_category(category_id=category_id)
    except NotFoundError as e:
        return {"error": str(e)}, 404
    except ConflictError as e:
        return {"error": str(e)}, 409
    return {"ok": True}, 200
