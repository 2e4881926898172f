# Overview: Service-layer operations for categories; encapsulates business logic and database work.

from __future__ import annotations

from ..extensions import db
from ..models import Category, Product
from ..validation import ConflictError, NotFoundError, ValidationError
from .audit_service import record_action
from .pagination import apply_search, paginate

CATEGORY_MUTABLE_FIELDS = {"name", "parent_id", "icon_url"}


def _get_or_404(category_id: str) -> Category:
    category = db.session.get(Category, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


def _check_parent(category_id: str | None, parent_id: str | None) -> None:
    """The parent must exist and must not be the category or one of its descendants."""
    if parent_id is None:
        return
    parent = db.session.get(Category, parent_id)
    if parent is None:
        raise ValidationError("parent_id does not reference an existing category")

    seen = set()
    node = parent
    while node is not None:
        if category_id is not None and node.id == category_id:
            raise ValidationError("A category cannot be nested under itself")
        if node.id in seen:
            break
        seen.add(node.id)
        node = node.parent


def list_categories(search: str | None = None, page: int | None = None, per_page: int | None = None) -> dict:
    query = db.session.query(Category).order_by(Category.name.asc(), Category.id.asc())
    query = apply_search(query, search, Category.name)
    return paginate(query, page=page, per_page=per_page, serialize=lambda c: c.to_dict())


def get_category(category_id: str) -> dict:
    return _get_or_404(category_id).to_dict()


def create_category(*, patch: dict) -> dict:
    _check_parent(None, patch.get("parent_id"))

    category = Category()
    for k, v in patch.items():
        if k in CATEGORY_MUTABLE_FIELDS:
            setattr(category, k, v)

    db.session.add(category)
    db.session.flush()

    record_action(action_type="insert", entity_type="categories", entity_id=category.id, entity_name=category.name)
    db.session.commit()
    return category.to_dict()


def update_category(*, category_id: str, patch: dict) -> dict:
    category = _get_or_404(category_id)
    if "parent_id" in patch:
        _check_parent(category.id, patch["parent_id"])

    for k, v in patch.items():
        if k in CATEGORY_MUTABLE_FIELDS:
            setattr(category, k, v)

    record_action(action_type="update", entity_type="categories", entity_id=category.id, entity_name=category.name)
    db.session.commit()
    return category.to_dict()


def delete_category(*, category_id: str) -> None:
    category = _get_or_404(category_id)

    if db.session.query(Category.id).filter(Category.parent_id == category.id).first():
        raise ConflictError("Category has sub-categories; move or delete them first.")
    if db.session.query(Product.id).filter(Product.category_id == category.id).first():
        raise ConflictError("Category is assigned to products; reassign them first.")

    record_action(action_type="delete", entity_type="categories", entity_id=category.id, entity_name=category.name)
    db.session.delete(category)
    db.session.commit()
