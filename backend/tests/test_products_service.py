# Overview: Pytest coverage for the product catalog service.

from decimal import Decimal

import pytest

from storedesk.extensions import db
from storedesk.models import AdminAction, Product, ProductVariant
from storedesk.services import products_service
from storedesk.validation import ConflictError, NotFoundError, ValidationError


class TestCreateProduct:
    """Every product starts with exactly one default variant."""

    def test_default_variant_seeded_from_stock_fields(self, db_session):
        created = products_service.create_product(
            patch={"name": "Lamp", "sku": "LAMP-1", "price": Decimal("45.00"), "initial_stock": 12, "minimum_stock": 3},
        )

        assert len(created["variants"]) == 1
        variant = created["variants"][0]
        assert variant["is_default"] is True
        assert variant["quantity"] == 12
        assert variant["minimum_quantity"] == 3
        assert variant["size"] is None and variant["color"] is None
        assert created["total_quantity"] == 12

    def test_stock_defaults(self, db_session):
        created = products_service.create_product(patch={"name": "Mug", "sku": "MUG-1", "price": Decimal("5")})
        assert created["initial_stock"] == 0
        assert created["minimum_stock"] == 5
        assert created["variants"][0]["quantity"] == 0

    def test_explicit_variants(self, db_session, shirt):
        assert [v.variant_name for v in shirt.variants] == ["Medium Blue", "Large Blue", "Small Red"]
        assert [v.is_default for v in shirt.variants] == [True, False, False]
        assert shirt.variants[0].effective_price == Decimal("20.00")
        assert shirt.variants[1].effective_price == Decimal("22.50")

    @pytest.mark.parametrize("flags", [(False, False), (True, True)])
    def test_explicit_variants_need_exactly_one_default(self, db_session, flags):
        variants = [{"variant_name": f"V{i}", "is_default": f} for i, f in enumerate(flags)]
        with pytest.raises(ValidationError):
            products_service.create_product(
                patch={"name": "Bad", "sku": "BAD-1", "price": Decimal("1")}, variants=variants,
            )
        assert db_session.query(Product).count() == 0

    def test_duplicate_sku_conflict(self, db_session, product):
        with pytest.raises(ConflictError):
            products_service.create_product(patch={"name": "Other", "sku": product.sku, "price": Decimal("1")})

    def test_price_rules(self, db_session):
        with pytest.raises(ValidationError):
            products_service.create_product(patch={"name": "Neg", "sku": "N-1", "price": Decimal("-1")})
        with pytest.raises(ValidationError):
            products_service.create_product(patch={"name": "Frac", "sku": "F-1", "price": Decimal("1.005")})

    def test_unknown_category_rejected(self, db_session):
        with pytest.raises(ValidationError):
            products_service.create_product(
                patch={"name": "X", "sku": "X-1", "price": Decimal("1"), "category_id": "nope"},
            )

    def test_records_insert_action(self, db_session, product):
        action = db_session.query(AdminAction).filter_by(entity_id=product.id).one()
        assert action.action_type == "insert"
        assert action.description == "Created new products - Widget"


class TestUpdateProduct:
    """Field patches and variant upserts."""

    def test_patch_fields_and_audit(self, db_session, product):
        updated = products_service.update_product(product_id=product.id, patch={"name": "Gadget"})
        assert updated["name"] == "Gadget"

        actions = db_session.query(AdminAction).filter_by(entity_id=product.id, action_type="update").all()
        assert len(actions) == 1
        assert actions[0].description == "Updated products - Gadget"

    def test_sku_change_rechecks_uniqueness(self, db_session, make_product):
        a = make_product(name="A", sku="A-1")
        make_product(name="B", sku="B-1")
        with pytest.raises(ConflictError):
            products_service.update_product(product_id=a.id, patch={"sku": "B-1"})

    def test_keeping_own_sku_is_fine(self, db_session, product):
        products_service.update_product(product_id=product.id, patch={"sku": product.sku})

    def test_upsert_variants_and_move_default(self, db_session, shirt):
        large = shirt.variants[1]
        updated = products_service.update_product(
            product_id=shirt.id,
            patch={},
            variants=[
                {"id": large.id, "is_default": True, "quantity": 9},
                {"id": shirt.variants[0].id, "is_default": False},
                {"size": "XS", "color": "Blue", "variant_name": "Tiny Blue", "quantity": 1},
            ],
        )
        defaults = [v for v in updated["variants"] if v["is_default"]]
        assert [v["id"] for v in defaults] == [large.id]
        assert len(updated["variants"]) == 4
        assert updated["variants"][-1]["variant_name"] == "Tiny Blue"
        assert next(v for v in updated["variants"] if v["id"] == large.id)["quantity"] == 9

    def test_update_cannot_leave_two_defaults(self, db_session, shirt):
        with pytest.raises(ValidationError):
            products_service.update_product(
                product_id=shirt.id, patch={}, variants=[{"id": shirt.variants[1].id, "is_default": True}],
            )

    def test_foreign_variant_rejected(self, db_session, shirt, product):
        with pytest.raises(ValidationError):
            products_service.update_product(
                product_id=shirt.id, patch={}, variants=[{"id": product.variants[0].id, "quantity": 1}],
            )

    def test_missing_product(self, db_session):
        with pytest.raises(NotFoundError):
            products_service.update_product(product_id="missing", patch={"name": "x"})


class TestDefaultVariant:
    """Moving the default flag keeps exactly one default."""

    def test_set_default_variant(self, db_session, shirt):
        target = shirt.variants[2]
        result = products_service.set_default_variant(product_id=shirt.id, variant_id=target.id)
        assert [v["id"] for v in result["variants"] if v["is_default"]] == [target.id]

    def test_set_default_to_foreign_variant(self, db_session, shirt, product):
        with pytest.raises(ValidationError):
            products_service.set_default_variant(product_id=shirt.id, variant_id=product.variants[0].id)

    def test_suggestion(self, db_session, shirt):
        result = products_service.default_variant_suggestion(shirt.id)
        assert result["variant"]["variant_name"] == "Medium Blue"
        assert [v["variant_name"] for v in result["selectable"]] == ["Medium Blue", "Large Blue"]


class TestDeleteProduct:
    """Hard delete with cascade to variants."""

    def test_delete_cascades_to_variants(self, db_session, shirt):
        shirt_id = shirt.id
        products_service.delete_product(product_id=shirt_id)

        assert db.session.get(Product, shirt_id) is None
        assert db_session.query(ProductVariant).filter_by(product_id=shirt_id).count() == 0
        action = db_session.query(AdminAction).filter_by(entity_id=shirt_id, action_type="delete").one()
        assert action.description == "Deleted products - T-Shirt"

    def test_product_on_order_cannot_be_deleted(self, db_session, product, make_order):
        make_order([{"product_id": product.id, "quantity": 1}])
        with pytest.raises(ConflictError):
            products_service.delete_product(product_id=product.id)


class TestListProducts:
    """Search and pagination."""

    def test_search_by_name_or_sku(self, db_session, make_product):
        make_product(name="Red Chair", sku="CH-RED")
        make_product(name="Blue Table", sku="TB-BLUE")
        make_product(name="Lamp", sku="LMP-CHAIRSIDE")

        result = products_service.list_products(search="chair")
        assert sorted(p["name"] for p in result["items"]) == ["Lamp", "Red Chair"]

    def test_like_wildcards_are_literal(self, db_session, make_product):
        make_product(name="100% Cotton", sku="COT-1")
        make_product(name="Wool", sku="WOOL-1")
        result = products_service.list_products(search="%")
        assert [p["name"] for p in result["items"]] == ["100% Cotton"]

    def test_pagination(self, db_session, make_product):
        for i in range(12):
            make_product(name=f"Item {i:02d}")
        page2 = products_service.list_products(page=2, per_page=5)
        assert page2["count"] == 5
        assert page2["pagination"] == {
            "page": 2, "per_page": 5, "total": 12, "total_pages": 3, "has_next": True, "has_prev": True,
        }
        assert page2["items"][0]["name"] == "Item 05"
