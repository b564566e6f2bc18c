"""Application tests for product and category management."""

import pytest
from protean.utils.globals import current_domain

from storefront.catalogue import queries
from storefront.catalogue.category.management import CreateCategory, DeleteCategory, UpdateCategory, load_category
from storefront.catalogue.product.management import (
    AddVariant,
    ChangeProductStatus,
    CreateProduct,
    RemoveVariant,
    UpdateProduct,
    load_product,
)
from storefront.catalogue.projections.product_search import ProductSearchIndex
from storefront.shared.errors import Conflict, DomainError, Forbidden, NotFound


def _create(staff, sku="TEE-001", name="Classic Tee", price=150000.0, **extra):
    return current_domain.process(CreateProduct(sku=sku, name=name, price=price, **extra, **staff), asynchronous=False)


class TestCreateProduct:
    def test_create_product(self, staff):
        product_id = _create(staff)
        product = load_product(product_id)
        assert product.name == "Classic Tee"
        assert product.status == "draft"

    def test_search_index_row_is_projected(self, staff):
        product_id = _create(staff)
        row = current_domain.repository_for(ProductSearchIndex).get(product_id)
        assert row.name_lower == "classic tee"
        assert row.status == "draft"

    def test_duplicate_sku_conflicts(self, staff):
        _create(staff, sku="tee-001")
        with pytest.raises(Conflict):
            _create(staff, sku="TEE-001", name="Other")

    def test_sku_taken_by_variant_conflicts(self, staff):
        product_id = _create(staff)
        variant = AddVariant(product_id=product_id, sku="TEE-001-M", price=1.0, **staff)
        current_domain.process(variant, asynchronous=False)
        with pytest.raises(Conflict):
            _create(staff, sku="TEE-001-M", name="Clash")

    def test_unknown_category(self, staff):
        with pytest.raises(NotFound):
            _create(staff, category_id="missing")

    def test_customer_cannot_create(self):
        with pytest.raises(Forbidden):
            current_domain.process(
                CreateProduct(sku="TEE-001", name="Tee", price=1.0, actor_id="user-1", actor_role="customer"),
                asynchronous=False,
            )


class TestUpdateProduct:
    def test_update_name_and_price(self, staff):
        product_id = _create(staff)
        current_domain.process(
            UpdateProduct(product_id=product_id, name="Premium Tee", price=200000.0, **staff),
            asynchronous=False,
        )
        product = load_product(product_id)
        assert product.name == "Premium Tee"
        assert product.price == 200000.0

        row = current_domain.repository_for(ProductSearchIndex).get(product_id)
        assert row.price == 200000.0
        assert row.name == "Premium Tee"

    def test_status_actions(self, staff):
        product_id = _create(staff)
        status = current_domain.process(
            ChangeProductStatus(product_id=product_id, action="activate", **staff),
            asynchronous=False,
        )
        assert status == "active"
        assert current_domain.repository_for(ProductSearchIndex).get(product_id).status == "active"

    def test_unknown_action(self, staff):
        product_id = _create(staff)
        with pytest.raises(DomainError):
            current_domain.process(
                ChangeProductStatus(product_id=product_id, action="explode", **staff),
                asynchronous=False,
            )

    def test_variant_add_and_remove(self, staff):
        product_id = _create(staff)
        variant_id = current_domain.process(
            AddVariant(product_id=product_id, sku="TEE-001-L", price=160000.0, **staff),
            asynchronous=False,
        )
        assert current_domain.repository_for(ProductSearchIndex).get(product_id).variant_count == 1

        current_domain.process(RemoveVariant(product_id=product_id, variant_id=variant_id, **staff), asynchronous=False)
        assert load_product(product_id).variants == []

    def test_lookup_by_sku_is_case_insensitive(self, staff):
        product_id = _create(staff)
        assert str(queries.get_product_by_sku("tee-001").id) == product_id


class TestCategories:
    def test_create_and_update(self, staff):
        category_id = current_domain.process(CreateCategory(name="Shirts", **staff), asynchronous=False)
        current_domain.process(UpdateCategory(category_id=category_id, display_order=3, **staff), asynchronous=False)

        category = load_category(category_id)
        assert category.slug == "shirts"
        assert category.display_order == 3

    def test_duplicate_name_conflicts(self, staff):
        current_domain.process(CreateCategory(name="Shirts", **staff), asynchronous=False)
        with pytest.raises(Conflict):
            current_domain.process(CreateCategory(name="shirts", **staff), asynchronous=False)

    def test_delete_refused_while_products_remain(self, staff):
        category_id = current_domain.process(CreateCategory(name="Shirts", **staff), asynchronous=False)
        _create(staff, category_id=category_id)
        with pytest.raises(Conflict):
            current_domain.process(DeleteCategory(category_id=category_id, **staff), asynchronous=False)

    def test_delete_refused_while_children_remain(self, staff):
        parent = current_domain.process(CreateCategory(name="Clothing", **staff), asynchronous=False)
        current_domain.process(CreateCategory(name="Shirts", parent_id=parent, **staff), asynchronous=False)
        with pytest.raises(Conflict):
            current_domain.process(DeleteCategory(category_id=parent, **staff), asynchronous=False)

    def test_delete_empty_category(self, staff):
        category_id = current_domain.process(CreateCategory(name="Shirts", **staff), asynchronous=False)
        current_domain.process(DeleteCategory(category_id=category_id, **staff), asynchronous=False)
        with pytest.raises(NotFound):
            load_category(category_id)

    def test_categories_listed_by_display_order(self, staff):
        current_domain.process(CreateCategory(name="Second", display_order=2, **staff), asynchronous=False)
        current_domain.process(CreateCategory(name="First", display_order=1, **staff), asynchronous=False)
        assert [c.name for c in queries.list_categories()] == ["First", "Second"]
