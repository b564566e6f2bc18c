"""Tests for the Product aggregate."""

import pytest
from protean.exceptions import ValidationError

from storefront.catalogue.product.events import ProductCreated, ProductPriceChanged, ProductStatusChanged
from storefront.catalogue.product.product import Product, ProductStatus, slugify, validate_sku
from storefront.shared.errors import InvalidTransition


def _product(**overrides):
    defaults = {"sku": "tee-001", "name": "Classic Tee", "price": 150000.0}
    defaults.update(overrides)
    return Product.create(**defaults)


class TestSku:
    def test_sku_is_uppercased(self):
        assert validate_sku(" tee-001 ") == "TEE-001"

    @pytest.mark.parametrize("sku", ["ab", "-abc", "abc-", "ab--cd", "a b c", ""])
    def test_invalid_skus(self, sku):
        with pytest.raises(ValidationError):
            validate_sku(sku)


class TestSlug:
    def test_slugify(self):
        assert slugify("Áo Thun  Classic!") == "o-thun-classic"

    def test_empty_slug_falls_back(self):
        assert slugify("!!!") == "product"


class TestProductCreation:
    def test_defaults(self):
        product = _product()
        assert product.sku == "TEE-001"
        assert product.slug == "classic-tee"
        assert product.status == ProductStatus.DRAFT.value
        assert product.is_active is False

    def test_created_event(self):
        product = _product()
        assert isinstance(product._events[0], ProductCreated)
        assert product._events[0].sku == "TEE-001"

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            _product(price=-1.0)


class TestProductLifecycle:
    def test_activate_from_draft(self):
        product = _product()
        product.activate()
        assert product.is_active
        assert isinstance(product._events[-1], ProductStatusChanged)

    def test_deactivate_and_reactivate(self):
        product = _product()
        product.activate()
        product.deactivate()
        assert product.status == ProductStatus.INACTIVE.value
        product.activate()
        assert product.is_active

    def test_draft_cannot_be_deactivated(self):
        with pytest.raises(InvalidTransition):
            _product().deactivate()

    def test_archived_is_terminal(self):
        product = _product()
        product.archive()
        with pytest.raises(InvalidTransition):
            product.activate()
        with pytest.raises(InvalidTransition):
            product.update_details(name="Renamed")


class TestPricingAndVariants:
    def test_price_change_raises_event(self):
        product = _product()
        product.change_price(120000.0)
        assert product.price == 120000.0
        assert isinstance(product._events[-1], ProductPriceChanged)
        assert product._events[-1].previous_price == 150000.0

    def test_same_price_is_noop(self):
        product = _product()
        events_before = len(product._events)
        product.change_price(150000.0)
        assert len(product._events) == events_before

    def test_variant_price_used_for_unit_price(self):
        product = _product()
        variant = product.add_variant(sku="tee-001-xl", price=170000.0, name="XL", attributes={"size": "XL"})
        assert product.unit_price(variant.id) == 170000.0
        assert product.unit_price() == 150000.0
        assert variant.sku == "TEE-001-XL"

    def test_duplicate_variant_sku_rejected(self):
        product = _product()
        product.add_variant(sku="tee-001-s", price=1.0)
        with pytest.raises(ValidationError):
            product.add_variant(sku="TEE-001-S", price=2.0)

    def test_remove_unknown_variant(self):
        with pytest.raises(ValidationError):
            _product().remove_variant("missing")
