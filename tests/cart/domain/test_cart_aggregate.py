"""Tests for the Cart aggregate."""

import pytest
from protean.exceptions import ValidationError

from storefront.cart.cart import Cart, CartStatus
from storefront.cart.events import CartConverted, CartItemAdded
from storefront.shared.errors import BusinessRuleViolation, NotFound


def _guest_cart():
    return Cart.create(session_id="guest123")


class TestCartCreation:
    def test_guest_cart(self):
        cart = _guest_cart()
        assert cart.is_guest
        assert cart.is_active
        assert cart.item_count == 0

    def test_user_cart(self):
        cart = Cart.create(user_id="user-1")
        assert not cart.is_guest

    def test_cart_needs_an_owner(self):
        with pytest.raises(ValidationError):
            Cart.create()


class TestCartLines:
    def test_add_item(self):
        cart = _guest_cart()
        item = cart.add_item("p1", None, 2, 50000.0)
        assert item.line_total == 100000.0
        assert cart.subtotal == 100000.0
        assert isinstance(cart._events[-1], CartItemAdded)

    def test_same_product_merges_into_one_line(self):
        cart = _guest_cart()
        cart.add_item("p1", None, 2, 50000.0)
        cart.add_item("p1", None, 3, 50000.0)
        assert cart.item_count == 1
        assert cart.total_quantity == 5

    def test_variants_are_separate_lines(self):
        cart = _guest_cart()
        cart.add_item("p1", "v1", 1, 10.0)
        cart.add_item("p1", "v2", 1, 12.0)
        cart.add_item("p1", None, 1, 8.0)
        assert cart.item_count == 3
        assert cart.subtotal == 30.0

    def test_update_quantity_returns_delta(self):
        cart = _guest_cart()
        item = cart.add_item("p1", None, 2, 10.0)
        assert cart.update_item_quantity(item.id, 5) == 3
        assert cart.update_item_quantity(item.id, 1) == -4
        assert cart.update_item_quantity(item.id, 1) == 0

    def test_zero_quantity_rejected(self):
        cart = _guest_cart()
        item = cart.add_item("p1", None, 2, 10.0)
        with pytest.raises(ValidationError):
            cart.update_item_quantity(item.id, 0)

    def test_remove_unknown_item(self):
        with pytest.raises(NotFound):
            _guest_cart().remove_item("missing")

    def test_clear_returns_removed_lines(self):
        cart = _guest_cart()
        cart.add_item("p1", None, 2, 10.0)
        cart.add_item("p2", None, 1, 10.0)
        removed = cart.clear()
        assert len(removed) == 2
        assert cart.item_count == 0


class TestCartLifecycle:
    def test_convert(self):
        cart = _guest_cart()
        cart.add_item("p1", None, 3, 10.0)
        cart.mark_converted("order-1")
        assert cart.status == CartStatus.CONVERTED.value
        assert cart.order_id == "order-1"
        assert isinstance(cart._events[-1], CartConverted)

    def test_empty_cart_cannot_convert(self):
        with pytest.raises(BusinessRuleViolation):
            _guest_cart().mark_converted("order-1")

    def test_converted_cart_is_frozen(self):
        cart = _guest_cart()
        cart.add_item("p1", None, 1, 10.0)
        cart.mark_converted("order-1")
        with pytest.raises(BusinessRuleViolation):
            cart.add_item("p2", None, 1, 10.0)
        with pytest.raises(BusinessRuleViolation):
            cart.mark_converted("order-2")

    def test_assign_to_user_merges_lines(self):
        previous = Cart.create(user_id="user-1")
        previous.add_item("p1", None, 1, 10.0)
        previous.add_item("p2", None, 2, 20.0)

        cart = _guest_cart()
        cart.add_item("p1", None, 2, 10.0)
        cart.assign_to_user("user-1", merged_items=previous.clear())

        assert cart.user_id == "user-1"
        assert cart.item_count == 2
        assert cart.find_line("p1").quantity == 3

    def test_user_cart_cannot_be_reassigned(self):
        with pytest.raises(BusinessRuleViolation):
            Cart.create(user_id="user-1").assign_to_user("user-2")
