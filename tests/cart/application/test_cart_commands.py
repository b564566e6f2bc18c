"""Application tests for cart commands: ownership, stock holds and checkout."""

import pytest
from protean.utils.globals import current_domain

from storefront.cart import queries
from storefront.cart.items import AddToCart, RemoveCartItem, UpdateCartItem
from storefront.cart.management import ClearCart, CreateCart, DeleteCart, SyncCartWithUser, UpdateCart, load_cart
from storefront.inventory.stock.allocation import available_quantity
from storefront.ordering.order.checkout import ConvertCartToOrder
from storefront.ordering.queries import load_order
from storefront.shared.errors import (
    BusinessRuleViolation,
    DomainError,
    InsufficientStock,
    NotFound,
    ProductUnavailable,
    Unauthorized,
)

GUEST = {"session_id": "guest123"}


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _guest_cart():
    return _process(CreateCart(**GUEST))


def _add(cart_id, product_id, quantity, caller=GUEST):
    return _process(AddToCart(cart_id=cart_id, product_id=product_id, quantity=quantity, **caller))


class TestGuestCheckoutScenario:
    def test_reserve_oversell_and_convert(self, make_product):
        product_id = make_product(price=100000.0, stock=5)
        cart_id = _guest_cart()

        _add(cart_id, product_id, 3)
        assert available_quantity(product_id) == 2

        with pytest.raises(InsufficientStock):
            _add(cart_id, product_id, 3)
        assert available_quantity(product_id) == 2
        assert load_cart(cart_id).total_quantity == 3

        order_id = _process(ConvertCartToOrder(cart_id=cart_id, actor_id="user-1", **GUEST))
        order = load_order(order_id)
        assert order.total == 3 * 100000.0
        assert order.amounts.subtotal == 3 * 100000.0

        # The hold moves to the order rather than being released
        assert available_quantity(product_id) == 2

        with pytest.raises(NotFound):
            queries.get_current_cart(session_id="guest123")

    def test_cart_cannot_be_converted_twice(self, make_product):
        product_id = make_product(stock=5)
        cart_id = _guest_cart()
        _add(cart_id, product_id, 1)
        _process(ConvertCartToOrder(cart_id=cart_id, actor_id="user-1", **GUEST))

        with pytest.raises(BusinessRuleViolation):
            _process(ConvertCartToOrder(cart_id=cart_id, actor_id="user-1", **GUEST))

    def test_empty_cart_cannot_be_converted(self):
        cart_id = _guest_cart()
        with pytest.raises(BusinessRuleViolation):
            _process(ConvertCartToOrder(cart_id=cart_id, actor_id="user-1", **GUEST))


class TestCreateCart:
    def test_requires_user_or_session(self):
        with pytest.raises(DomainError):
            _process(CreateCart())

    def test_returns_existing_active_cart(self):
        assert _guest_cart() == _guest_cart()

    def test_user_cart(self):
        cart_id = _process(CreateCart(actor_id="user-1"))
        assert load_cart(cart_id).user_id == "user-1"
        assert str(queries.get_current_cart(user_id="user-1").id) == cart_id


class TestCartOwnership:
    def test_other_session_is_rejected(self, make_product):
        product_id = make_product()
        cart_id = _guest_cart()
        with pytest.raises(Unauthorized):
            _add(cart_id, product_id, 1, caller={"session_id": "someone-else"})

    def test_other_user_is_rejected(self):
        cart_id = _process(CreateCart(actor_id="user-1"))
        with pytest.raises(Unauthorized):
            queries.get_cart(cart_id, actor_id="user-2")

    def test_staff_cannot_read_or_change_a_customer_cart(self, make_product):
        product_id = make_product()
        cart_id = _process(CreateCart(actor_id="user-1"))
        with pytest.raises(Unauthorized):
            queries.get_cart(cart_id, actor_id="staff-1")
        with pytest.raises(Unauthorized):
            _add(cart_id, product_id, 1, caller={"actor_id": "admin-1", "actor_role": "admin"})
        assert load_cart(cart_id).total_quantity == 0

    def test_staff_cannot_use_a_guest_cart_without_its_session(self, make_product):
        product_id = make_product()
        cart_id = _guest_cart()
        with pytest.raises(Unauthorized):
            _add(cart_id, product_id, 1, caller={"actor_id": "staff-1", "actor_role": "staff"})
        with pytest.raises(Unauthorized):
            _process(ClearCart(cart_id=cart_id, actor_id="staff-1", actor_role="staff", session_id="other"))

    def test_owner_and_session_holder_are_accepted(self):
        user_cart = _process(CreateCart(actor_id="user-1"))
        guest_cart = _guest_cart()
        assert str(queries.get_cart(user_cart, actor_id="user-1").id) == user_cart
        assert str(queries.get_cart(guest_cart, **GUEST).id) == guest_cart


class TestCartItems:
    def test_inactive_product_cannot_be_added(self, make_product):
        product_id = make_product(activate=False)
        with pytest.raises(ProductUnavailable):
            _add(_guest_cart(), product_id, 1)

    def test_unknown_product(self):
        with pytest.raises(NotFound):
            _add(_guest_cart(), "missing", 1)

    def test_update_quantity_adjusts_hold(self, make_product):
        product_id = make_product(stock=10)
        cart_id = _guest_cart()
        item_id = _add(cart_id, product_id, 2)

        _process(UpdateCartItem(cart_id=cart_id, item_id=item_id, quantity=6, **GUEST))
        assert available_quantity(product_id) == 4

        _process(UpdateCartItem(cart_id=cart_id, item_id=item_id, quantity=1, **GUEST))
        assert available_quantity(product_id) == 9

    def test_growing_beyond_stock_fails(self, make_product):
        product_id = make_product(stock=3)
        cart_id = _guest_cart()
        item_id = _add(cart_id, product_id, 2)
        with pytest.raises(InsufficientStock):
            _process(UpdateCartItem(cart_id=cart_id, item_id=item_id, quantity=4, **GUEST))
        assert load_cart(cart_id).total_quantity == 2

    def test_remove_item_releases_hold(self, make_product):
        product_id = make_product(stock=5)
        cart_id = _guest_cart()
        item_id = _add(cart_id, product_id, 4)

        _process(RemoveCartItem(cart_id=cart_id, item_id=item_id, **GUEST))
        assert available_quantity(product_id) == 5
        assert load_cart(cart_id).item_count == 0

    def test_clear_releases_all_holds(self, make_product):
        first = make_product(stock=5)
        second = make_product(stock=5)
        cart_id = _guest_cart()
        _add(cart_id, first, 2)
        _add(cart_id, second, 3)

        _process(ClearCart(cart_id=cart_id, **GUEST))
        assert available_quantity(first) == 5
        assert available_quantity(second) == 5

    def test_delete_releases_holds(self, make_product):
        product_id = make_product(stock=5)
        cart_id = _guest_cart()
        _add(cart_id, product_id, 2)

        _process(DeleteCart(cart_id=cart_id, **GUEST))
        assert available_quantity(product_id) == 5
        with pytest.raises(NotFound):
            load_cart(cart_id)

    def test_update_details(self):
        cart_id = _guest_cart()
        _process(UpdateCart(cart_id=cart_id, notes="Leave at the door", **GUEST))
        assert load_cart(cart_id).notes == "Leave at the door"


class TestSyncCart:
    def test_guest_cart_claimed_and_previous_merged(self, make_product):
        product_id = make_product(stock=10)
        previous_id = _process(CreateCart(actor_id="user-1"))
        _add(previous_id, product_id, 1, caller={"actor_id": "user-1"})

        cart_id = _guest_cart()
        _add(cart_id, product_id, 2)

        _process(SyncCartWithUser(cart_id=cart_id, actor_id="user-1", **GUEST))

        cart = load_cart(cart_id)
        assert cart.user_id == "user-1"
        assert cart.total_quantity == 3
        assert load_cart(previous_id).status == "abandoned"
        # Holds are unchanged by the merge
        assert available_quantity(product_id) == 7

    def test_sync_requires_matching_session(self):
        cart_id = _guest_cart()
        with pytest.raises(Unauthorized):
            _process(SyncCartWithUser(cart_id=cart_id, actor_id="user-1", session_id="other"))


class TestCartStats:
    def test_counts_by_status(self, make_product):
        product_id = make_product(price=1000.0, stock=10)
        active = _guest_cart()
        _add(active, product_id, 2)

        converted = _process(CreateCart(actor_id="user-1"))
        _add(converted, product_id, 1, caller={"actor_id": "user-1"})
        _process(ConvertCartToOrder(cart_id=converted, actor_id="user-1"))

        stats = queries.cart_stats()
        assert stats.active_carts == 1
        assert stats.guest_carts == 1
        assert stats.converted_carts == 1
        assert stats.active_value == 2000.0
