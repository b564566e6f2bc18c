"""Application tests for direct orders and the order lifecycle."""

import json

import pytest
from protean.utils.globals import current_domain

from storefront.inventory import queries as inventory_queries
from storefront.inventory.stock.allocation import available_quantity
from storefront.ordering import queries
from storefront.ordering.order.creation import CreateOrder, CreateOrderForUser
from storefront.ordering.order.lifecycle import CancelOrder, ConfirmOrder, DeliverOrder, ShipOrder
from storefront.ordering.queries import load_order
from storefront.shared.access import Actor
from storefront.shared.errors import (
    DomainError,
    Forbidden,
    InsufficientStock,
    InvalidTransition,
    ProductUnavailable,
    Unauthorized,
)

CUSTOMER = {"actor_id": "user-1", "actor_role": "customer"}


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _items(*lines):
    return json.dumps([{"product_id": product_id, "quantity": quantity} for product_id, quantity in lines])


def _place(product_id, quantity=2, payment_method="cod", caller=CUSTOMER):
    return _process(CreateOrder(items=_items((product_id, quantity)), payment_method=payment_method, **caller))


def _advance(order_id, staff, to="delivered"):
    _process(ConfirmOrder(order_id=order_id, **staff))
    if to == "confirmed":
        return
    _process(ShipOrder(order_id=order_id, tracking_number="VN123", **staff))
    if to == "shipped":
        return
    _process(DeliverOrder(order_id=order_id, **staff))


class TestCreateOrder:
    def test_order_reserves_stock(self, make_product):
        product_id = make_product(price=50000.0, stock=10)
        order_id = _place(product_id, quantity=4)

        order = load_order(order_id)
        assert order.user_id == "user-1"
        assert order.total == 200000.0
        assert order.order_number.startswith("ORD-")
        assert available_quantity(product_id) == 6

    def test_insufficient_stock_leaves_nothing_behind(self, make_product):
        product_id = make_product(stock=1)
        with pytest.raises(InsufficientStock):
            _place(product_id, quantity=2)

        assert available_quantity(product_id) == 1
        assert queries.list_orders(queries.OrderFilters()).total == 0

    def test_repeated_lines_are_reserved_together(self, make_product):
        product_id = make_product(stock=5)
        _process(CreateOrder(items=_items((product_id, 2), (product_id, 2)), **CUSTOMER))
        assert available_quantity(product_id) == 1

    def test_inactive_product_rejected(self, make_product):
        product_id = make_product(activate=False)
        with pytest.raises(ProductUnavailable):
            _place(product_id)

    def test_malformed_items(self):
        with pytest.raises(DomainError):
            _process(CreateOrder(items="not json", **CUSTOMER))
        with pytest.raises(DomainError):
            _process(CreateOrder(items="[]", **CUSTOMER))

    def test_summary_projection(self, make_product):
        product_id = make_product(price=1000.0)
        order_id = _place(product_id, quantity=3)

        summary = queries.find_summary_by_number(load_order(order_id).order_number)
        assert summary.order_id == order_id
        assert summary.total_quantity == 3
        assert summary.status == "created"


class TestCreateOrderForUser:
    def test_admin_places_order_for_customer(self, make_product, admin):
        product_id = make_product(stock=5)
        order_id = _process(CreateOrderForUser(user_id="user-9", items=_items((product_id, 1)), **admin))

        order = load_order(order_id)
        assert order.user_id == "user-9"
        assert order.placed_by == "admin-1"

    def test_staff_is_not_enough(self, make_product, staff):
        product_id = make_product(stock=5)
        with pytest.raises(Forbidden):
            _process(CreateOrderForUser(user_id="user-9", items=_items((product_id, 1)), **staff))


class TestLifecycle:
    def test_ship_commits_stock(self, make_product, staff):
        product_id = make_product(stock=10)
        order_id = _place(product_id, quantity=3)
        _advance(order_id, staff, to="shipped")

        level = inventory_queries.get_stock_for_product(product_id)
        assert level.on_hand == 7
        assert level.reserved == 0
        assert level.available == 7

    def test_cod_delivery_marks_paid(self, make_product, staff):
        product_id = make_product()
        order_id = _place(product_id)
        _advance(order_id, staff)

        order = load_order(order_id)
        assert order.status == "delivered"
        assert order.payment_status == "paid"
        assert queries.order_stats().paid_orders == 1

    def test_customer_cannot_confirm(self, make_product):
        product_id = make_product()
        order_id = _place(product_id)
        with pytest.raises(Forbidden):
            _process(ConfirmOrder(order_id=order_id, **CUSTOMER))

    def test_invalid_transition(self, make_product, staff):
        product_id = make_product()
        order_id = _place(product_id)
        with pytest.raises(InvalidTransition):
            _process(DeliverOrder(order_id=order_id, **staff))


class TestCancelOrder:
    def test_owner_cancel_releases_stock(self, make_product):
        product_id = make_product(stock=10)
        order_id = _place(product_id, quantity=4)

        _process(CancelOrder(order_id=order_id, reason="Ordered by mistake", **CUSTOMER))

        order = load_order(order_id)
        assert order.status == "cancelled"
        assert order.cancelled_by == "user-1"
        assert available_quantity(product_id) == 10

    def test_other_customer_cannot_cancel(self, make_product):
        product_id = make_product()
        order_id = _place(product_id)
        with pytest.raises(Unauthorized):
            _process(CancelOrder(order_id=order_id, reason="Nope", actor_id="user-2"))

    def test_cancel_after_shipping_keeps_committed_stock(self, make_product, staff):
        product_id = make_product(stock=10)
        order_id = _place(product_id, quantity=4)
        _advance(order_id, staff, to="shipped")

        _process(CancelOrder(order_id=order_id, reason="Lost in transit", **staff))

        level = inventory_queries.get_stock_for_product(product_id)
        assert level.on_hand == 6
        assert level.reserved == 0

    def test_delivered_order_cannot_be_cancelled(self, make_product, staff):
        product_id = make_product()
        order_id = _place(product_id)
        _advance(order_id, staff)
        with pytest.raises(InvalidTransition):
            _process(CancelOrder(order_id=order_id, reason="Too late", **staff))


class TestOrderQueries:
    def test_owner_reads_order(self, make_product):
        product_id = make_product()
        order_id = _place(product_id)
        assert str(queries.get_order(order_id, Actor.of("user-1")).id) == order_id

    def test_stranger_cannot_read_order(self, make_product):
        product_id = make_product()
        order_id = _place(product_id)
        with pytest.raises(Unauthorized):
            queries.get_order(order_id, Actor.of("user-2"))

    def test_list_filters_by_user_and_status(self, make_product, staff):
        product_id = make_product(stock=20)
        first = _place(product_id, quantity=1)
        _place(product_id, quantity=1)
        _place(product_id, quantity=1, caller={"actor_id": "user-2"})
        _process(ConfirmOrder(order_id=first, **staff))

        mine = queries.list_orders(queries.OrderFilters(user_id="user-1"))
        assert mine.total == 2

        confirmed = queries.list_orders(queries.OrderFilters(status="confirmed"))
        assert [row.order_id for row in confirmed.items] == [first]

    def test_stats(self, make_product, staff):
        product_id = make_product(price=1000.0, stock=20)
        delivered = _place(product_id, quantity=2)
        cancelled = _place(product_id, quantity=1)
        _place(product_id, quantity=1)
        _advance(delivered, staff)
        _process(CancelOrder(order_id=cancelled, reason="Duplicate", **CUSTOMER))

        stats = queries.order_stats()
        assert stats.total_orders == 3
        assert stats.created == 1
        assert stats.delivered == 1
        assert stats.cancelled == 1
        assert stats.revenue == 2000.0
