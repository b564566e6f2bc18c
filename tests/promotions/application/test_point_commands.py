"""Application tests for the point ledger and its order integration."""

import json

import pytest
from protean.utils.globals import current_domain

from storefront.ordering.order.creation import CreateOrder
from storefront.ordering.order.lifecycle import CancelOrder, ConfirmOrder, DeliverOrder, ShipOrder
from storefront.ordering.queries import load_order
from storefront.promotions import queries
from storefront.promotions.points.ledger import (
    AdjustPoints,
    EarnPoints,
    ExpirePoints,
    RedeemPoints,
    balance_of,
    earn_points,
)
from storefront.promotions.points.order_events import points_for
from storefront.shared.errors import Forbidden, InsufficientPoints, Unauthorized


def _process(command):
    return current_domain.process(command, asynchronous=False)


class TestLedgerCommands:
    def test_staff_awards_points(self, staff):
        balance = _process(EarnPoints(user_id="user-1", points=500, reference="promo", **staff))
        assert balance == 500
        assert balance_of("user-1") == 500

    def test_customer_cannot_award(self):
        with pytest.raises(Forbidden):
            _process(EarnPoints(user_id="user-1", points=500, actor_id="user-1"))

    def test_owner_redeems(self, staff):
        _process(EarnPoints(user_id="user-1", points=500, **staff))
        assert _process(RedeemPoints(user_id="user-1", points=200, actor_id="user-1")) == 300

    def test_stranger_cannot_redeem(self, staff):
        _process(EarnPoints(user_id="user-1", points=500, **staff))
        with pytest.raises(Unauthorized):
            _process(RedeemPoints(user_id="user-1", points=200, actor_id="user-2"))

    def test_redeem_without_account(self):
        with pytest.raises(InsufficientPoints):
            _process(RedeemPoints(user_id="user-1", points=1, actor_id="user-1"))

    def test_overdraw_leaves_balance_untouched(self, staff):
        _process(EarnPoints(user_id="user-1", points=100, **staff))
        with pytest.raises(InsufficientPoints):
            _process(RedeemPoints(user_id="user-1", points=101, actor_id="user-1"))
        assert balance_of("user-1") == 100

    def test_adjust_is_admin_only(self, staff, admin):
        _process(EarnPoints(user_id="user-1", points=100, **staff))
        with pytest.raises(Forbidden):
            _process(AdjustPoints(user_id="user-1", points=-50, **staff))
        assert _process(AdjustPoints(user_id="user-1", points=-50, **admin)) == 50

    def test_expire(self, staff):
        _process(EarnPoints(user_id="user-1", points=100, **staff))
        assert _process(ExpirePoints(user_id="user-1", points=30, **staff)) == 70

    def test_history_and_summary(self, staff):
        _process(EarnPoints(user_id="user-1", points=100, **staff))
        _process(RedeemPoints(user_id="user-1", points=40, actor_id="user-1"))

        summary = queries.point_summary("user-1")
        assert summary.balance == 60
        assert summary.lifetime_earned == 100
        assert summary.lifetime_redeemed == 40

        history = queries.point_history("user-1")
        assert history.total == 2
        redeems = queries.point_history("user-1", transaction_type="redeem")
        assert [t.amount for t in redeems.items] == [-40]


class TestPointsOnOrders:
    def _order(self, product_id, quantity=1, points=0):
        return _process(
            CreateOrder(
                items=json.dumps([{"product_id": product_id, "quantity": quantity}]),
                points_to_redeem=points,
                actor_id="user-1",
            )
        )

    def test_points_for_total(self):
        assert points_for(250500.0) == 250
        assert points_for(999.0) == 0

    def test_delivery_earns_points_once(self, make_product, staff):
        product_id = make_product(price=120000.0)
        order_id = self._order(product_id)

        _process(ConfirmOrder(order_id=order_id, **staff))
        _process(ShipOrder(order_id=order_id, tracking_number="VN1", **staff))
        _process(DeliverOrder(order_id=order_id, **staff))

        assert balance_of("user-1") == 120

    def test_redeeming_points_lowers_total(self, make_product):
        earn_points("user-1", 5000, reference="seed")
        product_id = make_product(price=100000.0)

        order_id = self._order(product_id, points=3000)

        assert load_order(order_id).total == 97000.0
        assert balance_of("user-1") == 2000

    def test_cannot_redeem_more_than_balance(self, make_product):
        earn_points("user-1", 10, reference="seed")
        product_id = make_product(price=100000.0)
        with pytest.raises(InsufficientPoints):
            self._order(product_id, points=11)
        assert balance_of("user-1") == 10

    def test_cancellation_refunds_points(self, make_product):
        earn_points("user-1", 5000, reference="seed")
        product_id = make_product(price=100000.0)
        order_id = self._order(product_id, points=3000)

        _process(CancelOrder(order_id=order_id, reason="Changed my mind", actor_id="user-1"))
        assert balance_of("user-1") == 5000
