"""Application tests for coupon management, validation and redemption."""

import json
from datetime import UTC, datetime, timedelta

import pytest
from protean.utils.globals import current_domain

from storefront.ordering.order.creation import CreateOrder
from storefront.ordering.queries import load_order
from storefront.promotions import queries
from storefront.promotions.coupon.management import CreateCoupon, DeleteCoupon, UpdateCoupon, load_coupon
from storefront.promotions.coupon.redemption import UseCoupon
from storefront.promotions.coupon.validation import (
    COUPON_EXPIRED,
    COUPON_NOT_APPLICABLE,
    COUPON_NOT_FOUND,
    COUPON_USER_LIMIT,
    validate_coupon,
)
from storefront.shared.errors import Conflict, DomainError, Forbidden, InvalidCoupon, NotFound, Unauthorized

NOW = datetime.now(UTC)


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _create(admin, code="SAVE10", coupon_type="percentage", discount_value=10.0, **options):
    return _process(
        CreateCoupon(
            code=code,
            name="Promotion",
            coupon_type=coupon_type,
            discount_value=discount_value,
            valid_from=NOW - timedelta(days=1),
            valid_to=NOW + timedelta(days=30),
            **options,
            **admin,
        )
    )


def _use(code, order_id, user_id="user-1", amount=100000.0):
    return _process(
        UseCoupon(code=code, user_id=user_id, order_id=order_id, order_amount=amount, actor_id=user_id)
    )


class TestCouponManagement:
    def test_admin_creates_coupon(self, admin):
        coupon_id = _create(admin, code="welcome")
        coupon = load_coupon(coupon_id)
        assert coupon.code == "WELCOME"
        assert coupon.created_by == "admin-1"

    def test_staff_cannot_create(self, staff):
        with pytest.raises(Forbidden):
            _create(staff)

    def test_duplicate_code(self, admin):
        _create(admin, code="SAVE10")
        with pytest.raises(Conflict):
            _create(admin, code="save10")

    def test_unknown_type(self, admin):
        with pytest.raises(DomainError):
            _create(admin, coupon_type="mystery")

    def test_deactivate_then_delete(self, admin):
        coupon_id = _create(admin)
        _process(UpdateCoupon(coupon_id=coupon_id, status="inactive", **admin))
        assert load_coupon(coupon_id).status == "inactive"
        assert queries.list_coupons(active=True).total == 0

        _process(DeleteCoupon(coupon_id=coupon_id, **admin))
        with pytest.raises(NotFound):
            load_coupon(coupon_id)


class TestValidation:
    def test_valid_coupon_reports_discount(self, admin):
        _create(admin)
        result = validate_coupon("save10", user_id="user-1", order_amount=250000.0)
        assert result.valid
        assert result.discount_amount == 25000.0

    def test_unknown_code(self):
        result = validate_coupon("NOPE", user_id="user-1", order_amount=1.0)
        assert not result.valid
        assert result.message == COUPON_NOT_FOUND

    def test_expired(self, admin):
        _create(admin)
        later = NOW + timedelta(days=60)
        assert validate_coupon("SAVE10", user_id="user-1", order_amount=1.0, now=later).message == COUPON_EXPIRED

    def test_minimum_order(self, admin):
        _create(admin, minimum_order_amount=500000.0)
        result = validate_coupon("SAVE10", user_id="user-1", order_amount=100000.0)
        assert result.message == COUPON_NOT_APPLICABLE

    def test_first_time_only(self, admin):
        _create(admin, first_time_only=True)
        assert validate_coupon("SAVE10", user_id="user-1", order_amount=1.0, prior_orders=0).valid
        result = validate_coupon("SAVE10", user_id="user-1", order_amount=1.0, prior_orders=1)
        assert result.message == COUPON_NOT_APPLICABLE

    def test_not_stackable(self, admin):
        _create(admin)
        result = validate_coupon("SAVE10", user_id="user-1", order_amount=1.0, other_coupons=1)
        assert result.message == COUPON_NOT_APPLICABLE


class TestRedemption:
    def test_use_records_usage_and_count(self, admin):
        coupon_id = _create(admin)
        usage_id = _use("SAVE10", "order-1")

        assert load_coupon(coupon_id).usage_count == 1
        usages = queries.list_coupon_usages(coupon_id)
        assert [str(u.id) for u in usages.items] == [usage_id]
        assert usages.items[0].discount_amount == 10000.0

    def test_same_order_is_idempotent(self, admin):
        coupon_id = _create(admin, per_user_limit=5)
        first = _use("SAVE10", "order-1")
        assert _use("SAVE10", "order-1") == first
        assert load_coupon(coupon_id).usage_count == 1

    def test_per_user_limit(self, admin):
        _create(admin, per_user_limit=1)
        _use("SAVE10", "order-1")
        with pytest.raises(InvalidCoupon) as exc:
            _use("SAVE10", "order-2")
        assert exc.value.message == COUPON_USER_LIMIT

        # Another user still has their own allowance
        _use("SAVE10", "order-3", user_id="user-2")

    def test_global_usage_limit(self, admin):
        _create(admin, usage_limit=1)
        _use("SAVE10", "order-1")
        with pytest.raises(InvalidCoupon) as exc:
            _use("SAVE10", "order-2", user_id="user-2")
        assert exc.value.message == COUPON_EXPIRED

    def test_customer_cannot_redeem_for_someone_else(self, admin):
        _create(admin)
        with pytest.raises(Unauthorized):
            _process(UseCoupon(code="SAVE10", user_id="user-2", order_id="o", order_amount=1.0, actor_id="user-1"))


class TestCouponAtCheckout:
    def test_order_total_reflects_discount(self, admin, make_product):
        coupon_id = _create(admin, code="FLAT20K", coupon_type="fixed", discount_value=20000.0)
        product_id = make_product(price=100000.0)

        order_id = _process(
            CreateOrder(
                items=json.dumps([{"product_id": product_id, "quantity": 1}]),
                coupon_code="flat20k",
                actor_id="user-1",
            )
        )

        order = load_order(order_id)
        assert order.coupon_code == "FLAT20K"
        assert order.amounts.discount_amount == 20000.0
        assert order.total == 80000.0
        assert load_coupon(coupon_id).usage_count == 1

    def test_invalid_coupon_blocks_order(self, make_product):
        product_id = make_product(stock=5)
        with pytest.raises(InvalidCoupon):
            _process(
                CreateOrder(
                    items=json.dumps([{"product_id": product_id, "quantity": 1}]),
                    coupon_code="GHOST",
                    actor_id="user-1",
                )
            )
