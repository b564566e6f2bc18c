"""Tests for the Coupon aggregate rules."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ValidationError

from storefront.promotions.coupon.coupon import Coupon, CouponStatus

NOW = datetime.now(UTC)


def _coupon(**overrides):
    defaults = {
        "code": "save10",
        "name": "Save ten percent",
        "coupon_type": "percentage",
        "discount_value": 10.0,
        "valid_from": NOW - timedelta(days=1),
        "valid_to": NOW + timedelta(days=30),
    }
    defaults.update(overrides)
    return Coupon.create(**defaults)


class TestCouponCreation:
    def test_code_is_normalized(self):
        assert _coupon(code=" save10 ").code == "SAVE10"

    def test_bad_code_rejected(self):
        with pytest.raises(ValidationError):
            _coupon(code="no spaces allowed")

    def test_percentage_capped_at_100(self):
        with pytest.raises(ValidationError):
            _coupon(discount_value=150.0)

    def test_zero_discount_rejected(self):
        with pytest.raises(ValidationError):
            _coupon(coupon_type="fixed", discount_value=0.0)

    def test_window_must_be_ordered(self):
        with pytest.raises(ValidationError):
            _coupon(valid_from=NOW, valid_to=NOW - timedelta(hours=1))

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            _coupon(coupon_type="bogus")


class TestDiscountCalculation:
    def test_percentage(self):
        assert _coupon().calculate_discount(200000.0) == 20000.0

    def test_percentage_capped_by_maximum(self):
        coupon = _coupon(maximum_discount_amount=15000.0)
        assert coupon.calculate_discount(200000.0) == 15000.0

    def test_fixed_never_exceeds_order(self):
        coupon = _coupon(coupon_type="fixed", discount_value=50000.0)
        assert coupon.calculate_discount(80000.0) == 50000.0
        assert coupon.calculate_discount(30000.0) == 30000.0

    def test_free_shipping_uses_fee(self):
        coupon = _coupon(coupon_type="free_shipping", discount_value=1.0)
        assert coupon.calculate_discount(100000.0, shipping_fee=25000.0) == 25000.0
        assert coupon.calculate_discount(100000.0) == 0.0


class TestValidity:
    def test_valid_inside_window(self):
        assert _coupon().is_valid_at(NOW)

    def test_expired(self):
        assert not _coupon().is_valid_at(NOW + timedelta(days=31))

    def test_not_yet_started(self):
        assert not _coupon().is_valid_at(NOW - timedelta(days=2))

    def test_inactive(self):
        coupon = _coupon()
        coupon.set_status(CouponStatus.INACTIVE.value)
        assert not coupon.is_valid_at(NOW)

    def test_usage_limit(self):
        coupon = _coupon(usage_limit=2)
        coupon.record_use()
        assert coupon.is_valid_at(NOW)
        coupon.record_use()
        assert not coupon.is_valid_at(NOW)
