"""Application tests for concurrent coupon usage updates."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from storefront.promotions.coupon.coupon import Coupon
from storefront.promotions.coupon.management import CreateCoupon, load_coupon

NOW = datetime.now(UTC)


def _create(admin, usage_limit=0):
    return current_domain.process(
        CreateCoupon(
            code="RUSH10",
            name="Rush hour",
            coupon_type="percentage",
            discount_value=10.0,
            valid_from=NOW - timedelta(days=1),
            valid_to=NOW + timedelta(days=1),
            usage_limit=usage_limit,
            **admin,
        ),
        asynchronous=False,
    )


class TestStaleCouponUsage:
    def test_second_writer_on_stale_copy_fails(self, admin):
        coupon_id = _create(admin, usage_limit=1)
        repo = current_domain.repository_for(Coupon)

        first = repo.get(coupon_id)
        second = repo.get(coupon_id)
        first.record_use()
        second.record_use()

        repo.add(first)
        with pytest.raises(ExpectedVersionError):
            repo.add(second)

        coupon = load_coupon(coupon_id)
        assert coupon.usage_count == 1
        assert coupon.is_valid_at(datetime.now(UTC)) is False
