"""CouponUsage aggregate: one redemption of a coupon against one order."""

from datetime import UTC, datetime

from protean.fields import DateTime, Float, Identifier, String

from storefront.domain import storefront
from storefront.promotions.coupon.events import CouponRedeemed


@storefront.aggregate
class CouponUsage:
    coupon_id: Identifier(required=True)
    code: String(required=True, max_length=50)
    user_id: Identifier(required=True)
    order_id: Identifier(required=True, unique=True)
    discount_amount: Float(default=0.0, min_value=0.0)
    used_at: DateTime()

    @classmethod
    def record(cls, coupon, user_id, order_id, discount_amount):
        now = datetime.now(UTC)
        usage = cls(
            coupon_id=str(coupon.id),
            code=coupon.code,
            user_id=str(user_id),
            order_id=str(order_id),
            discount_amount=discount_amount,
            used_at=now,
        )
        usage.raise_(
            CouponRedeemed(
                usage_id=str(usage.id),
                coupon_id=str(coupon.id),
                code=coupon.code,
                user_id=str(user_id),
                order_id=str(order_id),
                discount_amount=discount_amount,
                used_at=now,
            )
        )
        return usage
