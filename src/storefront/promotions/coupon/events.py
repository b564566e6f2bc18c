"""Domain events for coupons and coupon usage."""

from protean.fields import DateTime, Float, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Coupon")
class CouponCreated:
    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True)
    coupon_type = String(required=True)
    discount_value = Float(required=True)
    created_by = Identifier()
    created_at = DateTime(required=True)


@storefront.event(part_of="Coupon")
class CouponStatusChanged:
    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True)
    status = String(required=True)
    changed_at = DateTime(required=True)


@storefront.event(part_of="CouponUsage")
class CouponRedeemed:
    __version__ = 1

    usage_id = Identifier(required=True)
    coupon_id = Identifier(required=True)
    code = String(required=True)
    user_id = Identifier(required=True)
    order_id = Identifier(required=True)
    discount_amount = Float(required=True)
    used_at = DateTime(required=True)
