"""Coupon validation: a read-only check that answers valid/invalid with a reason.

Order history is passed in by the caller so that this module does not reach
into the ordering component.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from protean.utils.globals import current_domain

from storefront.promotions.coupon.coupon import Coupon, normalize_code
from storefront.promotions.coupon.usage import CouponUsage

COUPON_NOT_FOUND = "Coupon not found"
COUPON_EXPIRED = "Coupon is not valid or has expired"
COUPON_NOT_APPLICABLE = "Coupon cannot be used for this order"
COUPON_USER_LIMIT = "Coupon usage limit reached for this user"
COUPON_VALID = "Coupon is valid"


@dataclass
class CouponValidation:
    valid: bool
    message: str
    discount_amount: float = 0.0
    coupon: Coupon | None = None

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "message": self.message,
            "discount_amount": self.discount_amount,
            "coupon_id": str(self.coupon.id) if self.coupon else None,
            "code": self.coupon.code if self.coupon else None,
        }


def find_coupon(code: str) -> Coupon | None:
    coupons = current_domain.repository_for(Coupon)._dao.query.filter(code=normalize_code(code)).all().items
    return coupons[0] if coupons else None


def user_usage_count(coupon_id, user_id) -> int:
    dao = current_domain.repository_for(CouponUsage)._dao
    usages = dao.query.filter(coupon_id=str(coupon_id), user_id=str(user_id))
    return usages.all().total


def validate_coupon(
    code: str,
    user_id: str,
    order_amount: float,
    prior_orders: int = 0,
    other_coupons: int = 0,
    shipping_fee: float = 0.0,
    now: datetime | None = None,
) -> CouponValidation:
    """Check a coupon against an order without changing anything."""
    coupon = find_coupon(code)
    if coupon is None:
        return CouponValidation(valid=False, message=COUPON_NOT_FOUND)

    if not coupon.is_valid_at(now or datetime.now(UTC)):
        return CouponValidation(valid=False, message=COUPON_EXPIRED, coupon=coupon)

    previous_uses = user_usage_count(coupon.id, user_id)
    if (
        order_amount < (coupon.minimum_order_amount or 0.0)
        or (coupon.first_time_only and prior_orders > 0)
        or (coupon.new_user_only and (prior_orders > 0 or previous_uses > 0))
        or (other_coupons > 0 and not coupon.is_stackable)
    ):
        return CouponValidation(valid=False, message=COUPON_NOT_APPLICABLE, coupon=coupon)

    if previous_uses >= coupon.per_user_limit:
        return CouponValidation(valid=False, message=COUPON_USER_LIMIT, coupon=coupon)

    return CouponValidation(
        valid=True,
        message=COUPON_VALID,
        discount_amount=coupon.calculate_discount(order_amount, shipping_fee),
        coupon=coupon,
    )
