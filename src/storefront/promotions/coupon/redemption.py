"""Coupon redemption: command, handler and the in-transaction helper.

Redemption re-validates, records a CouponUsage and bumps the coupon's usage
count in one Unit of Work. It is idempotent per order: redeeming again for
the same order returns the existing usage.
"""

from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.promotions.coupon.coupon import Coupon
from storefront.promotions.coupon.usage import CouponUsage
from storefront.promotions.coupon.validation import validate_coupon
from storefront.shared.access import Actor
from storefront.shared.errors import InvalidCoupon
from storefront.utils.logging import logger


@storefront.command(part_of="CouponUsage")
class UseCoupon:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    code = String(required=True, max_length=50)
    user_id = Identifier(required=True)
    order_id = Identifier(required=True)
    order_amount = Float(required=True, min_value=0.0)
    prior_orders = Integer(default=0)
    shipping_fee = Float(default=0.0)


def usage_for_order(order_id) -> CouponUsage | None:
    usages = current_domain.repository_for(CouponUsage)._dao.query.filter(order_id=str(order_id)).all().items
    return usages[0] if usages else None


def use_coupon(code, user_id, order_id, order_amount, prior_orders=0, shipping_fee=0.0) -> CouponUsage:
    """Redeem inside the caller's Unit of Work. Raises InvalidCoupon with the validation reason."""
    existing = usage_for_order(order_id)
    if existing is not None:
        return existing

    result = validate_coupon(
        code,
        user_id=user_id,
        order_amount=order_amount,
        prior_orders=prior_orders,
        shipping_fee=shipping_fee,
    )
    if not result.valid:
        raise InvalidCoupon(result.message)

    coupon = result.coupon
    coupon.record_use()
    usage = CouponUsage.record(coupon, user_id=user_id, order_id=order_id, discount_amount=result.discount_amount)

    current_domain.repository_for(Coupon).add(coupon)
    current_domain.repository_for(CouponUsage).add(usage)
    logger.info(
        "Coupon redeemed",
        code=coupon.code,
        order_id=str(order_id),
        discount=result.discount_amount,
        usage_count=coupon.usage_count,
    )
    return usage


@storefront.command_handler(part_of=CouponUsage)
class CouponRedemptionHandler:
    @handle(UseCoupon)
    def redeem(self, command):
        Actor.of(command.actor_id, command.actor_role).require_owner(command.user_id, "order")
        usage = use_coupon(
            command.code,
            user_id=command.user_id,
            order_id=command.order_id,
            order_amount=command.order_amount,
            prior_orders=command.prior_orders or 0,
            shipping_fee=command.shipping_fee or 0.0,
        )
        return str(usage.id)
