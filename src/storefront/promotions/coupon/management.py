"""Coupon management: commands and handler. Admin only."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.promotions.coupon.coupon import Coupon, CouponStatus, normalize_code
from storefront.promotions.coupon.validation import find_coupon
from storefront.shared.access import Actor, Role
from storefront.shared.errors import Conflict, DomainError, NotFound
from storefront.utils.logging import logger


@storefront.command(part_of="Coupon")
class CreateCoupon:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    code = String(required=True, max_length=50)
    name = String(required=True, max_length=255)
    description = Text()
    coupon_type = String(required=True, max_length=20)
    discount_value = Float(required=True)
    minimum_order_amount = Float(default=0.0)
    maximum_discount_amount = Float(default=0.0)
    valid_from = DateTime(required=True)
    valid_to = DateTime(required=True)
    usage_limit = Integer(default=0)
    per_user_limit = Integer(default=1)
    is_stackable = Boolean(default=False)
    first_time_only = Boolean(default=False)
    new_user_only = Boolean(default=False)


@storefront.command(part_of="Coupon")
class UpdateCoupon:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    coupon_id = Identifier(required=True)
    name = String(max_length=255)
    description = Text()
    discount_value = Float()
    minimum_order_amount = Float()
    maximum_discount_amount = Float()
    valid_from = DateTime()
    valid_to = DateTime()
    usage_limit = Integer()
    per_user_limit = Integer()
    is_stackable = Boolean()
    first_time_only = Boolean()
    new_user_only = Boolean()
    status = String(max_length=20)


@storefront.command(part_of="Coupon")
class DeleteCoupon:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    coupon_id = Identifier(required=True)


def load_coupon(coupon_id) -> Coupon:
    try:
        return current_domain.repository_for(Coupon).get(coupon_id)
    except ObjectNotFoundError:
        raise NotFound(f"Coupon {coupon_id} not found", field="coupon_id") from None


@storefront.command_handler(part_of=Coupon)
class ManageCouponHandler:
    @handle(CreateCoupon)
    def create_coupon(self, command):
        actor = Actor.of(command.actor_id, command.actor_role)
        actor.require(Role.ADMIN)
        if find_coupon(command.code) is not None:
            raise Conflict(f"Coupon {normalize_code(command.code)} already exists", field="code")
        try:
            coupon = Coupon.create(
                code=command.code,
                name=command.name,
                coupon_type=command.coupon_type,
                discount_value=command.discount_value,
                valid_from=command.valid_from,
                valid_to=command.valid_to,
                created_by=actor.user_id,
                description=command.description,
                minimum_order_amount=command.minimum_order_amount,
                maximum_discount_amount=command.maximum_discount_amount,
                usage_limit=command.usage_limit,
                per_user_limit=command.per_user_limit,
                is_stackable=command.is_stackable,
                first_time_only=command.first_time_only,
                new_user_only=command.new_user_only,
            )
        except ValueError:
            raise DomainError(f"Unknown coupon type: {command.coupon_type}", field="coupon_type") from None

        current_domain.repository_for(Coupon).add(coupon)
        logger.info("Coupon created", coupon_id=str(coupon.id), code=coupon.code)
        return str(coupon.id)

    @handle(UpdateCoupon)
    def update_coupon(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.ADMIN)
        coupon = load_coupon(command.coupon_id)
        coupon.update(
            name=command.name,
            description=command.description,
            discount_value=command.discount_value,
            minimum_order_amount=command.minimum_order_amount,
            maximum_discount_amount=command.maximum_discount_amount,
            valid_from=command.valid_from,
            valid_to=command.valid_to,
            usage_limit=command.usage_limit,
            per_user_limit=command.per_user_limit,
            is_stackable=command.is_stackable,
            first_time_only=command.first_time_only,
            new_user_only=command.new_user_only,
        )
        if command.status:
            if command.status not in {s.value for s in CouponStatus}:
                raise DomainError(f"Unknown coupon status: {command.status}", field="status")
            coupon.set_status(command.status)
        current_domain.repository_for(Coupon).add(coupon)

    @handle(DeleteCoupon)
    def delete_coupon(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.ADMIN)
        coupon = load_coupon(command.coupon_id)
        current_domain.repository_for(Coupon)._dao.delete(coupon)
        logger.info("Coupon deleted", coupon_id=str(coupon.id), code=coupon.code)
