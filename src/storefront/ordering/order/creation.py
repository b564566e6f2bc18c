"""Direct order creation: commands and handler.

Both commands reserve stock for every line. CreateOrderForUser lets an admin
place an order on a customer's behalf and records the admin as ``placed_by``.
"""

from protean import handle
from protean.fields import Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.inventory.stock import allocation
from storefront.ordering.order.order import Order
from storefront.ordering.order.placement import parse_lines, place_order
from storefront.shared.access import Actor, Role


@storefront.command(part_of="Order")
class CreateOrder:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    items = Text(required=True)  # JSON: [{product_id, variant_id, quantity}]
    payment_method = String(max_length=20, default="cod")
    shipping_address = Text()
    billing_address = Text()
    notes = Text()
    coupon_code = String(max_length=50)
    shipping_provider = String(max_length=50)
    points_to_redeem = Integer(default=0, min_value=0)


@storefront.command(part_of="Order")
class CreateOrderForUser:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    user_id = Identifier(required=True)
    items = Text(required=True)
    payment_method = String(max_length=20, default="cod")
    shipping_address = Text()
    billing_address = Text()
    notes = Text()
    coupon_code = String(max_length=50)
    shipping_provider = String(max_length=50)


def _reserve_for(order: Order, lines) -> None:
    for (product_id, variant_id), quantity in allocation.group_lines(lines).items():
        allocation.reserve(product_id, variant_id, quantity, reference=f"order:{order.order_number}")


@storefront.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        actor = Actor.of(command.actor_id, command.actor_role)
        lines = parse_lines(command.items)
        order = place_order(
            user_id=actor.user_id,
            lines=lines,
            payment_method=command.payment_method,
            shipping_address=command.shipping_address,
            billing_address=command.billing_address,
            notes=command.notes,
            coupon_code=command.coupon_code,
            shipping_provider=command.shipping_provider,
            points_to_redeem=command.points_to_redeem or 0,
        )
        _reserve_for(order, lines)
        return str(order.id)

    @handle(CreateOrderForUser)
    def create_order_for_user(self, command):
        actor = Actor.of(command.actor_id, command.actor_role)
        actor.require(Role.ADMIN)
        lines = parse_lines(command.items)
        order = place_order(
            user_id=command.user_id,
            lines=lines,
            payment_method=command.payment_method,
            placed_by=actor.user_id,
            shipping_address=command.shipping_address,
            billing_address=command.billing_address,
            notes=command.notes,
            coupon_code=command.coupon_code,
            shipping_provider=command.shipping_provider,
        )
        _reserve_for(order, lines)
        return str(order.id)
