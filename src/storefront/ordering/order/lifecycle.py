"""Order lifecycle: Confirm, Ship, Deliver and Cancel.

Stock follows the order: shipping commits the held units, cancelling before
shipment releases them. Points redeemed on a cancelled order go back to the
customer in the same Unit of Work.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.inventory.stock import allocation
from storefront.ordering.order.order import Order
from storefront.ordering.queries import load_order
from storefront.promotions.points.ledger import refund_points
from storefront.shared.access import Actor, Role
from storefront.utils.logging import logger


@storefront.command(part_of="Order")
class ConfirmOrder:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    order_id = Identifier(required=True)


@storefront.command(part_of="Order")
class ShipOrder:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    order_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=255)


@storefront.command(part_of="Order")
class DeliverOrder:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    order_id = Identifier(required=True)


@storefront.command(part_of="Order")
class CancelOrder:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    order_id = Identifier(required=True)
    reason = String(required=True, max_length=500)


def _staff(command) -> Actor:
    actor = Actor.of(command.actor_id, command.actor_role)
    actor.require(Role.STAFF)
    return actor


@storefront.command_handler(part_of=Order)
class OrderLifecycleHandler:
    @handle(ConfirmOrder)
    def confirm_order(self, command):
        actor = _staff(command)
        order = load_order(command.order_id)
        order.confirm(confirmed_by=actor.user_id)
        current_domain.repository_for(Order).add(order)

    @handle(ShipOrder)
    def ship_order(self, command):
        _staff(command)
        order = load_order(command.order_id)
        order.ship(command.tracking_number)
        for (product_id, variant_id), quantity in allocation.group_lines(order.stock_lines()).items():
            allocation.commit(product_id, variant_id, quantity, reference=f"order:{order.order_number}")
        current_domain.repository_for(Order).add(order)

    @handle(DeliverOrder)
    def deliver_order(self, command):
        _staff(command)
        order = load_order(command.order_id)
        order.deliver()
        current_domain.repository_for(Order).add(order)

    @handle(CancelOrder)
    def cancel_order(self, command):
        actor = Actor.of(command.actor_id, command.actor_role)
        order = load_order(command.order_id)
        actor.require_owner(order.user_id, "order")

        was_shipped = order.is_shipped
        order.cancel(command.reason, cancelled_by=actor.user_id)

        if not was_shipped:
            for (product_id, variant_id), quantity in allocation.group_lines(order.stock_lines()).items():
                allocation.release(product_id, variant_id, quantity, reference=f"order:{order.order_number}")
        if order.points_redeemed:
            refund_points(
                order.user_id,
                order.points_redeemed,
                reference=order.order_number,
                description=f"Refund for cancelled order {order.order_number}",
            )

        current_domain.repository_for(Order).add(order)
        logger.info(
            "Order cancelled",
            order_id=str(order.id),
            order_number=order.order_number,
            released_stock=not was_shipped,
            points_refunded=order.points_redeemed or 0,
        )
