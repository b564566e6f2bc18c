"""Direct stock reservation: commands and handler.

Carts and orders reserve through ``allocation`` inside their own handlers.
These commands are the staff entry point for manual holds.
"""

from protean import handle
from protean.fields import Identifier, Integer, String

from storefront.domain import storefront
from storefront.inventory.stock import allocation
from storefront.inventory.stock.stock import StockItem
from storefront.shared.access import Actor, Role


@storefront.command(part_of="StockItem")
class ReserveStock:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True)
    reference = String(max_length=255)


@storefront.command(part_of="StockItem")
class ReleaseStock:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True)
    reference = String(max_length=255)


@storefront.command_handler(part_of=StockItem)
class ReservationHandler:
    @handle(ReserveStock)
    def reserve_stock(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.STAFF)
        item = allocation.reserve(
            command.product_id,
            command.variant_id,
            command.quantity,
            reference=command.reference,
        )
        return item.available

    @handle(ReleaseStock)
    def release_stock(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.STAFF)
        return allocation.release(
            command.product_id,
            command.variant_id,
            command.quantity,
            reference=command.reference,
        )
