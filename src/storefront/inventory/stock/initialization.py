"""Stock initialization: command and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.inventory.stock.allocation import find_stock_item
from storefront.inventory.stock.stock import DEFAULT_REORDER_POINT, StockItem, stock_key
from storefront.shared.access import Actor, Role
from storefront.shared.errors import Conflict
from storefront.utils.logging import logger


@storefront.command(part_of="StockItem")
class InitializeStock:
    """Start tracking stock for a product or one of its variants."""

    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    sku = String(max_length=50)
    initial_quantity = Integer(default=0, min_value=0)
    reorder_point = Integer(default=DEFAULT_REORDER_POINT, min_value=0)


@storefront.command_handler(part_of=StockItem)
class InitializeStockHandler:
    @handle(InitializeStock)
    def initialize_stock(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.STAFF)
        if find_stock_item(command.product_id, command.variant_id) is not None:
            key = stock_key(command.product_id, command.variant_id)
            raise Conflict(f"Stock for {key} is already tracked", field="product_id")

        item = StockItem.create(
            product_id=command.product_id,
            variant_id=command.variant_id,
            sku=command.sku,
            initial_quantity=command.initial_quantity or 0,
            reorder_point=command.reorder_point if command.reorder_point is not None else DEFAULT_REORDER_POINT,
        )
        current_domain.repository_for(StockItem).add(item)
        logger.info("Stock initialized", stock_item_id=str(item.id), stock_key=item.stock_key)
        return str(item.id)
