"""Stock settings: command and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.inventory.stock.stock import StockItem
from storefront.shared.access import Actor, Role
from storefront.shared.errors import NotFound


@storefront.command(part_of="StockItem")
class UpdateStockSettings:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    stock_item_id = Identifier(required=True)
    reorder_point = Integer(required=True, min_value=0)


@storefront.command_handler(part_of=StockItem)
class StockSettingsHandler:
    @handle(UpdateStockSettings)
    def update_settings(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.STAFF)
        repo = current_domain.repository_for(StockItem)
        try:
            item = repo.get(command.stock_item_id)
        except ObjectNotFoundError:
            raise NotFound(f"Stock item {command.stock_item_id} not found", field="stock_item_id") from None
        item.update_reorder_point(command.reorder_point)
        repo.add(item)
