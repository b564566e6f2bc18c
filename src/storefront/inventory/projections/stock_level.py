"""Stock level: per-item stock for lookups and the low/out-of-stock queries."""

from protean.core.projector import on
from protean.fields import Boolean, DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.inventory.stock.events import (
    ReorderPointUpdated,
    StockCommitted,
    StockInitialized,
    StockMovementApplied,
    StockReleased,
    StockReserved,
)
from storefront.inventory.stock.stock import StockItem


@storefront.projection
class StockLevel:
    stock_item_id = Identifier(identifier=True, required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    stock_key = String(required=True, max_length=120)
    sku = String(max_length=50)
    on_hand = Integer(default=0)
    reserved = Integer(default=0)
    available = Integer(default=0)
    reorder_point = Integer(default=0)
    is_low_stock = Boolean(default=False)
    is_out_of_stock = Boolean(default=True)
    last_movement_at = DateTime()
    updated_at = DateTime()


def _refresh_flags(level: StockLevel) -> None:
    level.available = level.on_hand - level.reserved
    level.is_out_of_stock = level.available <= 0
    level.is_low_stock = level.available <= level.reorder_point


@storefront.projector(projector_for=StockLevel, aggregates=[StockItem])
class StockLevelProjector:
    @on(StockInitialized)
    def on_stock_initialized(self, event):
        level = StockLevel(
            stock_item_id=event.stock_item_id,
            product_id=event.product_id,
            variant_id=event.variant_id,
            stock_key=event.stock_key,
            sku=event.sku,
            on_hand=event.initial_quantity,
            reserved=0,
            reorder_point=event.reorder_point,
            updated_at=event.initialized_at,
        )
        _refresh_flags(level)
        current_domain.repository_for(StockLevel).add(level)

    @on(StockReserved)
    def on_stock_reserved(self, event):
        repo = current_domain.repository_for(StockLevel)
        level = repo.get(event.stock_item_id)
        level.reserved = event.new_reserved
        _refresh_flags(level)
        level.updated_at = event.reserved_at
        repo.add(level)

    @on(StockReleased)
    def on_stock_released(self, event):
        repo = current_domain.repository_for(StockLevel)
        level = repo.get(event.stock_item_id)
        level.reserved = event.new_reserved
        _refresh_flags(level)
        level.updated_at = event.released_at
        repo.add(level)

    @on(StockCommitted)
    def on_stock_committed(self, event):
        repo = current_domain.repository_for(StockLevel)
        level = repo.get(event.stock_item_id)
        level.on_hand = event.new_on_hand
        level.reserved = event.new_reserved
        _refresh_flags(level)
        level.updated_at = event.committed_at
        repo.add(level)

    @on(StockMovementApplied)
    def on_movement_applied(self, event):
        repo = current_domain.repository_for(StockLevel)
        level = repo.get(event.stock_item_id)
        level.on_hand = event.new_on_hand
        _refresh_flags(level)
        level.last_movement_at = event.applied_at
        level.updated_at = event.applied_at
        repo.add(level)

    @on(ReorderPointUpdated)
    def on_reorder_point_updated(self, event):
        repo = current_domain.repository_for(StockLevel)
        level = repo.get(event.stock_item_id)
        level.reorder_point = event.reorder_point
        _refresh_flags(level)
        level.updated_at = event.updated_at
        repo.add(level)
