"""Read-side helpers for stock levels and movements."""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.inventory.movement.movement import InventoryMovement
from storefront.inventory.projections.stock_level import StockLevel
from storefront.inventory.stock.stock import stock_key
from storefront.shared.dates import date_range_filters, parse_date
from storefront.shared.errors import NotFound
from storefront.shared.pagination import Page, iter_all, paginate


@dataclass
class StockLevelFilters:
    product_id: str | None = None
    low_stock: bool = False
    out_of_stock: bool = False


@dataclass
class MovementFilters:
    movement_type: str | None = None
    status: str | None = None
    product_id: str | None = None
    reference: str | None = None
    start_date: str | None = None
    end_date: str | None = None


@dataclass
class InventoryStats:
    total_items: int = 0
    low_stock_items: int = 0
    out_of_stock_items: int = 0
    total_on_hand: int = 0
    total_reserved: int = 0
    pending_movements: int = 0


def get_stock_level(stock_item_id: str) -> StockLevel:
    try:
        return current_domain.repository_for(StockLevel).get(stock_item_id)
    except ObjectNotFoundError:
        raise NotFound(f"Stock item {stock_item_id} not found", field="stock_item_id") from None


def get_stock_for_product(product_id: str, variant_id: str | None = None) -> StockLevel:
    key = stock_key(product_id, variant_id)
    levels = current_domain.repository_for(StockLevel)._dao.query.filter(stock_key=key).all().items
    if not levels:
        raise NotFound(f"No stock level for {key}", field="product_id")
    return levels[0]


def list_stock_levels(filters: StockLevelFilters, page: int | None = None, limit: int | None = None) -> Page:
    criteria = {}
    if filters.product_id:
        criteria["product_id"] = filters.product_id
    if filters.out_of_stock:
        criteria["is_out_of_stock"] = True
    elif filters.low_stock:
        criteria["is_low_stock"] = True

    query = current_domain.repository_for(StockLevel)._dao.query.filter(**criteria).order_by("available")
    return paginate(query, page, limit)


def get_movement(movement_id: str) -> InventoryMovement:
    try:
        return current_domain.repository_for(InventoryMovement).get(movement_id)
    except ObjectNotFoundError:
        raise NotFound(f"Movement {movement_id} not found", field="movement_id") from None


def list_movements(filters: MovementFilters, page: int | None = None, limit: int | None = None) -> Page:
    criteria = {}
    if filters.movement_type:
        criteria["movement_type"] = filters.movement_type
    if filters.status:
        criteria["status"] = filters.status
    if filters.product_id:
        criteria["product_id"] = filters.product_id
    if filters.reference:
        criteria["reference"] = filters.reference
    criteria.update(
        date_range_filters(
            "created_at",
            parse_date(filters.start_date, "start_date"),
            parse_date(filters.end_date, "end_date"),
        )
    )

    query = current_domain.repository_for(InventoryMovement)._dao.query.filter(**criteria).order_by("-created_at")
    return paginate(query, page, limit)


def inventory_stats() -> InventoryStats:
    stats = InventoryStats()
    for level in iter_all(current_domain.repository_for(StockLevel)._dao.query):
        stats.total_items += 1
        stats.total_on_hand += level.on_hand
        stats.total_reserved += level.reserved
        if level.is_out_of_stock:
            stats.out_of_stock_items += 1
        elif level.is_low_stock:
            stats.low_stock_items += 1

    movements = current_domain.repository_for(InventoryMovement)._dao.query.filter(status="pending")
    stats.pending_movements = movements.all().total
    return stats
