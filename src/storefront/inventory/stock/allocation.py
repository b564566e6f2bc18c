"""Stock allocation used inside command handlers.

Cart and order handlers call these functions so that reservations are saved in
the same Unit of Work as the cart or order that caused them.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.inventory.stock.stock import StockItem, stock_item_id, stock_key
from storefront.shared.errors import InsufficientStock, NotFound
from storefront.utils.logging import logger


def find_stock_item(product_id, variant_id=None) -> StockItem | None:
    """Load the stock item for a (product, variant) pair, or None if it was never initialised."""
    try:
        return current_domain.repository_for(StockItem).get(stock_item_id(product_id, variant_id))
    except ObjectNotFoundError:
        return None


def available_quantity(product_id, variant_id=None) -> int:
    item = find_stock_item(product_id, variant_id)
    return item.available if item else 0


def reserve(product_id, variant_id, quantity, reference=None) -> StockItem:
    item = find_stock_item(product_id, variant_id)
    if item is None:
        raise InsufficientStock(available=0, requested=quantity)

    item.reserve(quantity, reference=reference)
    current_domain.repository_for(StockItem).add(item)
    logger.info(
        "Stock reserved",
        stock_item_id=str(item.id),
        quantity=quantity,
        available=item.available,
        reference=reference,
    )
    return item


def release(product_id, variant_id, quantity, reference=None) -> int:
    item = find_stock_item(product_id, variant_id)
    if item is None:
        raise NotFound(f"No stock level for {stock_key(product_id, variant_id)}", field="product_id")

    released = item.release(quantity, reference=reference)
    if released:
        current_domain.repository_for(StockItem).add(item)
    logger.info("Stock released", stock_item_id=str(item.id), quantity=released, reference=reference)
    return released


def commit(product_id, variant_id, quantity, reference=None) -> None:
    item = find_stock_item(product_id, variant_id)
    if item is None:
        raise NotFound(f"No stock level for {stock_key(product_id, variant_id)}", field="product_id")

    item.commit(quantity, reference=reference)
    current_domain.repository_for(StockItem).add(item)


def group_lines(lines) -> dict[tuple, int]:
    """Sum quantities per (product, variant) so each stock item is loaded once per Unit of Work."""
    totals: dict[tuple, int] = {}
    for product_id, variant_id, quantity in lines:
        key = (str(product_id), str(variant_id) if variant_id else None)
        totals[key] = totals.get(key, 0) + quantity
    return totals
