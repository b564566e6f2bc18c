"""Domain events for the StockItem aggregate.

Every event carries the resulting levels so that replay never has to
recompute them.
"""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="StockItem")
class StockInitialized:
    __version__ = 1

    stock_item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    stock_key = String(required=True)
    sku = String()
    initial_quantity = Integer(required=True)
    reorder_point = Integer(required=True)
    initialized_at = DateTime(required=True)


@storefront.event(part_of="StockItem")
class StockReserved:
    __version__ = 1

    stock_item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True)
    reference = String()  # cart or order the hold belongs to
    new_reserved = Integer(required=True)
    new_available = Integer(required=True)
    reserved_at = DateTime(required=True)


@storefront.event(part_of="StockItem")
class StockReleased:
    """Reserved stock returned to available. ``quantity`` is what was actually released."""

    __version__ = 1

    stock_item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True)
    requested_quantity = Integer(required=True)
    reference = String()
    new_reserved = Integer(required=True)
    new_available = Integer(required=True)
    released_at = DateTime(required=True)


@storefront.event(part_of="StockItem")
class StockCommitted:
    """Reserved stock left the warehouse with a shipped order."""

    __version__ = 1

    stock_item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True)
    reference = String()
    new_on_hand = Integer(required=True)
    new_reserved = Integer(required=True)
    committed_at = DateTime(required=True)


@storefront.event(part_of="StockItem")
class StockMovementApplied:
    __version__ = 1

    stock_item_id = Identifier(required=True)
    movement_id = Identifier(required=True)
    movement_type = String(required=True)
    quantity = Integer(required=True)
    previous_on_hand = Integer(required=True)
    new_on_hand = Integer(required=True)
    new_available = Integer(required=True)
    applied_at = DateTime(required=True)


@storefront.event(part_of="StockItem")
class ReorderPointUpdated:
    __version__ = 1

    stock_item_id = Identifier(required=True)
    previous_reorder_point = Integer(required=True)
    reorder_point = Integer(required=True)
    updated_at = DateTime(required=True)


@storefront.event(part_of="StockItem")
class LowStockDetected:
    __version__ = 1

    stock_item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    sku = String()
    available = Integer(required=True)
    reorder_point = Integer(required=True)
    detected_at = DateTime(required=True)
