"""Domain events for the InventoryMovement aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="InventoryMovement")
class MovementCreated:
    __version__ = 1

    movement_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    movement_type = String(required=True)
    quantity = Integer(required=True)
    reference = String()
    created_by = Identifier()
    created_at = DateTime(required=True)


@storefront.event(part_of="InventoryMovement")
class MovementApproved:
    __version__ = 1

    movement_id = Identifier(required=True)
    approved_by = Identifier(required=True)
    approved_at = DateTime(required=True)


@storefront.event(part_of="InventoryMovement")
class MovementCompleted:
    __version__ = 1

    movement_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    movement_type = String(required=True)
    quantity = Integer(required=True)
    total_cost = Float()
    completed_at = DateTime(required=True)


@storefront.event(part_of="InventoryMovement")
class MovementCancelled:
    __version__ = 1

    movement_id = Identifier(required=True)
    reason = String()
    cancelled_at = DateTime(required=True)
