"""Inventory movement workflow: commands and handler.

Create → Approve → Complete, each step by staff. Completing a movement applies
its delta to the stock item in the same Unit of Work, so the movement status
and the stock change are committed together or not at all.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.inventory.movement.movement import InventoryMovement
from storefront.inventory.stock.allocation import find_stock_item
from storefront.inventory.stock.stock import MovementType, StockItem
from storefront.shared.access import Actor, Role
from storefront.shared.errors import DomainError, NotFound
from storefront.utils.logging import logger


@storefront.command(part_of="InventoryMovement")
class CreateMovement:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    movement_type = String(required=True, max_length=20)
    quantity = Integer(required=True, min_value=0)
    unit_cost = Float(min_value=0.0)
    reference = String(max_length=255)
    reference_type = String(max_length=50)
    notes = Text()


@storefront.command(part_of="InventoryMovement")
class UpdateMovement:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    movement_id = Identifier(required=True)
    quantity = Integer(min_value=0)
    unit_cost = Float(min_value=0.0)
    reference = String(max_length=255)
    reference_type = String(max_length=50)
    notes = Text()


@storefront.command(part_of="InventoryMovement")
class DeleteMovement:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    movement_id = Identifier(required=True)


@storefront.command(part_of="InventoryMovement")
class ApproveMovement:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    movement_id = Identifier(required=True)


@storefront.command(part_of="InventoryMovement")
class CompleteMovement:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    movement_id = Identifier(required=True)


@storefront.command(part_of="InventoryMovement")
class CancelMovement:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    movement_id = Identifier(required=True)
    reason = String(max_length=255)


def _staff(command) -> Actor:
    actor = Actor.of(command.actor_id, command.actor_role)
    actor.require(Role.STAFF)
    return actor


def load_movement(movement_id) -> InventoryMovement:
    try:
        return current_domain.repository_for(InventoryMovement).get(movement_id)
    except ObjectNotFoundError:
        raise NotFound(f"Movement {movement_id} not found", field="movement_id") from None


@storefront.command_handler(part_of=InventoryMovement)
class MovementHandler:
    @handle(CreateMovement)
    def create_movement(self, command):
        actor = _staff(command)
        try:
            kind = MovementType(command.movement_type)
        except ValueError:
            raise DomainError(f"Unknown movement type: {command.movement_type}", field="movement_type") from None

        movement = InventoryMovement.create(
            product_id=command.product_id,
            variant_id=command.variant_id,
            movement_type=kind.value,
            quantity=command.quantity,
            unit_cost=command.unit_cost,
            reference=command.reference,
            reference_type=command.reference_type,
            notes=command.notes,
            created_by=actor.user_id,
        )
        current_domain.repository_for(InventoryMovement).add(movement)
        logger.info("Movement created", movement_id=str(movement.id), movement_type=kind.value)
        return str(movement.id)

    @handle(UpdateMovement)
    def update_movement(self, command):
        _staff(command)
        movement = load_movement(command.movement_id)
        movement.update(
            quantity=command.quantity,
            unit_cost=command.unit_cost,
            reference=command.reference,
            reference_type=command.reference_type,
            notes=command.notes,
        )
        current_domain.repository_for(InventoryMovement).add(movement)

    @handle(DeleteMovement)
    def delete_movement(self, command):
        _staff(command)
        movement = load_movement(command.movement_id)
        movement.ensure_deletable()
        current_domain.repository_for(InventoryMovement)._dao.delete(movement)

    @handle(ApproveMovement)
    def approve_movement(self, command):
        actor = _staff(command)
        movement = load_movement(command.movement_id)
        movement.approve(approved_by=actor.user_id)
        current_domain.repository_for(InventoryMovement).add(movement)

    @handle(CompleteMovement)
    def complete_movement(self, command):
        _staff(command)
        movement = load_movement(command.movement_id)
        movement.complete()

        stock_repo = current_domain.repository_for(StockItem)
        item = find_stock_item(movement.product_id, movement.variant_id)
        if item is None:
            item = StockItem.create(product_id=movement.product_id, variant_id=movement.variant_id)
        item.apply_movement(movement.id, movement.movement_type, movement.quantity)

        stock_repo.add(item)
        current_domain.repository_for(InventoryMovement).add(movement)
        logger.info(
            "Movement completed",
            movement_id=str(movement.id),
            stock_item_id=str(item.id),
            on_hand=item.on_hand,
        )
        return item.on_hand

    @handle(CancelMovement)
    def cancel_movement(self, command):
        _staff(command)
        movement = load_movement(command.movement_id)
        movement.cancel(reason=command.reason)
        current_domain.repository_for(InventoryMovement).add(movement)
