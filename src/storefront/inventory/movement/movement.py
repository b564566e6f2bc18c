"""InventoryMovement aggregate: a recorded change to on-hand stock.

Workflow:
    PENDING → APPROVED → COMPLETED
    PENDING | APPROVED → CANCELLED

A movement is editable and deletable only while pending. Its delta reaches the
stock item once, when it completes.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.inventory.movement.events import (
    MovementApproved,
    MovementCancelled,
    MovementCompleted,
    MovementCreated,
)
from storefront.inventory.stock.stock import MovementType
from storefront.shared.errors import InvalidTransition


class MovementStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@storefront.aggregate
class InventoryMovement:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    movement_type = String(required=True, choices=MovementType)
    quantity = Integer(required=True, min_value=0)
    unit_cost = Float(min_value=0.0)
    total_cost = Float(min_value=0.0)
    reference = String(max_length=255)
    reference_type = String(max_length=50)
    notes = Text()
    status = String(choices=MovementStatus, default=MovementStatus.PENDING.value)
    created_by = Identifier()
    approved_by = Identifier()
    approved_at = DateTime()
    completed_at = DateTime()
    cancelled_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def quantity_must_be_positive_unless_adjustment(self):
        if self.movement_type != MovementType.ADJUSTMENT.value and (self.quantity or 0) <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

    @classmethod
    def create(
        cls,
        product_id,
        movement_type,
        quantity,
        variant_id=None,
        unit_cost=None,
        reference=None,
        reference_type=None,
        notes=None,
        created_by=None,
    ):
        kind = MovementType(movement_type)
        now = datetime.now(UTC)
        movement = cls(
            product_id=product_id,
            variant_id=variant_id,
            movement_type=kind.value,
            quantity=quantity,
            unit_cost=unit_cost,
            total_cost=round(unit_cost * quantity, 2) if unit_cost is not None else None,
            reference=reference,
            reference_type=reference_type,
            notes=notes,
            status=MovementStatus.PENDING.value,
            created_by=created_by,
            created_at=now,
            updated_at=now,
        )
        movement.raise_(
            MovementCreated(
                movement_id=str(movement.id),
                product_id=str(product_id),
                variant_id=str(variant_id) if variant_id else None,
                movement_type=kind.value,
                quantity=quantity,
                reference=reference,
                created_by=created_by,
                created_at=now,
            )
        )
        return movement

    @property
    def is_pending(self) -> bool:
        return self.status == MovementStatus.PENDING.value

    def _require_status(self, expected: MovementStatus, action: str):
        if self.status != expected.value:
            raise InvalidTransition(f"Cannot {action} a movement in {self.status} status")

    def update(self, quantity=None, unit_cost=None, reference=None, reference_type=None, notes=None):
        self._require_status(MovementStatus.PENDING, "update")

        if quantity is not None:
            self.quantity = quantity
        if unit_cost is not None:
            self.unit_cost = unit_cost
        if reference is not None:
            self.reference = reference
        if reference_type is not None:
            self.reference_type = reference_type
        if notes is not None:
            self.notes = notes
        if self.unit_cost is not None:
            self.total_cost = round(self.unit_cost * self.quantity, 2)
        self.updated_at = datetime.now(UTC)

    def ensure_deletable(self):
        self._require_status(MovementStatus.PENDING, "delete")

    def approve(self, approved_by):
        self._require_status(MovementStatus.PENDING, "approve")

        now = datetime.now(UTC)
        self.status = MovementStatus.APPROVED.value
        self.approved_by = approved_by
        self.approved_at = now
        self.updated_at = now
        self.raise_(MovementApproved(movement_id=str(self.id), approved_by=approved_by, approved_at=now))

    def complete(self):
        """Mark the movement completed. The caller applies the delta to stock in the same Unit of Work."""
        self._require_status(MovementStatus.APPROVED, "complete")

        now = datetime.now(UTC)
        self.status = MovementStatus.COMPLETED.value
        self.completed_at = now
        self.updated_at = now
        self.raise_(
            MovementCompleted(
                movement_id=str(self.id),
                product_id=str(self.product_id),
                variant_id=self.variant_id,
                movement_type=self.movement_type,
                quantity=self.quantity,
                total_cost=self.total_cost,
                completed_at=now,
            )
        )

    def cancel(self, reason=None):
        if self.status not in (MovementStatus.PENDING.value, MovementStatus.APPROVED.value):
            raise InvalidTransition(f"Cannot cancel a movement in {self.status} status")

        now = datetime.now(UTC)
        self.status = MovementStatus.CANCELLED.value
        self.cancelled_at = now
        self.updated_at = now
        self.raise_(MovementCancelled(movement_id=str(self.id), reason=reason, cancelled_at=now))
