"""StockItem aggregate (Event Sourced): stock for one product or product variant.

All state changes are captured as events and replayed through @apply
handlers. Appends are checked against the stream's expected version, so two
concurrent reservations on the same item cannot both succeed on stale state:
the loser fails with ``ExpectedVersionError`` and nothing is written.

Stock Level Model:
    on_hand:   Physical count in the warehouse
    reserved:  Held for carts and orders (not yet shipped)
    available: on_hand - reserved (what can still be sold)

Invariant: on_hand >= reserved >= 0.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import NAMESPACE_URL, uuid5

from protean import apply, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.inventory.stock.events import (
    LowStockDetected,
    ReorderPointUpdated,
    StockCommitted,
    StockInitialized,
    StockMovementApplied,
    StockReleased,
    StockReserved,
)
from storefront.shared.errors import BusinessRuleViolation, InsufficientStock

DEFAULT_REORDER_POINT = 10
STOCK_NAMESPACE = uuid5(NAMESPACE_URL, "storefront:stock-item")


class MovementType(Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"
    ADJUSTMENT = "adjustment"
    TRANSFER = "transfer"
    RETURN = "return"


def stock_key(product_id, variant_id=None) -> str:
    """Natural key of a stock row: one per (product, optional variant)."""
    return f"{product_id}:{variant_id or '-'}"


def stock_item_id(product_id, variant_id=None) -> str:
    """Identity of the stock item for a (product, variant) pair.

    Derived from the natural key, so two creations for the same pair open the
    same stream and the second one fails on the expected-version check.
    """
    return str(uuid5(STOCK_NAMESPACE, stock_key(product_id, variant_id)))


@storefront.value_object(part_of="StockItem")
class StockLevels:
    on_hand = Integer(default=0)
    reserved = Integer(default=0)
    available = Integer(default=0)


@storefront.aggregate(is_event_sourced=True)
class StockItem:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    stock_key = String(required=True, max_length=120)
    sku = String(max_length=50)
    levels = ValueObject(StockLevels)
    reorder_point = Integer(default=DEFAULT_REORDER_POINT)
    last_movement_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def reserved_must_not_exceed_on_hand(self):
        if self.levels and not (self.levels.on_hand >= self.levels.reserved >= 0):
            raise ValidationError({"levels": ["On-hand must be at least reserved, and reserved at least zero"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, product_id, variant_id=None, sku=None, initial_quantity=0, reorder_point=DEFAULT_REORDER_POINT):
        if initial_quantity < 0:
            raise ValidationError({"initial_quantity": ["Initial quantity cannot be negative"]})
        if reorder_point < 0:
            raise ValidationError({"reorder_point": ["Reorder point cannot be negative"]})

        item = cls._create_new(id=stock_item_id(product_id, variant_id))
        item.raise_(
            StockInitialized(
                stock_item_id=str(item.id),
                product_id=str(product_id),
                variant_id=str(variant_id) if variant_id else None,
                stock_key=stock_key(product_id, variant_id),
                sku=sku,
                initial_quantity=initial_quantity,
                reorder_point=reorder_point,
                initialized_at=datetime.now(UTC),
            )
        )
        return item

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def on_hand(self) -> int:
        return self.levels.on_hand if self.levels else 0

    @property
    def reserved(self) -> int:
        return self.levels.reserved if self.levels else 0

    @property
    def available(self) -> int:
        return self.on_hand - self.reserved

    @property
    def is_low_stock(self) -> bool:
        return self.available <= self.reorder_point

    def _check_low_stock(self, previous_available: int):
        """Raise LowStockDetected when a change crosses into low stock."""
        if previous_available > self.reorder_point >= self.available:
            self.raise_(
                LowStockDetected(
                    stock_item_id=str(self.id),
                    product_id=str(self.product_id),
                    variant_id=self.variant_id,
                    sku=self.sku,
                    available=self.available,
                    reorder_point=self.reorder_point,
                    detected_at=datetime.now(UTC),
                )
            )

    # -------------------------------------------------------------------
    # Reservations
    # -------------------------------------------------------------------
    def reserve(self, quantity, reference=None):
        """Hold stock for a cart or order. Fails without touching state if not enough is available."""
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        available = self.available
        if available < quantity:
            raise InsufficientStock(available=available, requested=quantity)

        self.raise_(
            StockReserved(
                stock_item_id=str(self.id),
                product_id=str(self.product_id),
                variant_id=self.variant_id,
                quantity=quantity,
                reference=reference,
                new_reserved=self.reserved + quantity,
                new_available=available - quantity,
                reserved_at=datetime.now(UTC),
            )
        )
        self._check_low_stock(available)

    def release(self, quantity, reference=None) -> int:
        """Return held stock to available, floored at zero reserved. Returns the quantity released."""
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        released = min(quantity, self.reserved)
        if released == 0:
            return 0

        self.raise_(
            StockReleased(
                stock_item_id=str(self.id),
                product_id=str(self.product_id),
                variant_id=self.variant_id,
                quantity=released,
                requested_quantity=quantity,
                reference=reference,
                new_reserved=self.reserved - released,
                new_available=self.available + released,
                released_at=datetime.now(UTC),
            )
        )
        return released

    def commit(self, quantity, reference=None):
        """Deduct shipped stock: on-hand and reserved both drop by ``quantity``."""
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})
        if quantity > self.reserved:
            raise BusinessRuleViolation(
                f"Cannot commit {quantity} units, only {self.reserved} reserved",
                field="quantity",
            )

        self.raise_(
            StockCommitted(
                stock_item_id=str(self.id),
                product_id=str(self.product_id),
                variant_id=self.variant_id,
                quantity=quantity,
                reference=reference,
                new_on_hand=self.on_hand - quantity,
                new_reserved=self.reserved - quantity,
                committed_at=datetime.now(UTC),
            )
        )

    # -------------------------------------------------------------------
    # Movements
    # -------------------------------------------------------------------
    def apply_movement(self, movement_id, movement_type, quantity):
        """Apply a completed inventory movement to on-hand stock."""
        kind = MovementType(movement_type)
        previous_on_hand = self.on_hand
        previous_available = self.available

        if kind in (MovementType.INBOUND, MovementType.RETURN):
            if quantity <= 0:
                raise ValidationError({"quantity": ["Quantity must be positive"]})
            new_on_hand = previous_on_hand + quantity
        elif kind in (MovementType.OUTBOUND, MovementType.TRANSFER):
            if quantity <= 0:
                raise ValidationError({"quantity": ["Quantity must be positive"]})
            if quantity > previous_available:
                raise InsufficientStock(available=previous_available, requested=quantity)
            new_on_hand = previous_on_hand - quantity
        else:
            if quantity < 0:
                raise ValidationError({"quantity": ["Adjusted quantity cannot be negative"]})
            if quantity < self.reserved:
                raise BusinessRuleViolation(
                    f"Adjusted on-hand {quantity} would fall below reserved {self.reserved}",
                    field="quantity",
                )
            new_on_hand = quantity

        self.raise_(
            StockMovementApplied(
                stock_item_id=str(self.id),
                movement_id=str(movement_id),
                movement_type=kind.value,
                quantity=quantity,
                previous_on_hand=previous_on_hand,
                new_on_hand=new_on_hand,
                new_available=new_on_hand - self.reserved,
                applied_at=datetime.now(UTC),
            )
        )
        self._check_low_stock(previous_available)

    def update_reorder_point(self, reorder_point):
        if reorder_point is None or reorder_point < 0:
            raise ValidationError({"reorder_point": ["Reorder point cannot be negative"]})

        previous = self.reorder_point
        self.raise_(
            ReorderPointUpdated(
                stock_item_id=str(self.id),
                previous_reorder_point=previous,
                reorder_point=reorder_point,
                updated_at=datetime.now(UTC),
            )
        )
        if self.available > previous and self.is_low_stock:
            self.raise_(
                LowStockDetected(
                    stock_item_id=str(self.id),
                    product_id=str(self.product_id),
                    variant_id=self.variant_id,
                    sku=self.sku,
                    available=self.available,
                    reorder_point=self.reorder_point,
                    detected_at=datetime.now(UTC),
                )
            )

    # -------------------------------------------------------------------
    # @apply methods: rebuild state during event replay
    # -------------------------------------------------------------------
    @apply
    def _on_stock_initialized(self, event: StockInitialized):
        self.id = event.stock_item_id
        self.product_id = event.product_id
        self.variant_id = event.variant_id
        self.stock_key = event.stock_key
        self.sku = event.sku
        self.reorder_point = event.reorder_point
        self.levels = StockLevels(
            on_hand=event.initial_quantity,
            reserved=0,
            available=event.initial_quantity,
        )
        self.created_at = event.initialized_at
        self.updated_at = event.initialized_at

    @apply
    def _on_stock_reserved(self, event: StockReserved):
        self.levels = StockLevels(
            on_hand=self.on_hand,
            reserved=event.new_reserved,
            available=event.new_available,
        )
        self.updated_at = event.reserved_at

    @apply
    def _on_stock_released(self, event: StockReleased):
        self.levels = StockLevels(
            on_hand=self.on_hand,
            reserved=event.new_reserved,
            available=event.new_available,
        )
        self.updated_at = event.released_at

    @apply
    def _on_stock_committed(self, event: StockCommitted):
        self.levels = StockLevels(
            on_hand=event.new_on_hand,
            reserved=event.new_reserved,
            available=event.new_on_hand - event.new_reserved,
        )
        self.updated_at = event.committed_at

    @apply
    def _on_stock_movement_applied(self, event: StockMovementApplied):
        self.levels = StockLevels(
            on_hand=event.new_on_hand,
            reserved=self.reserved,
            available=event.new_available,
        )
        self.last_movement_at = event.applied_at
        self.updated_at = event.applied_at

    @apply
    def _on_reorder_point_updated(self, event: ReorderPointUpdated):
        self.reorder_point = event.reorder_point
        self.updated_at = event.updated_at

    @apply
    def _on_low_stock_detected(self, event: LowStockDetected):  # noqa: ARG002
        pass
