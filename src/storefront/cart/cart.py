"""Cart aggregate (CQRS): mutable line items ahead of checkout.

A cart belongs to a signed-in user or to a guest session, never neither.
Stock is held for every line while it sits in the cart. The handlers keep
those holds in step with the line quantities.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from storefront.cart.events import (
    CartAbandoned,
    CartCleared,
    CartConverted,
    CartCreated,
    CartItemAdded,
    CartItemQuantityChanged,
    CartItemRemoved,
    CartSyncedWithUser,
)
from storefront.domain import storefront
from storefront.shared.errors import BusinessRuleViolation, NotFound


class CartStatus(Enum):
    ACTIVE = "active"
    CONVERTED = "converted"
    ABANDONED = "abandoned"


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    added_at = DateTime()

    @property
    def line_total(self) -> float:
        return round(self.unit_price * self.quantity, 2)

    def matches(self, product_id, variant_id) -> bool:
        return str(self.product_id) == str(product_id) and (self.variant_id or None) == (
            str(variant_id) if variant_id else None
        )


@storefront.aggregate
class Cart:
    user_id = Identifier()
    session_id = String(max_length=255)
    items = HasMany(CartItem)
    shipping_address = Text()
    billing_address = Text()
    notes = Text()
    status = String(choices=CartStatus, default=CartStatus.ACTIVE.value)
    order_id = Identifier()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def cart_must_have_an_owner(self):
        if not self.user_id and not self.session_id:
            raise ValidationError({"cart": ["A cart needs a user or a session"]})

    @invariant.post
    def lines_must_be_unique(self):
        keys = [(str(i.product_id), i.variant_id or None) for i in self.items]
        if len(keys) != len(set(keys)):
            raise ValidationError({"items": ["Each product and variant appears once per cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id=None, session_id=None):
        now = datetime.now(UTC)
        cart = cls(
            user_id=user_id,
            session_id=session_id,
            status=CartStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
        )
        cart.raise_(
            CartCreated(
                cart_id=str(cart.id),
                user_id=str(user_id) if user_id else None,
                session_id=session_id,
                created_at=now,
            )
        )
        return cart

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def is_active(self) -> bool:
        return self.status == CartStatus.ACTIVE.value

    @property
    def is_guest(self) -> bool:
        return not self.user_id

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def total_quantity(self) -> int:
        return sum(i.quantity for i in self.items)

    @property
    def subtotal(self) -> float:
        return round(sum(i.line_total for i in self.items), 2)

    def _require_active(self, action: str):
        if not self.is_active:
            raise BusinessRuleViolation(f"Cannot {action} a {self.status} cart", field="status")

    def find_item(self, item_id) -> CartItem:
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise NotFound(f"Item {item_id} not found in cart", field="item_id")
        return item

    def find_line(self, product_id, variant_id=None) -> CartItem | None:
        return next((i for i in self.items if i.matches(product_id, variant_id)), None)

    # -------------------------------------------------------------------
    # Details
    # -------------------------------------------------------------------
    def update_details(self, shipping_address=None, billing_address=None, notes=None):
        self._require_active("update")
        if shipping_address is not None:
            self.shipping_address = shipping_address
        if billing_address is not None:
            self.billing_address = billing_address
        if notes is not None:
            self.notes = notes
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Lines
    # -------------------------------------------------------------------
    def add_item(self, product_id, variant_id, quantity, unit_price) -> CartItem:
        """Add a line, or raise the quantity of the existing line for the same product and variant."""
        self._require_active("add items to")
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        now = datetime.now(UTC)
        item = self.find_line(product_id, variant_id)
        if item is not None:
            item.quantity += quantity
            item.unit_price = unit_price
        else:
            item = CartItem(
                product_id=product_id,
                variant_id=variant_id,
                quantity=quantity,
                unit_price=unit_price,
                added_at=now,
            )
            self.add_items(item)

        self.updated_at = now
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                variant_id=str(variant_id) if variant_id else None,
                quantity=quantity,
                unit_price=unit_price,
            )
        )
        return item

    def update_item_quantity(self, item_id, new_quantity) -> int:
        """Set a line's quantity. Returns the change (positive when it grew)."""
        self._require_active("update items in")
        if new_quantity is None or new_quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        item = self.find_item(item_id)
        previous = item.quantity
        if previous == new_quantity:
            return 0

        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartItemQuantityChanged(
                cart_id=str(self.id),
                item_id=str(item.id),
                previous_quantity=previous,
                new_quantity=new_quantity,
            )
        )
        return new_quantity - previous

    def remove_item(self, item_id) -> CartItem:
        self._require_active("remove items from")
        item = self.find_item(item_id)
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(item.product_id),
                variant_id=item.variant_id,
                quantity=item.quantity,
            )
        )
        return item

    def clear(self) -> list[CartItem]:
        self._require_active("clear")
        removed = list(self.items)
        for item in removed:
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartCleared(cart_id=str(self.id), items_removed=len(removed)))
        return removed

    # -------------------------------------------------------------------
    # Ownership
    # -------------------------------------------------------------------
    def assign_to_user(self, user_id, merged_items=()):
        """Claim a guest cart for a user, folding in lines from the user's previous cart."""
        if not self.is_guest:
            raise BusinessRuleViolation("Cart already belongs to a user", field="cart_id")
        self._require_active("sync")

        now = datetime.now(UTC)
        for source in merged_items:
            line = self.find_line(source.product_id, source.variant_id)
            if line is not None:
                line.quantity += source.quantity
            else:
                self.add_items(
                    CartItem(
                        product_id=source.product_id,
                        variant_id=source.variant_id,
                        quantity=source.quantity,
                        unit_price=source.unit_price,
                        added_at=now,
                    )
                )

        self.user_id = user_id
        self.updated_at = now
        self.raise_(
            CartSyncedWithUser(
                cart_id=str(self.id),
                user_id=str(user_id),
                session_id=self.session_id,
                items_merged=len(merged_items),
            )
        )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def mark_converted(self, order_id):
        self._require_active("convert")
        if not self.items:
            raise BusinessRuleViolation("Cannot convert an empty cart", field="cart")

        snapshot = [
            {
                "product_id": str(item.product_id),
                "variant_id": item.variant_id,
                "quantity": item.quantity,
            }
            for item in self.items
        ]
        now = datetime.now(UTC)
        self.status = CartStatus.CONVERTED.value
        self.order_id = order_id
        self.updated_at = now
        self.raise_(
            CartConverted(
                cart_id=str(self.id),
                order_id=str(order_id),
                user_id=str(self.user_id) if self.user_id else None,
                items=json.dumps(snapshot),
                converted_at=now,
            )
        )

    def abandon(self):
        self._require_active("abandon")
        now = datetime.now(UTC)
        self.status = CartStatus.ABANDONED.value
        self.updated_at = now
        self.raise_(CartAbandoned(cart_id=str(self.id), abandoned_at=now))
