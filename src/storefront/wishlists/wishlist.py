"""Wishlist aggregate with WishlistItem entity.

A user may keep several wishlists. Public wishlists can be read by anyone,
private ones only by their owner. An item appears at most once per
(product, variant) within a wishlist.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.shared.errors import Conflict, NotFound


@storefront.entity(part_of="Wishlist")
class WishlistItem:
    product_id: Identifier(required=True)
    variant_id: Identifier()
    notes: Text()
    priority: Integer(default=0)  # 0 normal, 1 high, 2 urgent
    added_price: Float(min_value=0.0)
    added_at: DateTime()

    def matches(self, product_id, variant_id) -> bool:
        return str(self.product_id) == str(product_id) and (self.variant_id or None) == (
            str(variant_id) if variant_id else None
        )


@storefront.aggregate
class Wishlist:
    user_id: Identifier(required=True)
    name: String(required=True, max_length=255)
    description: Text()
    is_public: Boolean(default=False)
    items: HasMany(WishlistItem)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def items_must_be_unique(self):
        keys = [(str(i.product_id), i.variant_id or None) for i in self.items]
        if len(keys) != len(set(keys)):
            raise ValidationError({"items": ["A product appears at most once per wishlist"]})

    @classmethod
    def create(cls, user_id, name, description=None, is_public=False):
        now = datetime.now(UTC)
        return cls(
            user_id=str(user_id),
            name=name,
            description=description,
            is_public=bool(is_public),
            created_at=now,
            updated_at=now,
        )

    @property
    def item_count(self) -> int:
        return len(self.items)

    def update(self, name=None, description=None, is_public=None):
        if name is not None:
            self.name = name
        if description is not None:
            self.description = description
        if is_public is not None:
            self.is_public = is_public
        self.updated_at = datetime.now(UTC)

    def find_item(self, product_id, variant_id=None):
        return next((i for i in self.items if i.matches(product_id, variant_id)), None)

    def add_item(self, product_id, price, variant_id=None, notes=None, priority=0) -> WishlistItem:
        if self.find_item(product_id, variant_id) is not None:
            raise Conflict("Product is already in this wishlist", field="product_id")

        now = datetime.now(UTC)
        item = WishlistItem(
            product_id=str(product_id),
            variant_id=str(variant_id) if variant_id else None,
            notes=notes,
            priority=priority or 0,
            added_price=price,
            added_at=now,
        )
        self.add_items(item)
        self.updated_at = now
        return item

    def remove_item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise NotFound(f"Wishlist item {item_id} not found", field="item_id")
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)
