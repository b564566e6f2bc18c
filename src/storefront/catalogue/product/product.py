"""Product aggregate root with Variant entity.

Only ACTIVE products can be carted, ordered or found through search.

State Machine:
    DRAFT → ACTIVE ⇄ INACTIVE
    any non-archived status → ARCHIVED (terminal)
"""

import json
import re
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, String, Text

from storefront.catalogue.product.events import (
    ProductCreated,
    ProductDetailsUpdated,
    ProductPriceChanged,
    ProductStatusChanged,
    VariantAdded,
    VariantRemoved,
    VariantUpdated,
)
from storefront.domain import storefront
from storefront.shared.errors import InvalidTransition

_SKU_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9-]{1,48}[A-Za-z0-9]$")
_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class ProductStatus(Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


_VALID_TRANSITIONS = {
    ProductStatus.DRAFT: {ProductStatus.ACTIVE, ProductStatus.ARCHIVED},
    ProductStatus.ACTIVE: {ProductStatus.INACTIVE, ProductStatus.ARCHIVED},
    ProductStatus.INACTIVE: {ProductStatus.ACTIVE, ProductStatus.ARCHIVED},
    ProductStatus.ARCHIVED: set(),
}


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "product"


def validate_sku(sku: str, field: str = "sku") -> str:
    sku = (sku or "").strip().upper()
    if not _SKU_PATTERN.match(sku) or "--" in sku:
        raise ValidationError({field: ["SKU must be 3-50 alphanumeric characters or single hyphens"]})
    return sku


@storefront.entity(part_of="Product")
class Variant:
    """A priced, stocked sub-entity of a product (size, colour)."""

    sku: String(required=True, max_length=50)
    name: String(max_length=255)
    price: Float(required=True, min_value=0.0)
    attributes: Text()
    is_active: Boolean(default=True)


@storefront.aggregate
class Product:
    sku: String(required=True, max_length=50)
    name: String(required=True, max_length=255)
    slug: String(max_length=255)
    description: Text()
    category_id: Identifier()
    price: Float(required=True, min_value=0.0)
    variants: HasMany(Variant)
    status: String(choices=ProductStatus, default=ProductStatus.DRAFT.value)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def slug_must_be_url_safe(self):
        if self.slug and not _SLUG_PATTERN.match(self.slug):
            raise ValidationError({"slug": ["Slug must be lowercase letters, digits and single hyphens"]})

    @invariant.post
    def variant_skus_must_be_unique(self):
        skus = [v.sku for v in self.variants]
        if len(skus) != len(set(skus)):
            raise ValidationError({"variants": ["Variant SKUs must be unique within a product"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, sku, name, price, description=None, category_id=None, slug=None):
        sku = validate_sku(sku)
        now = datetime.now(UTC)

        product = cls(
            sku=sku,
            name=name,
            slug=slug or slugify(name),
            description=description,
            category_id=category_id,
            price=price,
            status=ProductStatus.DRAFT.value,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=str(product.id),
                sku=sku,
                name=name,
                slug=product.slug,
                description=description,
                category_id=category_id,
                price=price,
                status=ProductStatus.DRAFT.value,
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Details and pricing
    # -------------------------------------------------------------------
    def update_details(self, name=None, description=None, category_id=None, slug=None):
        if ProductStatus(self.status) == ProductStatus.ARCHIVED:
            raise InvalidTransition("Archived products cannot be modified")

        if name is not None:
            self.name = name
        if description is not None:
            self.description = description
        if category_id is not None:
            self.category_id = category_id
        if slug is not None:
            self.slug = slug

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            ProductDetailsUpdated(
                product_id=str(self.id),
                name=self.name,
                slug=self.slug,
                description=self.description,
                category_id=self.category_id,
                updated_at=now,
            )
        )

    def change_price(self, new_price):
        if new_price is None or new_price < 0:
            raise ValidationError({"price": ["Price must be zero or positive"]})
        if new_price == self.price:
            return

        previous = self.price
        self.price = new_price
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            ProductPriceChanged(
                product_id=str(self.id),
                previous_price=previous,
                new_price=new_price,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Variants
    # -------------------------------------------------------------------
    def find_variant(self, variant_id):
        return next((v for v in self.variants if str(v.id) == str(variant_id)), None)

    def add_variant(self, sku, price, name=None, attributes=None):
        sku = validate_sku(sku)
        attrs_json = json.dumps(attributes) if isinstance(attributes, dict) else attributes

        variant = Variant(sku=sku, name=name, price=price, attributes=attrs_json, is_active=True)
        self.add_variants(variant)

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            VariantAdded(
                product_id=str(self.id),
                variant_id=str(variant.id),
                sku=sku,
                name=name,
                price=price,
                added_at=now,
            )
        )
        return variant

    def update_variant(self, variant_id, name=None, price=None, is_active=None):
        variant = self.find_variant(variant_id)
        if variant is None:
            raise ValidationError({"variant_id": [f"Variant {variant_id} not found"]})

        if name is not None:
            variant.name = name
        if price is not None:
            variant.price = price
        if is_active is not None:
            variant.is_active = is_active

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            VariantUpdated(
                product_id=str(self.id),
                variant_id=str(variant.id),
                name=variant.name,
                price=variant.price,
                is_active=variant.is_active,
                updated_at=now,
            )
        )

    def remove_variant(self, variant_id):
        variant = self.find_variant(variant_id)
        if variant is None:
            raise ValidationError({"variant_id": [f"Variant {variant_id} not found"]})

        self.remove_variants(variant)
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(VariantRemoved(product_id=str(self.id), variant_id=str(variant_id), removed_at=now))

    # -------------------------------------------------------------------
    # Sellability
    # -------------------------------------------------------------------
    @property
    def is_active(self) -> bool:
        return ProductStatus(self.status) == ProductStatus.ACTIVE

    def unit_price(self, variant_id=None) -> float:
        if variant_id:
            variant = self.find_variant(variant_id)
            if variant is not None:
                return variant.price
        return self.price

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def _transition_to(self, target: ProductStatus):
        current = ProductStatus(self.status)
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition(f"Cannot move product from {current.value} to {target.value}")

        self.status = target.value
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            ProductStatusChanged(
                product_id=str(self.id),
                previous_status=current.value,
                new_status=target.value,
                changed_at=now,
            )
        )

    def activate(self):
        self._transition_to(ProductStatus.ACTIVE)

    def deactivate(self):
        self._transition_to(ProductStatus.INACTIVE)

    def archive(self):
        self._transition_to(ProductStatus.ARCHIVED)
