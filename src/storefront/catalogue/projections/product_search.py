"""Product search index: one denormalized row per product for search and suggestions."""

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product.events import (
    ProductCreated,
    ProductDetailsUpdated,
    ProductPriceChanged,
    ProductStatusChanged,
    VariantAdded,
    VariantRemoved,
)
from storefront.catalogue.product.product import Product
from storefront.domain import storefront


@storefront.projection
class ProductSearchIndex:
    product_id = Identifier(identifier=True, required=True)
    sku = String(required=True, max_length=50)
    name = String(required=True, max_length=255)
    name_lower = String(max_length=255)
    slug = String(max_length=255)
    description = Text()
    category_id = Identifier()
    price = Float(default=0.0)
    status = String(max_length=20)
    variant_count = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()


@storefront.projector(projector_for=ProductSearchIndex, aggregates=[Product])
class ProductSearchIndexProjector:
    @on(ProductCreated)
    def on_product_created(self, event):
        current_domain.repository_for(ProductSearchIndex).add(
            ProductSearchIndex(
                product_id=event.product_id,
                sku=event.sku,
                name=event.name,
                name_lower=event.name.lower(),
                slug=event.slug,
                description=event.description,
                category_id=event.category_id,
                price=event.price,
                status=event.status,
                variant_count=0,
                created_at=event.created_at,
                updated_at=event.created_at,
            )
        )

    @on(ProductDetailsUpdated)
    def on_details_updated(self, event):
        repo = current_domain.repository_for(ProductSearchIndex)
        row = repo.get(event.product_id)
        row.name = event.name
        row.name_lower = event.name.lower()
        row.slug = event.slug
        row.description = event.description
        row.category_id = event.category_id
        row.updated_at = event.updated_at
        repo.add(row)

    @on(ProductPriceChanged)
    def on_price_changed(self, event):
        repo = current_domain.repository_for(ProductSearchIndex)
        row = repo.get(event.product_id)
        row.price = event.new_price
        row.updated_at = event.changed_at
        repo.add(row)

    @on(ProductStatusChanged)
    def on_status_changed(self, event):
        repo = current_domain.repository_for(ProductSearchIndex)
        row = repo.get(event.product_id)
        row.status = event.new_status
        row.updated_at = event.changed_at
        repo.add(row)

    @on(VariantAdded)
    def on_variant_added(self, event):
        repo = current_domain.repository_for(ProductSearchIndex)
        row = repo.get(event.product_id)
        row.variant_count = (row.variant_count or 0) + 1
        repo.add(row)

    @on(VariantRemoved)
    def on_variant_removed(self, event):
        repo = current_domain.repository_for(ProductSearchIndex)
        row = repo.get(event.product_id)
        row.variant_count = max((row.variant_count or 0) - 1, 0)
        repo.add(row)
