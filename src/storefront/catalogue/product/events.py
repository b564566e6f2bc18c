"""Domain events for the Product aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductCreated:
    __version__ = 1

    product_id = Identifier(required=True)
    sku = String(required=True)
    name = String(required=True)
    slug = String()
    description = String()
    category_id = Identifier()
    price = Float(required=True)
    status = String(required=True)
    created_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductDetailsUpdated:
    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    slug = String()
    description = String()
    category_id = Identifier()
    updated_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductPriceChanged:
    __version__ = 1

    product_id = Identifier(required=True)
    previous_price = Float(required=True)
    new_price = Float(required=True)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Product")
class VariantAdded:
    __version__ = 1

    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    sku = String(required=True)
    name = String()
    price = Float(required=True)
    added_at = DateTime(required=True)


@storefront.event(part_of="Product")
class VariantUpdated:
    __version__ = 1

    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    name = String()
    price = Float(required=True)
    is_active = Boolean(required=True)
    updated_at = DateTime(required=True)


@storefront.event(part_of="Product")
class VariantRemoved:
    __version__ = 1

    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    removed_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductStatusChanged:
    """Product moved between draft, active, inactive and archived."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)
