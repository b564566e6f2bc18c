"""Domain events for the Cart aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Cart")
class CartCreated:
    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier()
    session_id = String()
    created_at = DateTime(required=True)


@storefront.event(part_of="Cart")
class CartItemAdded:
    """A product was added to the cart, or its quantity increased."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True)
    unit_price = Float()


@storefront.event(part_of="Cart")
class CartItemQuantityChanged:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartCleared:
    __version__ = 1

    cart_id = Identifier(required=True)
    items_removed = Integer(required=True)


@storefront.event(part_of="Cart")
class CartSyncedWithUser:
    """A guest cart was claimed by a signed-in user."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    session_id = String()
    items_merged = Integer(default=0)


@storefront.event(part_of="Cart")
class CartConverted:
    __version__ = 1

    cart_id = Identifier(required=True)
    order_id = Identifier(required=True)
    user_id = Identifier()
    items = Text(required=True)  # JSON array of {product_id, variant_id, quantity}
    converted_at = DateTime(required=True)


@storefront.event(part_of="Cart")
class CartAbandoned:
    __version__ = 1

    cart_id = Identifier(required=True)
    abandoned_at = DateTime(required=True)
