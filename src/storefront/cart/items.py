"""Cart item management: commands and handler.

Stock is reserved as lines are added and released as they shrink or go, in
the same Unit of Work as the cart change.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.management import authorize_cart, load_cart
from storefront.catalogue.product.management import load_product
from storefront.domain import storefront
from storefront.inventory.stock import allocation
from storefront.shared.errors import NotFound, ProductNotFound, ProductUnavailable


@storefront.command(part_of="Cart")
class AddToCart:
    actor_id = Identifier()
    actor_role = String(max_length=20)
    session_id = String(max_length=255)
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Cart")
class UpdateCartItem:
    actor_id = Identifier()
    actor_role = String(max_length=20)
    session_id = String(max_length=255)
    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Cart")
class RemoveCartItem:
    actor_id = Identifier()
    actor_role = String(max_length=20)
    session_id = String(max_length=255)
    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)


def sellable_price(product_id, variant_id=None) -> float:
    """Current unit price of an active product (and active variant, if given)."""
    try:
        product = load_product(product_id)
    except NotFound:
        raise ProductNotFound(product_id) from None
    if not product.is_active:
        raise ProductUnavailable(product_id)

    if variant_id:
        variant = product.find_variant(variant_id)
        if variant is None:
            raise ProductNotFound(product_id, variant_id)
        if not variant.is_active:
            raise ProductUnavailable(product_id)
    return product.unit_price(variant_id)


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        cart = load_cart(command.cart_id)
        authorize_cart(cart, command.actor_id, command.session_id)

        unit_price = sellable_price(command.product_id, command.variant_id)
        allocation.reserve(
            command.product_id,
            command.variant_id,
            command.quantity,
            reference=f"cart:{cart.id}",
        )
        item = cart.add_item(
            product_id=command.product_id,
            variant_id=command.variant_id,
            quantity=command.quantity,
            unit_price=unit_price,
        )
        current_domain.repository_for(Cart).add(cart)
        return str(item.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        cart = load_cart(command.cart_id)
        authorize_cart(cart, command.actor_id, command.session_id)

        item = cart.find_item(command.item_id)
        delta = cart.update_item_quantity(command.item_id, command.quantity)
        reference = f"cart:{cart.id}"
        if delta > 0:
            allocation.reserve(item.product_id, item.variant_id, delta, reference=reference)
        elif delta < 0:
            allocation.release(item.product_id, item.variant_id, -delta, reference=reference)
        current_domain.repository_for(Cart).add(cart)

    @handle(RemoveCartItem)
    def remove_cart_item(self, command):
        cart = load_cart(command.cart_id)
        authorize_cart(cart, command.actor_id, command.session_id)

        item = cart.remove_item(command.item_id)
        allocation.release(item.product_id, item.variant_id, item.quantity, reference=f"cart:{cart.id}")
        current_domain.repository_for(Cart).add(cart)
