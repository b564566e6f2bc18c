"""Cart checkout: command and handler.

The reservations taken while the items sat in the cart carry over to the
order, so checkout itself reserves nothing. The cart is marked converted in
the same Unit of Work and cannot produce a second order.
"""

from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.management import authorize_cart, load_cart
from storefront.domain import storefront
from storefront.ordering.order.order import Order
from storefront.ordering.order.placement import place_order
from storefront.shared.access import Actor
from storefront.shared.errors import BusinessRuleViolation, InvalidTransition


@storefront.command(part_of="Order")
class ConvertCartToOrder:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    session_id = String(max_length=255)
    cart_id = Identifier(required=True)
    payment_method = String(max_length=20, default="cod")
    shipping_address = Text()
    billing_address = Text()
    notes = Text()
    coupon_code = String(max_length=50)
    shipping_provider = String(max_length=50)
    points_to_redeem = Integer(default=0, min_value=0)


@storefront.command_handler(part_of=Order)
class CheckoutHandler:
    @handle(ConvertCartToOrder)
    def convert_cart_to_order(self, command):
        actor = Actor.of(command.actor_id, command.actor_role)
        cart = load_cart(command.cart_id)
        authorize_cart(cart, command.actor_id, command.session_id)

        if not cart.is_active:
            raise InvalidTransition(f"Cart is {cart.status} and cannot be checked out")
        if not cart.items:
            raise BusinessRuleViolation("Cannot convert an empty cart", field="cart_id")

        order = place_order(
            user_id=cart.user_id or actor.user_id,
            lines=[(item.product_id, item.variant_id, item.quantity) for item in cart.items],
            payment_method=command.payment_method,
            placed_by=actor.user_id,
            cart_id=cart.id,
            shipping_address=command.shipping_address or cart.shipping_address,
            billing_address=command.billing_address or cart.billing_address,
            notes=command.notes or cart.notes,
            coupon_code=command.coupon_code,
            shipping_provider=command.shipping_provider,
            points_to_redeem=command.points_to_redeem or 0,
        )

        cart.mark_converted(order.id)
        current_domain.repository_for(Cart).add(cart)
        return str(order.id)
