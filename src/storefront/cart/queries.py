"""Read-side helpers for carts."""

from dataclasses import dataclass

from protean.utils.globals import current_domain

from storefront.cart.cart import Cart, CartStatus
from storefront.cart.management import active_cart_for, authorize_cart, load_cart
from storefront.shared.errors import NotFound
from storefront.shared.pagination import iter_all


@dataclass
class CartSummary:
    item_count: int
    total_quantity: int
    subtotal: float


@dataclass
class CartStats:
    active_carts: int = 0
    converted_carts: int = 0
    abandoned_carts: int = 0
    guest_carts: int = 0
    active_value: float = 0.0


def get_cart(cart_id, actor_id=None, session_id=None) -> Cart:
    cart = load_cart(cart_id)
    authorize_cart(cart, actor_id, session_id)
    return cart


def get_current_cart(user_id=None, session_id=None) -> Cart:
    """The caller's active cart. Converted and abandoned carts are not returned."""
    cart = active_cart_for(user_id=user_id, session_id=session_id)
    if cart is None:
        raise NotFound("No active cart", field="cart_id")
    return cart


def summarize(cart: Cart) -> CartSummary:
    return CartSummary(item_count=cart.item_count, total_quantity=cart.total_quantity, subtotal=cart.subtotal)


def cart_to_dict(cart: Cart) -> dict:
    data = cart.to_dict()
    data["items"] = [dict(item.to_dict(), line_total=item.line_total) for item in cart.items]
    data.update(item_count=cart.item_count, total_quantity=cart.total_quantity, subtotal=cart.subtotal)
    return data


def cart_stats() -> CartStats:
    stats = CartStats()
    for cart in iter_all(current_domain.repository_for(Cart)._dao.query):
        if cart.status == CartStatus.ACTIVE.value:
            stats.active_carts += 1
            stats.active_value += cart.subtotal
            if cart.is_guest:
                stats.guest_carts += 1
        elif cart.status == CartStatus.CONVERTED.value:
            stats.converted_carts += 1
        else:
            stats.abandoned_carts += 1
    stats.active_value = round(stats.active_value, 2)
    return stats
