"""Cart management: commands and handler for cart-level operations.

Every mutation checks the caller against the cart's owner: the user for a
signed-in cart, the session id for a guest cart. Staff may act on any cart.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart, CartStatus
from storefront.domain import storefront
from storefront.inventory.stock import allocation
from storefront.shared.access import Actor
from storefront.shared.errors import DomainError, NotFound, Unauthorized
from storefront.utils.logging import logger


@storefront.command(part_of="Cart")
class CreateCart:
    actor_id = Identifier()
    actor_role = String(max_length=20)
    session_id = String(max_length=255)


@storefront.command(part_of="Cart")
class UpdateCart:
    actor_id = Identifier()
    actor_role = String(max_length=20)
    session_id = String(max_length=255)
    cart_id = Identifier(required=True)
    shipping_address = Text()
    billing_address = Text()
    notes = Text()


@storefront.command(part_of="Cart")
class DeleteCart:
    actor_id = Identifier()
    actor_role = String(max_length=20)
    session_id = String(max_length=255)
    cart_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    actor_id = Identifier()
    actor_role = String(max_length=20)
    session_id = String(max_length=255)
    cart_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class SyncCartWithUser:
    """Claim the guest cart of ``session_id`` for the signed-in caller."""

    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    session_id = String(max_length=255)
    cart_id = Identifier(required=True)


def load_cart(cart_id) -> Cart:
    try:
        return current_domain.repository_for(Cart).get(cart_id)
    except ObjectNotFoundError:
        raise NotFound(f"Cart {cart_id} not found", field="cart_id") from None


def authorize_cart(cart: Cart, actor_id=None, session_id=None) -> None:
    """Only the owning user, or the holder of a guest cart's session, may touch a cart.

    Staff and admins get no exemption.
    """
    if cart.user_id:
        if actor_id and str(actor_id) == str(cart.user_id):
            return
        raise Unauthorized("You do not own this cart", field="cart_id")
    if session_id and session_id == cart.session_id:
        return
    raise Unauthorized("You do not own this cart", field="session_id")


def active_cart_for(user_id=None, session_id=None) -> Cart | None:
    """The caller's active cart: by user when signed in, else by guest session."""
    query = current_domain.repository_for(Cart)._dao.query.filter(status=CartStatus.ACTIVE.value)
    if user_id:
        carts = query.filter(user_id=user_id).order_by("-updated_at").all().items
    elif session_id:
        carts = [c for c in query.filter(session_id=session_id).order_by("-updated_at").all().items if c.is_guest]
    else:
        return None
    return carts[0] if carts else None


def release_lines(cart: Cart, lines) -> None:
    totals = allocation.group_lines((line.product_id, line.variant_id, line.quantity) for line in lines)
    for (product_id, variant_id), quantity in totals.items():
        allocation.release(product_id, variant_id, quantity, reference=f"cart:{cart.id}")


@storefront.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        if not command.actor_id and not command.session_id:
            raise DomainError("A user or session id is required to create a cart", field="session_id")

        user_id = command.actor_id or None
        existing = active_cart_for(user_id=user_id, session_id=command.session_id)
        if existing is not None:
            return str(existing.id)

        cart = Cart.create(user_id=user_id, session_id=command.session_id)
        current_domain.repository_for(Cart).add(cart)
        logger.info("Cart created", cart_id=str(cart.id), user_id=user_id, guest=cart.is_guest)
        return str(cart.id)

    @handle(UpdateCart)
    def update_cart(self, command):
        cart = load_cart(command.cart_id)
        authorize_cart(cart, command.actor_id, command.session_id)
        cart.update_details(
            shipping_address=command.shipping_address,
            billing_address=command.billing_address,
            notes=command.notes,
        )
        current_domain.repository_for(Cart).add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = load_cart(command.cart_id)
        authorize_cart(cart, command.actor_id, command.session_id)
        removed = cart.clear()
        release_lines(cart, removed)
        current_domain.repository_for(Cart).add(cart)

    @handle(DeleteCart)
    def delete_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = load_cart(command.cart_id)
        authorize_cart(cart, command.actor_id, command.session_id)
        if cart.is_active:
            release_lines(cart, cart.items)
        repo._dao.delete(cart)
        logger.info("Cart deleted", cart_id=str(cart.id))

    @handle(SyncCartWithUser)
    def sync_cart_with_user(self, command):
        repo = current_domain.repository_for(Cart)
        cart = load_cart(command.cart_id)
        if not cart.is_guest:
            raise DomainError("Only guest carts can be synced to a user", field="cart_id")
        if not command.session_id or command.session_id != cart.session_id:
            raise Unauthorized("You do not own this cart", field="session_id")

        actor = Actor.of(command.actor_id, command.actor_role)
        previous = active_cart_for(user_id=actor.user_id)
        merged = []
        if previous is not None and previous.id != cart.id:
            merged = previous.clear()
            previous.abandon()
            repo.add(previous)

        cart.assign_to_user(actor.user_id, merged_items=merged)
        repo.add(cart)
        logger.info("Cart synced", cart_id=str(cart.id), user_id=actor.user_id, items_merged=len(merged))
