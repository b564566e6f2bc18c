"""FastAPI endpoints for carts and cart items.

Signed-in callers are identified by ``X-User-Id``; guests by ``X-Session-Id``.
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.deps import current_actor, optional_actor, session_id, staff_actor
from storefront.api.envelope import Envelope, ok
from storefront.cart import queries
from storefront.cart.api.schemas import AddToCartRequest, ConvertCartRequest, UpdateCartItemRequest, UpdateCartRequest
from storefront.cart.items import AddToCart, RemoveCartItem, UpdateCartItem
from storefront.cart.management import ClearCart, CreateCart, DeleteCart, SyncCartWithUser, UpdateCart
from storefront.ordering.order.checkout import ConvertCartToOrder
from storefront.ordering.queries import get_order, order_to_dict
from storefront.shared.access import Actor

cart_router = APIRouter(prefix="/cart", tags=["cart"])


def _caller(actor: Actor | None, session: str | None) -> dict:
    return {
        "actor_id": actor.user_id if actor else None,
        "actor_role": actor.role.value if actor else None,
        "session_id": session,
    }


def _owned_cart(cart_id: str, actor: Actor | None, session: str | None):
    return queries.get_cart(cart_id, actor_id=actor.user_id if actor else None, session_id=session)


def _cart(cart_id: str, actor: Actor | None, session: str | None) -> dict:
    return queries.cart_to_dict(_owned_cart(cart_id, actor, session))


@cart_router.post("", status_code=201, response_model=Envelope)
async def create_cart(
    actor: Actor | None = Depends(optional_actor),
    session: str | None = Depends(session_id),
) -> Envelope:
    command = CreateCart(**_caller(actor, session))
    cart_id = current_domain.process(command, asynchronous=False)
    return ok(_cart(cart_id, actor, session), "Cart ready")


@cart_router.get("", response_model=Envelope)
async def get_current_cart(
    actor: Actor | None = Depends(optional_actor),
    session: str | None = Depends(session_id),
) -> Envelope:
    cart = queries.get_current_cart(user_id=actor.user_id if actor else None, session_id=session)
    return ok(queries.cart_to_dict(cart))


@cart_router.get("/stats", response_model=Envelope)
async def cart_stats(actor: Actor = Depends(staff_actor)) -> Envelope:
    return ok(asdict(queries.cart_stats()))


@cart_router.get("/{cart_id}", response_model=Envelope)
async def get_cart(
    cart_id: str,
    actor: Actor | None = Depends(optional_actor),
    session: str | None = Depends(session_id),
) -> Envelope:
    return ok(_cart(cart_id, actor, session))


@cart_router.put("/{cart_id}", response_model=Envelope)
async def update_cart(
    cart_id: str,
    body: UpdateCartRequest,
    actor: Actor | None = Depends(optional_actor),
    session: str | None = Depends(session_id),
) -> Envelope:
    command = UpdateCart(
        cart_id=cart_id,
        shipping_address=body.shipping_address,
        billing_address=body.billing_address,
        notes=body.notes,
        **_caller(actor, session),
    )
    current_domain.process(command, asynchronous=False)
    return ok(_cart(cart_id, actor, session), "Cart updated")


@cart_router.delete("/{cart_id}", response_model=Envelope)
async def delete_cart(
    cart_id: str,
    actor: Actor | None = Depends(optional_actor),
    session: str | None = Depends(session_id),
) -> Envelope:
    current_domain.process(DeleteCart(cart_id=cart_id, **_caller(actor, session)), asynchronous=False)
    return ok(message="Cart deleted")


@cart_router.post("/{cart_id}/clear", response_model=Envelope)
async def clear_cart(
    cart_id: str,
    actor: Actor | None = Depends(optional_actor),
    session: str | None = Depends(session_id),
) -> Envelope:
    current_domain.process(ClearCart(cart_id=cart_id, **_caller(actor, session)), asynchronous=False)
    return ok(_cart(cart_id, actor, session), "Cart cleared")


@cart_router.get("/{cart_id}/items", response_model=Envelope)
async def list_cart_items(
    cart_id: str,
    actor: Actor | None = Depends(optional_actor),
    session: str | None = Depends(session_id),
) -> Envelope:
    return ok(_cart(cart_id, actor, session)["items"])


@cart_router.get("/{cart_id}/summary", response_model=Envelope)
async def cart_summary(
    cart_id: str,
    actor: Actor | None = Depends(optional_actor),
    session: str | None = Depends(session_id),
) -> Envelope:
    cart = _owned_cart(cart_id, actor, session)
    return ok(asdict(queries.summarize(cart)))


@cart_router.post("/{cart_id}/items", status_code=201, response_model=Envelope)
async def add_to_cart(
    cart_id: str,
    body: AddToCartRequest,
    actor: Actor | None = Depends(optional_actor),
    session: str | None = Depends(session_id),
) -> Envelope:
    command = AddToCart(
        cart_id=cart_id,
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
        **_caller(actor, session),
    )
    current_domain.process(command, asynchronous=False)
    return ok(_cart(cart_id, actor, session), "Item added to cart")


@cart_router.put("/{cart_id}/items/{item_id}", response_model=Envelope)
async def update_cart_item(
    cart_id: str,
    item_id: str,
    body: UpdateCartItemRequest,
    actor: Actor | None = Depends(optional_actor),
    session: str | None = Depends(session_id),
) -> Envelope:
    command = UpdateCartItem(cart_id=cart_id, item_id=item_id, quantity=body.quantity, **_caller(actor, session))
    current_domain.process(command, asynchronous=False)
    return ok(_cart(cart_id, actor, session), "Cart item updated")


@cart_router.delete("/{cart_id}/items/{item_id}", response_model=Envelope)
async def remove_cart_item(
    cart_id: str,
    item_id: str,
    actor: Actor | None = Depends(optional_actor),
    session: str | None = Depends(session_id),
) -> Envelope:
    command = RemoveCartItem(cart_id=cart_id, item_id=item_id, **_caller(actor, session))
    current_domain.process(command, asynchronous=False)
    return ok(_cart(cart_id, actor, session), "Item removed from cart")


@cart_router.post("/{cart_id}/sync", response_model=Envelope)
async def sync_cart(
    cart_id: str,
    actor: Actor = Depends(current_actor),
    session: str | None = Depends(session_id),
) -> Envelope:
    command = SyncCartWithUser(cart_id=cart_id, **_caller(actor, session))
    current_domain.process(command, asynchronous=False)
    return ok(_cart(cart_id, actor, session), "Cart synced")


@cart_router.post("/{cart_id}/convert-to-order", status_code=201, response_model=Envelope)
async def convert_cart_to_order(
    cart_id: str,
    body: ConvertCartRequest,
    actor: Actor = Depends(current_actor),
    session: str | None = Depends(session_id),
) -> Envelope:
    command = ConvertCartToOrder(
        cart_id=cart_id,
        payment_method=body.payment_method,
        shipping_address=body.shipping_address,
        billing_address=body.billing_address,
        notes=body.notes,
        coupon_code=body.coupon_code,
        shipping_provider=body.shipping_provider,
        points_to_redeem=body.points_to_redeem,
        **_caller(actor, session),
    )
    order_id = current_domain.process(command, asynchronous=False)
    return ok(order_to_dict(get_order(order_id, actor)), "Order created")
