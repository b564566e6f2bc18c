"""FastAPI routes for orders and their lifecycle."""

import json
from dataclasses import asdict

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.deps import admin_actor, current_actor, staff_actor
from storefront.api.envelope import Envelope, PagedEnvelope, ok, paged
from storefront.ordering import queries
from storefront.ordering.api.schemas import (
    CancelOrderRequest,
    CreateOrderForUserRequest,
    CreateOrderRequest,
    ShipOrderRequest,
)
from storefront.ordering.order.creation import CreateOrder, CreateOrderForUser
from storefront.ordering.order.lifecycle import CancelOrder, ConfirmOrder, DeliverOrder, ShipOrder
from storefront.shared.access import Actor

order_router = APIRouter(prefix="/orders", tags=["orders"])
admin_order_router = APIRouter(prefix="/admin/orders", tags=["orders"])


def _lines(items) -> str:
    return json.dumps([item.model_dump() for item in items])


def _order(order_id: str, actor: Actor) -> dict:
    return queries.order_to_dict(queries.get_order(order_id, actor))


@order_router.post("", status_code=201, response_model=Envelope)
async def create_order(body: CreateOrderRequest, actor: Actor = Depends(current_actor)) -> Envelope:
    command = CreateOrder(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        items=_lines(body.items),
        payment_method=body.payment_method,
        shipping_address=body.shipping_address,
        billing_address=body.billing_address,
        notes=body.notes,
        coupon_code=body.coupon_code,
        shipping_provider=body.shipping_provider,
        points_to_redeem=body.points_to_redeem,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return ok(_order(order_id, actor), "Order created")


@order_router.get("", response_model=PagedEnvelope)
async def list_orders(
    status: str | None = None,
    payment_status: str | None = None,
    user_id: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    page: int = 1,
    limit: int = 20,
    actor: Actor = Depends(staff_actor),
) -> PagedEnvelope:
    filters = queries.OrderFilters(
        status=status,
        payment_status=payment_status,
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
    )
    return paged(queries.list_orders(filters, page, limit))


@order_router.get("/my", response_model=PagedEnvelope)
async def list_my_orders(
    status: str | None = None,
    page: int = 1,
    limit: int = 20,
    actor: Actor = Depends(current_actor),
) -> PagedEnvelope:
    filters = queries.OrderFilters(status=status, user_id=actor.user_id)
    return paged(queries.list_orders(filters, page, limit))


@order_router.get("/stats", response_model=Envelope)
async def order_stats(actor: Actor = Depends(staff_actor)) -> Envelope:
    return ok(asdict(queries.order_stats()))


@order_router.get("/user/{user_id}", response_model=PagedEnvelope)
async def list_user_orders(
    user_id: str,
    status: str | None = None,
    page: int = 1,
    limit: int = 20,
    actor: Actor = Depends(current_actor),
) -> PagedEnvelope:
    actor.require_owner(user_id, "orders")
    return paged(queries.list_orders(queries.OrderFilters(status=status, user_id=user_id), page, limit))


@order_router.get("/order-number/{order_number}", response_model=Envelope)
async def get_order_by_number(order_number: str, actor: Actor = Depends(current_actor)) -> Envelope:
    return ok(queries.order_to_dict(queries.get_order_by_number(order_number, actor)))


@order_router.get("/{order_id}", response_model=Envelope)
async def get_order(order_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    return ok(_order(order_id, actor))


@order_router.get("/{order_id}/items", response_model=Envelope)
async def get_order_items(order_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    return ok(_order(order_id, actor)["items"])


@order_router.post("/{order_id}/confirm", response_model=Envelope)
async def confirm_order(order_id: str, actor: Actor = Depends(staff_actor)) -> Envelope:
    command = ConfirmOrder(actor_id=actor.user_id, actor_role=actor.role.value, order_id=order_id)
    current_domain.process(command, asynchronous=False)
    return ok(_order(order_id, actor), "Order confirmed")


@order_router.post("/{order_id}/ship", response_model=Envelope)
async def ship_order(order_id: str, body: ShipOrderRequest, actor: Actor = Depends(staff_actor)) -> Envelope:
    command = ShipOrder(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        order_id=order_id,
        tracking_number=body.tracking_number,
    )
    current_domain.process(command, asynchronous=False)
    return ok(_order(order_id, actor), "Order shipped")


@order_router.post("/{order_id}/deliver", response_model=Envelope)
async def deliver_order(order_id: str, actor: Actor = Depends(staff_actor)) -> Envelope:
    command = DeliverOrder(actor_id=actor.user_id, actor_role=actor.role.value, order_id=order_id)
    current_domain.process(command, asynchronous=False)
    return ok(_order(order_id, actor), "Order delivered")


@order_router.post("/{order_id}/cancel", response_model=Envelope)
async def cancel_order(order_id: str, body: CancelOrderRequest, actor: Actor = Depends(current_actor)) -> Envelope:
    command = CancelOrder(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        order_id=order_id,
        reason=body.reason,
    )
    current_domain.process(command, asynchronous=False)
    return ok(_order(order_id, actor), "Order cancelled")


@admin_order_router.post("/user/{user_id}", status_code=201, response_model=Envelope)
async def create_order_for_user(
    user_id: str,
    body: CreateOrderForUserRequest,
    actor: Actor = Depends(admin_actor),
) -> Envelope:
    command = CreateOrderForUser(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        user_id=user_id,
        items=_lines(body.items),
        payment_method=body.payment_method,
        shipping_address=body.shipping_address,
        billing_address=body.billing_address,
        notes=body.notes,
        coupon_code=body.coupon_code,
        shipping_provider=body.shipping_provider,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return ok(_order(order_id, actor), "Order created")
