"""FastAPI routes for shipping providers, fee quotes and order tracking."""

from dataclasses import asdict

import pydantic
from fastapi import APIRouter, Depends, Request
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.api.deps import admin_actor, current_actor, staff_actor
from storefront.api.envelope import Envelope, PagedEnvelope, ok, paged
from storefront.shared.access import Actor
from storefront.shipping import queries
from storefront.shipping.api.schemas import (
    AddTrackingEventRequest,
    CalculateShippingRequest,
    CarrierWebhookPayload,
    CreateOrderTrackingRequest,
    CreateShippingProviderRequest,
    ShippingRateRequest,
    UpdateOrderTrackingRequest,
    UpdateShippingProviderRequest,
    UpdateShippingRateRequest,
)
from storefront.shipping.provider.management import (
    AddShippingRate,
    CreateShippingProvider,
    DeleteShippingProvider,
    RemoveShippingRate,
    UpdateShippingProvider,
    UpdateShippingRate,
    load_provider,
)
from storefront.shipping.provider.quotes import active_providers, calculate_shipping
from storefront.shipping.tracking.management import (
    AddTrackingEvent,
    CreateOrderTracking,
    DeleteOrderTracking,
    UpdateOrderTracking,
    load_tracking,
)
from storefront.shipping.tracking.webhook import ProcessCarrierWebhook, webhook_provider
from storefront.utils.logging import logger

shipping_router = APIRouter(prefix="/shipping", tags=["shipping"])
tracking_router = APIRouter(prefix="/order-tracking", tags=["order tracking"])


def _by(actor: Actor) -> dict:
    return {"actor_id": actor.user_id, "actor_role": actor.role.value}


def _provider(provider_id) -> dict:
    return queries.provider_to_dict(load_provider(provider_id))


def _tracking(tracking_id) -> dict:
    return queries.tracking_to_dict(load_tracking(tracking_id))


# ---------------------------------------------------------------------------
# Providers and quotes
# ---------------------------------------------------------------------------
@shipping_router.get("/providers/active", response_model=Envelope)
async def list_active_providers() -> Envelope:
    return ok([queries.public_provider(provider) for provider in active_providers()])


@shipping_router.post("/calculate", response_model=Envelope)
async def calculate(body: CalculateShippingRequest) -> Envelope:
    quotes = calculate_shipping(body.zone, body.value, body.weight, cod=body.cod, insurance=body.insurance)
    return ok([asdict(quote) for quote in quotes])


@shipping_router.post("/providers", status_code=201, response_model=Envelope)
async def create_provider(body: CreateShippingProviderRequest, actor: Actor = Depends(admin_actor)) -> Envelope:
    provider_id = current_domain.process(CreateShippingProvider(**_by(actor), **body.model_dump()), asynchronous=False)
    return ok(_provider(provider_id), "Shipping provider created")


@shipping_router.get("/providers", response_model=PagedEnvelope)
async def list_providers(
    active_only: bool = False,
    page: int = 1,
    limit: int = 20,
    actor: Actor = Depends(admin_actor),
) -> PagedEnvelope:
    return paged(queries.list_providers(active_only, page, limit), serializer=queries.provider_to_dict)


@shipping_router.get("/providers/{provider_id}", response_model=Envelope)
async def get_provider(provider_id: str, actor: Actor = Depends(admin_actor)) -> Envelope:
    return ok(_provider(provider_id))


@shipping_router.put("/providers/{provider_id}", response_model=Envelope)
async def update_provider(
    provider_id: str,
    body: UpdateShippingProviderRequest,
    actor: Actor = Depends(admin_actor),
) -> Envelope:
    command = UpdateShippingProvider(**_by(actor), provider_id=provider_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return ok(_provider(provider_id), "Shipping provider updated")


@shipping_router.delete("/providers/{provider_id}", response_model=Envelope)
async def delete_provider(provider_id: str, actor: Actor = Depends(admin_actor)) -> Envelope:
    current_domain.process(DeleteShippingProvider(**_by(actor), provider_id=provider_id), asynchronous=False)
    return ok(message="Shipping provider deleted")


@shipping_router.post("/providers/{provider_id}/rates", status_code=201, response_model=Envelope)
async def add_rate(provider_id: str, body: ShippingRateRequest, actor: Actor = Depends(admin_actor)) -> Envelope:
    command = AddShippingRate(**_by(actor), provider_id=provider_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return ok(_provider(provider_id), "Shipping rate added")


@shipping_router.put("/providers/{provider_id}/rates/{rate_id}", response_model=Envelope)
async def update_rate(
    provider_id: str,
    rate_id: str,
    body: UpdateShippingRateRequest,
    actor: Actor = Depends(admin_actor),
) -> Envelope:
    command = UpdateShippingRate(**_by(actor), provider_id=provider_id, rate_id=rate_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return ok(_provider(provider_id), "Shipping rate updated")


@shipping_router.delete("/providers/{provider_id}/rates/{rate_id}", response_model=Envelope)
async def remove_rate(provider_id: str, rate_id: str, actor: Actor = Depends(admin_actor)) -> Envelope:
    command = RemoveShippingRate(**_by(actor), provider_id=provider_id, rate_id=rate_id)
    current_domain.process(command, asynchronous=False)
    return ok(_provider(provider_id), "Shipping rate removed")


# ---------------------------------------------------------------------------
# Order tracking
# ---------------------------------------------------------------------------
@tracking_router.get("/track/{tracking_number}", response_model=Envelope)
async def track(tracking_number: str) -> Envelope:
    return ok(queries.public_tracking(tracking_number))


@tracking_router.post("/webhook/{carrier_code}", response_model=Envelope)
async def carrier_webhook(carrier_code: str, request: Request) -> Envelope:
    """Verify the carrier's signature over the raw body, then record the reported status."""
    payload = await request.body()
    signature = request.headers.get("X-Carrier-Signature")
    provider = webhook_provider(carrier_code, payload, signature)

    try:
        update = CarrierWebhookPayload.model_validate_json(payload)
    except pydantic.ValidationError as exc:
        logger.warning("Carrier webhook rejected: malformed payload", carrier_code=carrier_code)
        raise ValidationError({"payload": [str(error["msg"]) for error in exc.errors()]}) from None

    command = ProcessCarrierWebhook(
        carrier=provider.name,
        carrier_code=provider.code,
        payload=payload.decode("utf-8"),
        **update.model_dump(),
    )
    status = current_domain.process(command, asynchronous=False)
    return ok({"tracking_number": update.tracking_number, "status": status}, "Webhook processed")


@tracking_router.get("/stats", response_model=Envelope)
async def tracking_stats(actor: Actor = Depends(staff_actor)) -> Envelope:
    return ok(asdict(queries.tracking_stats(actor)))


@tracking_router.get("/order/{order_id}", response_model=Envelope)
async def tracking_for_order(order_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    return ok(queries.tracking_to_dict(queries.tracking_for_order(order_id, actor)))


@tracking_router.post("", status_code=201, response_model=Envelope)
async def create_tracking(body: CreateOrderTrackingRequest, actor: Actor = Depends(staff_actor)) -> Envelope:
    tracking_id = current_domain.process(CreateOrderTracking(**_by(actor), **body.model_dump()), asynchronous=False)
    return ok(_tracking(tracking_id), "Order tracking created")


@tracking_router.get("", response_model=PagedEnvelope)
async def list_trackings(
    status: str | None = None,
    carrier: str | None = None,
    carrier_code: str | None = None,
    is_active: bool | None = None,
    page: int = 1,
    limit: int = 20,
    actor: Actor = Depends(staff_actor),
) -> PagedEnvelope:
    filters = queries.TrackingFilters(status=status, carrier=carrier, carrier_code=carrier_code, is_active=is_active)
    return paged(queries.list_trackings(actor, filters, page, limit))


@tracking_router.get("/{tracking_id}", response_model=Envelope)
async def get_tracking(tracking_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    return ok(queries.tracking_to_dict(queries.get_tracking(tracking_id, actor)))


@tracking_router.put("/{tracking_id}", response_model=Envelope)
async def update_tracking(
    tracking_id: str,
    body: UpdateOrderTrackingRequest,
    actor: Actor = Depends(staff_actor),
) -> Envelope:
    command = UpdateOrderTracking(**_by(actor), tracking_id=tracking_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return ok(_tracking(tracking_id), "Order tracking updated")


@tracking_router.delete("/{tracking_id}", response_model=Envelope)
async def delete_tracking(tracking_id: str, actor: Actor = Depends(staff_actor)) -> Envelope:
    current_domain.process(DeleteOrderTracking(**_by(actor), tracking_id=tracking_id), asynchronous=False)
    return ok(message="Order tracking deleted")


@tracking_router.get("/{tracking_id}/events", response_model=PagedEnvelope)
async def list_tracking_events(
    tracking_id: str,
    page: int = 1,
    limit: int = 20,
    actor: Actor = Depends(current_actor),
) -> PagedEnvelope:
    return paged(queries.tracking_events(tracking_id, actor, page, limit))


@tracking_router.post("/{tracking_id}/events", status_code=201, response_model=Envelope)
async def add_tracking_event(
    tracking_id: str,
    body: AddTrackingEventRequest,
    actor: Actor = Depends(staff_actor),
) -> Envelope:
    command = AddTrackingEvent(**_by(actor), tracking_id=tracking_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return ok(_tracking(tracking_id), "Tracking event added")
