"""FastAPI routes for the caller's address book."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.addresses.api.schemas import CreateAddressRequest, UpdateAddressRequest
from storefront.addresses.management import (
    CreateAddress,
    DeleteAddress,
    SetDefaultAddress,
    UpdateAddress,
    addresses_of,
    default_address,
    get_address,
)
from storefront.api.deps import current_actor
from storefront.api.envelope import Envelope, ok
from storefront.shared.access import Actor

address_router = APIRouter(prefix="/addresses", tags=["addresses"])


def _by(actor: Actor) -> dict:
    return {"actor_id": actor.user_id, "actor_role": actor.role.value}


@address_router.post("", status_code=201, response_model=Envelope)
async def create_address(body: CreateAddressRequest, actor: Actor = Depends(current_actor)) -> Envelope:
    address_id = current_domain.process(CreateAddress(**_by(actor), **body.model_dump()), asynchronous=False)
    return ok(get_address(address_id, actor), "Address created")


@address_router.get("", response_model=Envelope)
async def list_addresses(actor: Actor = Depends(current_actor)) -> Envelope:
    return ok(addresses_of(actor.user_id))


@address_router.get("/default", response_model=Envelope)
async def get_default_address(actor: Actor = Depends(current_actor)) -> Envelope:
    return ok(default_address(actor.user_id))


@address_router.get("/{address_id}", response_model=Envelope)
async def get_one(address_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    return ok(get_address(address_id, actor))


@address_router.put("/{address_id}", response_model=Envelope)
async def update_address(
    address_id: str,
    body: UpdateAddressRequest,
    actor: Actor = Depends(current_actor),
) -> Envelope:
    command = UpdateAddress(**_by(actor), address_id=address_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return ok(get_address(address_id, actor), "Address updated")


@address_router.post("/{address_id}/default", response_model=Envelope)
async def set_default(address_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    current_domain.process(SetDefaultAddress(**_by(actor), address_id=address_id), asynchronous=False)
    return ok(get_address(address_id, actor), "Default address updated")


@address_router.delete("/{address_id}", response_model=Envelope)
async def delete_address(address_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    current_domain.process(DeleteAddress(**_by(actor), address_id=address_id), asynchronous=False)
    return ok(message="Address deleted")
