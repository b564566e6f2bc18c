"""FastAPI routes for wishlists."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.deps import current_actor, optional_actor
from storefront.api.envelope import Envelope, PagedEnvelope, ok, paged
from storefront.shared.access import Actor
from storefront.wishlists.api.schemas import AddWishlistItemRequest, CreateWishlistRequest, UpdateWishlistRequest
from storefront.wishlists.management import (
    AddWishlistItem,
    CreateWishlist,
    DeleteWishlist,
    RemoveWishlistItem,
    UpdateWishlist,
    get_wishlist,
    public_wishlists,
    wishlist_to_dict,
    wishlists_of,
)

wishlist_router = APIRouter(prefix="/wishlists", tags=["wishlists"])


def _by(actor: Actor) -> dict:
    return {"actor_id": actor.user_id, "actor_role": actor.role.value}


@wishlist_router.post("", status_code=201, response_model=Envelope)
async def create_wishlist(body: CreateWishlistRequest, actor: Actor = Depends(current_actor)) -> Envelope:
    wishlist_id = current_domain.process(CreateWishlist(**_by(actor), **body.model_dump()), asynchronous=False)
    return ok(wishlist_to_dict(get_wishlist(wishlist_id, actor)), "Wishlist created")


@wishlist_router.get("", response_model=PagedEnvelope)
async def list_my_wishlists(page: int = 1, limit: int = 20, actor: Actor = Depends(current_actor)) -> PagedEnvelope:
    return paged(wishlists_of(actor.user_id, page, limit), serializer=wishlist_to_dict)


@wishlist_router.get("/public", response_model=PagedEnvelope)
async def list_public_wishlists(page: int = 1, limit: int = 20) -> PagedEnvelope:
    return paged(public_wishlists(page, limit), serializer=wishlist_to_dict)


@wishlist_router.get("/{wishlist_id}", response_model=Envelope)
async def get_one(wishlist_id: str, actor: Actor | None = Depends(optional_actor)) -> Envelope:
    return ok(wishlist_to_dict(get_wishlist(wishlist_id, actor)))


@wishlist_router.put("/{wishlist_id}", response_model=Envelope)
async def update_wishlist(
    wishlist_id: str,
    body: UpdateWishlistRequest,
    actor: Actor = Depends(current_actor),
) -> Envelope:
    command = UpdateWishlist(**_by(actor), wishlist_id=wishlist_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return ok(wishlist_to_dict(get_wishlist(wishlist_id, actor)), "Wishlist updated")


@wishlist_router.delete("/{wishlist_id}", response_model=Envelope)
async def delete_wishlist(wishlist_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    current_domain.process(DeleteWishlist(**_by(actor), wishlist_id=wishlist_id), asynchronous=False)
    return ok(message="Wishlist deleted")


@wishlist_router.post("/{wishlist_id}/items", status_code=201, response_model=Envelope)
async def add_item(
    wishlist_id: str,
    body: AddWishlistItemRequest,
    actor: Actor = Depends(current_actor),
) -> Envelope:
    command = AddWishlistItem(**_by(actor), wishlist_id=wishlist_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return ok(wishlist_to_dict(get_wishlist(wishlist_id, actor)), "Item added to wishlist")


@wishlist_router.delete("/{wishlist_id}/items/{item_id}", response_model=Envelope)
async def remove_item(wishlist_id: str, item_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    command = RemoveWishlistItem(**_by(actor), wishlist_id=wishlist_id, item_id=item_id)
    current_domain.process(command, asynchronous=False)
    return ok(wishlist_to_dict(get_wishlist(wishlist_id, actor)), "Item removed from wishlist")
