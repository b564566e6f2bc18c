"""FastAPI routes for banners."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.deps import staff_actor
from storefront.api.envelope import Envelope, PagedEnvelope, ok, paged
from storefront.banners.api.schemas import CreateBannerRequest, UpdateBannerRequest
from storefront.banners.management import (
    CreateBanner,
    DeleteBanner,
    UpdateBanner,
    active_banners,
    list_banners,
    load_banner,
)
from storefront.shared.access import Actor

banner_router = APIRouter(prefix="/banners", tags=["banners"])


def _by(actor: Actor) -> dict:
    return {"actor_id": actor.user_id, "actor_role": actor.role.value}


@banner_router.get("/active", response_model=PagedEnvelope)
async def list_active_banners(position: str | None = None, page: int = 1, limit: int = 20) -> PagedEnvelope:
    return paged(active_banners(position, page, limit))


@banner_router.post("", status_code=201, response_model=Envelope)
async def create_banner(body: CreateBannerRequest, actor: Actor = Depends(staff_actor)) -> Envelope:
    banner_id = current_domain.process(CreateBanner(**_by(actor), **body.model_dump()), asynchronous=False)
    return ok(load_banner(banner_id), "Banner created")


@banner_router.get("", response_model=PagedEnvelope)
async def list_all_banners(
    status: str | None = None,
    position: str | None = None,
    page: int = 1,
    limit: int = 20,
    actor: Actor = Depends(staff_actor),
) -> PagedEnvelope:
    return paged(list_banners(status, position, page, limit))


@banner_router.get("/{banner_id}", response_model=Envelope)
async def get_banner(banner_id: str) -> Envelope:
    return ok(load_banner(banner_id))


@banner_router.put("/{banner_id}", response_model=Envelope)
async def update_banner(banner_id: str, body: UpdateBannerRequest, actor: Actor = Depends(staff_actor)) -> Envelope:
    current_domain.process(UpdateBanner(**_by(actor), banner_id=banner_id, **body.model_dump()), asynchronous=False)
    return ok(load_banner(banner_id), "Banner updated")


@banner_router.delete("/{banner_id}", response_model=Envelope)
async def delete_banner(banner_id: str, actor: Actor = Depends(staff_actor)) -> Envelope:
    current_domain.process(DeleteBanner(**_by(actor), banner_id=banner_id), asynchronous=False)
    return ok(message="Banner deleted")
