"""FastAPI routes for managing rate limit rules (admin only)."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.deps import admin_actor
from storefront.api.envelope import Envelope, PagedEnvelope, ok, paged
from storefront.ratelimit.api.schemas import CreateRateLimitRuleRequest, UpdateRateLimitRuleRequest
from storefront.ratelimit.management import (
    CleanupRateLimitCounters,
    CreateRateLimitRule,
    DeleteRateLimitRule,
    UpdateRateLimitRule,
    load_rule,
)
from storefront.ratelimit.rule import RateLimitRule
from storefront.shared.access import Actor
from storefront.shared.pagination import paginate

rate_limit_router = APIRouter(prefix="/rate-limits", tags=["rate limits"])


def _by(actor: Actor) -> dict:
    return {"actor_id": actor.user_id, "actor_role": actor.role.value}


@rate_limit_router.post("", status_code=201, response_model=Envelope)
async def create_rule(body: CreateRateLimitRuleRequest, actor: Actor = Depends(admin_actor)) -> Envelope:
    rule_id = current_domain.process(CreateRateLimitRule(**_by(actor), **body.model_dump()), asynchronous=False)
    return ok(load_rule(rule_id), "Rate limit rule created")


@rate_limit_router.get("", response_model=PagedEnvelope)
async def list_rules(page: int = 1, limit: int = 20, actor: Actor = Depends(admin_actor)) -> PagedEnvelope:
    query = current_domain.repository_for(RateLimitRule)._dao.query.order_by("-priority")
    return paged(paginate(query, page, limit))


@rate_limit_router.delete("/counters/expired", response_model=Envelope)
async def cleanup_counters(actor: Actor = Depends(admin_actor)) -> Envelope:
    removed = current_domain.process(CleanupRateLimitCounters(**_by(actor)), asynchronous=False)
    return ok({"removed": removed}, "Expired rate limit counters removed")


@rate_limit_router.get("/{rule_id}", response_model=Envelope)
async def get_rule(rule_id: str, actor: Actor = Depends(admin_actor)) -> Envelope:
    return ok(load_rule(rule_id))


@rate_limit_router.put("/{rule_id}", response_model=Envelope)
async def update_rule(rule_id: str, body: UpdateRateLimitRuleRequest, actor: Actor = Depends(admin_actor)) -> Envelope:
    current_domain.process(UpdateRateLimitRule(**_by(actor), rule_id=rule_id, **body.model_dump()), asynchronous=False)
    return ok(load_rule(rule_id), "Rate limit rule updated")


@rate_limit_router.delete("/{rule_id}", response_model=Envelope)
async def delete_rule(rule_id: str, actor: Actor = Depends(admin_actor)) -> Envelope:
    current_domain.process(DeleteRateLimitRule(**_by(actor), rule_id=rule_id), asynchronous=False)
    return ok(message="Rate limit rule deleted")
