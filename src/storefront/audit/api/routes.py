"""FastAPI routes for the audit log (admin only)."""

from fastapi import APIRouter, Depends, Query

from storefront.api.deps import admin_actor
from storefront.api.envelope import Envelope, PagedEnvelope, ok, paged
from storefront.audit import queries
from storefront.shared.access import Actor

audit_router = APIRouter(prefix="/audit-logs", tags=["audit"])


@audit_router.get("", response_model=PagedEnvelope)
async def list_audit_logs(
    user_id: str | None = None,
    action: str | None = None,
    resource_type: str | None = None,
    resource_id: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    page: int = 1,
    limit: int = 20,
    actor: Actor = Depends(admin_actor),
) -> PagedEnvelope:
    filters = queries.AuditFilters(
        user_id=user_id,
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        start_date=start_date,
        end_date=end_date,
    )
    return paged(queries.list_audit_logs(actor, filters, page, limit))


@audit_router.delete("/cleanup", response_model=Envelope)
async def cleanup(days: int = Query(default=90, ge=1), actor: Actor = Depends(admin_actor)) -> Envelope:
    removed = queries.cleanup_audit_logs(actor, days)
    return ok({"removed": removed}, "Audit log cleaned up")


@audit_router.get("/{entry_id}", response_model=Envelope)
async def get_audit_log(entry_id: str, actor: Actor = Depends(admin_actor)) -> Envelope:
    return ok(queries.get_audit_log(entry_id, actor))
