"""Read-side helpers and retention cleanup for the audit log."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.audit.audit_log import AuditLog
from storefront.shared.access import Actor, Role
from storefront.shared.dates import date_range_filters, parse_date
from storefront.shared.errors import DomainError, NotFound
from storefront.shared.pagination import Page, iter_all, paginate
from storefront.utils.logging import logger


@dataclass
class AuditFilters:
    user_id: str | None = None
    action: str | None = None
    resource_type: str | None = None
    resource_id: str | None = None
    start_date: str | None = None
    end_date: str | None = None


def list_audit_logs(actor: Actor, filters: AuditFilters, page: int | None = None, limit: int | None = None) -> Page:
    actor.require(Role.ADMIN)

    criteria = {}
    if filters.user_id:
        criteria["user_id"] = filters.user_id
    if filters.action:
        criteria["action"] = filters.action
    if filters.resource_type:
        criteria["resource_type"] = filters.resource_type
    if filters.resource_id:
        criteria["resource_id"] = filters.resource_id
    criteria.update(
        date_range_filters(
            "occurred_at",
            parse_date(filters.start_date, "start_date"),
            parse_date(filters.end_date, "end_date"),
        )
    )

    query = current_domain.repository_for(AuditLog)._dao.query.filter(**criteria).order_by("-occurred_at")
    return paginate(query, page, limit)


def get_audit_log(entry_id, actor: Actor) -> AuditLog:
    actor.require(Role.ADMIN)
    try:
        return current_domain.repository_for(AuditLog).get(entry_id)
    except ObjectNotFoundError:
        raise NotFound(f"Audit log {entry_id} not found", field="entry_id") from None


def cleanup_audit_logs(actor: Actor, days: int) -> int:
    """Delete entries older than ``days`` days. Returns the number removed."""
    actor.require(Role.ADMIN)
    if days is None or days < 1:
        raise DomainError("days must be at least 1", field="days")

    cutoff = datetime.now(UTC) - timedelta(days=days)
    dao = current_domain.repository_for(AuditLog)._dao
    expired = list(iter_all(dao.query.filter(occurred_at__lt=cutoff)))
    for entry in expired:
        dao.delete(entry)

    logger.info("Audit log cleaned up", days=days, removed=len(expired), by=actor.user_id)
    return len(expired)
