"""Read-side helpers for permissions: listings, effective permissions and checks.

A check resolves in this order:

1. ``super_admin`` holds every active permission.
2. An unexpired per-user override decides next; a deny beats a grant.
3. Otherwise the caller's access role decides.

Holding ``<resource>.manage`` also answers read, write and delete on that resource.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from protean.utils.globals import current_domain

from storefront.permissions.management import find_role_by_name
from storefront.permissions.permission import MANAGE_COVERS, Permission, PermissionAction, permission_name
from storefront.permissions.role import AccessRole
from storefront.permissions.user_permission import UserPermission
from storefront.shared.access import Role
from storefront.shared.pagination import Page, iter_all, paginate, paginate_list


@dataclass
class PermissionFilters:
    resource: str | None = None
    action: str | None = None
    is_active: bool | None = None


@dataclass
class PermissionCheck:
    has_permission: bool
    source: str | None = None  # role, user_permission or system
    reason: str | None = None


@dataclass
class PermissionStats:
    total_permissions: int = 0
    active_permissions: int = 0
    total_roles: int = 0
    active_roles: int = 0
    total_user_permissions: int = 0
    active_user_permissions: int = 0
    by_resource: dict = field(default_factory=dict)


def _permissions_dao():
    return current_domain.repository_for(Permission)._dao


def list_permissions(filters: PermissionFilters, page: int | None = None, limit: int | None = None) -> Page:
    criteria = {key: value for key, value in vars(filters).items() if value is not None}
    return paginate(_permissions_dao().query.filter(**criteria).order_by("name"), page, limit)


def list_roles(page: int | None = None, limit: int | None = None) -> Page:
    return paginate(current_domain.repository_for(AccessRole)._dao.query.order_by("name"), page, limit)


def role_to_dict(role: AccessRole) -> dict:
    data = role.to_dict()
    data.pop("grants", None)
    ids = role.permission_ids()
    permissions = [permission for permission in iter_all(_permissions_dao().query) if str(permission.id) in ids]
    data["permissions"] = [permission.to_dict() for permission in sorted(permissions, key=lambda p: p.name)]
    return data


def user_overrides(user_id, page: int | None = None, limit: int | None = None) -> Page:
    query = current_domain.repository_for(UserPermission)._dao.query.filter(user_id=str(user_id))
    return paginate(query.order_by("permission_name"), page, limit)


def _live_overrides(user_id, now: datetime) -> list[UserPermission]:
    query = current_domain.repository_for(UserPermission)._dao.query.filter(user_id=str(user_id))
    return [override for override in iter_all(query) if not override.is_expired_at(now)]


def effective_permissions(user_id, role_name: str | None) -> list[Permission]:
    """Every active permission the user holds right now, by name."""
    active_query = _permissions_dao().query.filter(is_active=True)
    active = {str(permission.id): permission for permission in iter_all(active_query)}
    if role_name == Role.SUPER_ADMIN.value:
        return sorted(active.values(), key=lambda p: p.name)

    held = set()
    role = find_role_by_name(role_name)
    if role is not None and role.is_active:
        held |= role.permission_ids()
    for override in _live_overrides(user_id, datetime.now(UTC)):
        if override.is_granted:
            held.add(str(override.permission_id))
        else:
            held.discard(str(override.permission_id))
    return sorted((active[pid] for pid in held if pid in active), key=lambda p: p.name)


def effective_permissions_page(user_id, role_name, page: int | None = None, limit: int | None = None) -> Page:
    return paginate_list(effective_permissions(user_id, role_name), page, limit)


def _covering(resource: str, action: str) -> list[Permission]:
    names = [permission_name(resource, action)]
    if action in MANAGE_COVERS:
        names.append(permission_name(resource, PermissionAction.MANAGE.value))
    query = _permissions_dao().query.filter(name__in=names, is_active=True)
    return [permission for permission in query.all().items if permission.covers(resource, action)]


def check_permission(user_id, role_name: str | None, resource: str, action: str) -> PermissionCheck:
    resource = (resource or "").strip().lower()
    action = (action or "").strip().lower()
    if role_name == Role.SUPER_ADMIN.value:
        return PermissionCheck(has_permission=True, source="system")

    covering = {str(permission.id) for permission in _covering(resource, action)}
    if not covering:
        return PermissionCheck(has_permission=False, reason="Unknown or inactive permission")

    overrides = [o for o in _live_overrides(user_id, datetime.now(UTC)) if str(o.permission_id) in covering]
    if any(not override.is_granted for override in overrides):
        return PermissionCheck(has_permission=False, source="user_permission", reason="Permission denied for this user")
    if overrides:
        return PermissionCheck(has_permission=True, source="user_permission")

    role = find_role_by_name(role_name)
    if role is not None and role.is_active and role.permission_ids() & covering:
        return PermissionCheck(has_permission=True, source="role")
    return PermissionCheck(has_permission=False, reason="User does not have the required permission")


def permission_stats() -> PermissionStats:
    stats = PermissionStats()
    for permission in iter_all(_permissions_dao().query):
        stats.total_permissions += 1
        if permission.is_active:
            stats.active_permissions += 1
        stats.by_resource[permission.resource] = stats.by_resource.get(permission.resource, 0) + 1
    for role in iter_all(current_domain.repository_for(AccessRole)._dao.query):
        stats.total_roles += 1
        if role.is_active:
            stats.active_roles += 1
    now = datetime.now(UTC)
    for override in iter_all(current_domain.repository_for(UserPermission)._dao.query):
        stats.total_user_permissions += 1
        if override.is_granted and not override.is_expired_at(now):
            stats.active_user_permissions += 1
    return stats
