"""FastAPI routes for permissions, access roles and per-user overrides."""

import json
from dataclasses import asdict

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.deps import admin_actor, current_actor
from storefront.api.envelope import Envelope, PagedEnvelope, ok, paged
from storefront.permissions import queries
from storefront.permissions.api.schemas import (
    CreatePermissionRequest,
    CreateRoleRequest,
    PermissionCheckRequest,
    RolePermissionRequest,
    RolePermissionsRequest,
    UpdatePermissionRequest,
    UpdateRoleRequest,
    UserPermissionRequest,
)
from storefront.permissions.management import (
    AssignRolePermission,
    CreateAccessRole,
    CreatePermission,
    DeleteAccessRole,
    DeletePermission,
    InitializeDefaultPermissions,
    RevokeRolePermission,
    SetRolePermissions,
    UpdateAccessRole,
    UpdatePermission,
    load_permission,
    load_role,
)
from storefront.permissions.user_grants import RemoveUserPermission, SetUserPermission
from storefront.permissions.user_permission import UserPermission
from storefront.shared.access import Actor

permission_router = APIRouter(prefix="/permissions", tags=["permissions"])
role_router = APIRouter(prefix="/roles", tags=["permissions"])
user_permission_router = APIRouter(prefix="/users/{user_id}/permissions", tags=["permissions"])


def _by(actor: Actor) -> dict:
    return {"actor_id": actor.user_id, "actor_role": actor.role.value}


def _role(role_id) -> dict:
    return queries.role_to_dict(load_role(role_id))


# ---------------------------------------------------------------------------
# Permissions
# ---------------------------------------------------------------------------
@permission_router.get("/me", response_model=PagedEnvelope)
async def my_permissions(page: int = 1, limit: int = 100, actor: Actor = Depends(current_actor)) -> PagedEnvelope:
    return paged(queries.effective_permissions_page(actor.user_id, actor.role.value, page, limit))


@permission_router.get("/me/check", response_model=Envelope)
async def check_my_permission(resource: str, action: str, actor: Actor = Depends(current_actor)) -> Envelope:
    return ok(asdict(queries.check_permission(actor.user_id, actor.role.value, resource, action)))


@permission_router.post("/check", response_model=Envelope)
async def check_permission(body: PermissionCheckRequest, actor: Actor = Depends(admin_actor)) -> Envelope:
    return ok(asdict(queries.check_permission(body.user_id, body.role, body.resource, body.action)))


@permission_router.post("/initialize", response_model=Envelope)
async def initialize_defaults(actor: Actor = Depends(admin_actor)) -> Envelope:
    created = current_domain.process(InitializeDefaultPermissions(**_by(actor)), asynchronous=False)
    return ok(created, "Default permissions initialized")


@permission_router.get("/stats", response_model=Envelope)
async def permission_stats(actor: Actor = Depends(admin_actor)) -> Envelope:
    return ok(asdict(queries.permission_stats()))


@permission_router.post("", status_code=201, response_model=Envelope)
async def create_permission(body: CreatePermissionRequest, actor: Actor = Depends(admin_actor)) -> Envelope:
    permission_id = current_domain.process(CreatePermission(**_by(actor), **body.model_dump()), asynchronous=False)
    return ok(load_permission(permission_id), "Permission created")


@permission_router.get("", response_model=PagedEnvelope)
async def list_permissions(
    resource: str | None = None,
    action: str | None = None,
    is_active: bool | None = None,
    page: int = 1,
    limit: int = 20,
    actor: Actor = Depends(admin_actor),
) -> PagedEnvelope:
    filters = queries.PermissionFilters(resource=resource, action=action, is_active=is_active)
    return paged(queries.list_permissions(filters, page, limit))


@permission_router.get("/{permission_id}", response_model=Envelope)
async def get_permission(permission_id: str, actor: Actor = Depends(admin_actor)) -> Envelope:
    return ok(load_permission(permission_id))


@permission_router.put("/{permission_id}", response_model=Envelope)
async def update_permission(
    permission_id: str,
    body: UpdatePermissionRequest,
    actor: Actor = Depends(admin_actor),
) -> Envelope:
    command = UpdatePermission(**_by(actor), permission_id=permission_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return ok(load_permission(permission_id), "Permission updated")


@permission_router.delete("/{permission_id}", response_model=Envelope)
async def delete_permission(permission_id: str, actor: Actor = Depends(admin_actor)) -> Envelope:
    current_domain.process(DeletePermission(**_by(actor), permission_id=permission_id), asynchronous=False)
    return ok(message="Permission deleted")


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------
@role_router.post("", status_code=201, response_model=Envelope)
async def create_role(body: CreateRoleRequest, actor: Actor = Depends(admin_actor)) -> Envelope:
    role_id = current_domain.process(CreateAccessRole(**_by(actor), **body.model_dump()), asynchronous=False)
    return ok(_role(role_id), "Role created")


@role_router.get("", response_model=PagedEnvelope)
async def list_roles(page: int = 1, limit: int = 20, actor: Actor = Depends(admin_actor)) -> PagedEnvelope:
    return paged(queries.list_roles(page, limit), serializer=queries.role_to_dict)


@role_router.get("/{role_id}", response_model=Envelope)
async def get_role(role_id: str, actor: Actor = Depends(admin_actor)) -> Envelope:
    return ok(_role(role_id))


@role_router.put("/{role_id}", response_model=Envelope)
async def update_role(role_id: str, body: UpdateRoleRequest, actor: Actor = Depends(admin_actor)) -> Envelope:
    current_domain.process(UpdateAccessRole(**_by(actor), role_id=role_id, **body.model_dump()), asynchronous=False)
    return ok(_role(role_id), "Role updated")


@role_router.delete("/{role_id}", response_model=Envelope)
async def delete_role(role_id: str, actor: Actor = Depends(admin_actor)) -> Envelope:
    current_domain.process(DeleteAccessRole(**_by(actor), role_id=role_id), asynchronous=False)
    return ok(message="Role deleted")


@role_router.post("/{role_id}/permissions", response_model=Envelope)
async def assign_permission(
    role_id: str,
    body: RolePermissionRequest,
    actor: Actor = Depends(admin_actor),
) -> Envelope:
    command = AssignRolePermission(**_by(actor), role_id=role_id, permission_id=body.permission_id)
    current_domain.process(command, asynchronous=False)
    return ok(_role(role_id), "Permission assigned to role")


@role_router.put("/{role_id}/permissions", response_model=Envelope)
async def set_permissions(
    role_id: str,
    body: RolePermissionsRequest,
    actor: Actor = Depends(admin_actor),
) -> Envelope:
    command = SetRolePermissions(**_by(actor), role_id=role_id, permission_ids=json.dumps(body.permission_ids))
    current_domain.process(command, asynchronous=False)
    return ok(_role(role_id), "Role permissions updated")


@role_router.delete("/{role_id}/permissions/{permission_id}", response_model=Envelope)
async def revoke_permission(role_id: str, permission_id: str, actor: Actor = Depends(admin_actor)) -> Envelope:
    command = RevokeRolePermission(**_by(actor), role_id=role_id, permission_id=permission_id)
    current_domain.process(command, asynchronous=False)
    return ok(_role(role_id), "Permission revoked from role")


# ---------------------------------------------------------------------------
# Per-user overrides
# ---------------------------------------------------------------------------
@user_permission_router.get("", response_model=PagedEnvelope)
async def list_user_permissions(
    user_id: str,
    page: int = 1,
    limit: int = 20,
    actor: Actor = Depends(admin_actor),
) -> PagedEnvelope:
    return paged(queries.user_overrides(user_id, page, limit))


@user_permission_router.get("/effective", response_model=PagedEnvelope)
async def user_effective_permissions(
    user_id: str,
    role: str | None = None,
    page: int = 1,
    limit: int = 100,
    actor: Actor = Depends(admin_actor),
) -> PagedEnvelope:
    return paged(queries.effective_permissions_page(user_id, role, page, limit))


@user_permission_router.put("", response_model=Envelope)
async def set_user_permission(
    user_id: str,
    body: UserPermissionRequest,
    actor: Actor = Depends(admin_actor),
) -> Envelope:
    override_id = current_domain.process(
        SetUserPermission(**_by(actor), user_id=user_id, **body.model_dump()),
        asynchronous=False,
    )
    override = current_domain.repository_for(UserPermission).get(override_id)
    message = "Permission granted to user" if override.is_granted else "Permission denied for user"
    return ok(override, message)


@user_permission_router.delete("/{permission_id}", response_model=Envelope)
async def remove_user_permission(user_id: str, permission_id: str, actor: Actor = Depends(admin_actor)) -> Envelope:
    command = RemoveUserPermission(**_by(actor), user_id=user_id, permission_id=permission_id)
    current_domain.process(command, asynchronous=False)
    return ok(message="User permission removed")
