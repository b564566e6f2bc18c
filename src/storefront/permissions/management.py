"""Permission and access role management: commands, handlers and lookups (admin only)."""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.permissions.permission import RESOURCES, Permission, PermissionAction, permission_name
from storefront.permissions.role import AccessRole
from storefront.permissions.user_permission import UserPermission
from storefront.shared.access import Actor, Role
from storefront.shared.errors import BusinessRuleViolation, Conflict, DomainError, NotFound
from storefront.utils.logging import logger

DEFAULT_ROLES = {
    Role.SUPER_ADMIN.value: ("Super Administrator", "Full system access with all permissions"),
    Role.ADMIN.value: ("Administrator", "Administrative access to most system features"),
    Role.STAFF.value: ("Staff", "Back-office access to catalogue, stock and orders"),
    Role.CUSTOMER.value: ("Customer", "Basic shopper access"),
}

_VERBS = {
    PermissionAction.READ.value: "Read",
    PermissionAction.WRITE.value: "Create/Update",
    PermissionAction.DELETE.value: "Delete",
    PermissionAction.MANAGE.value: "Manage",
    PermissionAction.ADMIN.value: "Administer",
}

_STAFF_RESOURCES = {"category", "product", "inventory", "upload", "order", "customer", "banner", "shipping"}
_CUSTOMER_RESOURCES = {"category", "product", "inventory", "upload", "banner", "search"}


def default_permissions() -> list[tuple[str, str]]:
    """Every resource gets read, write, delete and manage; ``system.admin`` is the one admin action."""
    actions = (
        PermissionAction.READ.value,
        PermissionAction.WRITE.value,
        PermissionAction.DELETE.value,
        PermissionAction.MANAGE.value,
    )
    pairs = [(resource, action) for resource in RESOURCES for action in actions]
    pairs.append(("system", PermissionAction.ADMIN.value))
    return pairs


def default_grant(role_name: str, resource: str, action: str) -> bool:
    if role_name == Role.SUPER_ADMIN.value:
        return True
    if role_name == Role.ADMIN.value:
        return action != PermissionAction.ADMIN.value
    if role_name == Role.STAFF.value:
        return resource in _STAFF_RESOURCES and action in (PermissionAction.READ.value, PermissionAction.WRITE.value)
    if role_name == Role.CUSTOMER.value:
        return resource in _CUSTOMER_RESOURCES and action == PermissionAction.READ.value
    return False


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------
@storefront.command(part_of="Permission")
class CreatePermission:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    resource = String(required=True, max_length=50)
    action = String(required=True, max_length=20)
    display_name = String(max_length=255)
    description = Text()


@storefront.command(part_of="Permission")
class UpdatePermission:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    permission_id = Identifier(required=True)
    display_name = String(max_length=255)
    description = Text()
    is_active = Boolean()


@storefront.command(part_of="Permission")
class DeletePermission:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    permission_id = Identifier(required=True)


@storefront.command(part_of="Permission")
class InitializeDefaultPermissions:
    """Seed the system permissions and roles. Safe to run repeatedly."""

    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)


@storefront.command(part_of="AccessRole")
class CreateAccessRole:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    name = String(required=True, max_length=50)
    display_name = String(max_length=100)
    description = Text()


@storefront.command(part_of="AccessRole")
class UpdateAccessRole:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    role_id = Identifier(required=True)
    display_name = String(max_length=100)
    description = Text()
    is_active = Boolean()


@storefront.command(part_of="AccessRole")
class DeleteAccessRole:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    role_id = Identifier(required=True)


@storefront.command(part_of="AccessRole")
class AssignRolePermission:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    role_id = Identifier(required=True)
    permission_id = Identifier(required=True)


@storefront.command(part_of="AccessRole")
class RevokeRolePermission:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    role_id = Identifier(required=True)
    permission_id = Identifier(required=True)


@storefront.command(part_of="AccessRole")
class SetRolePermissions:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    role_id = Identifier(required=True)
    permission_ids = Text(required=True)  # JSON array of permission ids


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------
def load_permission(permission_id) -> Permission:
    try:
        return current_domain.repository_for(Permission).get(permission_id)
    except ObjectNotFoundError:
        raise NotFound(f"Permission {permission_id} not found", field="permission_id") from None


def find_permission_by_name(name: str) -> Permission | None:
    rows = current_domain.repository_for(Permission)._dao.query.filter(name=name.strip().lower()).all().items
    return rows[0] if rows else None


def load_role(role_id) -> AccessRole:
    try:
        return current_domain.repository_for(AccessRole).get(role_id)
    except ObjectNotFoundError:
        raise NotFound(f"Role {role_id} not found", field="role_id") from None


def find_role_by_name(name: str | None) -> AccessRole | None:
    if not name:
        return None
    rows = current_domain.repository_for(AccessRole)._dao.query.filter(name=name.strip().lower()).all().items
    return rows[0] if rows else None


def parse_ids(raw) -> list[str]:
    try:
        ids = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError:
        raise DomainError("Permission ids must be a JSON array", field="permission_ids") from None
    if not isinstance(ids, list):
        raise DomainError("Permission ids must be a JSON array", field="permission_ids")
    return [str(permission_id) for permission_id in ids]


def _require_admin(command) -> Actor:
    actor = Actor.of(command.actor_id, command.actor_role)
    actor.require(Role.ADMIN)
    return actor


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------
@storefront.command_handler(part_of=Permission)
class PermissionHandler:
    @handle(CreatePermission)
    def create_permission(self, command):
        _require_admin(command)
        permission = Permission.create(
            command.resource,
            command.action,
            display_name=command.display_name,
            description=command.description,
        )
        if find_permission_by_name(permission.name):
            raise Conflict(f"Permission '{permission.name}' already exists", field="name")
        current_domain.repository_for(Permission).add(permission)
        logger.info("Permission created", permission_id=str(permission.id), name=permission.name)
        return str(permission.id)

    @handle(UpdatePermission)
    def update_permission(self, command):
        _require_admin(command)
        permission = load_permission(command.permission_id)
        permission.update(
            display_name=command.display_name,
            description=command.description,
            is_active=command.is_active,
        )
        current_domain.repository_for(Permission).add(permission)

    @handle(DeletePermission)
    def delete_permission(self, command):
        _require_admin(command)
        permission = load_permission(command.permission_id)
        if permission.is_system:
            raise BusinessRuleViolation("System permissions cannot be deleted", field="permission_id")

        permission_id = str(permission.id)
        role_repo = current_domain.repository_for(AccessRole)
        for role in role_repo._dao.query.all().items:
            if role.revoke(permission_id):
                role_repo.add(role)
        user_dao = current_domain.repository_for(UserPermission)._dao
        for override in user_dao.query.filter(permission_id=permission_id).all().items:
            user_dao.delete(override)

        current_domain.repository_for(Permission)._dao.delete(permission)
        logger.info("Permission deleted", permission_id=permission_id, name=permission.name)

    @handle(InitializeDefaultPermissions)
    def initialize_defaults(self, command):
        actor = _require_admin(command)
        permission_repo = current_domain.repository_for(Permission)
        role_repo = current_domain.repository_for(AccessRole)

        created_permissions = 0
        permissions = []
        for resource, action in default_permissions():
            permission = find_permission_by_name(permission_name(resource, action))
            if permission is None:
                permission = Permission.create(
                    resource,
                    action,
                    display_name=f"{_VERBS[action]} {resource}",
                    is_system=True,
                )
                permission_repo.add(permission)
                created_permissions += 1
            permissions.append(permission)

        created_roles = 0
        for name, (display_name, description) in DEFAULT_ROLES.items():
            role = find_role_by_name(name)
            if role is None:
                role = AccessRole.create(name, display_name=display_name, description=description, is_system=True)
                created_roles += 1
            for permission in permissions:
                if default_grant(name, permission.resource, permission.action):
                    role.grant(permission.id, granted_by=actor.user_id)
            role_repo.add(role)

        logger.info(
            "Default permissions initialized",
            permissions_created=created_permissions,
            roles_created=created_roles,
        )
        return {"permissions_created": created_permissions, "roles_created": created_roles}


@storefront.command_handler(part_of=AccessRole)
class AccessRoleHandler:
    @handle(CreateAccessRole)
    def create_role(self, command):
        _require_admin(command)
        if find_role_by_name(command.name):
            raise Conflict(f"Role '{command.name}' already exists", field="name")
        role = AccessRole.create(command.name, display_name=command.display_name, description=command.description)
        current_domain.repository_for(AccessRole).add(role)
        logger.info("Role created", role_id=str(role.id), name=role.name)
        return str(role.id)

    @handle(UpdateAccessRole)
    def update_role(self, command):
        _require_admin(command)
        role = load_role(command.role_id)
        role.update(display_name=command.display_name, description=command.description, is_active=command.is_active)
        current_domain.repository_for(AccessRole).add(role)

    @handle(DeleteAccessRole)
    def delete_role(self, command):
        _require_admin(command)
        role = load_role(command.role_id)
        if role.is_system:
            raise BusinessRuleViolation("System roles cannot be deleted", field="role_id")
        current_domain.repository_for(AccessRole)._dao.delete(role)
        logger.info("Role deleted", role_id=str(role.id), name=role.name)

    @handle(AssignRolePermission)
    def assign_permission(self, command):
        actor = _require_admin(command)
        role = load_role(command.role_id)
        permission = load_permission(command.permission_id)
        if not role.grant(permission.id, granted_by=actor.user_id):
            raise Conflict(f"Role '{role.name}' already has '{permission.name}'", field="permission_id")
        current_domain.repository_for(AccessRole).add(role)
        logger.info("Permission granted to role", role=role.name, permission=permission.name)

    @handle(RevokeRolePermission)
    def revoke_permission(self, command):
        _require_admin(command)
        role = load_role(command.role_id)
        if not role.revoke(command.permission_id):
            raise NotFound(
                f"Role '{role.name}' does not have permission {command.permission_id}",
                field="permission_id",
            )
        current_domain.repository_for(AccessRole).add(role)
        logger.info("Permission revoked from role", role=role.name, permission_id=str(command.permission_id))

    @handle(SetRolePermissions)
    def set_permissions(self, command):
        actor = _require_admin(command)
        role = load_role(command.role_id)
        permission_ids = [str(load_permission(pid).id) for pid in parse_ids(command.permission_ids)]
        role.replace_grants(permission_ids, granted_by=actor.user_id)
        current_domain.repository_for(AccessRole).add(role)
        logger.info("Role permissions replaced", role=role.name, count=len(permission_ids))
