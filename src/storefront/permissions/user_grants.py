"""Per-user permission overrides: grant or deny a single permission to one user."""

from datetime import UTC, datetime

from protean import handle
from protean.fields import Boolean, DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.permissions.management import load_permission
from storefront.permissions.user_permission import UserPermission
from storefront.shared.access import Actor, Role
from storefront.shared.errors import DomainError, NotFound
from storefront.utils.logging import logger


@storefront.command(part_of="UserPermission")
class SetUserPermission:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    user_id = Identifier(required=True)
    permission_id = Identifier(required=True)
    is_granted = Boolean(default=True)
    reason = Text()
    expires_at = DateTime()


@storefront.command(part_of="UserPermission")
class RemoveUserPermission:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    user_id = Identifier(required=True)
    permission_id = Identifier(required=True)


def find_override(user_id, permission_id) -> UserPermission | None:
    dao = current_domain.repository_for(UserPermission)._dao
    rows = dao.query.filter(user_id=str(user_id), permission_id=str(permission_id)).all().items
    return rows[0] if rows else None


@storefront.command_handler(part_of=UserPermission)
class UserPermissionHandler:
    @handle(SetUserPermission)
    def set_permission(self, command):
        """Create the user's override for the permission, or replace the existing one."""
        actor = Actor.of(command.actor_id, command.actor_role)
        actor.require(Role.ADMIN)
        permission = load_permission(command.permission_id)
        expires_at = command.expires_at
        if expires_at is not None:
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=UTC)
            if expires_at <= datetime.now(UTC):
                raise DomainError("Expiry must be in the future", field="expires_at")

        override = find_override(command.user_id, permission.id)
        if override is None:
            override = UserPermission.create(
                command.user_id,
                permission,
                is_granted=command.is_granted,
                granted_by=actor.user_id,
                reason=command.reason,
                expires_at=expires_at,
            )
        else:
            override.change(command.is_granted, granted_by=actor.user_id, reason=command.reason, expires_at=expires_at)
        current_domain.repository_for(UserPermission).add(override)
        logger.info(
            "User permission set",
            user_id=str(command.user_id),
            permission=permission.name,
            is_granted=override.is_granted,
        )
        return str(override.id)

    @handle(RemoveUserPermission)
    def remove_permission(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.ADMIN)
        override = find_override(command.user_id, command.permission_id)
        if override is None:
            raise NotFound(f"User {command.user_id} has no override for that permission", field="permission_id")
        current_domain.repository_for(UserPermission)._dao.delete(override)
        logger.info("User permission removed", user_id=str(command.user_id), permission=override.permission_name)
