"""Permission aggregate: one named ``resource.action`` capability.

Permissions are granted to access roles and, as overrides, to single users.
System permissions are seeded by InitializeDefaultPermissions and cannot be
deleted.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, String, Text

from storefront.domain import storefront


class PermissionAction(Enum):
    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    MANAGE = "manage"
    ADMIN = "admin"


RESOURCES = (
    "user",
    "category",
    "product",
    "inventory",
    "upload",
    "order",
    "address",
    "coupon",
    "point",
    "banner",
    "wishlist",
    "search",
    "notification",
    "shipping",
    "customer",
    "report",
    "system",
    "audit",
)

# ``manage`` on a resource covers these actions on the same resource
MANAGE_COVERS = {PermissionAction.READ.value, PermissionAction.WRITE.value, PermissionAction.DELETE.value}


def permission_name(resource: str, action: str) -> str:
    return f"{resource.strip().lower()}.{action.strip().lower()}"


def parse_action(value: str | None) -> PermissionAction:
    try:
        return PermissionAction((value or "").strip().lower())
    except ValueError:
        raise ValidationError({"action": [f"Unknown permission action '{value}'"]}) from None


@storefront.aggregate
class Permission:
    name: String(required=True, max_length=100, unique=True)
    display_name: String(required=True, max_length=255)
    description: Text()
    resource: String(required=True, max_length=50)
    action: String(required=True, choices=PermissionAction)
    is_system: Boolean(default=False)
    is_active: Boolean(default=True)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def name_must_match_resource_and_action(self):
        if self.resource and self.action and self.name != permission_name(self.resource, self.action):
            raise ValidationError({"name": ["Name must be '<resource>.<action>'"]})

    @invariant.post
    def resource_must_be_known(self):
        if self.resource and self.resource not in RESOURCES:
            raise ValidationError({"resource": [f"Unknown resource '{self.resource}'"]})

    @classmethod
    def create(cls, resource, action, display_name=None, description=None, is_system=False):
        resource = resource.strip().lower()
        action = parse_action(action).value
        now = datetime.now(UTC)
        return cls(
            name=permission_name(resource, action),
            display_name=display_name or f"{action.title()} {resource}",
            description=description,
            resource=resource,
            action=action,
            is_system=is_system,
            created_at=now,
            updated_at=now,
        )

    def update(self, display_name=None, description=None, is_active=None):
        if display_name is not None:
            self.display_name = display_name
        if description is not None:
            self.description = description
        if is_active is not None:
            self.is_active = is_active
        self.updated_at = datetime.now(UTC)

    def covers(self, resource: str, action: str) -> bool:
        """Whether holding this permission allows ``action`` on ``resource``."""
        if not self.is_active or self.resource != resource:
            return False
        if self.action == action:
            return True
        return self.action == PermissionAction.MANAGE.value and action in MANAGE_COVERS
