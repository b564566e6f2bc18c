"""AccessRole aggregate: a named bundle of permissions.

Access roles are matched to callers by the role name resolved at the HTTP
edge (customer, staff, admin, super_admin).
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, String, Text

from storefront.domain import storefront


@storefront.entity(part_of="AccessRole")
class RoleGrant:
    permission_id: Identifier(required=True)
    granted_by: Identifier()
    granted_at: DateTime()


@storefront.aggregate
class AccessRole:
    name: String(required=True, max_length=50, unique=True)
    display_name: String(required=True, max_length=100)
    description: Text()
    is_system: Boolean(default=False)
    is_active: Boolean(default=True)
    grants: HasMany(RoleGrant)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def name_must_be_a_slug(self):
        if self.name and not self.name.replace("_", "").isalnum():
            raise ValidationError({"name": ["Role name may only contain letters, digits and '_'"]})

    @classmethod
    def create(cls, name, display_name=None, description=None, is_system=False):
        now = datetime.now(UTC)
        return cls(
            name=name.strip().lower(),
            display_name=display_name or name,
            description=description,
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

    def permission_ids(self) -> set[str]:
        return {str(grant.permission_id) for grant in self.grants}

    def grant(self, permission_id, granted_by=None) -> bool:
        """Add a permission. Returns False when the role already holds it."""
        if str(permission_id) in self.permission_ids():
            return False
        now = datetime.now(UTC)
        self.add_grants(RoleGrant(permission_id=str(permission_id), granted_by=granted_by, granted_at=now))
        self.updated_at = now
        return True

    def revoke(self, permission_id) -> bool:
        """Drop a permission. Returns False when the role did not hold it."""
        for grant in list(self.grants):
            if str(grant.permission_id) == str(permission_id):
                self.remove_grants(grant)
                self.updated_at = datetime.now(UTC)
                return True
        return False

    def replace_grants(self, permission_ids, granted_by=None) -> None:
        wanted = {str(permission_id) for permission_id in permission_ids}
        for permission_id in self.permission_ids() - wanted:
            self.revoke(permission_id)
        for permission_id in sorted(wanted - self.permission_ids()):
            self.grant(permission_id, granted_by)
