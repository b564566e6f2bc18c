"""UserPermission aggregate: a per-user grant or deny that overrides the user's role."""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Identifier, String, Text

from storefront.domain import storefront


@storefront.aggregate
class UserPermission:
    user_id: Identifier(required=True)
    permission_id: Identifier(required=True)
    permission_name: String(required=True, max_length=100)
    is_granted: Boolean(default=True)
    granted_by: Identifier()
    reason: Text()
    expires_at: DateTime()
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, user_id, permission, is_granted=True, granted_by=None, reason=None, expires_at=None):
        now = datetime.now(UTC)
        return cls(
            user_id=str(user_id),
            permission_id=str(permission.id),
            permission_name=permission.name,
            is_granted=is_granted,
            granted_by=granted_by,
            reason=reason,
            expires_at=expires_at,
            created_at=now,
            updated_at=now,
        )

    def change(self, is_granted, granted_by=None, reason=None, expires_at=None):
        self.is_granted = is_granted
        self.granted_by = granted_by
        self.reason = reason
        self.expires_at = expires_at
        self.updated_at = datetime.now(UTC)

    def is_expired_at(self, moment: datetime) -> bool:
        if self.expires_at is None:
            return False
        expires_at = self.expires_at if self.expires_at.tzinfo else self.expires_at.replace(tzinfo=UTC)
        return expires_at <= moment
