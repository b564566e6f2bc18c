"""RateLimitRule aggregate: how many requests a client may make to a path prefix per window."""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Integer, String, Text

from storefront.domain import storefront


@storefront.aggregate
class RateLimitRule:
    name: String(required=True, max_length=100, unique=True)
    description: Text()
    path_prefix: String(required=True, max_length=255)
    limit: Integer(required=True, min_value=1)
    window_seconds: Integer(required=True, min_value=1)
    is_active: Boolean(default=True)
    priority: Integer(default=0)  # higher is checked first
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, name, path_prefix, limit, window_seconds, description=None, priority=0, is_active=True):
        now = datetime.now(UTC)
        return cls(
            name=name,
            description=description,
            path_prefix=path_prefix,
            limit=limit,
            window_seconds=window_seconds,
            priority=priority or 0,
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )

    def applies_to(self, path: str) -> bool:
        return self.is_active and path.startswith(self.path_prefix)

    def update(self, **changes):
        for key in ("description", "path_prefix", "limit", "window_seconds", "is_active", "priority"):
            if changes.get(key) is not None:
                setattr(self, key, changes[key])
        self.updated_at = datetime.now(UTC)
