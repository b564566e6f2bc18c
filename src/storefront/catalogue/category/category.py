"""Category aggregate: a flat or nested grouping of products."""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from storefront.catalogue.product.product import slugify
from storefront.domain import storefront


@storefront.aggregate
class Category:
    name: String(required=True, max_length=100)
    slug: String(required=True, max_length=120)
    description: Text()
    parent_id: Identifier()
    display_order: Integer(default=0)
    is_active: Boolean(default=True)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, name, description=None, parent_id=None, display_order=0, slug=None):
        now = datetime.now(UTC)
        return cls(
            name=name,
            slug=slug or slugify(name),
            description=description,
            parent_id=parent_id,
            display_order=display_order,
            is_active=True,
            created_at=now,
            updated_at=now,
        )

    def update(self, name=None, description=None, display_order=None, is_active=None):
        if name is not None:
            self.name = name
        if description is not None:
            self.description = description
        if display_order is not None:
            self.display_order = display_order
        if is_active is not None:
            self.is_active = is_active
        self.updated_at = datetime.now(UTC)
