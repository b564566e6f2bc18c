"""Address aggregate: one entry in a user's address book.

Exactly one address per user is the default once the book is non-empty.
The handlers enforce that across aggregates.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Identifier, String, Text

from storefront.domain import storefront


class AddressType(Enum):
    HOME = "home"
    OFFICE = "office"
    BILLING = "billing"
    SHIPPING = "shipping"
    OTHER = "other"


ADDRESS_FIELDS = (
    "address_type",
    "full_name",
    "phone",
    "email",
    "address_line1",
    "address_line2",
    "ward",
    "district",
    "city",
    "state",
    "country",
    "postal_code",
    "instructions",
    "notes",
)


@storefront.aggregate
class Address:
    user_id: Identifier(required=True)
    address_type: String(choices=AddressType, default=AddressType.HOME.value)
    full_name: String(required=True, min_length=2, max_length=255)
    phone: String(required=True, min_length=10, max_length=20)
    email: String(max_length=255)
    address_line1: String(required=True, min_length=5, max_length=255)
    address_line2: String(max_length=255)
    ward: String(required=True, max_length=100)
    district: String(required=True, max_length=100)
    city: String(required=True, max_length=100)
    state: String(max_length=100)
    country: String(max_length=100, default="Vietnam")
    postal_code: String(max_length=20)
    instructions: Text()
    notes: Text()
    is_default: Boolean(default=False)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, user_id, **details):
        now = datetime.now(UTC)
        values = {key: value for key, value in details.items() if key in ADDRESS_FIELDS and value is not None}
        return cls(user_id=str(user_id), is_default=False, created_at=now, updated_at=now, **values)

    def update(self, **details):
        for key, value in details.items():
            if key in ADDRESS_FIELDS and value is not None:
                setattr(self, key, value)
        self.updated_at = datetime.now(UTC)

    def make_default(self):
        self.is_default = True
        self.updated_at = datetime.now(UTC)

    def clear_default(self):
        self.is_default = False
        self.updated_at = datetime.now(UTC)

    def one_line(self) -> str:
        parts = [self.address_line1, self.address_line2, self.ward, self.district, self.city, self.country]
        return ", ".join(part for part in parts if part)
