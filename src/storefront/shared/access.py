"""Caller identity and role checks.

The caller's identity is resolved once at the HTTP edge and then passed into
every command explicitly as ``actor_id``/``actor_role``. Domain code never
reaches for request-scoped globals.
"""

from dataclasses import dataclass
from enum import Enum

from storefront.shared.errors import Forbidden, Unauthorized


class Role(Enum):
    CUSTOMER = "customer"
    STAFF = "staff"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


_RANK = {
    Role.CUSTOMER: 0,
    Role.STAFF: 1,
    Role.ADMIN: 2,
    Role.SUPER_ADMIN: 3,
}


def parse_role(value: str | None) -> Role:
    if not value:
        return Role.CUSTOMER
    try:
        return Role(value.strip().lower())
    except ValueError:
        return Role.CUSTOMER


@dataclass(frozen=True)
class Actor:
    """The authenticated caller of an operation."""

    user_id: str
    role: Role = Role.CUSTOMER

    @classmethod
    def of(cls, user_id: str | None, role: str | None = None) -> "Actor":
        if not user_id:
            raise Unauthorized("Authentication required", field="user_id")
        return cls(user_id=str(user_id), role=parse_role(role))

    @property
    def is_staff(self) -> bool:
        return _RANK[self.role] >= _RANK[Role.STAFF]

    @property
    def is_admin(self) -> bool:
        return _RANK[self.role] >= _RANK[Role.ADMIN]

    def require(self, minimum: Role) -> None:
        if _RANK[self.role] < _RANK[minimum]:
            raise Forbidden(f"Requires {minimum.value} role", field="role")

    def require_owner(self, owner_id: str | None, resource: str = "resource") -> None:
        """Owners and staff may act on a resource; everyone else is rejected."""
        if self.is_staff:
            return
        if owner_id is None or str(owner_id) != self.user_id:
            raise Unauthorized(f"You do not own this {resource}", field="user_id")


SYSTEM_ACTOR = Actor(user_id="system", role=Role.SUPER_ADMIN)
