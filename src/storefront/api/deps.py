"""FastAPI dependencies that resolve the caller.

Authentication happens upstream; the gateway forwards the verified identity
in ``X-User-Id``/``X-User-Role``. Guest carts are addressed by ``X-Session-Id``.
"""

from fastapi import Header

from storefront.shared.access import Actor, Role, parse_role
from storefront.shared.errors import Unauthorized


async def current_actor(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Actor:
    if not x_user_id:
        raise Unauthorized("Authentication required", field="user_id")
    return Actor(user_id=x_user_id, role=parse_role(x_user_role))


async def optional_actor(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Actor | None:
    if not x_user_id:
        return None
    return Actor(user_id=x_user_id, role=parse_role(x_user_role))


async def session_id(x_session_id: str | None = Header(default=None)) -> str | None:
    return x_session_id


def require_role(minimum: Role):
    """Dependency factory: the caller must hold ``minimum`` or a higher role."""

    async def dependency(
        x_user_id: str | None = Header(default=None),
        x_user_role: str | None = Header(default=None),
    ) -> Actor:
        actor = await current_actor(x_user_id, x_user_role)
        actor.require(minimum)
        return actor

    return dependency


staff_actor = require_role(Role.STAFF)
admin_actor = require_role(Role.ADMIN)
