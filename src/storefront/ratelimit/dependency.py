"""FastAPI dependency that applies rate limit rules to every API request."""

from fastapi import Request
from protean.utils.globals import current_domain

from storefront.ratelimit.management import RecordRequestHit


def client_key(request: Request) -> str:
    """Signed-in callers are limited per user; everyone else per client IP."""
    user_id = request.headers.get("x-user-id")
    if user_id:
        return f"user:{user_id}"
    host = request.client.host if request.client else "unknown"
    return f"ip:{host}"


async def enforce_rate_limits(request: Request) -> None:
    current_domain.process(
        RecordRequestHit(path=request.url.path, client_key=client_key(request)),
        asynchronous=False,
    )
