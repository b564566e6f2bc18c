"""Response envelopes.

Every endpoint answers ``{success, message, data}``; listings add
``page``, ``limit`` and ``total``.
"""

from typing import Any

from pydantic import BaseModel

from storefront.shared.pagination import Page


class Envelope(BaseModel):
    success: bool = True
    message: str = "OK"
    data: Any = None


class PagedEnvelope(Envelope):
    page: int = 1
    limit: int = 20
    total: int = 0


class ErrorEnvelope(BaseModel):
    success: bool = False
    message: str
    error_detail: Any = None


def to_data(obj) -> Any:
    """Protean objects serialise through ``to_dict``; everything else passes through."""
    if obj is None:
        return None
    if isinstance(obj, list):
        return [to_data(item) for item in obj]
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return obj


def ok(data=None, message: str = "OK") -> Envelope:
    return Envelope(message=message, data=to_data(data))


def paged(page: Page, message: str = "OK", serializer=to_data) -> PagedEnvelope:
    return PagedEnvelope(
        message=message,
        data=[serializer(item) for item in page.items],
        page=page.page,
        limit=page.limit,
        total=page.total,
    )
