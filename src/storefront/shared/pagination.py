"""Page/limit handling shared by every listing operation."""

from dataclasses import dataclass, field
from typing import Any

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
BATCH_SIZE = 100


def clamp(page: int | None, limit: int | None) -> tuple[int, int]:
    """Clamp 1-based page and limit into sane bounds."""
    page = page if page and page > 0 else DEFAULT_PAGE
    if not limit or limit < 1:
        limit = DEFAULT_LIMIT
    return page, min(limit, MAX_LIMIT)


@dataclass
class Page:
    items: list[Any] = field(default_factory=list)
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    total: int = 0

    def map(self, fn) -> "Page":
        return Page(items=[fn(item) for item in self.items], page=self.page, limit=self.limit, total=self.total)


def paginate(queryset, page: int | None = None, limit: int | None = None) -> Page:
    """Run a Protean queryset for one page."""
    page, limit = clamp(page, limit)
    result = queryset.offset((page - 1) * limit).limit(limit).all()
    return Page(items=list(result.items), page=page, limit=limit, total=result.total)


def paginate_list(items: list, page: int | None = None, limit: int | None = None) -> Page:
    """Slice an already materialised list into a page."""
    page, limit = clamp(page, limit)
    start = (page - 1) * limit
    return Page(items=items[start : start + limit], page=page, limit=limit, total=len(items))


def iter_all(queryset, batch_size: int = BATCH_SIZE):
    """Yield every record matched by a queryset, fetching in batches."""
    offset = 0
    while True:
        result = queryset.offset(offset).limit(batch_size).all()
        yield from result.items
        offset += batch_size
        if offset >= result.total or not result.items:
            break
