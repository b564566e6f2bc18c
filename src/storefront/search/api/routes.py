"""FastAPI endpoints for product search."""

from fastapi import APIRouter

from storefront.api.envelope import Envelope, PagedEnvelope, ok, paged
from storefront.search.product_search import ProductSearchQuery, SearchSort, search_products, suggest
from storefront.shared.errors import DomainError

search_router = APIRouter(prefix="/search", tags=["search"])


@search_router.get("/products", response_model=PagedEnvelope)
async def search(
    q: str | None = None,
    category_id: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    sort: str = SearchSort.RELEVANCE.value,
    page: int = 1,
    limit: int = 20,
) -> PagedEnvelope:
    try:
        sort_order = SearchSort(sort)
    except ValueError:
        raise DomainError(f"Unknown sort order: {sort}", field="sort") from None

    query = ProductSearchQuery(
        keyword=q,
        category_id=category_id,
        min_price=min_price,
        max_price=max_price,
        sort=sort_order,
        page=page,
        limit=limit,
    )
    return paged(search_products(query))


@search_router.get("/suggestions", response_model=Envelope)
async def suggestions(q: str = "", limit: int = 10) -> Envelope:
    return ok(suggest(q, limit))
