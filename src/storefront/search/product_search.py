"""Product search over the ProductSearchIndex projection.

Candidates are narrowed by the structured filters in the store, then keyword
matching, ranking and paging happen in memory.
"""

from dataclasses import dataclass
from enum import Enum

from protean.utils.globals import current_domain

from storefront.catalogue.product.product import ProductStatus
from storefront.catalogue.projections.product_search import ProductSearchIndex
from storefront.shared.errors import DomainError
from storefront.shared.pagination import Page, iter_all, paginate_list


class SearchSort(Enum):
    RELEVANCE = "relevance"
    NEWEST = "newest"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    NAME = "name"


@dataclass
class ProductSearchQuery:
    keyword: str | None = None
    category_id: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    sort: SearchSort = SearchSort.RELEVANCE
    page: int | None = None
    limit: int | None = None


def _relevance(row: ProductSearchIndex, keyword: str) -> int:
    name = row.name_lower or ""
    score = 0
    if name == keyword:
        score += 100
    if name.startswith(keyword):
        score += 50
    if keyword in name:
        score += 20
    if keyword in (row.sku or "").lower():
        score += 15
    if keyword in (row.description or "").lower():
        score += 5
    return score


def _candidates(query: ProductSearchQuery) -> list[ProductSearchIndex]:
    criteria = {"status": ProductStatus.ACTIVE.value}
    if query.category_id:
        criteria["category_id"] = query.category_id
    if query.min_price is not None:
        criteria["price__gte"] = query.min_price
    if query.max_price is not None:
        criteria["price__lte"] = query.max_price

    repo = current_domain.repository_for(ProductSearchIndex)
    return list(iter_all(repo._dao.query.filter(**criteria)))


def search_products(query: ProductSearchQuery) -> Page:
    if query.min_price is not None and query.max_price is not None and query.min_price > query.max_price:
        raise DomainError("min_price must not exceed max_price", field="min_price")

    rows = _candidates(query)
    keyword = (query.keyword or "").strip().lower()

    if keyword:
        scored = [(row, _relevance(row, keyword)) for row in rows]
        rows = [row for row, score in scored if score > 0]
        scores = {row.product_id: score for row, score in scored}
    else:
        scores = {}

    if query.sort == SearchSort.PRICE_ASC:
        rows.sort(key=lambda r: (r.price, r.name_lower))
    elif query.sort == SearchSort.PRICE_DESC:
        rows.sort(key=lambda r: (-r.price, r.name_lower))
    elif query.sort == SearchSort.NAME:
        rows.sort(key=lambda r: r.name_lower)
    elif query.sort == SearchSort.RELEVANCE and keyword:
        rows.sort(key=lambda r: (-scores[r.product_id], r.name_lower))
    else:
        rows.sort(key=lambda r: r.created_at, reverse=True)

    return paginate_list(rows, query.page, query.limit)


def suggest(prefix: str, limit: int = 10) -> list[str]:
    """Active product names starting with (then containing) the prefix."""
    prefix = (prefix or "").strip().lower()
    if not prefix:
        return []

    rows = _candidates(ProductSearchQuery())
    starts = sorted(r.name for r in rows if (r.name_lower or "").startswith(prefix))
    contains = sorted(r.name for r in rows if prefix in (r.name_lower or "") and r.name not in starts)
    return (starts + contains)[: max(1, min(limit, 50))]
