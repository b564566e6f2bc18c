"""Read-side helpers for products and categories."""

from dataclasses import dataclass

from protean.utils.globals import current_domain

from storefront.catalogue.category.category import Category
from storefront.catalogue.product.product import Product
from storefront.shared.errors import NotFound
from storefront.shared.pagination import Page, paginate


@dataclass
class ProductFilters:
    status: str | None = None
    category_id: str | None = None


def get_product_by_sku(sku: str) -> Product:
    products = current_domain.repository_for(Product)._dao.query.filter(sku=sku.upper()).all().items
    if not products:
        raise NotFound(f"Product with SKU {sku} not found", field="sku")
    return products[0]


def list_products(filters: ProductFilters, page: int | None = None, limit: int | None = None) -> Page:
    criteria = {}
    if filters.status:
        criteria["status"] = filters.status
    if filters.category_id:
        criteria["category_id"] = filters.category_id

    query = current_domain.repository_for(Product)._dao.query.filter(**criteria).order_by("-created_at")
    return paginate(query, page, limit)


def list_categories(parent_id: str | None = None, active_only: bool = False) -> list[Category]:
    criteria = {}
    if parent_id:
        criteria["parent_id"] = parent_id
    if active_only:
        criteria["is_active"] = True

    query = current_domain.repository_for(Category)._dao.query.filter(**criteria).order_by("display_order")
    return list(query.all().items)
