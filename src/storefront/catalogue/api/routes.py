"""FastAPI endpoints for products, variants and categories."""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.deps import optional_actor, staff_actor
from storefront.api.envelope import Envelope, PagedEnvelope, ok, paged
from storefront.catalogue import queries
from storefront.catalogue.api.schemas import (
    AddVariantRequest,
    ChangeStatusRequest,
    CreateCategoryRequest,
    CreateProductRequest,
    UpdateCategoryRequest,
    UpdateProductRequest,
    UpdateVariantRequest,
)
from storefront.catalogue.category.management import CreateCategory, DeleteCategory, UpdateCategory, load_category
from storefront.catalogue.product.management import (
    AddVariant,
    ChangeProductStatus,
    CreateProduct,
    RemoveVariant,
    UpdateProduct,
    UpdateVariant,
    load_product,
)
from storefront.catalogue.product.product import ProductStatus
from storefront.shared.access import Actor
from storefront.shared.errors import ProductNotFound

product_router = APIRouter(prefix="/products", tags=["products"])
category_router = APIRouter(prefix="/categories", tags=["categories"])


def _visible_product(product_id: str, actor: Actor | None):
    """Customers only see active products; staff see every status."""
    product = load_product(product_id)
    if not product.is_active and not (actor and actor.is_staff):
        raise ProductNotFound(product_id)
    return product


# --- Product endpoints ---


@product_router.post("", status_code=201, response_model=Envelope)
async def create_product(body: CreateProductRequest, actor: Actor = Depends(staff_actor)) -> Envelope:
    command = CreateProduct(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        sku=body.sku,
        name=body.name,
        price=body.price,
        description=body.description,
        category_id=body.category_id,
        slug=body.slug,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return ok(load_product(product_id), "Product created")


@product_router.get("", response_model=PagedEnvelope)
async def list_products(
    status: str | None = None,
    category_id: str | None = None,
    page: int = 1,
    limit: int = 20,
    actor: Actor | None = Depends(optional_actor),
) -> PagedEnvelope:
    if not (actor and actor.is_staff):
        status = ProductStatus.ACTIVE.value
    filters = queries.ProductFilters(status=status, category_id=category_id)
    return paged(queries.list_products(filters, page, limit))


@product_router.get("/sku/{sku}", response_model=Envelope)
async def get_product_by_sku(sku: str, actor: Actor | None = Depends(optional_actor)) -> Envelope:
    product = queries.get_product_by_sku(sku)
    return ok(_visible_product(str(product.id), actor))


@product_router.get("/{product_id}", response_model=Envelope)
async def get_product(product_id: str, actor: Actor | None = Depends(optional_actor)) -> Envelope:
    return ok(_visible_product(product_id, actor))


@product_router.put("/{product_id}", response_model=Envelope)
async def update_product(product_id: str, body: UpdateProductRequest, actor: Actor = Depends(staff_actor)) -> Envelope:
    command = UpdateProduct(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        product_id=product_id,
        name=body.name,
        description=body.description,
        category_id=body.category_id,
        slug=body.slug,
        price=body.price,
    )
    current_domain.process(command, asynchronous=False)
    return ok(load_product(product_id), "Product updated")


@product_router.put("/{product_id}/status", response_model=Envelope)
async def change_product_status(
    product_id: str, body: ChangeStatusRequest, actor: Actor = Depends(staff_actor)
) -> Envelope:
    command = ChangeProductStatus(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        product_id=product_id,
        action=body.action,
    )
    status = current_domain.process(command, asynchronous=False)
    return ok({"product_id": product_id, "status": status}, "Product status changed")


@product_router.post("/{product_id}/variants", status_code=201, response_model=Envelope)
async def add_variant(product_id: str, body: AddVariantRequest, actor: Actor = Depends(staff_actor)) -> Envelope:
    command = AddVariant(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        product_id=product_id,
        sku=body.sku,
        name=body.name,
        price=body.price,
        attributes=json.dumps(body.attributes) if body.attributes else None,
    )
    variant_id = current_domain.process(command, asynchronous=False)
    return ok({"variant_id": variant_id}, "Variant added")


@product_router.put("/{product_id}/variants/{variant_id}", response_model=Envelope)
async def update_variant(
    product_id: str, variant_id: str, body: UpdateVariantRequest, actor: Actor = Depends(staff_actor)
) -> Envelope:
    command = UpdateVariant(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        product_id=product_id,
        variant_id=variant_id,
        name=body.name,
        price=body.price,
        is_active=body.is_active,
    )
    current_domain.process(command, asynchronous=False)
    return ok(load_product(product_id), "Variant updated")


@product_router.delete("/{product_id}/variants/{variant_id}", response_model=Envelope)
async def remove_variant(product_id: str, variant_id: str, actor: Actor = Depends(staff_actor)) -> Envelope:
    command = RemoveVariant(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        product_id=product_id,
        variant_id=variant_id,
    )
    current_domain.process(command, asynchronous=False)
    return ok(message="Variant removed")


# --- Category endpoints ---


@category_router.post("", status_code=201, response_model=Envelope)
async def create_category(body: CreateCategoryRequest, actor: Actor = Depends(staff_actor)) -> Envelope:
    command = CreateCategory(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        name=body.name,
        description=body.description,
        parent_id=body.parent_id,
        display_order=body.display_order,
    )
    category_id = current_domain.process(command, asynchronous=False)
    return ok(load_category(category_id), "Category created")


@category_router.get("", response_model=Envelope)
async def list_categories(parent_id: str | None = None, active_only: bool = True) -> Envelope:
    return ok(queries.list_categories(parent_id=parent_id, active_only=active_only))


@category_router.get("/{category_id}", response_model=Envelope)
async def get_category(category_id: str) -> Envelope:
    return ok(load_category(category_id))


@category_router.put("/{category_id}", response_model=Envelope)
async def update_category(
    category_id: str, body: UpdateCategoryRequest, actor: Actor = Depends(staff_actor)
) -> Envelope:
    command = UpdateCategory(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        category_id=category_id,
        name=body.name,
        description=body.description,
        display_order=body.display_order,
        is_active=body.is_active,
    )
    current_domain.process(command, asynchronous=False)
    return ok(load_category(category_id), "Category updated")


@category_router.delete("/{category_id}", response_model=Envelope)
async def delete_category(category_id: str, actor: Actor = Depends(staff_actor)) -> Envelope:
    command = DeleteCategory(actor_id=actor.user_id, actor_role=actor.role.value, category_id=category_id)
    current_domain.process(command, asynchronous=False)
    return ok(message="Category deleted")
