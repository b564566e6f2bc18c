"""FastAPI routes for stock levels and inventory movements."""

from dataclasses import asdict

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.deps import staff_actor
from storefront.api.envelope import Envelope, PagedEnvelope, ok, paged
from storefront.inventory import queries
from storefront.inventory.api.schemas import (
    CancelMovementRequest,
    CreateMovementRequest,
    InitializeStockRequest,
    StockQuantityRequest,
    UpdateMovementRequest,
    UpdateStockSettingsRequest,
)
from storefront.inventory.movement.management import (
    ApproveMovement,
    CancelMovement,
    CompleteMovement,
    CreateMovement,
    DeleteMovement,
    UpdateMovement,
)
from storefront.inventory.stock.initialization import InitializeStock
from storefront.inventory.stock.reservation import ReleaseStock, ReserveStock
from storefront.inventory.stock.settings import UpdateStockSettings
from storefront.shared.access import Actor

inventory_router = APIRouter(prefix="/inventory", tags=["inventory"])


# --- Stock levels ---


@inventory_router.post("/stock", status_code=201, response_model=Envelope)
async def initialize_stock(body: InitializeStockRequest, actor: Actor = Depends(staff_actor)) -> Envelope:
    command = InitializeStock(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        product_id=body.product_id,
        variant_id=body.variant_id,
        sku=body.sku,
        initial_quantity=body.initial_quantity,
        reorder_point=body.reorder_point,
    )
    result = current_domain.process(command, asynchronous=False)
    return ok({"stock_item_id": result}, "Stock initialized")


@inventory_router.get("/stock", response_model=PagedEnvelope)
async def list_stock_levels(
    product_id: str | None = None,
    low_stock: bool = False,
    out_of_stock: bool = False,
    page: int = 1,
    limit: int = 20,
    actor: Actor = Depends(staff_actor),
) -> PagedEnvelope:
    filters = queries.StockLevelFilters(product_id=product_id, low_stock=low_stock, out_of_stock=out_of_stock)
    return paged(queries.list_stock_levels(filters, page, limit))


@inventory_router.get("/stock/low", response_model=PagedEnvelope)
async def list_low_stock(page: int = 1, limit: int = 20, actor: Actor = Depends(staff_actor)) -> PagedEnvelope:
    return paged(queries.list_stock_levels(queries.StockLevelFilters(low_stock=True), page, limit))


@inventory_router.get("/stock/out", response_model=PagedEnvelope)
async def list_out_of_stock(page: int = 1, limit: int = 20, actor: Actor = Depends(staff_actor)) -> PagedEnvelope:
    return paged(queries.list_stock_levels(queries.StockLevelFilters(out_of_stock=True), page, limit))


@inventory_router.get("/stock/{stock_item_id}", response_model=Envelope)
async def get_stock_level(stock_item_id: str, actor: Actor = Depends(staff_actor)) -> Envelope:
    return ok(queries.get_stock_level(stock_item_id))


@inventory_router.put("/stock/{stock_item_id}/settings", response_model=Envelope)
async def update_stock_settings(
    stock_item_id: str, body: UpdateStockSettingsRequest, actor: Actor = Depends(staff_actor)
) -> Envelope:
    command = UpdateStockSettings(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        stock_item_id=stock_item_id,
        reorder_point=body.reorder_point,
    )
    current_domain.process(command, asynchronous=False)
    return ok(queries.get_stock_level(stock_item_id), "Stock settings updated")


@inventory_router.post("/reserve", response_model=Envelope)
async def reserve_stock(body: StockQuantityRequest, actor: Actor = Depends(staff_actor)) -> Envelope:
    command = ReserveStock(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
        reference=body.reference,
    )
    available = current_domain.process(command, asynchronous=False)
    return ok({"available": available}, "Stock reserved")


@inventory_router.post("/release", response_model=Envelope)
async def release_stock(body: StockQuantityRequest, actor: Actor = Depends(staff_actor)) -> Envelope:
    command = ReleaseStock(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        product_id=body.product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
        reference=body.reference,
    )
    released = current_domain.process(command, asynchronous=False)
    return ok({"released": released}, "Stock released")


@inventory_router.get("/stats", response_model=Envelope)
async def inventory_stats(actor: Actor = Depends(staff_actor)) -> Envelope:
    return ok(asdict(queries.inventory_stats()))


# --- Movements ---


@inventory_router.post("/movements", status_code=201, response_model=Envelope)
async def create_movement(body: CreateMovementRequest, actor: Actor = Depends(staff_actor)) -> Envelope:
    command = CreateMovement(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        product_id=body.product_id,
        variant_id=body.variant_id,
        movement_type=body.movement_type,
        quantity=body.quantity,
        unit_cost=body.unit_cost,
        reference=body.reference,
        reference_type=body.reference_type,
        notes=body.notes,
    )
    movement_id = current_domain.process(command, asynchronous=False)
    return ok(queries.get_movement(movement_id), "Movement created")


@inventory_router.get("/movements", response_model=PagedEnvelope)
async def list_movements(
    movement_type: str | None = None,
    status: str | None = None,
    product_id: str | None = None,
    reference: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
    page: int = 1,
    limit: int = 20,
    actor: Actor = Depends(staff_actor),
) -> PagedEnvelope:
    filters = queries.MovementFilters(
        movement_type=movement_type,
        status=status,
        product_id=product_id,
        reference=reference,
        start_date=start_date,
        end_date=end_date,
    )
    return paged(queries.list_movements(filters, page, limit))


@inventory_router.get("/movements/{movement_id}", response_model=Envelope)
async def get_movement(movement_id: str, actor: Actor = Depends(staff_actor)) -> Envelope:
    return ok(queries.get_movement(movement_id))


@inventory_router.put("/movements/{movement_id}", response_model=Envelope)
async def update_movement(
    movement_id: str, body: UpdateMovementRequest, actor: Actor = Depends(staff_actor)
) -> Envelope:
    command = UpdateMovement(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        movement_id=movement_id,
        quantity=body.quantity,
        unit_cost=body.unit_cost,
        reference=body.reference,
        reference_type=body.reference_type,
        notes=body.notes,
    )
    current_domain.process(command, asynchronous=False)
    return ok(queries.get_movement(movement_id), "Movement updated")


@inventory_router.delete("/movements/{movement_id}", response_model=Envelope)
async def delete_movement(movement_id: str, actor: Actor = Depends(staff_actor)) -> Envelope:
    command = DeleteMovement(actor_id=actor.user_id, actor_role=actor.role.value, movement_id=movement_id)
    current_domain.process(command, asynchronous=False)
    return ok(message="Movement deleted")


@inventory_router.post("/movements/{movement_id}/approve", response_model=Envelope)
async def approve_movement(movement_id: str, actor: Actor = Depends(staff_actor)) -> Envelope:
    command = ApproveMovement(actor_id=actor.user_id, actor_role=actor.role.value, movement_id=movement_id)
    current_domain.process(command, asynchronous=False)
    return ok(queries.get_movement(movement_id), "Movement approved")


@inventory_router.post("/movements/{movement_id}/complete", response_model=Envelope)
async def complete_movement(movement_id: str, actor: Actor = Depends(staff_actor)) -> Envelope:
    command = CompleteMovement(actor_id=actor.user_id, actor_role=actor.role.value, movement_id=movement_id)
    on_hand = current_domain.process(command, asynchronous=False)
    return ok({"movement": queries.get_movement(movement_id).to_dict(), "on_hand": on_hand}, "Movement completed")


@inventory_router.post("/movements/{movement_id}/cancel", response_model=Envelope)
async def cancel_movement(
    movement_id: str, body: CancelMovementRequest | None = None, actor: Actor = Depends(staff_actor)
) -> Envelope:
    command = CancelMovement(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        movement_id=movement_id,
        reason=body.reason if body else None,
    )
    current_domain.process(command, asynchronous=False)
    return ok(queries.get_movement(movement_id), "Movement cancelled")
