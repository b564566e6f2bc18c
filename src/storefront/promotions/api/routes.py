"""FastAPI routes for coupons and loyalty points."""

from dataclasses import asdict

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront import config
from storefront.api.deps import current_actor, staff_actor
from storefront.api.envelope import Envelope, PagedEnvelope, ok, paged
from storefront.ordering.queries import prior_order_count
from storefront.promotions import queries
from storefront.promotions.api.schemas import (
    AdjustPointsRequest,
    CreateCouponRequest,
    PointsRequest,
    UpdateCouponRequest,
    UseCouponRequest,
    ValidateCouponRequest,
)
from storefront.promotions.coupon.management import CreateCoupon, DeleteCoupon, UpdateCoupon, load_coupon
from storefront.promotions.coupon.redemption import UseCoupon
from storefront.promotions.coupon.validation import validate_coupon
from storefront.promotions.points.ledger import AdjustPoints, EarnPoints, ExpirePoints, RedeemPoints, RefundPoints
from storefront.shared.access import Actor, Role

coupon_router = APIRouter(prefix="/coupons", tags=["coupons"])
point_router = APIRouter(prefix="/points", tags=["points"])


# --- Coupons ---


@coupon_router.post("", status_code=201, response_model=Envelope)
async def create_coupon(body: CreateCouponRequest, actor: Actor = Depends(current_actor)) -> Envelope:
    command = CreateCoupon(actor_id=actor.user_id, actor_role=actor.role.value, **body.model_dump())
    coupon_id = current_domain.process(command, asynchronous=False)
    return ok(load_coupon(coupon_id), "Coupon created")


@coupon_router.get("", response_model=PagedEnvelope)
async def list_coupons(
    active: bool | None = None,
    page: int = 1,
    limit: int = 20,
    actor: Actor = Depends(staff_actor),
) -> PagedEnvelope:
    return paged(queries.list_coupons(active, page, limit))


@coupon_router.get("/active", response_model=PagedEnvelope)
async def list_active_coupons(page: int = 1, limit: int = 20) -> PagedEnvelope:
    return paged(queries.list_coupons(True, page, limit))


@coupon_router.get("/code/{code}", response_model=Envelope)
async def get_coupon_by_code(code: str, actor: Actor = Depends(current_actor)) -> Envelope:
    return ok(queries.get_coupon_by_code(code))


@coupon_router.post("/validate", response_model=Envelope)
async def validate(body: ValidateCouponRequest, actor: Actor = Depends(current_actor)) -> Envelope:
    result = validate_coupon(
        body.code,
        user_id=actor.user_id,
        order_amount=body.order_amount,
        prior_orders=prior_order_count(actor.user_id),
        other_coupons=body.other_coupons,
        shipping_fee=config.DEFAULT_SHIPPING_FEE if body.shipping_fee is None else body.shipping_fee,
    )
    return ok(result.to_dict(), result.message)


@coupon_router.post("/use", response_model=Envelope)
async def use_coupon(body: UseCouponRequest, actor: Actor = Depends(current_actor)) -> Envelope:
    command = UseCoupon(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        code=body.code,
        user_id=actor.user_id,
        order_id=body.order_id,
        order_amount=body.order_amount,
        prior_orders=prior_order_count(actor.user_id),
        shipping_fee=config.DEFAULT_SHIPPING_FEE if body.shipping_fee is None else body.shipping_fee,
    )
    usage_id = current_domain.process(command, asynchronous=False)
    return ok({"usage_id": usage_id}, "Coupon applied")


@coupon_router.get("/{coupon_id}", response_model=Envelope)
async def get_coupon(coupon_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    return ok(load_coupon(coupon_id))


@coupon_router.put("/{coupon_id}", response_model=Envelope)
async def update_coupon(coupon_id: str, body: UpdateCouponRequest, actor: Actor = Depends(current_actor)) -> Envelope:
    command = UpdateCoupon(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        coupon_id=coupon_id,
        **body.model_dump(exclude_none=True),
    )
    current_domain.process(command, asynchronous=False)
    return ok(load_coupon(coupon_id), "Coupon updated")


@coupon_router.delete("/{coupon_id}", response_model=Envelope)
async def delete_coupon(coupon_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    current_domain.process(
        DeleteCoupon(actor_id=actor.user_id, actor_role=actor.role.value, coupon_id=coupon_id),
        asynchronous=False,
    )
    return ok(message="Coupon deleted")


@coupon_router.get("/{coupon_id}/usages", response_model=PagedEnvelope)
async def list_coupon_usages(
    coupon_id: str,
    page: int = 1,
    limit: int = 20,
    actor: Actor = Depends(staff_actor),
) -> PagedEnvelope:
    return paged(queries.list_coupon_usages(coupon_id, page, limit))


# --- Points ---


@point_router.get("/balance", response_model=Envelope)
async def my_balance(actor: Actor = Depends(current_actor)) -> Envelope:
    return ok(asdict(queries.point_summary(actor.user_id)))


@point_router.get("/history", response_model=PagedEnvelope)
async def my_history(
    transaction_type: str | None = None,
    page: int = 1,
    limit: int = 20,
    actor: Actor = Depends(current_actor),
) -> PagedEnvelope:
    return paged(queries.point_history(actor.user_id, transaction_type, page, limit))


@point_router.get("/user/{user_id}/balance", response_model=Envelope)
async def user_balance(user_id: str, actor: Actor = Depends(current_actor)) -> Envelope:
    actor.require_owner(user_id, "point account")
    return ok(asdict(queries.point_summary(user_id)))


@point_router.get("/user/{user_id}/history", response_model=PagedEnvelope)
async def user_history(
    user_id: str,
    transaction_type: str | None = None,
    page: int = 1,
    limit: int = 20,
    actor: Actor = Depends(current_actor),
) -> PagedEnvelope:
    actor.require_owner(user_id, "point account")
    return paged(queries.point_history(user_id, transaction_type, page, limit))


def _ledger(command_cls, user_id: str, body, actor: Actor) -> Envelope:
    command = command_cls(
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        user_id=user_id,
        points=body.points,
        reference=body.reference,
        description=body.description,
    )
    balance = current_domain.process(command, asynchronous=False)
    return ok({"user_id": user_id, "balance": balance})


@point_router.post("/earn", response_model=Envelope)
async def earn_points(body: PointsRequest, actor: Actor = Depends(staff_actor)) -> Envelope:
    return _ledger(EarnPoints, body.user_id or actor.user_id, body, actor)


@point_router.post("/redeem", response_model=Envelope)
async def redeem_points(body: PointsRequest, actor: Actor = Depends(current_actor)) -> Envelope:
    return _ledger(RedeemPoints, body.user_id or actor.user_id, body, actor)


@point_router.post("/refund", response_model=Envelope)
async def refund_points(body: PointsRequest, actor: Actor = Depends(staff_actor)) -> Envelope:
    return _ledger(RefundPoints, body.user_id or actor.user_id, body, actor)


@point_router.post("/adjust", response_model=Envelope)
async def adjust_points(body: AdjustPointsRequest, actor: Actor = Depends(current_actor)) -> Envelope:
    actor.require(Role.ADMIN)
    return _ledger(AdjustPoints, body.user_id, body, actor)


@point_router.post("/expire", response_model=Envelope)
async def expire_points(body: PointsRequest, actor: Actor = Depends(staff_actor)) -> Envelope:
    return _ledger(ExpirePoints, body.user_id or actor.user_id, body, actor)
