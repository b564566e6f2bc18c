"""Read-side helpers for coupons and points."""

from dataclasses import dataclass

from protean.utils.globals import current_domain

from storefront.promotions.coupon.coupon import Coupon, CouponStatus
from storefront.promotions.coupon.usage import CouponUsage
from storefront.promotions.coupon.validation import find_coupon
from storefront.promotions.projections.point_balance import PointBalance
from storefront.promotions.projections.point_ledger import PointTransaction
from storefront.shared.errors import NotFound
from storefront.shared.pagination import Page, paginate


@dataclass
class PointSummary:
    user_id: str
    balance: int = 0
    lifetime_earned: int = 0
    lifetime_redeemed: int = 0


def get_coupon_by_code(code: str) -> Coupon:
    coupon = find_coupon(code)
    if coupon is None:
        raise NotFound(f"Coupon {code} not found", field="code")
    return coupon


def list_coupons(active: bool | None = None, page: int | None = None, limit: int | None = None) -> Page:
    criteria = {}
    if active is not None:
        criteria["status"] = CouponStatus.ACTIVE.value if active else CouponStatus.INACTIVE.value
    query = current_domain.repository_for(Coupon)._dao.query.filter(**criteria).order_by("-created_at")
    return paginate(query, page, limit)


def list_coupon_usages(coupon_id: str, page: int | None = None, limit: int | None = None) -> Page:
    query = current_domain.repository_for(CouponUsage)._dao.query.filter(coupon_id=coupon_id).order_by("-used_at")
    return paginate(query, page, limit)


def point_summary(user_id: str) -> PointSummary:
    balances = current_domain.repository_for(PointBalance)._dao.query.filter(user_id=str(user_id)).all().items
    if not balances:
        return PointSummary(user_id=str(user_id))
    record = balances[0]
    return PointSummary(
        user_id=str(user_id),
        balance=record.balance,
        lifetime_earned=record.lifetime_earned,
        lifetime_redeemed=record.lifetime_redeemed,
    )


def point_history(
    user_id: str, transaction_type: str | None = None, page: int | None = None, limit: int | None = None
) -> Page:
    criteria = {"user_id": str(user_id)}
    if transaction_type:
        criteria["transaction_type"] = transaction_type
    query = current_domain.repository_for(PointTransaction)._dao.query.filter(**criteria).order_by("-created_at")
    return paginate(query, page, limit)
