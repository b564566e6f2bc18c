"""Point ledger: one row per point transaction, for history queries."""

from protean.core.projector import on
from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.promotions.points.account import PointAccount, TransactionType
from storefront.promotions.points.events import (
    PointsAdjusted,
    PointsEarned,
    PointsExpired,
    PointsRedeemed,
    PointsRefunded,
)


@storefront.projection
class PointTransaction:
    transaction_id = Identifier(identifier=True, required=True)
    account_id = Identifier(required=True)
    user_id = Identifier(required=True)
    transaction_type = String(required=True, max_length=20)
    amount = Integer(required=True)
    balance_after = Integer(required=True)
    reference = String(max_length=255)
    description = String(max_length=255)
    expires_at = DateTime()
    created_at = DateTime()


def _record(event, kind: TransactionType, expires_at=None):
    current_domain.repository_for(PointTransaction).add(
        PointTransaction(
            transaction_id=event.transaction_id,
            account_id=event.account_id,
            user_id=event.user_id,
            transaction_type=kind.value,
            amount=event.amount,
            balance_after=event.balance_after,
            reference=event.reference,
            description=event.description,
            expires_at=expires_at,
            created_at=event.occurred_at,
        )
    )


@storefront.projector(projector_for=PointTransaction, aggregates=[PointAccount])
class PointLedgerProjector:
    @on(PointsEarned)
    def on_points_earned(self, event):
        _record(event, TransactionType.EARN, expires_at=event.expires_at)

    @on(PointsRedeemed)
    def on_points_redeemed(self, event):
        _record(event, TransactionType.REDEEM)

    @on(PointsRefunded)
    def on_points_refunded(self, event):
        _record(event, TransactionType.REFUND)

    @on(PointsAdjusted)
    def on_points_adjusted(self, event):
        _record(event, TransactionType.ADJUST)

    @on(PointsExpired)
    def on_points_expired(self, event):
        _record(event, TransactionType.EXPIRE)
