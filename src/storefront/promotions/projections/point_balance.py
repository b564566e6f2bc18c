"""Point balance: the cached balance per user, rebuilt from ledger events."""

from protean.core.projector import on
from protean.fields import DateTime, Identifier, Integer
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.promotions.points.account import PointAccount
from storefront.promotions.points.events import (
    PointAccountOpened,
    PointsAdjusted,
    PointsEarned,
    PointsExpired,
    PointsRedeemed,
    PointsRefunded,
)


@storefront.projection
class PointBalance:
    account_id = Identifier(identifier=True, required=True)
    user_id = Identifier(required=True)
    balance = Integer(default=0)
    lifetime_earned = Integer(default=0)
    lifetime_redeemed = Integer(default=0)
    updated_at = DateTime()


@storefront.projector(projector_for=PointBalance, aggregates=[PointAccount])
class PointBalanceProjector:
    @on(PointAccountOpened)
    def on_account_opened(self, event):
        current_domain.repository_for(PointBalance).add(
            PointBalance(
                account_id=event.account_id,
                user_id=event.user_id,
                balance=0,
                lifetime_earned=0,
                lifetime_redeemed=0,
                updated_at=event.opened_at,
            )
        )

    def _apply(self, event, earned=0, redeemed=0):
        repo = current_domain.repository_for(PointBalance)
        balance = repo.get(event.account_id)
        balance.balance = event.balance_after
        balance.lifetime_earned += earned
        balance.lifetime_redeemed = max(0, balance.lifetime_redeemed + redeemed)
        balance.updated_at = event.occurred_at
        repo.add(balance)

    @on(PointsEarned)
    def on_points_earned(self, event):
        self._apply(event, earned=event.amount)

    @on(PointsRedeemed)
    def on_points_redeemed(self, event):
        self._apply(event, redeemed=-event.amount)

    @on(PointsRefunded)
    def on_points_refunded(self, event):
        self._apply(event, redeemed=-event.amount)

    @on(PointsAdjusted)
    def on_points_adjusted(self, event):
        self._apply(event)

    @on(PointsExpired)
    def on_points_expired(self, event):
        self._apply(event)
