"""PointAccount aggregate (Event Sourced): one user's loyalty-point ledger.

The balance is never stored directly. It is the running sum of the signed
transaction amounts, rebuilt by replaying the account's events.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum
from uuid import NAMESPACE_URL, uuid4, uuid5

from protean import apply, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer

from storefront.domain import storefront
from storefront.promotions.points.events import (
    PointAccountOpened,
    PointsAdjusted,
    PointsEarned,
    PointsExpired,
    PointsRedeemed,
    PointsRefunded,
)
from storefront.shared.errors import InsufficientPoints

POINTS_VALIDITY_DAYS = 365
ACCOUNT_NAMESPACE = uuid5(NAMESPACE_URL, "storefront:point-account")


class TransactionType(Enum):
    EARN = "earn"
    REDEEM = "redeem"
    REFUND = "refund"
    ADJUST = "adjust"
    EXPIRE = "expire"


def point_account_id(user_id) -> str:
    """Each user has exactly one account, keyed by their user id."""
    return str(uuid5(ACCOUNT_NAMESPACE, str(user_id)))


def _positive(amount, field="amount"):
    if amount is None or amount <= 0:
        raise ValidationError({field: ["Points must be a positive whole number"]})


@storefront.aggregate(is_event_sourced=True)
class PointAccount:
    user_id = Identifier(required=True)
    balance = Integer(default=0)
    lifetime_earned = Integer(default=0)
    lifetime_redeemed = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def balance_must_not_be_negative(self):
        if (self.balance or 0) < 0:
            raise ValidationError({"balance": ["Point balance cannot be negative"]})

    @classmethod
    def open(cls, user_id):
        account = cls._create_new(id=point_account_id(user_id))
        account.raise_(
            PointAccountOpened(
                account_id=str(account.id),
                user_id=str(user_id),
                opened_at=datetime.now(UTC),
            )
        )
        return account

    def _ledger_fields(self, amount, reference, description) -> dict:
        return {
            "account_id": str(self.id),
            "transaction_id": str(uuid4()),
            "user_id": str(self.user_id),
            "amount": amount,
            "balance_after": self.balance + amount,
            "reference": reference,
            "description": description,
            "occurred_at": datetime.now(UTC),
        }

    # -------------------------------------------------------------------
    # Ledger operations
    # -------------------------------------------------------------------
    def earn(self, points, reference=None, description=None, validity_days=POINTS_VALIDITY_DAYS):
        _positive(points)
        fields = self._ledger_fields(points, reference, description or "Points earned")
        self.raise_(PointsEarned(expires_at=fields["occurred_at"] + timedelta(days=validity_days), **fields))

    def redeem(self, points, reference=None, description=None):
        _positive(points)
        if points > self.balance:
            raise InsufficientPoints(balance=self.balance, requested=points)
        self.raise_(PointsRedeemed(**self._ledger_fields(-points, reference, description or "Points redeemed")))

    def refund(self, points, reference=None, description=None):
        _positive(points)
        self.raise_(PointsRefunded(**self._ledger_fields(points, reference, description or "Points refunded")))

    def adjust(self, points, reference=None, description=None):
        if not points:
            raise ValidationError({"amount": ["Adjustment cannot be zero"]})
        if self.balance + points < 0:
            raise InsufficientPoints(balance=self.balance, requested=-points)
        self.raise_(PointsAdjusted(**self._ledger_fields(points, reference, description or "Points adjusted")))

    def expire(self, points, reference=None, description=None):
        _positive(points)
        if points > self.balance:
            raise InsufficientPoints(balance=self.balance, requested=points)
        self.raise_(PointsExpired(**self._ledger_fields(-points, reference, description or "Points expired")))

    # -------------------------------------------------------------------
    # @apply methods
    # -------------------------------------------------------------------
    @apply
    def _on_opened(self, event: PointAccountOpened):
        self.id = event.account_id
        self.user_id = event.user_id
        self.balance = 0
        self.lifetime_earned = 0
        self.lifetime_redeemed = 0
        self.created_at = event.opened_at
        self.updated_at = event.opened_at

    @apply
    def _on_earned(self, event: PointsEarned):
        self.balance = event.balance_after
        self.lifetime_earned += event.amount
        self.updated_at = event.occurred_at

    @apply
    def _on_redeemed(self, event: PointsRedeemed):
        self.balance = event.balance_after
        self.lifetime_redeemed += -event.amount
        self.updated_at = event.occurred_at

    @apply
    def _on_refunded(self, event: PointsRefunded):
        self.balance = event.balance_after
        self.lifetime_redeemed = max(0, self.lifetime_redeemed - event.amount)
        self.updated_at = event.occurred_at

    @apply
    def _on_adjusted(self, event: PointsAdjusted):
        self.balance = event.balance_after
        self.updated_at = event.occurred_at

    @apply
    def _on_expired(self, event: PointsExpired):
        self.balance = event.balance_after
        self.updated_at = event.occurred_at
