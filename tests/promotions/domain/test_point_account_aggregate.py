"""Tests for the event-sourced PointAccount aggregate."""

import pytest
from protean.exceptions import ValidationError

from storefront.promotions.points.account import PointAccount
from storefront.promotions.points.events import PointsEarned, PointsRedeemed
from storefront.shared.errors import InsufficientPoints


def _account(balance=0):
    account = PointAccount.open("user-1")
    if balance:
        account.earn(balance, reference="seed")
    return account


class TestLedger:
    def test_open_starts_at_zero(self):
        account = _account()
        assert account.balance == 0
        assert account.user_id == "user-1"

    def test_earn(self):
        account = _account()
        account.earn(150, reference="ORD-1")
        assert account.balance == 150
        assert account.lifetime_earned == 150
        event = account._events[-1]
        assert isinstance(event, PointsEarned)
        assert event.balance_after == 150
        assert event.expires_at > event.occurred_at

    def test_redeem(self):
        account = _account(100)
        account.redeem(40)
        assert account.balance == 60
        assert account.lifetime_redeemed == 40
        assert isinstance(account._events[-1], PointsRedeemed)
        assert account._events[-1].amount == -40

    def test_refund_restores_balance(self):
        account = _account(100)
        account.redeem(40)
        account.refund(40)
        assert account.balance == 100
        assert account.lifetime_redeemed == 0

    def test_signed_adjustments(self):
        account = _account(100)
        account.adjust(-30)
        account.adjust(5)
        assert account.balance == 75


class TestBalanceNeverNegative:
    def test_redeem_more_than_balance(self):
        account = _account(10)
        with pytest.raises(InsufficientPoints) as exc:
            account.redeem(11)
        assert exc.value.balance == 10
        assert account.balance == 10

    def test_adjust_below_zero(self):
        with pytest.raises(InsufficientPoints):
            _account(10).adjust(-11)

    def test_expire_more_than_balance(self):
        with pytest.raises(InsufficientPoints):
            _account(10).expire(20)

    @pytest.mark.parametrize("points", [0, -5, None])
    def test_non_positive_amounts(self, points):
        with pytest.raises(ValidationError):
            _account(10).earn(points)

    def test_zero_adjustment(self):
        with pytest.raises(ValidationError):
            _account(10).adjust(0)
