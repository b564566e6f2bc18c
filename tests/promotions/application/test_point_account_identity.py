"""Application tests for one point account per user."""

import pytest
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from storefront.promotions.points.account import PointAccount, point_account_id
from storefront.promotions.points.ledger import balance_of, earn_points, find_account


class TestPointAccountIdentity:
    def test_identity_is_derived_from_user(self):
        assert point_account_id("user-1") == point_account_id("user-1")
        assert point_account_id("user-1") != point_account_id("user-2")

    def test_successive_earnings_land_in_one_account(self):
        earn_points("user-1", 100)
        earn_points("user-1", 50)

        assert balance_of("user-1") == 150
        assert find_account("user-1").id == point_account_id("user-1")

    def test_second_account_for_same_user_is_rejected(self):
        repo = current_domain.repository_for(PointAccount)
        first = PointAccount.open("user-1")
        second = PointAccount.open("user-1")
        assert first.id == second.id

        first.earn(100)
        repo.add(first)
        second.earn(40)
        with pytest.raises(ExpectedVersionError):
            repo.add(second)

        assert balance_of("user-1") == 100
