"""Domain events for the PointAccount aggregate.

Each ledger event is one append-only transaction. ``amount`` is signed:
earn and refund are positive, redeem and expire negative, adjust either.
"""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="PointAccount")
class PointAccountOpened:
    __version__ = 1

    account_id = Identifier(required=True)
    user_id = Identifier(required=True)
    opened_at = DateTime(required=True)


@storefront.event(part_of="PointAccount")
class PointsEarned:
    __version__ = 1

    account_id = Identifier(required=True)
    transaction_id = Identifier(required=True)
    user_id = Identifier(required=True)
    amount = Integer(required=True)
    balance_after = Integer(required=True)
    reference = String()
    description = String()
    expires_at = DateTime()
    occurred_at = DateTime(required=True)


@storefront.event(part_of="PointAccount")
class PointsRedeemed:
    __version__ = 1

    account_id = Identifier(required=True)
    transaction_id = Identifier(required=True)
    user_id = Identifier(required=True)
    amount = Integer(required=True)
    balance_after = Integer(required=True)
    reference = String()
    description = String()
    occurred_at = DateTime(required=True)


@storefront.event(part_of="PointAccount")
class PointsRefunded:
    __version__ = 1

    account_id = Identifier(required=True)
    transaction_id = Identifier(required=True)
    user_id = Identifier(required=True)
    amount = Integer(required=True)
    balance_after = Integer(required=True)
    reference = String()
    description = String()
    occurred_at = DateTime(required=True)


@storefront.event(part_of="PointAccount")
class PointsAdjusted:
    __version__ = 1

    account_id = Identifier(required=True)
    transaction_id = Identifier(required=True)
    user_id = Identifier(required=True)
    amount = Integer(required=True)
    balance_after = Integer(required=True)
    reference = String()
    description = String()
    occurred_at = DateTime(required=True)


@storefront.event(part_of="PointAccount")
class PointsExpired:
    __version__ = 1

    account_id = Identifier(required=True)
    transaction_id = Identifier(required=True)
    user_id = Identifier(required=True)
    amount = Integer(required=True)
    balance_after = Integer(required=True)
    reference = String()
    description = String()
    occurred_at = DateTime(required=True)
