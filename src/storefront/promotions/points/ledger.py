"""Point ledger operations: commands, handler and in-transaction helpers.

Ordering calls the helpers directly so that redemption and refunds land in the
same Unit of Work as the order change. Staff use the commands.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.promotions.points.account import PointAccount, point_account_id
from storefront.shared.access import Actor, Role
from storefront.shared.errors import InsufficientPoints
from storefront.utils.logging import logger


def find_account(user_id) -> PointAccount | None:
    try:
        return current_domain.repository_for(PointAccount).get(point_account_id(user_id))
    except ObjectNotFoundError:
        return None


def account_for(user_id) -> PointAccount:
    """The user's account, opened on first use."""
    return find_account(user_id) or PointAccount.open(user_id)


def balance_of(user_id) -> int:
    account = find_account(user_id)
    return account.balance if account else 0


def _save(account: PointAccount, operation: str, points: int, reference=None):
    current_domain.repository_for(PointAccount).add(account)
    logger.info(
        "Points " + operation,
        user_id=str(account.user_id),
        points=points,
        balance=account.balance,
        reference=reference,
    )


def earn_points(user_id, points, reference=None, description=None) -> PointAccount:
    account = account_for(user_id)
    account.earn(points, reference=reference, description=description)
    _save(account, "earned", points, reference)
    return account


def redeem_points(user_id, points, reference=None, description=None) -> PointAccount:
    account = find_account(user_id)
    if account is None:
        raise InsufficientPoints(balance=0, requested=points)
    account.redeem(points, reference=reference, description=description)
    _save(account, "redeemed", points, reference)
    return account


def refund_points(user_id, points, reference=None, description=None) -> PointAccount:
    account = account_for(user_id)
    account.refund(points, reference=reference, description=description)
    _save(account, "refunded", points, reference)
    return account


@storefront.command(part_of="PointAccount")
class EarnPoints:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    user_id = Identifier(required=True)
    points = Integer(required=True, min_value=1)
    reference = String(max_length=255)
    description = String(max_length=255)


@storefront.command(part_of="PointAccount")
class RedeemPoints:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    user_id = Identifier(required=True)
    points = Integer(required=True, min_value=1)
    reference = String(max_length=255)
    description = String(max_length=255)


@storefront.command(part_of="PointAccount")
class RefundPoints:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    user_id = Identifier(required=True)
    points = Integer(required=True, min_value=1)
    reference = String(max_length=255)
    description = String(max_length=255)


@storefront.command(part_of="PointAccount")
class AdjustPoints:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    user_id = Identifier(required=True)
    points = Integer(required=True)  # signed
    reference = String(max_length=255)
    description = String(max_length=255)


@storefront.command(part_of="PointAccount")
class ExpirePoints:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    user_id = Identifier(required=True)
    points = Integer(required=True, min_value=1)
    reference = String(max_length=255)
    description = String(max_length=255)


@storefront.command_handler(part_of=PointAccount)
class PointLedgerHandler:
    @handle(EarnPoints)
    def earn(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.STAFF)
        return earn_points(command.user_id, command.points, command.reference, command.description).balance

    @handle(RedeemPoints)
    def redeem(self, command):
        Actor.of(command.actor_id, command.actor_role).require_owner(command.user_id, "point account")
        return redeem_points(command.user_id, command.points, command.reference, command.description).balance

    @handle(RefundPoints)
    def refund(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.STAFF)
        return refund_points(command.user_id, command.points, command.reference, command.description).balance

    @handle(AdjustPoints)
    def adjust(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.ADMIN)
        account = account_for(command.user_id)
        account.adjust(command.points, reference=command.reference, description=command.description)
        _save(account, "adjusted", command.points, command.reference)
        return account.balance

    @handle(ExpirePoints)
    def expire(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.STAFF)
        account = find_account(command.user_id)
        if account is None:
            raise InsufficientPoints(balance=0, requested=command.points)
        account.expire(command.points, reference=command.reference, description=command.description)
        _save(account, "expired", command.points, command.reference)
        return account.balance
