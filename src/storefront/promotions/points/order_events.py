"""Loyalty points are earned when an order is delivered.

One point per ``POINTS_EARN_UNIT`` of the order total. A failure here is
logged and never reaches the delivery that triggered it.
"""

from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront import config
from storefront.domain import storefront
from storefront.ordering.order.events import OrderDelivered
from storefront.promotions.points.account import PointAccount, TransactionType
from storefront.promotions.points.ledger import EarnPoints
from storefront.promotions.projections.point_ledger import PointTransaction
from storefront.shared.access import SYSTEM_ACTOR
from storefront.utils.logging import logger


def points_for(total: float) -> int:
    if config.POINTS_EARN_UNIT <= 0:
        return 0
    return int((total or 0) // config.POINTS_EARN_UNIT)


def _already_earned(user_id, reference: str) -> bool:
    query = current_domain.repository_for(PointTransaction)._dao.query.filter(
        user_id=str(user_id),
        reference=reference,
        transaction_type=TransactionType.EARN.value,
    )
    return bool(query.all().items)


@storefront.event_handler(part_of=PointAccount, stream_category="storefront::order")
class OrderPointsEventHandler:
    @handle(OrderDelivered)
    def on_order_delivered(self, event: OrderDelivered) -> None:
        points = points_for(event.total)
        if points <= 0:
            return

        try:
            if _already_earned(event.user_id, event.order_number):
                logger.info("Points already earned for order", order_number=event.order_number)
                return
            current_domain.process(
                EarnPoints(
                    actor_id=SYSTEM_ACTOR.user_id,
                    actor_role=SYSTEM_ACTOR.role.value,
                    user_id=event.user_id,
                    points=points,
                    reference=event.order_number,
                    description=f"Earned on order {event.order_number}",
                ),
                asynchronous=False,
            )
        except Exception:
            logger.error(
                "Failed to award points for delivered order",
                order_id=str(event.order_id),
                user_id=str(event.user_id),
                points=points,
                exc_info=True,
            )
