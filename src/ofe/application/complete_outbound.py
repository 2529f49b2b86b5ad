"""Application service: Complete Outbound Scanning use case.

Once every unit has been scanned out, the order is ready for delivery and
its assets are marked OUT.
"""

from __future__ import annotations

import logging
from datetime import datetime

from ofe.application import notifications
from ofe.application.common import STAFF_ROLES, Clock, get_order, require_role, utc_now
from ofe.application.dto import OrderDTO, order_to_dto
from ofe.application.notifications import NotificationDispatcher, NotificationEvent
from ofe.application.scan_progress import compute_scan_progress, incomplete_items
from ofe.domain.exceptions import InvalidStateError, ValidationError
from ofe.domain.model.actor import Actor
from ofe.domain.model.order import Order, OrderStatus
from ofe.domain.model.scan import ScanType
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def mark_ready_for_delivery(
    uow: UnitOfWork, order: Order, by: str, at: datetime, notes: str | None = None
) -> None:
    """Validate outbound completeness and move the order to READY_FOR_DELIVERY."""
    if order.order_status != OrderStatus.IN_PREPARATION:
        raise InvalidStateError(
            f"Outbound scanning can only be completed for orders in preparation, "
            f"order is {order.order_status.value}"
        )
    missing = incomplete_items(compute_scan_progress(uow, order, ScanType.OUTBOUND))
    if missing:
        raise ValidationError(f"Outbound scanning incomplete: {missing}")
    order.transition_to(
        OrderStatus.READY_FOR_DELIVERY, by, at, notes or "All items scanned out and ready for delivery"
    )
    for item in order.items:
        asset = uow.assets.get_by_id(item.asset_id)
        if asset is not None:
            asset.mark_out()
            uow.assets.save(asset)


class CompleteOutboundHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        notifier: NotificationDispatcher | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._uow = uow
        self._notifier = notifier
        self._clock = clock

    def handle(self, actor: Actor, order_id: str) -> OrderDTO:
        require_role(actor, STAFF_ROLES, "complete outbound scanning")
        now = self._clock()

        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            mark_ready_for_delivery(uow, order, actor.id, now)
            uow.orders.save(order)
            uow.commit()

        logger.info("Order %s ready for delivery after outbound scanning", order.order_code)
        notifications.publish(
            self._notifier,
            [
                NotificationEvent(
                    notifications.ORDER_STATUS_CHANGED,
                    "ORDER",
                    order.id,
                    order.platform_id,
                    {
                        "order_code": order.order_code,
                        "from": OrderStatus.IN_PREPARATION.value,
                        "to": OrderStatus.READY_FOR_DELIVERY.value,
                    },
                )
            ],
        )
        return order_to_dto(order)
