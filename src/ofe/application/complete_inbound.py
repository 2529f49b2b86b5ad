"""Application service: Complete Inbound Scanning use case.

Once every item is back, the order is closed: its bookings are deleted
(the units were already returned to the shelf by the scans) and billing
moves on to invoicing.
"""

from __future__ import annotations

import logging
from datetime import datetime

from ofe.application import notifications
from ofe.application.common import STAFF_ROLES, Clock, get_order, require_role, utc_now
from ofe.application.dto import OrderDTO, order_to_dto
from ofe.application.notifications import NotificationDispatcher, NotificationEvent
from ofe.application.scan_progress import compute_scan_progress, incomplete_items
from ofe.domain.exceptions import ValidationError
from ofe.domain.model.actor import Actor
from ofe.domain.model.order import FinancialStatus, Order, OrderStatus
from ofe.domain.model.scan import ScanType
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def close_order(uow: UnitOfWork, order: Order, by: str, at: datetime, notes: str | None = None) -> None:
    """Validate inbound completeness and move the order to CLOSED."""
    missing = incomplete_items(compute_scan_progress(uow, order, ScanType.INBOUND))
    if missing:
        raise ValidationError(f"Inbound scanning incomplete: {missing}")
    order.transition_to(OrderStatus.CLOSED, by, at, notes or "All items returned, order closed")
    uow.bookings.delete_for_order(order.id)
    if order.financial_status == FinancialStatus.QUOTE_ACCEPTED:
        order.update_financial_status(FinancialStatus.PENDING_INVOICE, by, at, "Order closed")


class CompleteInboundHandler:

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
        require_role(actor, STAFF_ROLES, "complete inbound scanning")
        now = self._clock()

        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            previous = order.order_status
            close_order(uow, order, actor.id, now, "Inbound scanning complete")
            uow.orders.save(order)
            uow.commit()

        logger.info("Order %s closed after inbound scanning", order.order_code)
        notifications.publish(
            self._notifier,
            [
                NotificationEvent(
                    notifications.ORDER_STATUS_CHANGED,
                    "ORDER",
                    order.id,
                    order.platform_id,
                    {"order_code": order.order_code, "from": previous.value, "to": OrderStatus.CLOSED.value},
                )
            ],
        )
        return order_to_dto(order)
