"""Application service: Cancel Order use case.

Everything happens in one unit of work:
- both statuses move to CANCELLED with history
- the order's bookings are deleted and their units given back
- every pending reskin is cancelled and its line item voided

Orders that have left the warehouse (READY_FOR_DELIVERY onwards) or are
already terminal cannot be cancelled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from ofe.application import notifications
from ofe.application.common import (
    STAFF_ROLES,
    Clock,
    availability_service,
    get_order,
    require_role,
    utc_now,
)
from ofe.application.notifications import NotificationDispatcher, NotificationEvent
from ofe.domain.exceptions import InvalidStateError, ValidationError
from ofe.domain.model.actor import Actor
from ofe.domain.model.order import CancellationReason, Order
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CancellationResult:
    order_id: str
    order_code: str
    cancelled_reskins: int


def parse_reason(value: str | CancellationReason) -> CancellationReason:
    if isinstance(value, CancellationReason):
        return value
    try:
        return CancellationReason(value)
    except ValueError as exc:
        allowed = ", ".join(r.value for r in CancellationReason)
        raise ValidationError(f"Invalid cancellation reason '{value}', expected one of: {allowed}") from exc


def cancel_order_cascade(
    uow: UnitOfWork,
    order: Order,
    reason: CancellationReason,
    notes: str | None,
    by: str,
    at: datetime,
) -> int:
    """Cancel *order* and everything hanging off it; returns reskins cancelled."""
    if not order.can_cancel:
        raise InvalidStateError(f"Cannot cancel order in {order.order_status.value} status")

    cancelled_reskins = 0
    for reskin in uow.reskins.list_for_order(order.id):
        if not reskin.is_pending:
            continue
        reskin.cancel("Order cancelled", by, at)
        uow.reskins.save(reskin)
        line_item = uow.line_items.get_by_reskin_request(reskin.id)
        if line_item is not None and not line_item.is_voided:
            line_item.void("Order cancelled", by, at)
            uow.line_items.save(line_item)
        cancelled_reskins += 1

    availability_service(uow).release_for_order(order.id)
    order.cancel(reason, notes, by, at)
    uow.orders.save(order)
    return cancelled_reskins


class CancelOrderHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        notifier: NotificationDispatcher | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._uow = uow
        self._notifier = notifier
        self._clock = clock

    def handle(
        self,
        actor: Actor,
        order_id: str,
        reason: str | CancellationReason,
        notes: str | None = None,
        notify_client: bool = True,
    ) -> CancellationResult:
        require_role(actor, STAFF_ROLES, "cancel orders")
        cancellation_reason = parse_reason(reason)
        now = self._clock()

        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            cancelled_reskins = cancel_order_cascade(
                uow, order, cancellation_reason, notes, actor.id, now
            )
            uow.commit()

        logger.info(
            "Order %s cancelled (%s), %d reskin(s) cancelled",
            order.order_code, cancellation_reason.value, cancelled_reskins,
        )
        notifications.publish(
            self._notifier,
            [
                NotificationEvent(
                    notifications.ORDER_CANCELLED,
                    "ORDER",
                    order.id,
                    order.platform_id,
                    {
                        "order_code": order.order_code,
                        "reason": cancellation_reason.value,
                        "notes": notes,
                        "notify_client": notify_client,
                    },
                )
            ],
        )
        return CancellationResult(order.id, order.order_code, cancelled_reskins)
