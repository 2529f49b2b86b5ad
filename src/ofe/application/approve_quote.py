"""Application service: Approve Quote use case.

Approval is where the order starts holding inventory: availability is
rechecked (ignoring the order's own earlier bookings) and the bookings are
written in the same unit of work, so the check cannot go stale.
"""

from __future__ import annotations

import logging

from ofe.application import notifications
from ofe.application.common import (
    Clock,
    availability_service,
    get_order,
    require_role,
    utc_now,
)
from ofe.application.dto import OrderDTO, order_to_dto
from ofe.application.notifications import NotificationDispatcher, NotificationEvent
from ofe.domain.exceptions import InvalidStateError
from ofe.domain.model.actor import Actor, ActorRole
from ofe.domain.model.order import FinancialStatus, OrderStatus
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class ApproveQuoteHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        notifier: NotificationDispatcher | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._uow = uow
        self._notifier = notifier
        self._clock = clock

    def handle(self, actor: Actor, order_id: str, notes: str | None = None) -> OrderDTO:
        require_role(actor, (ActorRole.CLIENT, ActorRole.ADMIN), "approve quotes")
        now = self._clock()

        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            if order.order_status != OrderStatus.QUOTED:
                raise InvalidStateError(
                    f"Only quoted orders can be approved, order is {order.order_status.value}"
                )

            svc = availability_service(uow)
            # Re-approval starts from a clean slate
            svc.release_for_order(order.id)
            bookings = svc.reserve_for_order(order)

            pending = [r for r in uow.reskins.list_for_order(order.id) if r.is_pending]
            if pending:
                target = OrderStatus.AWAITING_FABRICATION
                history = f"Quote approved, awaiting fabrication of {len(pending)} reskin(s)"
            else:
                target = OrderStatus.CONFIRMED
                history = "Quote approved"
            if notes:
                history = f"{history}: {notes}"
            order.transition_to(target, actor.id, now, history)
            order.update_financial_status(FinancialStatus.QUOTE_ACCEPTED, actor.id, now, "Quote accepted")
            uow.orders.save(order)
            uow.commit()

        logger.info(
            "Order %s approved by %s -> %s (%d booking(s))",
            order.order_code, actor.id, order.order_status.value, len(bookings),
        )
        notifications.publish(
            self._notifier,
            [
                NotificationEvent(
                    notifications.QUOTE_APPROVED,
                    "ORDER",
                    order.id,
                    order.platform_id,
                    {"order_code": order.order_code, "order_status": order.order_status.value},
                )
            ],
        )
        return order_to_dto(order)
