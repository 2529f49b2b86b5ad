"""Application service: Decline Quote use case (QUOTED -> DECLINED)."""

from __future__ import annotations

import logging

from ofe.application import notifications
from ofe.application.common import Clock, availability_service, get_order, require_role, utc_now
from ofe.application.dto import OrderDTO, order_to_dto
from ofe.application.notifications import NotificationDispatcher, NotificationEvent
from ofe.domain.exceptions import ValidationError
from ofe.domain.model.actor import Actor, ActorRole
from ofe.domain.model.order import FinancialStatus, OrderStatus
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class DeclineQuoteHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        notifier: NotificationDispatcher | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._uow = uow
        self._notifier = notifier
        self._clock = clock

    def handle(self, actor: Actor, order_id: str, reason: str) -> OrderDTO:
        require_role(actor, (ActorRole.CLIENT, ActorRole.ADMIN), "decline quotes")
        if not reason or not reason.strip():
            raise ValidationError("Decline reason is required")
        now = self._clock()

        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            order.transition_to(OrderStatus.DECLINED, actor.id, now, reason.strip())
            order.update_financial_status(FinancialStatus.CANCELLED, actor.id, now, "Quote declined")
            availability_service(uow).release_for_order(order.id)
            uow.orders.save(order)
            uow.commit()

        logger.info("Order %s quote declined by %s", order.order_code, actor.id)
        notifications.publish(
            self._notifier,
            [
                NotificationEvent(
                    notifications.QUOTE_DECLINED,
                    "ORDER",
                    order.id,
                    order.platform_id,
                    {"order_code": order.order_code, "reason": reason.strip()},
                )
            ],
        )
        return order_to_dto(order)
