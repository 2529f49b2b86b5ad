"""Application service: Return to Logistics use case (PENDING_APPROVAL -> PRICING_REVIEW)."""

from __future__ import annotations

import logging

from ofe.application.common import Clock, get_order, require_role, utc_now
from ofe.application.dto import OrderDTO, order_to_dto
from ofe.domain.exceptions import InvalidStateError
from ofe.domain.model.actor import Actor, ActorRole
from ofe.domain.model.order import OrderStatus
from ofe.domain.repository.unit_of_work import UnitOfWork
from ofe.domain.service.pricing_calculator import require_reason

logger = logging.getLogger(__name__)


class ReturnToLogisticsHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, actor: Actor, order_id: str, reason: str) -> OrderDTO:
        require_role(actor, (ActorRole.ADMIN,), "return orders to logistics")
        reason = require_reason(reason, "Return reason")
        now = self._clock()

        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            if order.order_status != OrderStatus.PENDING_APPROVAL:
                raise InvalidStateError(
                    f"Only orders pending approval can be returned, order is {order.order_status.value}"
                )
            order.transition_to(OrderStatus.PRICING_REVIEW, actor.id, now, reason)
            uow.orders.save(order)
            uow.commit()

        logger.info("Order %s returned to logistics by %s", order.order_code, actor.id)
        return order_to_dto(order)
