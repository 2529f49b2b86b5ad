"""Application service: Submit for Admin Approval use case.

Logistics hands a reviewed order to an admin (PRICING_REVIEW ->
PENDING_APPROVAL) with freshly computed full pricing.
"""

from __future__ import annotations

import logging

from ofe.application.common import (
    STAFF_ROLES,
    Clock,
    get_order,
    recalculate_pricing,
    require_role,
    utc_now,
)
from ofe.application.dto import OrderDTO, order_to_dto
from ofe.domain.model.actor import Actor
from ofe.domain.model.order import OrderStatus
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class SubmitForApprovalHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, actor: Actor, order_id: str, notes: str | None = None) -> OrderDTO:
        require_role(actor, STAFF_ROLES, "submit orders for approval")
        now = self._clock()

        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            recalculate_pricing(uow, order, actor.id, now)
            order.transition_to(
                OrderStatus.PENDING_APPROVAL, actor.id, now, notes or "Submitted for admin approval"
            )
            uow.orders.save(order)
            uow.commit()

        logger.info("Order %s submitted for approval by %s", order.order_code, actor.id)
        return order_to_dto(order)
