"""Application service: Update Financial Status use case (invoicing and payment)."""

from __future__ import annotations

import logging

from ofe.application.common import Clock, get_order, require_role, utc_now
from ofe.application.dto import OrderDTO, order_to_dto
from ofe.domain.exceptions import InvalidStateError
from ofe.domain.model.actor import Actor, ActorRole
from ofe.domain.model.order import FinancialStatus
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

MANUAL_FINANCIAL_TARGETS = frozenset({
    FinancialStatus.PENDING_INVOICE,
    FinancialStatus.INVOICED,
    FinancialStatus.PAID,
})


class UpdateFinancialStatusHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(
        self,
        actor: Actor,
        order_id: str,
        new_status: FinancialStatus,
        notes: str | None = None,
    ) -> OrderDTO:
        require_role(actor, (ActorRole.ADMIN,), "update financial status")
        if new_status not in MANUAL_FINANCIAL_TARGETS:
            raise InvalidStateError(
                f"Financial status {new_status.value} is set by the quote workflow"
            )
        now = self._clock()

        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            previous = order.financial_status
            order.update_financial_status(new_status, actor.id, now, notes)
            uow.orders.save(order)
            uow.commit()

        logger.info(
            "Order %s financial status: %s -> %s", order.order_code, previous.value, new_status.value
        )
        return order_to_dto(order)
