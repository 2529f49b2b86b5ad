"""Application service: Send Quote use case.

Admins quote from PRICING_REVIEW or PENDING_APPROVAL and may override the
platform margin (with a reason); logistics may quote directly from
PRICING_REVIEW at the platform margin.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from ofe.application import notifications
from ofe.application.common import (
    STAFF_ROLES,
    Clock,
    get_order,
    recalculate_pricing,
    require_role,
    utc_now,
)
from ofe.application.dto import OrderDTO, order_to_dto
from ofe.application.notifications import NotificationDispatcher, NotificationEvent
from ofe.domain.exceptions import PermissionDeniedError
from ofe.domain.model.actor import Actor, ActorRole
from ofe.domain.model.order import FinancialStatus, OrderStatus
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class SendQuoteHandler:

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
        margin_override: Decimal | None = None,
        override_reason: str | None = None,
    ) -> OrderDTO:
        require_role(actor, STAFF_ROLES, "send quotes")
        if margin_override is not None and actor.role != ActorRole.ADMIN:
            raise PermissionDeniedError("Only admins can override the margin")
        now = self._clock()

        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            if actor.role == ActorRole.LOGISTICS and order.order_status != OrderStatus.PRICING_REVIEW:
                raise PermissionDeniedError(
                    "Logistics can only quote orders that are in pricing review"
                )
            recalculate_pricing(
                uow, order, actor.id, now,
                margin_override=margin_override,
                override_reason=override_reason,
            )
            order.transition_to(OrderStatus.QUOTED, actor.id, now, "Quote sent to client")
            order.update_financial_status(FinancialStatus.QUOTE_SENT, actor.id, now, "Quote sent")
            uow.orders.save(order)
            uow.commit()

        logger.info("Quote for order %s sent: %s", order.order_code, order.pricing.total)
        notifications.publish(
            self._notifier,
            [
                NotificationEvent(
                    notifications.QUOTE_SENT,
                    "ORDER",
                    order.id,
                    order.platform_id,
                    {"order_code": order.order_code, "total": str(order.pricing.total)},
                )
            ],
        )
        return order_to_dto(order)
