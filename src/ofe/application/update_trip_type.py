"""Application service: Update Trip Type use case.

Staff may switch between ONE_WAY and ROUND_TRIP while the order is in
review; transport is re-resolved for the new trip type and the full
pricing recomputed.
"""

from __future__ import annotations

import logging

from ofe.application.common import (
    STAFF_ROLES,
    Clock,
    get_order,
    pricing_calculator,
    recalculate_pricing,
    require_role,
    utc_now,
)
from ofe.application.dto import OrderDTO, order_to_dto
from ofe.domain.model.actor import Actor
from ofe.domain.model.pricing import TripType
from ofe.domain.repository.unit_of_work import UnitOfWork
from ofe.domain.service.pricing_calculator import require_reason

logger = logging.getLogger(__name__)


class UpdateTripTypeHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, actor: Actor, order_id: str, trip_type: TripType, reason: str) -> OrderDTO:
        require_role(actor, STAFF_ROLES, "change the trip type")
        reason = require_reason(reason, "Trip type change reason")
        now = self._clock()

        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            order.change_trip_type(trip_type)
            pricing_calculator(uow).require_transport_rate(order, trip_type=trip_type)
            recalculate_pricing(uow, order, actor.id, now)
            uow.orders.save(order)
            uow.commit()

        logger.info("Order %s trip type set to %s: %s", order.order_code, trip_type.value, reason)
        return order_to_dto(order)
