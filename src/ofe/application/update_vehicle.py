"""Application service: Update Vehicle use case.

Staff may upgrade (or change) the transport vehicle while the order is in
review; the transport charge is re-resolved for the new vehicle and the
full pricing recomputed.
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
from ofe.domain.model.pricing import VehicleType
from ofe.domain.repository.unit_of_work import UnitOfWork
from ofe.domain.service.pricing_calculator import require_reason

logger = logging.getLogger(__name__)


class UpdateVehicleHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, actor: Actor, order_id: str, vehicle_type: VehicleType, reason: str) -> OrderDTO:
        require_role(actor, STAFF_ROLES, "change the vehicle type")
        reason = require_reason(reason, "Vehicle change reason")
        now = self._clock()

        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            order.change_vehicle(vehicle_type)
            pricing_calculator(uow).require_transport_rate(order, vehicle_type)
            recalculate_pricing(uow, order, actor.id, now, vehicle_change_reason=reason)
            uow.orders.save(order)
            uow.commit()

        logger.info("Order %s vehicle set to %s: %s", order.order_code, vehicle_type.value, reason)
        return order_to_dto(order)
