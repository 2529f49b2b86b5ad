"""Application service: job number and delivery/pickup windows."""

from __future__ import annotations

import logging

from ofe.application.common import STAFF_ROLES, get_order, require_role
from ofe.application.dto import OrderDTO, order_to_dto
from ofe.domain.model.actor import Actor
from ofe.domain.model.order import TimeWindow
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class UpdateLogisticsDetailsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        actor: Actor,
        order_id: str,
        job_number: str | None = None,
        delivery_window: TimeWindow | None = None,
        pickup_window: TimeWindow | None = None,
    ) -> OrderDTO:
        require_role(actor, STAFF_ROLES, "update logistics details")

        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            if job_number is not None:
                order.set_job_number(job_number)
            if delivery_window is not None or pickup_window is not None:
                order.set_time_windows(delivery_window, pickup_window)
            uow.orders.save(order)
            uow.commit()

        logger.info("Order %s logistics details updated", order.order_code)
        return order_to_dto(order)
