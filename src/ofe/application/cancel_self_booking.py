"""Application service: Cancel Self-Booking use case."""

from __future__ import annotations

import logging

from ofe.application.common import STAFF_ROLES, Clock, require_role, utc_now
from ofe.application.dto import SelfBookingDTO, self_booking_to_dto
from ofe.domain.exceptions import NotFoundError
from ofe.domain.model.actor import Actor
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class CancelSelfBookingHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(self, actor: Actor, self_booking_id: str) -> SelfBookingDTO:
        require_role(actor, STAFF_ROLES, "cancel self-bookings")
        now = self._clock()

        with self._uow as uow:
            booking = uow.self_bookings.get_by_id(self_booking_id)
            if booking is None or booking.platform_id != actor.platform_id:
                raise NotFoundError("Self-booking not found")
            booking.cancel(actor.id, now)
            uow.self_bookings.save(booking)
            uow.commit()

        logger.info("Self-booking %s cancelled by %s", booking.id, actor.id)
        return self_booking_to_dto(booking)
