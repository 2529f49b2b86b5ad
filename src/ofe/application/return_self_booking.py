"""Application service: Self-Booking Return Scan use case."""

from __future__ import annotations

import logging

from ofe.application.common import STAFF_ROLES, Clock, require_role, utc_now
from ofe.application.dto import SelfBookingDTO, self_booking_to_dto
from ofe.domain.exceptions import NotFoundError
from ofe.domain.model.actor import Actor
from ofe.domain.model.booking import SelfBookingStatus
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class ReturnSelfBookingHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(
        self,
        actor: Actor,
        self_booking_id: str,
        qr_code: str,
        quantity: int = 1,
    ) -> SelfBookingDTO:
        require_role(actor, STAFF_ROLES, "return self-booked assets")
        now = self._clock()

        with self._uow as uow:
            booking = uow.self_bookings.get_by_id(self_booking_id)
            if booking is None or booking.platform_id != actor.platform_id:
                raise NotFoundError("Self-booking not found")
            asset = uow.assets.get_by_qr_code(qr_code)
            if asset is None:
                raise NotFoundError(f"No asset found for QR code: {qr_code}")

            booking.return_asset(asset.id, quantity, now)
            asset.mark_scanned(actor.id, now)
            uow.assets.save(asset)
            uow.self_bookings.save(booking)
            uow.commit()

        logger.info("Self-booking %s: %d x %s returned", booking.id, quantity, asset.name)
        if booking.status == SelfBookingStatus.COMPLETED:
            logger.info("Self-booking %s completed", booking.id)
        return self_booking_to_dto(booking)
