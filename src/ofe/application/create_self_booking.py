"""Application service: Create Self-Booking use case.

A manual checkout of assets for internal use.  Its units compete with
order bookings, so the same availability arithmetic gates it; unlike an
order it has no event window, so every live booking counts.
"""

from __future__ import annotations

import logging
from uuid import uuid4

from ofe.application.common import (
    STAFF_ROLES,
    Clock,
    availability_service,
    get_asset,
    require_role,
    utc_now,
)
from ofe.application.dto import SelfBookingDTO, self_booking_to_dto
from ofe.domain.exceptions import ValidationError
from ofe.domain.model.actor import Actor
from ofe.domain.model.booking import SelfBooking, SelfBookingItem
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class CreateSelfBookingHandler:

    def __init__(self, uow: UnitOfWork, clock: Clock = utc_now) -> None:
        self._uow = uow
        self._clock = clock

    def handle(
        self,
        actor: Actor,
        booked_for: str,
        items: list[tuple[str, int]],
        reason: str | None = None,
        job_reference: str | None = None,
        notes: str | None = None,
    ) -> SelfBookingDTO:
        require_role(actor, STAFF_ROLES, "create self-bookings")
        if not booked_for or not booked_for.strip():
            raise ValidationError("Booked-for is required")
        if not items:
            raise ValidationError("Self-booking must contain at least one item")
        if len({asset_id for asset_id, _ in items}) != len(items):
            raise ValidationError("Each asset may appear only once in a self-booking")
        if any(qty <= 0 for _, qty in items):
            raise ValidationError("Item quantities must be positive")
        now = self._clock()

        with self._uow as uow:
            requests = [(get_asset(uow, asset_id, actor.platform_id), qty) for asset_id, qty in items]
            availability_service(uow).check(requests)

            booking = SelfBooking(
                id=str(uuid4()),
                platform_id=actor.platform_id,
                booked_for=booked_for.strip(),
                created_by=actor.id,
                created_at=now,
                items=[SelfBookingItem(asset_id=a.id, quantity=qty) for a, qty in requests],
                reason=reason,
                job_reference=job_reference,
                notes=notes,
            )
            uow.self_bookings.save(booking)
            uow.commit()

        logger.info("Self-booking %s created for %s (%d item(s))", booking.id, booking.booked_for, len(items))
        return self_booking_to_dto(booking)
