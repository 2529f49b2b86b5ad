"""Application service: Complete Reskin Request use case.

Fabrication produces a new asset: same physical specs and quantities, new
identity and QR code, GREEN, with the completion photos as its images.  The
original becomes TRANSFORMED and everything the order held on it (the item
and its bookings) moves to the new asset.  When the last pending reskin of
an order awaiting fabrication completes, the order moves to preparation.
"""

from __future__ import annotations

import logging
from uuid import uuid4

from ofe.application import notifications
from ofe.application.common import STAFF_ROLES, Clock, get_order, require_role, utc_now
from ofe.application.dto import AssetDTO, ReskinDTO, asset_to_dto, reskin_to_dto
from ofe.application.notifications import NotificationDispatcher, NotificationEvent
from ofe.domain.exceptions import NotFoundError, ValidationError
from ofe.domain.model.actor import Actor
from ofe.domain.model.order import OrderStatus
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def new_qr_code() -> str:
    return f"AST-{uuid4().hex[:12].upper()}"


class CompleteReskinHandler:

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
        reskin_id: str,
        new_asset_name: str,
        completion_photos: list[str],
        completion_notes: str | None = None,
    ) -> tuple[ReskinDTO, AssetDTO, bool]:
        require_role(actor, STAFF_ROLES, "complete reskin requests")
        if not new_asset_name or not new_asset_name.strip():
            raise ValidationError("New asset name is required")
        if not completion_photos:
            raise ValidationError("At least one completion photo is required")
        now = self._clock()
        events: list[NotificationEvent] = []

        with self._uow as uow:
            reskin = uow.reskins.get_by_id(reskin_id)
            if reskin is None or reskin.platform_id != actor.platform_id:
                raise NotFoundError(f"Reskin request {reskin_id} not found")
            order = get_order(uow, reskin.order_id, actor)
            original = uow.assets.get_by_id(reskin.original_asset_id)
            if original is None:
                raise NotFoundError("Original asset not found")

            new_asset = original.reskinned_copy(
                new_id=str(uuid4()),
                new_name=new_asset_name.strip(),
                new_qr_code=new_qr_code(),
                brand_id=reskin.target_brand_id,
                images=completion_photos,
            )
            reskin.complete(
                new_asset.id, new_asset.name, completion_photos, actor.id, now, completion_notes
            )
            original.mark_transformed(new_asset.id)

            uow.assets.save(new_asset)
            uow.assets.save(original)
            uow.reskins.save(reskin)

            order.find_item(reskin.order_item_id).repoint(new_asset.id, new_asset.name)
            for booking in uow.bookings.list_for_order(order.id):
                if booking.asset_id == original.id:
                    booking.asset_id = new_asset.id
                    uow.bookings.save(booking)

            all_complete = not any(r.is_pending for r in uow.reskins.list_for_order(order.id))
            if all_complete and order.order_status == OrderStatus.AWAITING_FABRICATION:
                order.transition_to(
                    OrderStatus.IN_PREPARATION,
                    actor.id,
                    now,
                    "All fabrication complete, ready for preparation",
                )
                events.append(
                    NotificationEvent(
                        notifications.FABRICATION_COMPLETE,
                        "ORDER",
                        order.id,
                        order.platform_id,
                        {
                            "order_code": order.order_code,
                            "original_asset_name": original.name,
                            "new_asset_name": new_asset.name,
                            "new_qr_code": new_asset.qr_code,
                        },
                    )
                )
            uow.orders.save(order)
            uow.commit()

        logger.info(
            "Reskin %s complete: %s -> %s (%s)",
            reskin.id, original.name, new_asset.name, new_asset.qr_code,
        )
        notifications.publish(self._notifier, events)
        return reskin_to_dto(reskin), asset_to_dto(new_asset), all_complete
