"""Application service: Cancel Reskin Request use case.

The client's item falls back to the original asset.  The caller decides
what happens to the order:

- ``continue``: pricing is recomputed without the reskin charge and, if the
  client had already seen a quote, the quote is revised (back to QUOTED,
  releasing any bookings made on approval)
- ``cancel_order``: the whole order is cancelled as ``fabrication_failed``
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ofe.application import notifications
from ofe.application.cancel_order import cancel_order_cascade
from ofe.application.common import (
    STAFF_ROLES,
    Clock,
    availability_service,
    get_order,
    recalculate_pricing,
    require_role,
    utc_now,
)
from ofe.application.dto import ReskinDTO, reskin_to_dto
from ofe.application.notifications import NotificationDispatcher, NotificationEvent
from ofe.domain.exceptions import NotFoundError, ValidationError
from ofe.domain.model.actor import Actor
from ofe.domain.model.order import QUOTE_REVISABLE_STATUSES, CancellationReason
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

CONTINUE = "continue"
CANCEL_ORDER = "cancel_order"


@dataclass(frozen=True)
class ReskinCancellationResult:
    reskin: ReskinDTO
    order_action: str
    quote_revised: bool = False
    cancelled_reskins: int = 0


class CancelReskinHandler:

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
        reason: str,
        order_action: str = CONTINUE,
    ) -> ReskinCancellationResult:
        require_role(actor, STAFF_ROLES, "cancel reskin requests")
        if order_action not in (CONTINUE, CANCEL_ORDER):
            raise ValidationError(f"Invalid order action '{order_action}'")
        if not reason or not reason.strip():
            raise ValidationError("Cancellation reason is required")
        reason = reason.strip()
        now = self._clock()
        events: list[NotificationEvent] = []
        quote_revised = False
        cancelled_reskins = 0

        with self._uow as uow:
            reskin = uow.reskins.get_by_id(reskin_id)
            if reskin is None or reskin.platform_id != actor.platform_id:
                raise NotFoundError(f"Reskin request {reskin_id} not found")
            order = get_order(uow, reskin.order_id, actor)

            reskin.cancel(reason, actor.id, now)
            uow.reskins.save(reskin)
            line_item = uow.line_items.get_by_reskin_request(reskin.id)
            if line_item is not None and not line_item.is_voided:
                line_item.void(f"Reskin cancelled: {reason}", actor.id, now)
                uow.line_items.save(line_item)
            order.find_item(reskin.order_item_id).clear_reskin()

            if order_action == CANCEL_ORDER:
                cancelled_reskins = cancel_order_cascade(
                    uow,
                    order,
                    CancellationReason.FABRICATION_FAILED,
                    f"Reskin cancelled: {reason}",
                    actor.id,
                    now,
                )
                events.append(
                    NotificationEvent(
                        notifications.ORDER_CANCELLED,
                        "ORDER",
                        order.id,
                        order.platform_id,
                        {
                            "order_code": order.order_code,
                            "reason": CancellationReason.FABRICATION_FAILED.value,
                            "notify_client": True,
                        },
                    )
                )
            else:
                recalculate_pricing(uow, order, actor.id, now)
                if order.order_status in QUOTE_REVISABLE_STATUSES:
                    held_bookings = order.holds_bookings
                    order.revise_quote(
                        actor.id, now, f"Quote revised after reskin cancellation: {reason}"
                    )
                    # The client must approve again before anything is booked
                    if held_bookings:
                        availability_service(uow).release_for_order(order.id)
                    quote_revised = True
                    events.append(
                        NotificationEvent(
                            notifications.QUOTE_REVISED,
                            "ORDER",
                            order.id,
                            order.platform_id,
                            {"order_code": order.order_code, "total": str(order.pricing.total)},
                        )
                    )
                uow.orders.save(order)
            uow.commit()

        logger.info(
            "Reskin %s cancelled on order %s (%s)", reskin.id, order.order_code, order_action
        )
        notifications.publish(self._notifier, events)
        return ReskinCancellationResult(
            reskin=reskin_to_dto(reskin),
            order_action=order_action,
            quote_revised=quote_revised,
            cancelled_reskins=cancelled_reskins,
        )
