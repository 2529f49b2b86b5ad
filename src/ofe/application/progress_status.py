"""Application service: Progress Order Status use case.

Moves an order one step along the fulfillment graph.  Steps with their own
use case (quote, approval, decline, cancellation) are refused here.

Role rules:
- ADMIN: any remaining valid transition
- LOGISTICS / SYSTEM: the fulfillment chain only
- CLIENT: none
"""

from __future__ import annotations

import logging
from datetime import date, datetime

from ofe.application import notifications
from ofe.application.common import Clock, get_order, platform_today, utc_now
from ofe.application.complete_inbound import close_order
from ofe.application.complete_outbound import mark_ready_for_delivery
from ofe.application.dto import OrderDTO, order_to_dto
from ofe.application.notifications import NotificationDispatcher, NotificationEvent
from ofe.domain.exceptions import InvalidStateError, PermissionDeniedError
from ofe.domain.model.actor import Actor, ActorRole
from ofe.domain.model.asset import AssetCondition
from ofe.domain.model.order import MaintenanceDecision, Order, OrderStatus
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

_S = OrderStatus

FULFILLMENT_TRANSITIONS = frozenset({
    (_S.CONFIRMED, _S.IN_PREPARATION),
    (_S.AWAITING_FABRICATION, _S.IN_PREPARATION),
    (_S.IN_PREPARATION, _S.READY_FOR_DELIVERY),
    (_S.READY_FOR_DELIVERY, _S.IN_TRANSIT),
    (_S.IN_TRANSIT, _S.DELIVERED),
    (_S.DELIVERED, _S.IN_USE),
    (_S.IN_USE, _S.AWAITING_RETURN),
    (_S.AWAITING_RETURN, _S.RETURN_IN_TRANSIT),
    (_S.AWAITING_RETURN, _S.CLOSED),
    (_S.RETURN_IN_TRANSIT, _S.CLOSED),
})

# Targets that must go through their own use case
DEDICATED_TARGETS = {
    _S.PENDING_APPROVAL: "submit for approval",
    _S.QUOTED: "send quote",
    _S.CONFIRMED: "approve quote",
    _S.AWAITING_FABRICATION: "approve quote",
    _S.DECLINED: "decline quote",
    _S.CANCELLED: "cancel order",
}


def check_preparation_ready(uow: UnitOfWork, order: Order) -> None:
    """Every asset must be GREEN (or accepted as-is) and no reskin pending."""
    not_ready = []
    for item in order.items:
        asset = uow.assets.get_by_id(item.asset_id)
        if asset is None:
            continue
        if asset.condition == AssetCondition.GREEN:
            continue
        if (
            asset.condition == AssetCondition.ORANGE
            and item.maintenance_decision == MaintenanceDecision.USE_AS_IS
        ):
            continue
        not_ready.append(f"{asset.name} ({asset.condition.value})")
    if not_ready:
        raise InvalidStateError(
            "Cannot start preparation until maintenance is complete: " + ", ".join(not_ready)
        )
    pending = [r for r in uow.reskins.list_for_order(order.id) if r.is_pending]
    if pending:
        raise InvalidStateError(
            f"Cannot start preparation with {len(pending)} pending reskin request(s)"
        )


def check_event_dates(order: Order, target: OrderStatus, today: date) -> None:
    if target == _S.IN_USE and today < order.event_start_date:
        raise InvalidStateError(
            f"Order cannot be in use before the event starts on {order.event_start_date.isoformat()}"
        )
    if target == _S.AWAITING_RETURN and today < order.event_end_date:
        raise InvalidStateError(
            f"Order cannot await return before the event ends on {order.event_end_date.isoformat()}"
        )


def apply_transition(
    uow: UnitOfWork,
    order: Order,
    target: OrderStatus,
    by: str,
    now: datetime,
    notes: str | None = None,
) -> None:
    """Run the cross-aggregate guards for *target*, then transition."""
    if order.order_status in (_S.CONFIRMED, _S.AWAITING_FABRICATION) and target == _S.IN_PREPARATION:
        check_preparation_ready(uow, order)
    if target in (_S.IN_USE, _S.AWAITING_RETURN):
        check_event_dates(order, target, platform_today(uow, order.platform_id, now))
    if target == _S.READY_FOR_DELIVERY:
        mark_ready_for_delivery(uow, order, by, now, notes)
    elif target == _S.CLOSED:
        close_order(uow, order, by, now, notes)
    else:
        order.transition_to(target, by, now, notes)


class ProgressOrderStatusHandler:

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
        new_status: OrderStatus,
        notes: str | None = None,
    ) -> OrderDTO:
        if new_status in DEDICATED_TARGETS:
            raise InvalidStateError(
                f"Use '{DEDICATED_TARGETS[new_status]}' to move an order to {new_status.value}"
            )
        if actor.role == ActorRole.CLIENT:
            raise PermissionDeniedError("Clients cannot change order status")
        now = self._clock()

        with self._uow as uow:
            order = get_order(uow, order_id, actor)
            previous = order.order_status
            if actor.role != ActorRole.ADMIN and (previous, new_status) not in FULFILLMENT_TRANSITIONS:
                raise PermissionDeniedError(
                    f"{actor.role.value} users cannot move orders from {previous.value} "
                    f"to {new_status.value}"
                )
            apply_transition(uow, order, new_status, actor.id, now, notes)
            uow.orders.save(order)
            uow.commit()

        logger.info(
            "Order %s: %s -> %s by %s", order.order_code, previous.value, new_status.value, actor.id
        )
        notifications.publish(
            self._notifier,
            [
                NotificationEvent(
                    notifications.ORDER_STATUS_CHANGED,
                    "ORDER",
                    order.id,
                    order.platform_id,
                    {"order_code": order.order_code, "from": previous.value, "to": new_status.value},
                )
            ],
        )
        return order_to_dto(order)
