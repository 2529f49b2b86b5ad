"""Application service: daily event-date sweep.

Run once a day (cron).  Orders whose event starts today move from
DELIVERED to IN_USE; orders whose event ends today move from IN_USE to
AWAITING_RETURN.  Each platform's synthetic SYSTEM user is recorded as the
actor; a platform without one is skipped.

Safe to re-run: a moved order no longer matches its source status.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from itertools import groupby

from ofe.application import notifications
from ofe.application.common import Clock, platform_today, utc_now
from ofe.application.notifications import NotificationDispatcher, NotificationEvent
from ofe.domain.model.order import OrderStatus
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    started: list[str] = field(default_factory=list)
    ended: list[str] = field(default_factory=list)
    skipped_platforms: list[str] = field(default_factory=list)


class EventDateSweepHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        notifier: NotificationDispatcher | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._uow = uow
        self._notifier = notifier
        self._clock = clock

    def handle(self) -> SweepResult:
        now = self._clock()
        result = SweepResult()
        events: list[NotificationEvent] = []

        with self._uow as uow:
            candidates = uow.orders.list_by_status({OrderStatus.DELIVERED, OrderStatus.IN_USE})
            candidates.sort(key=lambda o: o.platform_id)
            for platform_id, group in groupby(candidates, key=lambda o: o.platform_id):
                system_actor = uow.platforms.get_system_actor(platform_id)
                if system_actor is None:
                    logger.error("No system user for platform %s, skipping sweep", platform_id)
                    result.skipped_platforms.append(platform_id)
                    continue
                today = platform_today(uow, platform_id, now)

                for order in group:
                    if order.order_status == OrderStatus.DELIVERED and order.event_start_date == today:
                        target, bucket, note = OrderStatus.IN_USE, result.started, "Event started"
                    elif order.order_status == OrderStatus.IN_USE and order.event_end_date == today:
                        target, bucket, note = OrderStatus.AWAITING_RETURN, result.ended, "Event ended"
                    else:
                        continue
                    previous = order.order_status
                    order.transition_to(target, system_actor.id, now, f"{note} (automatic)")
                    uow.orders.save(order)
                    bucket.append(order.order_code)
                    events.append(
                        NotificationEvent(
                            notifications.ORDER_STATUS_CHANGED,
                            "ORDER",
                            order.id,
                            platform_id,
                            {"order_code": order.order_code, "from": previous.value, "to": target.value},
                        )
                    )
            uow.commit()

        logger.info(
            "Event-date sweep: %d order(s) now in use, %d awaiting return",
            len(result.started), len(result.ended),
        )
        notifications.publish(self._notifier, events)
        return result
