"""Default notification dispatcher: writes every event to the log.

Email/in-app delivery is a separate service; this is the hand-off point.
"""

from __future__ import annotations

import logging

from ofe.application.notifications import NotificationDispatcher, NotificationEvent

logger = logging.getLogger(__name__)


class LoggingNotificationDispatcher(NotificationDispatcher):

    def dispatch(self, event: NotificationEvent) -> None:
        logger.info(
            "Notification %s for %s %s (platform %s): %s",
            event.event_type,
            event.entity_type,
            event.entity_id,
            event.platform_id,
            event.payload,
        )
