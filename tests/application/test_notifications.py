"""Notification delivery never decides the outcome of an operation."""

import logging

from ofe.application import notifications
from ofe.application.notifications import NotificationEvent
from ofe.domain.model.order import OrderStatus
from tests.fakes import FailingDispatcher, FixedClock, RecordingDispatcher, seeded_uow, submit_order


class TestPublish:

    def test_failing_dispatcher_is_logged_not_raised(self, caplog):
        uow = seeded_uow()
        with caplog.at_level(logging.ERROR, logger="ofe.application.notifications"):
            dto = submit_order(uow, FixedClock(), notifier=FailingDispatcher())

        assert uow.orders.get_by_id(dto.id).order_status == OrderStatus.PRICING_REVIEW
        assert uow.commits == 1
        assert "Failed to dispatch ORDER_SUBMITTED" in caplog.text

    def test_every_event_attempted(self, caplog):
        events = [
            NotificationEvent(notifications.QUOTE_SENT, "ORDER", "o-1", "plat-1"),
            NotificationEvent(notifications.QUOTE_SENT, "ORDER", "o-2", "plat-1"),
        ]
        with caplog.at_level(logging.ERROR):
            notifications.publish(FailingDispatcher(), events)
        assert caplog.text.count("Failed to dispatch") == 2

    def test_no_dispatcher(self):
        notifications.publish(None, [NotificationEvent(notifications.QUOTE_SENT, "ORDER", "o-1", "plat-1")])

    def test_events_sent_in_order(self):
        recorder = RecordingDispatcher()
        events = [
            NotificationEvent(notifications.QUOTE_SENT, "ORDER", "o-1", "plat-1"),
            NotificationEvent(notifications.ORDER_CANCELLED, "ORDER", "o-1", "plat-1"),
        ]
        notifications.publish(recorder, events)
        assert recorder.types() == ["QUOTE_SENT", "ORDER_CANCELLED"]
