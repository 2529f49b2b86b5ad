"""Integration tests for the scheduled event-date sweep."""

from datetime import date, datetime, timezone

from ofe.application.event_date_sweep import EventDateSweepHandler
from ofe.domain.model.order import OrderStatus
from tests.fakes import SYSTEM, FixedClock, RecordingDispatcher, make_order, seeded_uow

# 01:00 on 20 March in Dubai, still the 19th in UTC
JUST_AFTER_MIDNIGHT = datetime(2025, 3, 19, 21, 0, tzinfo=timezone.utc)


def _setup():
    uow = seeded_uow()
    uow.orders.save(make_order("order-1", "ORD-20250310-001", status=OrderStatus.DELIVERED))
    uow.orders.save(
        make_order(
            "order-2", "ORD-20250310-002", status=OrderStatus.IN_USE,
            start=date(2025, 3, 18), end=date(2025, 3, 20),
        )
    )
    uow.orders.save(
        make_order(
            "order-3", "ORD-20250310-003", status=OrderStatus.DELIVERED,
            start=date(2025, 3, 21), end=date(2025, 3, 22),
        )
    )
    return uow


class TestEventDateSweep:

    def test_starts_and_ends_events_in_platform_time(self):
        uow = _setup()
        notifier = RecordingDispatcher()
        result = EventDateSweepHandler(uow, notifier, FixedClock(JUST_AFTER_MIDNIGHT)).handle()

        assert result.started == ["ORD-20250310-001"]
        assert result.ended == ["ORD-20250310-002"]
        assert result.skipped_platforms == []
        assert uow.orders.get_by_id("order-1").order_status == OrderStatus.IN_USE
        assert uow.orders.get_by_id("order-2").order_status == OrderStatus.AWAITING_RETURN
        assert uow.orders.get_by_id("order-3").order_status == OrderStatus.DELIVERED
        assert notifier.types() == ["ORDER_STATUS_CHANGED", "ORDER_STATUS_CHANGED"]

    def test_history_attributed_to_system_user(self):
        uow = _setup()
        EventDateSweepHandler(uow, clock=FixedClock(JUST_AFTER_MIDNIGHT)).handle()
        entry = uow.orders.get_by_id("order-1").status_history[-1]
        assert entry.updated_by == SYSTEM.id
        assert entry.notes == "Event started (automatic)"

    def test_nothing_due(self):
        uow = _setup()
        result = EventDateSweepHandler(uow, clock=FixedClock()).handle()
        assert result.started == [] and result.ended == []
        assert uow.commits == 1

    def test_platform_without_system_user_skipped(self):
        uow = _setup()
        uow.orders.save(
            make_order("order-9", "ORD-20250310-009", status=OrderStatus.DELIVERED, platform_id="plat-2")
        )
        result = EventDateSweepHandler(uow, clock=FixedClock(JUST_AFTER_MIDNIGHT)).handle()
        assert result.skipped_platforms == ["plat-2"]
        assert result.started == ["ORD-20250310-001"]
        assert uow.orders.get_by_id("order-9").order_status == OrderStatus.DELIVERED
