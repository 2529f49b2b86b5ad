"""Integration tests for the fulfillment chain: progress, scanning and closing."""

from datetime import datetime, timezone

import pytest

from ofe.application.complete_inbound import CompleteInboundHandler
from ofe.application.complete_outbound import CompleteOutboundHandler
from ofe.application.dto import OrderItemSpec
from ofe.application.progress_status import ProgressOrderStatusHandler
from ofe.application.scan_inbound import InboundScanHandler
from ofe.application.scan_outbound import OutboundScanHandler
from ofe.application.scan_progress import InboundProgressHandler, OutboundProgressHandler
from ofe.application.update_financial_status import UpdateFinancialStatusHandler
from ofe.application.update_logistics_details import UpdateLogisticsDetailsHandler
from ofe.domain.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from ofe.domain.model.asset import AssetCondition, AssetStatus
from ofe.domain.model.order import FinancialStatus, MaintenanceDecision, OrderStatus, TimeWindow
from ofe.domain.model.scan import DiscrepancyReason
from tests.fakes import (
    ADMIN,
    ARCH,
    BAR,
    CHAIRS,
    CLIENT,
    LOGISTICS,
    STAGE,
    FixedClock,
    RecordingDispatcher,
    advance,
    confirmed_order,
    seeded_uow,
    ship,
)

EVENT_START = datetime(2025, 3, 20, 6, 0, tzinfo=timezone.utc)
EVENT_END = datetime(2025, 3, 21, 6, 0, tzinfo=timezone.utc)

_S = OrderStatus


def _returning_order(*items: OrderItemSpec):
    """A confirmed order walked through to AWAITING_RETURN."""
    uow, clock = seeded_uow(), FixedClock()
    dto = confirmed_order(uow, clock, *items)
    ship(uow, clock, dto.id)
    advance(uow, clock, dto.id, _S.IN_TRANSIT, _S.DELIVERED)
    clock.now = EVENT_START
    advance(uow, clock, dto.id, _S.IN_USE)
    clock.now = EVENT_END
    advance(uow, clock, dto.id, _S.AWAITING_RETURN)
    return uow, clock, dto.id


class TestFullJourney:

    def test_order_from_confirmation_to_paid(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock, OrderItemSpec(CHAIRS, 40), OrderItemSpec(STAGE, 1))
        order_id = dto.id

        advance(uow, clock, order_id, _S.IN_PREPARATION)
        outbound = OutboundScanHandler(uow, clock)
        outbound.handle(LOGISTICS, order_id, "QR-CHAIR", 40)
        stage = outbound.handle(LOGISTICS, order_id, "QR-STAGE")
        assert stage.status == AssetStatus.OUT.value

        advance(uow, clock, order_id, _S.READY_FOR_DELIVERY, _S.IN_TRANSIT, _S.DELIVERED)
        clock.now = EVENT_START
        advance(uow, clock, order_id, _S.IN_USE)
        clock.now = EVENT_END
        advance(uow, clock, order_id, _S.AWAITING_RETURN)

        inbound = InboundScanHandler(uow, clock)
        inbound.handle(LOGISTICS, order_id, "QR-CHAIR", AssetCondition.GREEN, 40)
        asset, progress = inbound.handle(LOGISTICS, order_id, "QR-STAGE", AssetCondition.GREEN)
        assert asset.status == AssetStatus.AVAILABLE.value
        assert progress.percent_complete == 100

        dto = advance(uow, clock, order_id, _S.CLOSED)
        assert dto.order_status == "CLOSED"
        assert dto.financial_status == "PENDING_INVOICE"
        assert uow.bookings.list_for_order(order_id) == []

        financial = UpdateFinancialStatusHandler(uow, clock)
        financial.handle(ADMIN, order_id, FinancialStatus.INVOICED, "INV-2025-0042")
        dto = financial.handle(ADMIN, order_id, FinancialStatus.PAID)
        assert dto.financial_status == "PAID"
        assert [h.status for h in dto.financial_history] == [
            "PENDING_QUOTE", "QUOTE_SENT", "QUOTE_ACCEPTED", "PENDING_INVOICE", "INVOICED", "PAID",
        ]


class TestProgressRules:

    def test_clients_cannot_progress(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        with pytest.raises(PermissionDeniedError, match="Clients cannot change order status"):
            ProgressOrderStatusHandler(uow, clock=clock).handle(CLIENT, dto.id, _S.IN_PREPARATION)

    def test_dedicated_targets_refused(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        with pytest.raises(InvalidStateError, match="Use 'cancel order'"):
            ProgressOrderStatusHandler(uow, clock=clock).handle(ADMIN, dto.id, _S.CANCELLED)

    def test_logistics_limited_to_fulfillment_chain(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        advance(uow, clock, dto.id, _S.IN_PREPARATION)
        with pytest.raises(PermissionDeniedError, match="cannot move orders"):
            advance(uow, clock, dto.id, _S.IN_TRANSIT)

    def test_admin_still_follows_the_graph(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        with pytest.raises(InvalidStateError, match="Cannot transition from CONFIRMED to IN_TRANSIT"):
            advance(uow, clock, dto.id, _S.IN_TRANSIT, actor=ADMIN)

    def test_red_asset_blocks_preparation(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock, OrderItemSpec(BAR, 1))
        with pytest.raises(InvalidStateError, match=r"maintenance is complete: LED Bar Counter \(RED\)"):
            advance(uow, clock, dto.id, _S.IN_PREPARATION)

    def test_orange_accepted_as_is_can_be_prepared(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock, OrderItemSpec(ARCH, 1, MaintenanceDecision.USE_AS_IS))
        assert advance(uow, clock, dto.id, _S.IN_PREPARATION).order_status == "IN_PREPARATION"

    def test_orange_to_fix_blocks_preparation(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock, OrderItemSpec(ARCH, 1, MaintenanceDecision.FIX_IN_ORDER))
        with pytest.raises(InvalidStateError, match=r"Floral Arch \(ORANGE\)"):
            advance(uow, clock, dto.id, _S.IN_PREPARATION)

    def test_cannot_be_in_use_before_event(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        ship(uow, clock, dto.id)
        advance(uow, clock, dto.id, _S.IN_TRANSIT, _S.DELIVERED)
        with pytest.raises(InvalidStateError, match="before the event starts on 2025-03-20"):
            advance(uow, clock, dto.id, _S.IN_USE)

    def test_status_change_notified(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        notifier = RecordingDispatcher()
        ProgressOrderStatusHandler(uow, notifier, clock).handle(LOGISTICS, dto.id, _S.IN_PREPARATION)
        assert notifier.types() == ["ORDER_STATUS_CHANGED"]
        assert notifier.events[0].payload["from"] == "CONFIRMED"
        assert notifier.events[0].payload["to"] == "IN_PREPARATION"


class TestOutboundScan:

    def test_not_before_preparation(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        with pytest.raises(InvalidStateError, match="Outbound scanning is not allowed"):
            OutboundScanHandler(uow, clock).handle(LOGISTICS, dto.id, "QR-STAGE")

    def test_cannot_scan_out_twice(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        advance(uow, clock, dto.id, _S.IN_PREPARATION)
        handler = OutboundScanHandler(uow, clock)
        handler.handle(LOGISTICS, dto.id, "QR-STAGE")
        with pytest.raises(ConflictError, match="already scanned out"):
            handler.handle(LOGISTICS, dto.id, "QR-STAGE")

    def test_asset_not_on_order(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        advance(uow, clock, dto.id, _S.IN_PREPARATION)
        with pytest.raises(ValidationError, match="is not part of order"):
            OutboundScanHandler(uow, clock).handle(LOGISTICS, dto.id, "QR-BAR", 1)

    def test_unknown_qr_code(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        advance(uow, clock, dto.id, _S.IN_PREPARATION)
        with pytest.raises(NotFoundError, match="No asset with QR code"):
            OutboundScanHandler(uow, clock).handle(LOGISTICS, dto.id, "QR-NOPE")


class TestCompleteOutbound:

    def test_progress_tracks_outbound_scans(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock, OrderItemSpec(CHAIRS, 10), OrderItemSpec(STAGE, 1))
        advance(uow, clock, dto.id, _S.IN_PREPARATION)
        OutboundScanHandler(uow, clock).handle(LOGISTICS, dto.id, "QR-CHAIR", 10)

        progress = OutboundProgressHandler(uow).handle(LOGISTICS, dto.id)
        assert (progress.items_scanned, progress.total_items) == (10, 11)
        assert progress.percent_complete == 91
        assert [i.is_complete for i in progress.items] == [True, False]
        assert InboundProgressHandler(uow).handle(LOGISTICS, dto.id).items_scanned == 0

    def test_requires_every_unit_scanned_out(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock, OrderItemSpec(CHAIRS, 10))
        advance(uow, clock, dto.id, _S.IN_PREPARATION)
        OutboundScanHandler(uow, clock).handle(LOGISTICS, dto.id, "QR-CHAIR", 4)

        with pytest.raises(ValidationError, match=r"Outbound scanning incomplete: Gold Chiavari Chair \(4/10\)"):
            CompleteOutboundHandler(uow, clock=clock).handle(LOGISTICS, dto.id)
        assert uow.orders.get_by_id(dto.id).order_status == _S.IN_PREPARATION

    def test_generic_progress_is_gated_too(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock, OrderItemSpec(CHAIRS, 10))
        advance(uow, clock, dto.id, _S.IN_PREPARATION)
        with pytest.raises(ValidationError, match="Outbound scanning incomplete"):
            advance(uow, clock, dto.id, _S.READY_FOR_DELIVERY, actor=ADMIN)

    def test_completion_marks_assets_out(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock, OrderItemSpec(CHAIRS, 10), OrderItemSpec(STAGE, 1))
        notifier = RecordingDispatcher()
        advance(uow, clock, dto.id, _S.IN_PREPARATION)
        outbound = OutboundScanHandler(uow, clock)
        outbound.handle(LOGISTICS, dto.id, "QR-CHAIR", 10)
        outbound.handle(LOGISTICS, dto.id, "QR-STAGE")

        result = CompleteOutboundHandler(uow, notifier, clock).handle(LOGISTICS, dto.id)

        assert result.order_status == "READY_FOR_DELIVERY"
        assert result.status_history[-1].notes == "All items scanned out and ready for delivery"
        assert uow.assets.get_by_id(CHAIRS).status == AssetStatus.OUT
        assert uow.assets.get_by_id(STAGE).status == AssetStatus.OUT
        assert notifier.events[0].payload["to"] == "READY_FOR_DELIVERY"

    def test_only_from_preparation(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        with pytest.raises(InvalidStateError, match="order is CONFIRMED"):
            CompleteOutboundHandler(uow, clock=clock).handle(LOGISTICS, dto.id)

    def test_clients_cannot_complete(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        with pytest.raises(PermissionDeniedError):
            CompleteOutboundHandler(uow, clock=clock).handle(CLIENT, dto.id)


class TestInboundScan:

    def test_partial_return_and_close(self):
        uow, clock, order_id = _returning_order(OrderItemSpec(CHAIRS, 40))
        inbound = InboundScanHandler(uow, clock)
        _, progress = inbound.handle(LOGISTICS, order_id, "QR-CHAIR", AssetCondition.GREEN, 30)
        assert progress.items_scanned == 30
        assert progress.total_items == 40
        assert progress.percent_complete == 75

        closer = CompleteInboundHandler(uow, clock=clock)
        with pytest.raises(ValidationError, match=r"Gold Chiavari Chair \(30/40\)"):
            closer.handle(LOGISTICS, order_id)

        with pytest.raises(ConflictError, match="Cannot scan 11 more"):
            inbound.handle(LOGISTICS, order_id, "QR-CHAIR", AssetCondition.GREEN, 11)

        inbound.handle(LOGISTICS, order_id, "QR-CHAIR", AssetCondition.GREEN, 10)
        assert InboundProgressHandler(uow).handle(LOGISTICS, order_id).percent_complete == 100
        dto = closer.handle(LOGISTICS, order_id)
        assert dto.order_status == "CLOSED"
        assert dto.financial_status == "PENDING_INVOICE"

    def test_damaged_return_updates_condition(self):
        uow, clock, order_id = _returning_order(OrderItemSpec(CHAIRS, 40))
        asset, _ = InboundScanHandler(uow, clock).handle(
            LOGISTICS, order_id, "QR-CHAIR", AssetCondition.ORANGE, 40,
            notes="Scuffed legs", photos=["legs.jpg"],
            discrepancy_reason=DiscrepancyReason.BROKEN, refurb_days_estimate=2,
        )
        assert asset.condition == "ORANGE"
        assert asset.refurb_days_estimate == 2
        stored = uow.assets.get_by_id(CHAIRS)
        assert stored.condition_history[-1].notes == "Scuffed legs"

    def test_batch_scan_needs_quantity(self):
        uow, clock, order_id = _returning_order(OrderItemSpec(CHAIRS, 40))
        with pytest.raises(ValidationError, match="Quantity is required for batch-tracked assets"):
            InboundScanHandler(uow, clock).handle(LOGISTICS, order_id, "QR-CHAIR", AssetCondition.GREEN)

    def test_individual_scan_is_one_unit(self):
        uow, clock, order_id = _returning_order()
        with pytest.raises(ValidationError, match="one unit at a time"):
            InboundScanHandler(uow, clock).handle(
                LOGISTICS, order_id, "QR-STAGE", AssetCondition.GREEN, 2
            )

    def test_not_before_event_ends(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        with pytest.raises(InvalidStateError, match="Inbound scanning is not allowed"):
            InboundScanHandler(uow, clock).handle(LOGISTICS, dto.id, "QR-STAGE", AssetCondition.GREEN)

    def test_negative_refurb_estimate(self):
        uow, clock, order_id = _returning_order()
        with pytest.raises(ValidationError, match="cannot be negative"):
            InboundScanHandler(uow, clock).handle(
                LOGISTICS, order_id, "QR-STAGE", AssetCondition.RED, refurb_days_estimate=-1
            )


class TestFinancialStatus:

    def test_only_admin(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        with pytest.raises(PermissionDeniedError):
            UpdateFinancialStatusHandler(uow, clock).handle(LOGISTICS, dto.id, FinancialStatus.INVOICED)

    def test_quote_statuses_are_workflow_owned(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        with pytest.raises(InvalidStateError, match="set by the quote workflow"):
            UpdateFinancialStatusHandler(uow, clock).handle(ADMIN, dto.id, FinancialStatus.QUOTE_ACCEPTED)

    def test_invoice_straight_after_acceptance(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        dto = UpdateFinancialStatusHandler(uow, clock).handle(ADMIN, dto.id, FinancialStatus.INVOICED)
        assert dto.financial_status == "INVOICED"

    def test_paid_requires_invoice(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        with pytest.raises(InvalidStateError, match="Cannot change financial status"):
            UpdateFinancialStatusHandler(uow, clock).handle(ADMIN, dto.id, FinancialStatus.PAID)


class TestLogisticsDetails:

    def test_job_number_and_windows(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        delivery = TimeWindow(
            datetime(2025, 3, 19, 8, 0, tzinfo=timezone.utc),
            datetime(2025, 3, 19, 12, 0, tzinfo=timezone.utc),
        )
        pickup = TimeWindow(
            datetime(2025, 3, 22, 8, 0, tzinfo=timezone.utc),
            datetime(2025, 3, 22, 12, 0, tzinfo=timezone.utc),
        )
        result = UpdateLogisticsDetailsHandler(uow).handle(
            LOGISTICS, dto.id, " JOB-7781 ", delivery, pickup
        )
        assert result.job_number == "JOB-7781"
        stored = uow.orders.get_by_id(dto.id)
        assert stored.delivery_window == delivery
        assert stored.pickup_window == pickup

    def test_pickup_must_follow_delivery(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        delivery = TimeWindow(
            datetime(2025, 3, 19, 8, 0, tzinfo=timezone.utc),
            datetime(2025, 3, 19, 12, 0, tzinfo=timezone.utc),
        )
        pickup = TimeWindow(
            datetime(2025, 3, 19, 10, 0, tzinfo=timezone.utc),
            datetime(2025, 3, 19, 14, 0, tzinfo=timezone.utc),
        )
        with pytest.raises(ValidationError, match="Pickup window must start after"):
            UpdateLogisticsDetailsHandler(uow).handle(LOGISTICS, dto.id, None, delivery, pickup)

    def test_clients_cannot_edit(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        with pytest.raises(PermissionDeniedError):
            UpdateLogisticsDetailsHandler(uow).handle(CLIENT, dto.id, "JOB-1")
