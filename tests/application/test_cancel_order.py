"""Integration tests for the Cancel Order use case."""

import pytest

from ofe.application.approve_quote import ApproveQuoteHandler
from ofe.application.cancel_order import CancelOrderHandler, parse_reason
from ofe.application.dto import OrderItemSpec
from ofe.application.process_reskin import ProcessReskinHandler
from ofe.application.send_quote import SendQuoteHandler
from ofe.domain.exceptions import InvalidStateError, PermissionDeniedError, ValidationError
from ofe.domain.model.asset import AssetStatus
from ofe.domain.model.order import CancellationReason, FinancialStatus, OrderStatus
from ofe.domain.model.reskin import ReskinStatus
from ofe.domain.model.value_objects import Money
from tests.fakes import (
    ADMIN,
    CLIENT,
    LOGISTICS,
    STAGE,
    FixedClock,
    RecordingDispatcher,
    advance,
    confirmed_order,
    seeded_uow,
    ship,
    submit_order,
)


class TestCancelOrder:

    def test_cancel_before_quote(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = submit_order(uow, clock)
        result = CancelOrderHandler(uow, clock=clock).handle(LOGISTICS, dto.id, "client_requested")

        assert result.order_code == dto.order_code
        assert result.cancelled_reskins == 0
        order = uow.orders.get_by_id(dto.id)
        assert order.order_status == OrderStatus.CANCELLED
        assert order.financial_status == FinancialStatus.CANCELLED

    def test_confirmed_order_releases_bookings(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        assert uow.assets.get_by_id(STAGE).status == AssetStatus.BOOKED

        CancelOrderHandler(uow, clock=clock).handle(
            ADMIN, dto.id, CancellationReason.EVENT_CANCELLED, "Venue flooded"
        )

        assert uow.bookings.list_for_order(dto.id) == []
        assert uow.assets.get_by_id(STAGE).status == AssetStatus.AVAILABLE
        order = uow.orders.get_by_id(dto.id)
        assert order.status_history[-1].notes == "event_cancelled: Venue flooded"

    def test_freed_unit_can_be_booked_again(self):
        uow, clock = seeded_uow(), FixedClock()
        first = confirmed_order(uow, clock)
        CancelOrderHandler(uow, clock=clock).handle(LOGISTICS, first.id, "other")
        second = confirmed_order(uow, clock)
        assert second.order_status == "CONFIRMED"

    def test_cascade_cancels_pending_reskins(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = submit_order(
            uow, clock, OrderItemSpec(STAGE, 1, is_reskin_request=True, reskin_target_brand_custom="Acme")
        )
        reskin, line_item = ProcessReskinHandler(uow, clock).handle(
            LOGISTICS, dto.id, dto.items[0].id, Money.of("1500")
        )
        SendQuoteHandler(uow, clock=clock).handle(LOGISTICS, dto.id)
        ApproveQuoteHandler(uow, clock=clock).handle(CLIENT, dto.id)

        notifier = RecordingDispatcher()
        result = CancelOrderHandler(uow, notifier, clock).handle(
            LOGISTICS, dto.id, "pricing_dispute", notify_client=False
        )

        assert result.cancelled_reskins == 1
        assert uow.reskins.get_by_id(reskin.id).status == ReskinStatus.CANCELLED
        assert uow.line_items.get_by_id(line_item.id).void_reason == "Order cancelled"
        assert uow.bookings.list_for_order(dto.id) == []
        assert notifier.types() == ["ORDER_CANCELLED"]
        assert notifier.events[0].payload["notify_client"] is False

    def test_not_once_dispatched(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = confirmed_order(uow, clock)
        ship(uow, clock, dto.id)
        with pytest.raises(InvalidStateError, match="Cannot cancel order in READY_FOR_DELIVERY"):
            CancelOrderHandler(uow, clock=clock).handle(LOGISTICS, dto.id, "other")
        assert len(uow.bookings.list_for_order(dto.id)) == 1

    def test_clients_cannot_cancel(self):
        uow, clock = seeded_uow(), FixedClock()
        dto = submit_order(uow, clock)
        with pytest.raises(PermissionDeniedError):
            CancelOrderHandler(uow, clock=clock).handle(CLIENT, dto.id, "client_requested")


class TestParseReason:

    def test_accepts_enum_and_value(self):
        assert parse_reason(CancellationReason.OTHER) == CancellationReason.OTHER
        assert parse_reason("asset_unavailable") == CancellationReason.ASSET_UNAVAILABLE

    def test_rejects_unknown(self):
        with pytest.raises(ValidationError, match="Invalid cancellation reason 'bored'"):
            parse_reason("bored")
