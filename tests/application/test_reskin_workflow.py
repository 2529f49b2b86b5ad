"""Integration tests for reskin (rebranding) requests."""

import pytest

from ofe.application.approve_quote import ApproveQuoteHandler
from ofe.application.cancel_reskin import CANCEL_ORDER, CancelReskinHandler
from ofe.application.complete_reskin import CompleteReskinHandler
from ofe.application.decline_quote import DeclineQuoteHandler
from ofe.application.dto import OrderItemSpec
from ofe.application.list_reskins import ListReskinsHandler
from ofe.application.process_reskin import ProcessReskinHandler
from ofe.application.send_quote import SendQuoteHandler
from ofe.domain.exceptions import ConflictError, InvalidStateError, ValidationError
from ofe.domain.model.asset import AssetStatus
from ofe.domain.model.order import FINANCIAL_TRANSITIONS, VALID_TRANSITIONS, OrderStatus
from ofe.domain.model.value_objects import Money
from tests.fakes import (
    CHAIRS,
    CLIENT,
    LOGISTICS,
    STAGE,
    FixedClock,
    RecordingDispatcher,
    advance,
    seeded_uow,
    submit_order,
)

RESKIN_STAGE = OrderItemSpec(
    STAGE, 1,
    is_reskin_request=True,
    reskin_target_brand_custom="Acme",
    reskin_notes="Logo on the front skirt",
)


def _processed():
    """An order in pricing review with one processed reskin charged at 1500."""
    uow, clock = seeded_uow(), FixedClock()
    dto = submit_order(uow, clock, RESKIN_STAGE, OrderItemSpec(CHAIRS, 10))
    stage_item = next(i for i in dto.items if i.asset_id == STAGE)
    reskin, line_item = ProcessReskinHandler(uow, clock).handle(
        LOGISTICS, dto.id, stage_item.id, Money.of("1500"), "Vinyl wrap"
    )
    return uow, clock, dto, reskin, line_item


def _awaiting_fabrication():
    uow, clock, dto, reskin, line_item = _processed()
    SendQuoteHandler(uow, clock=clock).handle(LOGISTICS, dto.id)
    ApproveQuoteHandler(uow, clock=clock).handle(CLIENT, dto.id)
    return uow, clock, dto, reskin, line_item


class TestProcessReskin:

    def test_opens_request_and_charges_it(self):
        uow, _, dto, reskin, line_item = _processed()
        assert reskin.status == "pending"
        assert reskin.target_brand == "Acme"
        assert line_item.line_item_code == "K-000001"
        assert line_item.category == "RESKIN"
        assert line_item.description == "Modular Stage Rebrand (Acme)"
        # 8.5 m3 x 50 + 300, plus 25% margin; the reskin is added after margin
        order = uow.orders.get_by_id(dto.id)
        assert order.pricing.total == Money.of("906.25") + Money.of("1500")

    def test_only_once_per_item(self):
        uow, clock, dto, reskin, _ = _processed()
        with pytest.raises(ConflictError, match="already processed"):
            ProcessReskinHandler(uow, clock).handle(
                LOGISTICS, dto.id, reskin.order_item_id, Money.of("1500")
            )

    def test_item_must_be_a_reskin_request(self):
        uow, clock, dto, _, _ = _processed()
        chairs_item = next(i for i in dto.items if i.asset_id == CHAIRS)
        with pytest.raises(ValidationError, match="not a reskin request"):
            ProcessReskinHandler(uow, clock).handle(LOGISTICS, dto.id, chairs_item.id, Money.of("100"))

    def test_listed_on_order(self):
        uow, _, dto, reskin, _ = _processed()
        assert [r.id for r in ListReskinsHandler(uow).handle(LOGISTICS, dto.id)] == [reskin.id]


class TestCompleteReskin:

    def test_approval_waits_for_fabrication(self):
        uow, clock, dto, _, _ = _awaiting_fabrication()
        order = uow.orders.get_by_id(dto.id)
        assert order.order_status == OrderStatus.AWAITING_FABRICATION
        with pytest.raises(InvalidStateError, match="pending reskin"):
            advance(uow, clock, dto.id, OrderStatus.IN_PREPARATION)

    def test_completion_creates_new_asset_and_moves_on(self):
        uow, clock, dto, reskin, _ = _awaiting_fabrication()
        notifier = RecordingDispatcher()
        done, new_asset, all_complete = CompleteReskinHandler(uow, notifier, clock).handle(
            LOGISTICS, reskin.id, "Modular Stage (Acme)", ["done.jpg"], "Wrapped and checked"
        )

        assert all_complete
        assert done.status == "complete"
        assert new_asset.qr_code.startswith("AST-")
        assert new_asset.transformed_from == STAGE

        original = uow.assets.get_by_id(STAGE)
        assert original.status == AssetStatus.TRANSFORMED
        assert original.transformed_to == new_asset.id

        order = uow.orders.get_by_id(dto.id)
        assert order.order_status == OrderStatus.IN_PREPARATION
        assert order.item_for_asset(new_asset.id).asset_name == "Modular Stage (Acme)"
        assert {b.asset_id for b in uow.bookings.list_for_order(dto.id)} == {new_asset.id, CHAIRS}
        assert notifier.types() == ["FABRICATION_COMPLETE"]

    def test_photo_required(self):
        uow, clock, _, reskin, _ = _awaiting_fabrication()
        with pytest.raises(ValidationError, match="completion photo"):
            CompleteReskinHandler(uow, clock=clock).handle(LOGISTICS, reskin.id, "Stage", [])


class TestCancelReskin:

    def test_continue_before_quote_just_reprices(self):
        uow, clock, dto, reskin, line_item = _processed()
        result = CancelReskinHandler(uow, clock=clock).handle(LOGISTICS, reskin.id, "Client dropped it")

        assert result.reskin.status == "cancelled"
        assert not result.quote_revised
        assert uow.line_items.get_by_id(line_item.id).is_voided
        order = uow.orders.get_by_id(dto.id)
        assert order.order_status == OrderStatus.PRICING_REVIEW
        assert order.pricing.total == Money.of("906.25")
        assert not order.item_for_asset(STAGE).is_reskin_request

    def test_continue_after_approval_revises_quote(self):
        uow, clock, dto, reskin, _ = _awaiting_fabrication()
        notifier = RecordingDispatcher()
        result = CancelReskinHandler(uow, notifier, clock).handle(
            LOGISTICS, reskin.id, "Brand guidelines changed"
        )

        assert result.quote_revised
        order = uow.orders.get_by_id(dto.id)
        assert order.order_status == OrderStatus.QUOTED
        assert order.financial_status.value == "QUOTE_SENT"
        assert notifier.types() == ["QUOTE_REVISED"]

        # Re-approval replaces the earlier bookings rather than adding to them
        ApproveQuoteHandler(uow, clock=clock).handle(CLIENT, dto.id)
        assert uow.orders.get_by_id(dto.id).order_status == OrderStatus.CONFIRMED
        assert len(uow.bookings.list_for_order(dto.id)) == 2

    def test_revised_quote_releases_bookings(self):
        uow, clock, dto, reskin, _ = _awaiting_fabrication()
        assert len(uow.bookings.list_for_order(dto.id)) == 2

        CancelReskinHandler(uow, clock=clock).handle(LOGISTICS, reskin.id, "Brand guidelines changed")

        assert uow.bookings.list_for_order(dto.id) == []
        stage = uow.assets.get_by_id(STAGE)
        assert stage.status == AssetStatus.AVAILABLE
        assert stage.available_quantity == 1
        chairs = uow.assets.get_by_id(CHAIRS)
        assert chairs.available_quantity == chairs.total_quantity

    def test_declining_revised_quote_leaves_nothing_booked(self):
        uow, clock, dto, reskin, _ = _awaiting_fabrication()
        CancelReskinHandler(uow, clock=clock).handle(LOGISTICS, reskin.id, "Brand guidelines changed")
        DeclineQuoteHandler(uow, clock=clock).handle(CLIENT, dto.id, "Too expensive now")

        order = uow.orders.get_by_id(dto.id)
        assert order.order_status == OrderStatus.DECLINED
        assert uow.bookings.list_for_order(dto.id) == []
        assert uow.assets.get_by_id(STAGE).status == AssetStatus.AVAILABLE

    def test_revision_follows_both_transition_graphs(self):
        uow, clock, dto, reskin, _ = _awaiting_fabrication()
        CancelReskinHandler(uow, clock=clock).handle(LOGISTICS, reskin.id, "Brand guidelines changed")
        ApproveQuoteHandler(uow, clock=clock).handle(CLIENT, dto.id)

        order = uow.orders.get_by_id(dto.id)
        statuses = [h.status for h in order.status_history]
        assert statuses[-3:] == [
            OrderStatus.AWAITING_FABRICATION, OrderStatus.QUOTED, OrderStatus.CONFIRMED,
        ]
        for before, after in zip(statuses, statuses[1:]):
            assert after in VALID_TRANSITIONS[before]
        financial = [h.status for h in order.financial_history]
        for before, after in zip(financial, financial[1:]):
            assert after in FINANCIAL_TRANSITIONS[before]

    def test_cancel_order_option(self):
        uow, clock, dto, reskin, _ = _awaiting_fabrication()
        notifier = RecordingDispatcher()
        result = CancelReskinHandler(uow, notifier, clock).handle(
            LOGISTICS, reskin.id, "Printer cannot match colours", CANCEL_ORDER
        )

        assert result.order_action == CANCEL_ORDER
        order = uow.orders.get_by_id(dto.id)
        assert order.order_status == OrderStatus.CANCELLED
        assert order.status_history[-1].notes.startswith("fabrication_failed")
        assert uow.bookings.list_for_order(dto.id) == []
        assert uow.assets.get_by_id(STAGE).status == AssetStatus.AVAILABLE
        assert notifier.types() == ["ORDER_CANCELLED"]

    def test_completed_reskin_cannot_be_cancelled(self):
        uow, clock, _, reskin, _ = _awaiting_fabrication()
        CompleteReskinHandler(uow, clock=clock).handle(LOGISTICS, reskin.id, "Stage (Acme)", ["a.jpg"])
        with pytest.raises(InvalidStateError, match="Cannot cancel completed"):
            CancelReskinHandler(uow, clock=clock).handle(LOGISTICS, reskin.id, "Too late now")

    def test_invalid_order_action(self):
        uow, clock, _, reskin, _ = _processed()
        with pytest.raises(ValidationError, match="Invalid order action"):
            CancelReskinHandler(uow, clock=clock).handle(LOGISTICS, reskin.id, "Whatever", "pause")
