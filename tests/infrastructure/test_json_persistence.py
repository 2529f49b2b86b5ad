"""Tests for the JSON document store and its unit of work."""

import json
from decimal import Decimal

import pytest

from ofe.application.dto import OrderItemSpec
from ofe.domain.model.asset import AssetStatus
from ofe.domain.model.order import OrderStatus
from ofe.domain.model.platform import FeasibilityConfig, PlatformConfig
from ofe.domain.model.pricing import PricingBreakdown
from ofe.domain.model.value_objects import Money
from ofe.domain.service.availability_service import InsufficientAvailabilityError
from ofe.infrastructure.persistence.json_unit_of_work import JsonUnitOfWork
from ofe.infrastructure.persistence.pricing_snapshot import (
    UnsupportedSnapshotError,
    breakdown_from_raw,
    breakdown_to_raw,
)
from tests.fakes import PLATFORM_ID, STAGE, FixedClock, confirmed_order, seeded_uow, submit_order


@pytest.fixture
def store_path(tmp_path):
    """A JSON store seeded with the same platform data the fakes use."""
    path = tmp_path / "store.json"
    source = seeded_uow()
    with JsonUnitOfWork(path) as uow:
        uow.platforms.save_config(source.platforms.get_config(PLATFORM_ID))
        uow.platforms.save_system_actor(source.platforms.get_system_actor(PLATFORM_ID))
        for config in source.pricing_configs._store.values():
            uow.pricing_configs.save(config)
        for rate in source.transport_rates._store.values():
            uow.transport_rates.save(rate)
        for city in source.cities._store.values():
            uow.cities.save(city)
        for service_type in source.service_types._store.values():
            uow.service_types.save(service_type)
        for asset in source.assets._store.values():
            uow.assets.save(asset)
        uow.commit()
    return path


class TestJsonUnitOfWork:

    def test_new_store_file_created(self, tmp_path):
        path = tmp_path / "nested" / "store.json"
        with JsonUnitOfWork(path) as uow:
            assert uow.orders.get_by_id("order-1") is None
        assert json.loads(path.read_text())["orders"] == []

    def test_uncommitted_changes_discarded(self, store_path):
        with JsonUnitOfWork(store_path) as uow:
            stage = uow.assets.get_by_id(STAGE)
            stage.status = AssetStatus.MAINTENANCE
            uow.assets.save(stage)

        with JsonUnitOfWork(store_path) as uow:
            assert uow.assets.get_by_id(STAGE).status == AssetStatus.AVAILABLE

    def test_failed_operation_leaves_file_untouched(self, store_path):
        before = store_path.read_text()
        with pytest.raises(InsufficientAvailabilityError):
            submit_order(JsonUnitOfWork(store_path), FixedClock(), OrderItemSpec(STAGE, 2))
        assert store_path.read_text() == before

    def test_platform_config_round_trip(self, store_path):
        config = PlatformConfig(
            PLATFORM_ID,
            default_margin_percent=Decimal("12.5"),
            feasibility=FeasibilityConfig(minimum_lead_hours=36, weekend_days=frozenset({5, 6})),
        )
        with JsonUnitOfWork(store_path) as uow:
            uow.platforms.save_config(config)
            uow.commit()
        with JsonUnitOfWork(store_path) as uow:
            assert uow.platforms.get_config(PLATFORM_ID) == config


class TestOrderPersistence:

    def test_confirmed_order_round_trip(self, store_path):
        clock = FixedClock()
        dto = confirmed_order(JsonUnitOfWork(store_path), clock)

        with JsonUnitOfWork(store_path) as uow:
            order = uow.orders.get_by_id(dto.id)
            assert order.order_code == "ORD-20250310-001"
            assert order.order_status == OrderStatus.CONFIRMED
            assert isinstance(order.pricing, PricingBreakdown)
            assert order.pricing.total == Money.of("875.00")
            assert [h.status for h in order.status_history][-1] == OrderStatus.CONFIRMED
            assert len(uow.bookings.list_for_order(dto.id)) == 1
            assert uow.assets.get_by_id(STAGE).status == AssetStatus.BOOKED

    def test_second_order_sees_first_booking(self, store_path):
        clock = FixedClock()
        confirmed_order(JsonUnitOfWork(store_path), clock)
        with pytest.raises(InsufficientAvailabilityError):
            submit_order(JsonUnitOfWork(store_path), clock)


class TestPricingSnapshot:

    def test_estimate_round_trip(self, store_path):
        dto = submit_order(JsonUnitOfWork(store_path), FixedClock())
        with JsonUnitOfWork(store_path) as uow:
            estimate = uow.orders.get_by_id(dto.id).pricing
        assert breakdown_from_raw(breakdown_to_raw(estimate)) == estimate

    def test_unknown_version_rejected(self, store_path):
        dto = submit_order(JsonUnitOfWork(store_path), FixedClock())
        with JsonUnitOfWork(store_path) as uow:
            raw = breakdown_to_raw(uow.orders.get_by_id(dto.id).pricing)
        raw["schema_version"] = 99
        with pytest.raises(UnsupportedSnapshotError, match="version 99"):
            breakdown_from_raw(raw)
