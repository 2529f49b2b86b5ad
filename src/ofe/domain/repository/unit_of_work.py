"""Abstract Unit of Work.

One unit of work wraps one business operation.  Nothing a handler does
through the repositories is durable until ``commit()``; leaving the
``with`` block without committing (normally or through an exception)
discards every change.

Usage::

    with uow:
        order = uow.orders.get_by_id(order_id)
        ...
        uow.commit()
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ofe.domain.repository.asset_repository import AssetRepository
from ofe.domain.repository.booking_repository import BookingRepository
from ofe.domain.repository.line_item_repository import LineItemRepository
from ofe.domain.repository.order_repository import OrderRepository
from ofe.domain.repository.platform_repository import PlatformRepository
from ofe.domain.repository.pricing_repository import (
    CityRepository,
    PricingConfigRepository,
    ServiceTypeRepository,
    TransportRateRepository,
)
from ofe.domain.repository.reskin_repository import ReskinRepository
from ofe.domain.repository.scan_repository import ScanRepository
from ofe.domain.repository.self_booking_repository import SelfBookingRepository


class UnitOfWork(ABC):
    orders: OrderRepository
    assets: AssetRepository
    bookings: BookingRepository
    self_bookings: SelfBookingRepository
    line_items: LineItemRepository
    reskins: ReskinRepository
    scans: ScanRepository
    pricing_configs: PricingConfigRepository
    transport_rates: TransportRateRepository
    service_types: ServiceTypeRepository
    cities: CityRepository
    platforms: PlatformRepository

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # No-op after a successful commit.
        self.rollback()

    @abstractmethod
    def commit(self) -> None:
        """Make every change since the last commit durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard every change since the last commit."""
