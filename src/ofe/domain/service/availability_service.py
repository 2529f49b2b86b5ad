"""Domain service: date-window availability and booking.

Availability of an asset for an event window is its total quantity minus
the quantity held by overlapping bookings of live orders minus the units
still out on self-bookings.  Checks and booking inserts are expected to run
inside the same unit of work, so a check is never stale by the time the
bookings are written.

Like the reservation flow it replaces, the check is two-phase: every item
is validated before any booking or asset is touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from uuid import uuid4

from ofe.domain.exceptions import ConflictError, NotFoundError
from ofe.domain.model.asset import Asset
from ofe.domain.model.booking import AssetBooking
from ofe.domain.model.order import Order
from ofe.domain.repository.asset_repository import AssetRepository
from ofe.domain.repository.booking_repository import BookingRepository
from ofe.domain.repository.order_repository import OrderRepository
from ofe.domain.repository.self_booking_repository import SelfBookingRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssetAvailability:
    asset_id: str
    asset_name: str
    requested: int
    available: int
    next_available_date: date | None = None

    @property
    def sufficient(self) -> bool:
        return self.available >= self.requested


class InsufficientAvailabilityError(ConflictError):
    """Raised with one entry per item that cannot be satisfied."""

    def __init__(self, shortfalls: list[AssetAvailability]) -> None:
        parts = []
        for s in shortfalls:
            part = f"{s.asset_name}: requested {s.requested}, available {s.available}"
            if s.next_available_date is not None:
                part += f" (next available {s.next_available_date.isoformat()})"
            parts.append(part)
        super().__init__("Insufficient availability: " + "; ".join(parts))
        self.shortfalls = shortfalls


class AvailabilityService:

    def __init__(
        self,
        assets: AssetRepository,
        bookings: BookingRepository,
        self_bookings: SelfBookingRepository,
        orders: OrderRepository,
    ) -> None:
        self._assets = assets
        self._bookings = bookings
        self._self_bookings = self_bookings
        self._orders = orders

    def availability(
        self,
        asset: Asset,
        requested: int,
        start: date | None = None,
        end: date | None = None,
        exclude_order_id: str | None = None,
    ) -> AssetAvailability:
        """Free units for the window; without a window every live booking counts."""
        booked = 0
        latest_until: date | None = None
        for booking in self._bookings.list_for_asset(asset.id):
            if booking.order_id == exclude_order_id:
                continue
            if start is not None and end is not None and not booking.overlaps(start, end):
                continue
            order = self._orders.get_by_id(booking.order_id)
            if order is None or not order.holds_bookings:
                continue
            booked += booking.quantity
            if latest_until is None or booking.blocked_until > latest_until:
                latest_until = booking.blocked_until

        self_booked = sum(
            item.outstanding
            for sb in self._self_bookings.list_active_for_asset(asset.id)
            for item in sb.items
            if item.asset_id == asset.id
        )

        return AssetAvailability(
            asset_id=asset.id,
            asset_name=asset.name,
            requested=requested,
            available=max(0, asset.total_quantity - booked - self_booked),
            next_available_date=latest_until + timedelta(days=1) if latest_until else None,
        )

    def check(
        self,
        requests: list[tuple[Asset, int]],
        start: date | None = None,
        end: date | None = None,
        exclude_order_id: str | None = None,
    ) -> list[AssetAvailability]:
        """Validate every request; raise one error listing all shortfalls."""
        results = [
            self.availability(asset, qty, start, end, exclude_order_id)
            for asset, qty in requests
        ]
        shortfalls = [r for r in results if not r.sufficient]
        if shortfalls:
            logger.warning(
                "Availability check failed for %s",
                ", ".join(f"{s.asset_id} ({s.requested}>{s.available})" for s in shortfalls),
            )
            raise InsufficientAvailabilityError(shortfalls)
        return results

    def reserve_for_order(self, order: Order) -> list[AssetBooking]:
        """Recheck availability and create the order's bookings.

        Phase 1 loads and validates every item (the order's own existing
        bookings are ignored); phase 2 writes bookings and shelf counts.
        """
        requests: list[tuple[Asset, int]] = []
        for item in order.items:
            asset = self._assets.get_by_id(item.asset_id)
            if asset is None:
                raise NotFoundError(f"Asset '{item.asset_name}' not found")
            requests.append((asset, item.quantity))

        results = self.check(
            requests, order.event_start_date, order.event_end_date, exclude_order_id=order.id
        )

        created: list[AssetBooking] = []
        for item, (asset, qty), result in zip(order.items, requests, results):
            booking = AssetBooking.for_event(
                booking_id=str(uuid4()),
                asset_id=asset.id,
                order_id=order.id,
                quantity=qty,
                event_start=order.event_start_date,
                event_end=order.event_end_date,
                refurb_days=item.refurb_days_snapshot or 0,
            )
            self._bookings.save(booking)
            asset.apply_booking(result.available - qty)
            self._assets.save(asset)
            created.append(booking)
        return created

    def release_for_order(self, order_id: str) -> list[AssetBooking]:
        """Delete an order's bookings and give the units back to the shelf."""
        released = self._bookings.delete_for_order(order_id)
        for booking in released:
            asset = self._assets.get_by_id(booking.asset_id)
            if asset is None:
                logger.warning("Booking %s points at missing asset %s", booking.id, booking.asset_id)
                continue
            asset.release_booking(booking.quantity)
            self._assets.save(asset)
        return released
