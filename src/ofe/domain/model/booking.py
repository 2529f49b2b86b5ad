"""Reservations that compete for the same asset pool.

``AssetBooking`` rows are created when a client approves a quote and live
only while the order holds a booking-holding status.  ``SelfBooking`` is a
manual checkout for internal use; its unreturned quantity is subtracted from
availability exactly like an order booking.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum

from ofe.domain.exceptions import InvalidStateError, ValidationError

# Days an asset is blocked before the event for preparation
PREP_BUFFER_DAYS = 5
# Days an asset is blocked after the event for return and processing
RETURN_BUFFER_DAYS = 3


@dataclass
class AssetBooking:
    id: str
    asset_id: str
    order_id: str
    quantity: int
    blocked_from: date
    blocked_until: date

    @staticmethod
    def for_event(
        booking_id: str,
        asset_id: str,
        order_id: str,
        quantity: int,
        event_start: date,
        event_end: date,
        refurb_days: int = 0,
    ) -> AssetBooking:
        """Block the event window plus preparation/refurb and return buffers."""
        if quantity <= 0:
            raise ValidationError("Booking quantity must be positive")
        return AssetBooking(
            id=booking_id,
            asset_id=asset_id,
            order_id=order_id,
            quantity=quantity,
            blocked_from=event_start - timedelta(days=PREP_BUFFER_DAYS + (refurb_days or 0)),
            blocked_until=event_end + timedelta(days=RETURN_BUFFER_DAYS),
        )

    def overlaps(self, start: date, end: date) -> bool:
        return self.blocked_from <= end and self.blocked_until >= start


class SelfBookingStatus(Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class SelfBookingItemStatus(Enum):
    OUT = "OUT"
    RETURNED = "RETURNED"
    CANCELLED = "CANCELLED"


@dataclass
class SelfBookingItem:
    asset_id: str
    quantity: int
    returned_quantity: int = 0
    status: SelfBookingItemStatus = SelfBookingItemStatus.OUT
    returned_at: datetime | None = None

    @property
    def outstanding(self) -> int:
        if self.status != SelfBookingItemStatus.OUT:
            return 0
        return self.quantity - self.returned_quantity

    def return_units(self, quantity: int, at: datetime) -> None:
        if quantity <= 0:
            raise ValidationError("Return quantity must be positive")
        if quantity > self.outstanding:
            raise ValidationError(
                f"Cannot return {quantity}, only {self.outstanding} remaining"
            )
        self.returned_quantity += quantity
        if self.returned_quantity >= self.quantity:
            self.status = SelfBookingItemStatus.RETURNED
            self.returned_at = at


@dataclass
class SelfBooking:
    """Aggregate root for a manual (non-order) checkout."""

    id: str
    platform_id: str
    booked_for: str
    created_by: str
    created_at: datetime
    items: list[SelfBookingItem]
    reason: str | None = None
    job_reference: str | None = None
    notes: str | None = None
    status: SelfBookingStatus = SelfBookingStatus.ACTIVE
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancelled_by: str | None = None

    def return_asset(self, asset_id: str, quantity: int, at: datetime) -> SelfBookingItem:
        if self.status != SelfBookingStatus.ACTIVE:
            raise InvalidStateError("Self-booking is not active")
        item = next(
            (
                i for i in self.items
                if i.asset_id == asset_id and i.status == SelfBookingItemStatus.OUT
            ),
            None,
        )
        if item is None:
            raise ValidationError("Asset is not in this booking or already returned")
        item.return_units(quantity, at)
        if all(i.status == SelfBookingItemStatus.RETURNED for i in self.items):
            self.status = SelfBookingStatus.COMPLETED
            self.completed_at = at
        return item

    def cancel(self, by: str, at: datetime) -> None:
        if self.status != SelfBookingStatus.ACTIVE:
            raise InvalidStateError(
                f"Cannot cancel self-booking in {self.status.value} status"
            )
        for item in self.items:
            if item.status == SelfBookingItemStatus.OUT:
                item.status = SelfBookingItemStatus.CANCELLED
        self.status = SelfBookingStatus.CANCELLED
        self.cancelled_at = at
        self.cancelled_by = by
