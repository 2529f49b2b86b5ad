"""Abstract repository for SelfBooking aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ofe.domain.model.booking import SelfBooking


class SelfBookingRepository(ABC):

    @abstractmethod
    def get_by_id(self, self_booking_id: str) -> SelfBooking | None:
        """Return a self-booking by its ID, or None if not found."""

    @abstractmethod
    def list_active_for_asset(self, asset_id: str) -> list[SelfBooking]:
        """Return ACTIVE self-bookings holding at least one OUT item for the asset."""

    @abstractmethod
    def save(self, self_booking: SelfBooking) -> None:
        """Persist a new or updated self-booking."""
