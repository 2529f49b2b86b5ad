"""Abstract repository for AssetBooking rows."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ofe.domain.model.booking import AssetBooking


class BookingRepository(ABC):

    @abstractmethod
    def list_for_asset(self, asset_id: str) -> list[AssetBooking]:
        """Return every booking on an asset."""

    @abstractmethod
    def list_for_order(self, order_id: str) -> list[AssetBooking]:
        """Return every booking created for an order."""

    @abstractmethod
    def save(self, booking: AssetBooking) -> None:
        """Persist a new or updated booking."""

    @abstractmethod
    def delete_for_order(self, order_id: str) -> list[AssetBooking]:
        """Delete the bookings of an order and return what was deleted."""
