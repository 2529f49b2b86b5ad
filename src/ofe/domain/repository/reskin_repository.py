"""Abstract repository for ReskinRequest aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ofe.domain.model.reskin import ReskinRequest


class ReskinRepository(ABC):

    @abstractmethod
    def get_by_id(self, reskin_id: str) -> ReskinRequest | None:
        """Return a reskin request by its ID, or None if not found."""

    @abstractmethod
    def get_by_order_item(self, order_item_id: str) -> ReskinRequest | None:
        """Return the reskin request for an order item, or None."""

    @abstractmethod
    def list_for_order(self, order_id: str) -> list[ReskinRequest]:
        """Return every reskin request of an order, oldest first."""

    @abstractmethod
    def save(self, reskin: ReskinRequest) -> None:
        """Persist a new or updated reskin request."""
