"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ofe.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    def get_by_id(self, order_id: str) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def list_by_status(self, statuses: frozenset[OrderStatus] | set[OrderStatus]) -> list[Order]:
        """Return every non-deleted order whose status is in *statuses*."""

    @abstractmethod
    def codes_with_prefix(self, prefix: str) -> list[str]:
        """Return the order codes (across all platforms) starting with *prefix*."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order.

        Raises ConflictError if another order already uses the same code.
        """
