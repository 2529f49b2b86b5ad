"""Abstract repository for OrderLineItem rows."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ofe.domain.model.line_item import OrderLineItem


class LineItemRepository(ABC):

    @abstractmethod
    def get_by_id(self, line_item_id: str) -> OrderLineItem | None:
        """Return a line item by its ID, or None if not found."""

    @abstractmethod
    def list_for_order(self, order_id: str) -> list[OrderLineItem]:
        """Return every line item of an order, voided ones included."""

    @abstractmethod
    def get_by_reskin_request(self, reskin_request_id: str) -> OrderLineItem | None:
        """Return the line item linked to a reskin request, or None."""

    @abstractmethod
    def codes_for_platform(self, platform_id: str) -> list[str]:
        """Return every line item code issued on a platform."""

    @abstractmethod
    def save(self, line_item: OrderLineItem) -> None:
        """Persist a new or updated line item.

        Raises ConflictError if the code is already used on the platform.
        """
