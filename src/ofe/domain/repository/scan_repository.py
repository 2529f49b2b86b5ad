"""Abstract repository for ScanEvent records (append-only)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ofe.domain.model.scan import ScanEvent, ScanType


class ScanRepository(ABC):

    @abstractmethod
    def list_for_order(self, order_id: str, scan_type: ScanType | None = None) -> list[ScanEvent]:
        """Return the scan events of an order, optionally of one type."""

    @abstractmethod
    def add(self, event: ScanEvent) -> None:
        """Append a scan event."""
