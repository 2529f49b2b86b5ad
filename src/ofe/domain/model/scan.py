"""Scan events: immutable records of physical QR scans.

Progress is always recomputed from the full event history.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from ofe.domain.model.asset import AssetCondition


class ScanType(Enum):
    OUTBOUND = "OUTBOUND"
    INBOUND = "INBOUND"


class DiscrepancyReason(Enum):
    BROKEN = "BROKEN"
    LOST = "LOST"
    OTHER = "OTHER"


@dataclass(frozen=True)
class ScanEvent:
    id: str
    order_id: str
    asset_id: str
    scan_type: ScanType
    quantity: int
    condition: AssetCondition
    scanned_by: str
    scanned_at: datetime
    notes: str | None = None
    discrepancy_reason: DiscrepancyReason | None = None
    photos: tuple[str, ...] = field(default_factory=tuple)


def scanned_quantity(events: list[ScanEvent], asset_id: str, scan_type: ScanType) -> int:
    return sum(
        e.quantity for e in events
        if e.asset_id == asset_id and e.scan_type == scan_type
    )
