"""Rate tables and the typed pricing snapshot.

Rate rows with ``company_id is None`` are platform defaults; a row with a
company id overrides the default for that company.

The pricing snapshot stored on an order is one of two versioned value
objects: ``EstimateBreakdown`` (computed at submission, no line items) or
``PricingBreakdown`` (computed during review, line items folded in).  All
figures on a breakdown are already rounded for output.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from ofe.domain.model.line_item import LineItemCategory, LineItemsTotals
from ofe.domain.model.value_objects import Money

PRICING_SCHEMA_VERSION = 1


class TripType(Enum):
    ONE_WAY = "ONE_WAY"
    ROUND_TRIP = "ROUND_TRIP"


class VehicleType(Enum):
    STANDARD = "STANDARD"
    SEVEN_TON = "7_TON"
    TEN_TON = "10_TON"


@dataclass(frozen=True)
class PricingConfig:
    platform_id: str
    warehouse_ops_rate: Money
    company_id: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class TransportRate:
    platform_id: str
    region: str
    trip_type: TripType
    vehicle_type: VehicleType
    rate: Money
    company_id: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class ServiceType:
    id: str
    platform_id: str
    name: str
    category: LineItemCategory
    unit: str
    default_rate: Money
    is_active: bool = True


@dataclass(frozen=True)
class City:
    id: str
    platform_id: str
    name: str
    region: str


# --- Snapshot value objects ---------------------------------------------------


@dataclass(frozen=True)
class BaseOperations:
    volume: Decimal
    rate: Money
    total: Money


@dataclass(frozen=True)
class TransportCharge:
    region: str
    trip_type: TripType
    vehicle_type: VehicleType
    system_rate: Money
    final_rate: Money
    vehicle_changed: bool = False
    vehicle_change_reason: str | None = None


@dataclass(frozen=True)
class Margin:
    percent: Decimal
    amount: Money
    is_override: bool = False
    override_reason: str | None = None


@dataclass(frozen=True)
class EstimateBreakdown:
    base_operations: BaseOperations
    transport: TransportCharge
    logistics_subtotal: Money
    margin: Margin
    estimate_total: Money
    calculated_at: datetime
    calculated_by: str
    schema_version: int = PRICING_SCHEMA_VERSION
    kind: str = "estimate"

    @property
    def total(self) -> Money:
        return self.estimate_total


@dataclass(frozen=True)
class PricingBreakdown:
    base_operations: BaseOperations
    transport: TransportCharge
    line_items: LineItemsTotals
    logistics_subtotal: Money
    margin: Margin
    final_total: Money
    calculated_at: datetime
    calculated_by: str
    schema_version: int = PRICING_SCHEMA_VERSION
    kind: str = "full"

    @property
    def total(self) -> Money:
        return self.final_total


Breakdown = EstimateBreakdown | PricingBreakdown
