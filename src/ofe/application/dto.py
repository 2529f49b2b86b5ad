"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without exposing
domain internals.  Money is formatted (``"AED 920.00"``), dates are ISO
strings, enums are their values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from ofe.domain.model.asset import Asset
from ofe.domain.model.booking import SelfBooking
from ofe.domain.model.line_item import OrderLineItem
from ofe.domain.model.order import MaintenanceDecision, Order
from ofe.domain.model.pricing import Breakdown, PricingBreakdown, TripType
from ofe.domain.model.reskin import ReskinRequest


# --- Inputs -------------------------------------------------------------------


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: one requested asset."""

    asset_id: str
    quantity: int
    maintenance_decision: MaintenanceDecision | None = None
    from_collection_id: str | None = None
    is_reskin_request: bool = False
    reskin_target_brand_id: str | None = None
    reskin_target_brand_custom: str | None = None
    reskin_notes: str | None = None


@dataclass(frozen=True)
class CreateOrderSpec:
    """Input: everything a client submits with a new order."""

    event_start_date: date
    event_end_date: date
    venue_name: str
    venue_city_name: str
    contact_name: str
    contact_email: str
    items: list[OrderItemSpec]
    venue_city_id: str | None = None
    venue_address: str = ""
    contact_phone: str = ""
    trip_type: TripType = TripType.ROUND_TRIP
    brand_id: str | None = None
    company_id: str | None = None


# --- Outputs ------------------------------------------------------------------


@dataclass(frozen=True)
class OrderItemDTO:
    id: str
    asset_id: str
    asset_name: str
    quantity: int
    total_volume: str
    is_reskin_request: bool
    maintenance_decision: str | None


@dataclass(frozen=True)
class HistoryDTO:
    status: str
    notes: str | None
    updated_by: str
    timestamp: str


@dataclass(frozen=True)
class PricingDTO:
    kind: str
    base_operations: str
    transport: str
    region: str
    vehicle_type: str
    catalog_total: str
    custom_total: str
    logistics_subtotal: str
    margin_percent: str
    margin_amount: str
    total: str


@dataclass(frozen=True)
class OrderDTO:
    id: str
    order_code: str
    platform_id: str
    company_id: str
    order_status: str
    financial_status: str
    event_start_date: str
    event_end_date: str
    venue: str
    trip_type: str
    vehicle_type: str
    total_volume: str
    total_weight: str
    items: list[OrderItemDTO]
    pricing: PricingDTO | None
    job_number: str | None
    status_history: list[HistoryDTO] = field(default_factory=list)
    financial_history: list[HistoryDTO] = field(default_factory=list)


@dataclass(frozen=True)
class LineItemDTO:
    id: str
    line_item_code: str
    line_item_type: str
    category: str
    description: str
    quantity: str | None
    unit: str | None
    unit_rate: str | None
    total: str
    billing_mode: str
    is_voided: bool
    void_reason: str | None


@dataclass(frozen=True)
class AssetDTO:
    id: str
    name: str
    qr_code: str
    tracking_method: str
    total_quantity: int
    available_quantity: int
    condition: str
    status: str
    refurb_days_estimate: int | None
    transformed_from: str | None
    transformed_to: str | None


@dataclass(frozen=True)
class ReskinDTO:
    id: str
    order_item_id: str
    original_asset_id: str
    original_asset_name: str
    target_brand: str
    status: str
    new_asset_id: str | None
    new_asset_name: str | None
    cancellation_reason: str | None


@dataclass(frozen=True)
class ScanProgressItemDTO:
    asset_id: str
    asset_name: str
    required_quantity: int
    scanned_quantity: int
    is_complete: bool


@dataclass(frozen=True)
class ScanProgressDTO:
    order_id: str
    order_status: str
    items_scanned: int
    total_items: int
    percent_complete: int
    items: list[ScanProgressItemDTO] = field(default_factory=list)


@dataclass(frozen=True)
class SelfBookingDTO:
    id: str
    booked_for: str
    status: str
    items: list[tuple[str, int, int, str]]


# --- Mapping ------------------------------------------------------------------


def pricing_to_dto(pricing: Breakdown) -> PricingDTO:
    if isinstance(pricing, PricingBreakdown):
        catalog = str(pricing.line_items.catalog_total)
        custom = str(pricing.line_items.custom_total)
    else:
        catalog = custom = "-"
    return PricingDTO(
        kind=pricing.kind,
        base_operations=str(pricing.base_operations.total),
        transport=str(pricing.transport.final_rate),
        region=pricing.transport.region,
        vehicle_type=pricing.transport.vehicle_type.value,
        catalog_total=catalog,
        custom_total=custom,
        logistics_subtotal=str(pricing.logistics_subtotal),
        margin_percent=str(pricing.margin.percent),
        margin_amount=str(pricing.margin.amount),
        total=str(pricing.total),
    )


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,
        order_code=order.order_code,
        platform_id=order.platform_id,
        company_id=order.company_id,
        order_status=order.order_status.value,
        financial_status=order.financial_status.value,
        event_start_date=order.event_start_date.isoformat(),
        event_end_date=order.event_end_date.isoformat(),
        venue=f"{order.venue.name}, {order.venue.city_name}".strip(", "),
        trip_type=order.trip_type.value,
        vehicle_type=order.vehicle_type.value,
        total_volume=str(order.total_volume),
        total_weight=str(order.total_weight),
        items=[
            OrderItemDTO(
                id=item.id,
                asset_id=item.asset_id,
                asset_name=item.asset_name,
                quantity=item.quantity,
                total_volume=str(item.total_volume),
                is_reskin_request=item.is_reskin_request,
                maintenance_decision=(
                    item.maintenance_decision.value if item.maintenance_decision else None
                ),
            )
            for item in order.items
        ],
        pricing=pricing_to_dto(order.pricing) if order.pricing is not None else None,
        job_number=order.job_number,
        status_history=[
            HistoryDTO(h.status.value, h.notes, h.updated_by, h.timestamp.strftime("%Y-%m-%d %H:%M UTC"))
            for h in order.status_history
        ],
        financial_history=[
            HistoryDTO(h.status.value, h.notes, h.updated_by, h.timestamp.strftime("%Y-%m-%d %H:%M UTC"))
            for h in order.financial_history
        ],
    )


def line_item_to_dto(item: OrderLineItem) -> LineItemDTO:
    return LineItemDTO(
        id=item.id,
        line_item_code=item.line_item_code,
        line_item_type=item.line_item_type.value,
        category=item.category.value,
        description=item.description,
        quantity=str(item.quantity) if item.quantity is not None else None,
        unit=item.unit,
        unit_rate=str(item.unit_rate) if item.unit_rate is not None else None,
        total=str(item.total),
        billing_mode=item.billing_mode.value,
        is_voided=item.is_voided,
        void_reason=item.void_reason,
    )


def asset_to_dto(asset: Asset) -> AssetDTO:
    return AssetDTO(
        id=asset.id,
        name=asset.name,
        qr_code=asset.qr_code,
        tracking_method=asset.tracking_method.value,
        total_quantity=asset.total_quantity,
        available_quantity=asset.available_quantity,
        condition=asset.condition.value,
        status=asset.status.value,
        refurb_days_estimate=asset.refurb_days_estimate,
        transformed_from=asset.transformed_from,
        transformed_to=asset.transformed_to,
    )


def reskin_to_dto(reskin: ReskinRequest) -> ReskinDTO:
    return ReskinDTO(
        id=reskin.id,
        order_item_id=reskin.order_item_id,
        original_asset_id=reskin.original_asset_id,
        original_asset_name=reskin.original_asset_name,
        target_brand=reskin.target_brand_id or reskin.target_brand_label,
        status=reskin.status.value,
        new_asset_id=reskin.new_asset_id,
        new_asset_name=reskin.new_asset_name,
        cancellation_reason=reskin.cancellation_reason,
    )


def self_booking_to_dto(booking: SelfBooking) -> SelfBookingDTO:
    return SelfBookingDTO(
        id=booking.id,
        booked_for=booking.booked_for,
        status=booking.status.value,
        items=[
            (item.asset_id, item.quantity, item.returned_quantity, item.status.value)
            for item in booking.items
        ],
    )
