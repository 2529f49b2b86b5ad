"""(De)serialization of the versioned pricing snapshot stored on orders."""

from __future__ import annotations

from decimal import Decimal

from ofe.domain.model.line_item import LineItemsTotals
from ofe.domain.model.pricing import (
    PRICING_SCHEMA_VERSION,
    BaseOperations,
    Breakdown,
    EstimateBreakdown,
    Margin,
    PricingBreakdown,
    TransportCharge,
    TripType,
    VehicleType,
)
from ofe.infrastructure.persistence.codec import (
    datetime_from_raw,
    datetime_to_raw,
    money_from_raw,
    money_to_raw,
)


class UnsupportedSnapshotError(ValueError):
    pass


def breakdown_to_raw(breakdown: Breakdown | None) -> dict | None:
    if breakdown is None:
        return None
    base = breakdown.base_operations
    transport = breakdown.transport
    margin = breakdown.margin
    raw = {
        "schema_version": breakdown.schema_version,
        "kind": breakdown.kind,
        "base_operations": {
            "volume": str(base.volume),
            "rate": money_to_raw(base.rate),
            "total": money_to_raw(base.total),
        },
        "transport": {
            "region": transport.region,
            "trip_type": transport.trip_type.value,
            "vehicle_type": transport.vehicle_type.value,
            "system_rate": money_to_raw(transport.system_rate),
            "final_rate": money_to_raw(transport.final_rate),
            "vehicle_changed": transport.vehicle_changed,
            "vehicle_change_reason": transport.vehicle_change_reason,
        },
        "logistics_subtotal": money_to_raw(breakdown.logistics_subtotal),
        "margin": {
            "percent": str(margin.percent),
            "amount": money_to_raw(margin.amount),
            "is_override": margin.is_override,
            "override_reason": margin.override_reason,
        },
        "calculated_at": datetime_to_raw(breakdown.calculated_at),
        "calculated_by": breakdown.calculated_by,
    }
    if isinstance(breakdown, PricingBreakdown):
        raw["line_items"] = {
            "catalog_total": money_to_raw(breakdown.line_items.catalog_total),
            "custom_total": money_to_raw(breakdown.line_items.custom_total),
        }
        raw["final_total"] = money_to_raw(breakdown.final_total)
    else:
        raw["estimate_total"] = money_to_raw(breakdown.estimate_total)
    return raw


def breakdown_from_raw(raw: dict | None) -> Breakdown | None:
    if raw is None:
        return None
    version = raw.get("schema_version", PRICING_SCHEMA_VERSION)
    if version != PRICING_SCHEMA_VERSION:
        raise UnsupportedSnapshotError(f"Unsupported pricing snapshot version {version}")

    b, t, m = raw["base_operations"], raw["transport"], raw["margin"]
    base = BaseOperations(
        volume=Decimal(b["volume"]),
        rate=money_from_raw(b["rate"]),
        total=money_from_raw(b["total"]),
    )
    transport = TransportCharge(
        region=t["region"],
        trip_type=TripType(t["trip_type"]),
        vehicle_type=VehicleType(t["vehicle_type"]),
        system_rate=money_from_raw(t["system_rate"]),
        final_rate=money_from_raw(t["final_rate"]),
        vehicle_changed=t.get("vehicle_changed", False),
        vehicle_change_reason=t.get("vehicle_change_reason"),
    )
    margin = Margin(
        percent=Decimal(m["percent"]),
        amount=money_from_raw(m["amount"]),
        is_override=m.get("is_override", False),
        override_reason=m.get("override_reason"),
    )

    if raw.get("kind") == "full":
        return PricingBreakdown(
            base_operations=base,
            transport=transport,
            line_items=LineItemsTotals(
                catalog_total=money_from_raw(raw["line_items"]["catalog_total"]),
                custom_total=money_from_raw(raw["line_items"]["custom_total"]),
            ),
            logistics_subtotal=money_from_raw(raw["logistics_subtotal"]),
            margin=margin,
            final_total=money_from_raw(raw["final_total"]),
            calculated_at=datetime_from_raw(raw["calculated_at"]),
            calculated_by=raw["calculated_by"],
            schema_version=version,
        )
    return EstimateBreakdown(
        base_operations=base,
        transport=transport,
        logistics_subtotal=money_from_raw(raw["logistics_subtotal"]),
        margin=margin,
        estimate_total=money_from_raw(raw["estimate_total"]),
        calculated_at=datetime_from_raw(raw["calculated_at"]),
        calculated_by=raw["calculated_by"],
        schema_version=version,
    )
