"""JSON-document implementation of OrderRepository."""

from __future__ import annotations

from decimal import Decimal

from ofe.domain.exceptions import ConflictError
from ofe.domain.model.order import (
    Contact,
    FinancialStatus,
    MaintenanceDecision,
    Order,
    OrderItem,
    OrderStatus,
    StatusHistoryEntry,
    TimeWindow,
    Venue,
)
from ofe.domain.model.pricing import TripType, VehicleType
from ofe.domain.repository.order_repository import OrderRepository
from ofe.infrastructure.persistence.codec import (
    date_from_raw,
    date_to_raw,
    datetime_from_raw,
    datetime_to_raw,
)
from ofe.infrastructure.persistence.json_store import JsonTable
from ofe.infrastructure.persistence.pricing_snapshot import (
    breakdown_from_raw,
    breakdown_to_raw,
)


class JsonOrderRepository(JsonTable, OrderRepository):
    table = "orders"

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: str) -> Order | None:
        raw = self._find_raw("id", order_id)
        return self._to_domain(raw) if raw else None

    def list_by_status(self, statuses) -> list[Order]:
        wanted = {s.value for s in statuses}
        return [
            self._to_domain(raw)
            for raw in self._rows
            if raw["order_status"] in wanted and raw.get("deleted_at") is None
        ]

    def codes_with_prefix(self, prefix: str) -> list[str]:
        return [raw["order_code"] for raw in self._rows if raw["order_code"].startswith(prefix)]

    def save(self, order: Order) -> None:
        for raw in self._rows:
            if raw["order_code"] == order.order_code and raw["id"] != order.id:
                raise ConflictError(f"Order code {order.order_code} is already in use")
        self._upsert(self._to_raw(order))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "platform_id": order.platform_id,
            "order_code": order.order_code,
            "company_id": order.company_id,
            "requester_id": order.requester_id,
            "brand_id": order.brand_id,
            "contact": {
                "name": order.contact.name,
                "email": order.contact.email,
                "phone": order.contact.phone,
            },
            "event_start_date": date_to_raw(order.event_start_date),
            "event_end_date": date_to_raw(order.event_end_date),
            "venue": {
                "name": order.venue.name,
                "city_id": order.venue.city_id,
                "city_name": order.venue.city_name,
                "address": order.venue.address,
            },
            "trip_type": order.trip_type.value,
            "vehicle_type": order.vehicle_type.value,
            "order_status": order.order_status.value,
            "financial_status": order.financial_status.value,
            "job_number": order.job_number,
            "delivery_window": _window_to_raw(order.delivery_window),
            "pickup_window": _window_to_raw(order.pickup_window),
            "pricing": breakdown_to_raw(order.pricing),
            "tier_id": order.tier_id,
            "created_at": datetime_to_raw(order.created_at),
            "deleted_at": datetime_to_raw(order.deleted_at),
            "items": [
                {
                    "id": item.id,
                    "asset_id": item.asset_id,
                    "asset_name": item.asset_name,
                    "quantity": item.quantity,
                    "volume_per_unit": str(item.volume_per_unit),
                    "weight_per_unit": str(item.weight_per_unit),
                    "from_collection_id": item.from_collection_id,
                    "is_reskin_request": item.is_reskin_request,
                    "reskin_target_brand_id": item.reskin_target_brand_id,
                    "reskin_target_brand_custom": item.reskin_target_brand_custom,
                    "reskin_notes": item.reskin_notes,
                    "maintenance_decision": (
                        item.maintenance_decision.value if item.maintenance_decision else None
                    ),
                    "refurb_days_snapshot": item.refurb_days_snapshot,
                }
                for item in order.items
            ],
            "status_history": [_history_to_raw(h) for h in order.status_history],
            "financial_history": [_history_to_raw(h) for h in order.financial_history],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        items = [
            OrderItem(
                id=i["id"],
                asset_id=i["asset_id"],
                asset_name=i["asset_name"],
                quantity=i["quantity"],
                volume_per_unit=Decimal(i["volume_per_unit"]),
                weight_per_unit=Decimal(i["weight_per_unit"]),
                from_collection_id=i.get("from_collection_id"),
                is_reskin_request=i.get("is_reskin_request", False),
                reskin_target_brand_id=i.get("reskin_target_brand_id"),
                reskin_target_brand_custom=i.get("reskin_target_brand_custom"),
                reskin_notes=i.get("reskin_notes"),
                maintenance_decision=(
                    MaintenanceDecision(i["maintenance_decision"])
                    if i.get("maintenance_decision")
                    else None
                ),
                refurb_days_snapshot=i.get("refurb_days_snapshot"),
            )
            for i in raw["items"]
        ]
        contact = raw["contact"]
        venue = raw["venue"]
        return Order(
            id=raw["id"],
            platform_id=raw["platform_id"],
            order_code=raw["order_code"],
            company_id=raw["company_id"],
            requester_id=raw["requester_id"],
            contact=Contact(contact["name"], contact["email"], contact.get("phone", "")),
            event_start_date=date_from_raw(raw["event_start_date"]),
            event_end_date=date_from_raw(raw["event_end_date"]),
            venue=Venue(
                name=venue["name"],
                city_id=venue.get("city_id"),
                city_name=venue.get("city_name", ""),
                address=venue.get("address", ""),
            ),
            items=items,
            created_at=datetime_from_raw(raw["created_at"]),
            trip_type=TripType(raw.get("trip_type", TripType.ROUND_TRIP.value)),
            vehicle_type=VehicleType(raw.get("vehicle_type", VehicleType.STANDARD.value)),
            brand_id=raw.get("brand_id"),
            order_status=OrderStatus(raw["order_status"]),
            financial_status=FinancialStatus(raw["financial_status"]),
            job_number=raw.get("job_number"),
            delivery_window=_window_from_raw(raw.get("delivery_window")),
            pickup_window=_window_from_raw(raw.get("pickup_window")),
            pricing=breakdown_from_raw(raw.get("pricing")),
            tier_id=raw.get("tier_id"),
            status_history=[
                _history_from_raw(h, OrderStatus) for h in raw.get("status_history", [])
            ],
            financial_history=[
                _history_from_raw(h, FinancialStatus) for h in raw.get("financial_history", [])
            ],
            deleted_at=datetime_from_raw(raw.get("deleted_at")),
        )


def _history_to_raw(entry: StatusHistoryEntry) -> dict:
    return {
        "status": entry.status.value,
        "notes": entry.notes,
        "updated_by": entry.updated_by,
        "timestamp": datetime_to_raw(entry.timestamp),
    }


def _history_from_raw(raw: dict, status_type) -> StatusHistoryEntry:
    return StatusHistoryEntry(
        status=status_type(raw["status"]),
        notes=raw.get("notes"),
        updated_by=raw["updated_by"],
        timestamp=datetime_from_raw(raw["timestamp"]),
    )


def _window_to_raw(window: TimeWindow | None) -> dict | None:
    if window is None:
        return None
    return {"start": datetime_to_raw(window.start), "end": datetime_to_raw(window.end)}


def _window_from_raw(raw: dict | None) -> TimeWindow | None:
    if raw is None:
        return None
    return TimeWindow(datetime_from_raw(raw["start"]), datetime_from_raw(raw["end"]))
