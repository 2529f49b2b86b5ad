"""JSON-document implementations of the booking repositories."""

from __future__ import annotations

from ofe.domain.model.booking import (
    AssetBooking,
    SelfBooking,
    SelfBookingItem,
    SelfBookingItemStatus,
    SelfBookingStatus,
)
from ofe.domain.repository.booking_repository import BookingRepository
from ofe.domain.repository.self_booking_repository import SelfBookingRepository
from ofe.infrastructure.persistence.codec import (
    date_from_raw,
    date_to_raw,
    datetime_from_raw,
    datetime_to_raw,
)
from ofe.infrastructure.persistence.json_store import JsonTable


class JsonBookingRepository(JsonTable, BookingRepository):
    table = "bookings"

    def list_for_asset(self, asset_id: str) -> list[AssetBooking]:
        return [self._to_domain(raw) for raw in self._rows if raw["asset_id"] == asset_id]

    def list_for_order(self, order_id: str) -> list[AssetBooking]:
        return [self._to_domain(raw) for raw in self._rows if raw["order_id"] == order_id]

    def save(self, booking: AssetBooking) -> None:
        self._upsert(self._to_raw(booking))

    def delete_for_order(self, order_id: str) -> list[AssetBooking]:
        deleted = self.list_for_order(order_id)
        self._document[self.table] = [raw for raw in self._rows if raw["order_id"] != order_id]
        return deleted

    @staticmethod
    def _to_raw(booking: AssetBooking) -> dict:
        return {
            "id": booking.id,
            "asset_id": booking.asset_id,
            "order_id": booking.order_id,
            "quantity": booking.quantity,
            "blocked_from": date_to_raw(booking.blocked_from),
            "blocked_until": date_to_raw(booking.blocked_until),
        }

    @staticmethod
    def _to_domain(raw: dict) -> AssetBooking:
        return AssetBooking(
            id=raw["id"],
            asset_id=raw["asset_id"],
            order_id=raw["order_id"],
            quantity=raw["quantity"],
            blocked_from=date_from_raw(raw["blocked_from"]),
            blocked_until=date_from_raw(raw["blocked_until"]),
        )


class JsonSelfBookingRepository(JsonTable, SelfBookingRepository):
    table = "self_bookings"

    def get_by_id(self, self_booking_id: str) -> SelfBooking | None:
        raw = self._find_raw("id", self_booking_id)
        return self._to_domain(raw) if raw else None

    def list_active_for_asset(self, asset_id: str) -> list[SelfBooking]:
        return [
            self._to_domain(raw)
            for raw in self._rows
            if raw["status"] == SelfBookingStatus.ACTIVE.value
            and any(i["asset_id"] == asset_id for i in raw["items"])
        ]

    def save(self, self_booking: SelfBooking) -> None:
        self._upsert(self._to_raw(self_booking))

    @staticmethod
    def _to_raw(sb: SelfBooking) -> dict:
        return {
            "id": sb.id,
            "platform_id": sb.platform_id,
            "booked_for": sb.booked_for,
            "created_by": sb.created_by,
            "created_at": datetime_to_raw(sb.created_at),
            "reason": sb.reason,
            "job_reference": sb.job_reference,
            "notes": sb.notes,
            "status": sb.status.value,
            "completed_at": datetime_to_raw(sb.completed_at),
            "cancelled_at": datetime_to_raw(sb.cancelled_at),
            "cancelled_by": sb.cancelled_by,
            "items": [
                {
                    "asset_id": item.asset_id,
                    "quantity": item.quantity,
                    "returned_quantity": item.returned_quantity,
                    "status": item.status.value,
                    "returned_at": datetime_to_raw(item.returned_at),
                }
                for item in sb.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> SelfBooking:
        return SelfBooking(
            id=raw["id"],
            platform_id=raw["platform_id"],
            booked_for=raw["booked_for"],
            created_by=raw["created_by"],
            created_at=datetime_from_raw(raw["created_at"]),
            items=[
                SelfBookingItem(
                    asset_id=i["asset_id"],
                    quantity=i["quantity"],
                    returned_quantity=i.get("returned_quantity", 0),
                    status=SelfBookingItemStatus(i["status"]),
                    returned_at=datetime_from_raw(i.get("returned_at")),
                )
                for i in raw["items"]
            ],
            reason=raw.get("reason"),
            job_reference=raw.get("job_reference"),
            notes=raw.get("notes"),
            status=SelfBookingStatus(raw["status"]),
            completed_at=datetime_from_raw(raw.get("completed_at")),
            cancelled_at=datetime_from_raw(raw.get("cancelled_at")),
            cancelled_by=raw.get("cancelled_by"),
        )
