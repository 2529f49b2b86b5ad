"""JSON-document implementation of ScanRepository (append-only)."""

from __future__ import annotations

from ofe.domain.model.asset import AssetCondition
from ofe.domain.model.scan import DiscrepancyReason, ScanEvent, ScanType
from ofe.domain.repository.scan_repository import ScanRepository
from ofe.infrastructure.persistence.codec import datetime_from_raw, datetime_to_raw
from ofe.infrastructure.persistence.json_store import JsonTable


class JsonScanRepository(JsonTable, ScanRepository):
    table = "scans"

    def list_for_order(self, order_id: str, scan_type: ScanType | None = None) -> list[ScanEvent]:
        return [
            self._to_domain(raw)
            for raw in self._rows
            if raw["order_id"] == order_id
            and (scan_type is None or raw["scan_type"] == scan_type.value)
        ]

    def add(self, event: ScanEvent) -> None:
        self._rows.append(self._to_raw(event))

    @staticmethod
    def _to_raw(event: ScanEvent) -> dict:
        return {
            "id": event.id,
            "order_id": event.order_id,
            "asset_id": event.asset_id,
            "scan_type": event.scan_type.value,
            "quantity": event.quantity,
            "condition": event.condition.value,
            "scanned_by": event.scanned_by,
            "scanned_at": datetime_to_raw(event.scanned_at),
            "notes": event.notes,
            "discrepancy_reason": (
                event.discrepancy_reason.value if event.discrepancy_reason else None
            ),
            "photos": list(event.photos),
        }

    @staticmethod
    def _to_domain(raw: dict) -> ScanEvent:
        return ScanEvent(
            id=raw["id"],
            order_id=raw["order_id"],
            asset_id=raw["asset_id"],
            scan_type=ScanType(raw["scan_type"]),
            quantity=raw["quantity"],
            condition=AssetCondition(raw["condition"]),
            scanned_by=raw["scanned_by"],
            scanned_at=datetime_from_raw(raw["scanned_at"]),
            notes=raw.get("notes"),
            discrepancy_reason=(
                DiscrepancyReason(raw["discrepancy_reason"])
                if raw.get("discrepancy_reason")
                else None
            ),
            photos=tuple(raw.get("photos", ())),
        )
