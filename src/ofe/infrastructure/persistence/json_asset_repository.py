"""JSON-document implementation of AssetRepository."""

from __future__ import annotations

from decimal import Decimal

from ofe.domain.exceptions import ConflictError
from ofe.domain.model.asset import (
    Asset,
    AssetCondition,
    AssetStatus,
    ConditionHistoryEntry,
    TrackingMethod,
)
from ofe.domain.repository.asset_repository import AssetRepository
from ofe.infrastructure.persistence.codec import datetime_from_raw, datetime_to_raw
from ofe.infrastructure.persistence.json_store import JsonTable


class JsonAssetRepository(JsonTable, AssetRepository):
    table = "assets"

    # --- AssetRepository interface --------------------------------------------

    def get_by_id(self, asset_id: str) -> Asset | None:
        raw = self._find_raw("id", asset_id)
        return self._to_domain(raw) if raw else None

    def get_by_qr_code(self, qr_code: str) -> Asset | None:
        raw = self._find_raw("qr_code", qr_code)
        return self._to_domain(raw) if raw else None

    def list_by_platform(self, platform_id: str) -> list[Asset]:
        return [
            self._to_domain(raw)
            for raw in self._rows
            if raw["platform_id"] == platform_id and raw.get("deleted_at") is None
        ]

    def save(self, asset: Asset) -> None:
        for raw in self._rows:
            if raw["qr_code"] == asset.qr_code and raw["id"] != asset.id:
                raise ConflictError(f"QR code '{asset.qr_code}' is already in use")
        self._upsert(self._to_raw(asset))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(asset: Asset) -> dict:
        return {
            "id": asset.id,
            "platform_id": asset.platform_id,
            "company_id": asset.company_id,
            "name": asset.name,
            "qr_code": asset.qr_code,
            "total_quantity": asset.total_quantity,
            "available_quantity": asset.available_quantity,
            "tracking_method": asset.tracking_method.value,
            "volume_per_unit": str(asset.volume_per_unit),
            "weight_per_unit": str(asset.weight_per_unit),
            "condition": asset.condition.value,
            "status": asset.status.value,
            "brand_id": asset.brand_id,
            "category": asset.category,
            "description": asset.description,
            "dimensions": asset.dimensions,
            "packaging": asset.packaging,
            "handling_tags": list(asset.handling_tags),
            "images": list(asset.images),
            "condition_notes": asset.condition_notes,
            "refurb_days_estimate": asset.refurb_days_estimate,
            "transformed_from": asset.transformed_from,
            "transformed_to": asset.transformed_to,
            "condition_history": [
                {
                    "condition": h.condition.value,
                    "notes": h.notes,
                    "updated_by": h.updated_by,
                    "timestamp": datetime_to_raw(h.timestamp),
                    "photos": list(h.photos),
                }
                for h in asset.condition_history
            ],
            "last_scanned_at": datetime_to_raw(asset.last_scanned_at),
            "last_scanned_by": asset.last_scanned_by,
            "deleted_at": datetime_to_raw(asset.deleted_at),
        }

    @staticmethod
    def _to_domain(raw: dict) -> Asset:
        return Asset(
            id=raw["id"],
            platform_id=raw["platform_id"],
            company_id=raw["company_id"],
            name=raw["name"],
            qr_code=raw["qr_code"],
            total_quantity=raw["total_quantity"],
            available_quantity=raw["available_quantity"],
            tracking_method=TrackingMethod(raw["tracking_method"]),
            volume_per_unit=Decimal(raw["volume_per_unit"]),
            weight_per_unit=Decimal(raw["weight_per_unit"]),
            condition=AssetCondition(raw["condition"]),
            status=AssetStatus(raw["status"]),
            brand_id=raw.get("brand_id"),
            category=raw.get("category", ""),
            description=raw.get("description", ""),
            dimensions=raw.get("dimensions") or {},
            packaging=raw.get("packaging"),
            handling_tags=list(raw.get("handling_tags", [])),
            images=list(raw.get("images", [])),
            condition_notes=raw.get("condition_notes"),
            refurb_days_estimate=raw.get("refurb_days_estimate"),
            transformed_from=raw.get("transformed_from"),
            transformed_to=raw.get("transformed_to"),
            condition_history=[
                ConditionHistoryEntry(
                    condition=AssetCondition(h["condition"]),
                    notes=h.get("notes"),
                    updated_by=h["updated_by"],
                    timestamp=datetime_from_raw(h["timestamp"]),
                    photos=tuple(h.get("photos", ())),
                )
                for h in raw.get("condition_history", [])
            ],
            last_scanned_at=datetime_from_raw(raw.get("last_scanned_at")),
            last_scanned_by=raw.get("last_scanned_by"),
            deleted_at=datetime_from_raw(raw.get("deleted_at")),
        )
