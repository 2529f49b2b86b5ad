"""JSON-document implementation of ReskinRepository."""

from __future__ import annotations

from ofe.domain.model.reskin import ReskinRequest
from ofe.domain.repository.reskin_repository import ReskinRepository
from ofe.infrastructure.persistence.codec import datetime_from_raw, datetime_to_raw
from ofe.infrastructure.persistence.json_store import JsonTable

_TIMESTAMPS = ("created_at", "completed_at", "cancelled_at")


class JsonReskinRepository(JsonTable, ReskinRepository):
    table = "reskins"

    def get_by_id(self, reskin_id: str) -> ReskinRequest | None:
        raw = self._find_raw("id", reskin_id)
        return self._to_domain(raw) if raw else None

    def get_by_order_item(self, order_item_id: str) -> ReskinRequest | None:
        raw = self._find_raw("order_item_id", order_item_id)
        return self._to_domain(raw) if raw else None

    def list_for_order(self, order_id: str) -> list[ReskinRequest]:
        return [self._to_domain(raw) for raw in self._rows if raw["order_id"] == order_id]

    def save(self, reskin: ReskinRequest) -> None:
        self._upsert(self._to_raw(reskin))

    @staticmethod
    def _to_raw(reskin: ReskinRequest) -> dict:
        raw = {
            "id": reskin.id,
            "platform_id": reskin.platform_id,
            "order_id": reskin.order_id,
            "order_item_id": reskin.order_item_id,
            "original_asset_id": reskin.original_asset_id,
            "original_asset_name": reskin.original_asset_name,
            "client_notes": reskin.client_notes,
            "target_brand_id": reskin.target_brand_id,
            "target_brand_custom": reskin.target_brand_custom,
            "admin_notes": reskin.admin_notes,
            "new_asset_id": reskin.new_asset_id,
            "new_asset_name": reskin.new_asset_name,
            "completion_photos": list(reskin.completion_photos),
            "completion_notes": reskin.completion_notes,
            "completed_by": reskin.completed_by,
            "cancelled_by": reskin.cancelled_by,
            "cancellation_reason": reskin.cancellation_reason,
        }
        for key in _TIMESTAMPS:
            raw[key] = datetime_to_raw(getattr(reskin, key))
        return raw

    @staticmethod
    def _to_domain(raw: dict) -> ReskinRequest:
        fields = dict(raw)
        for key in _TIMESTAMPS:
            fields[key] = datetime_from_raw(raw.get(key))
        fields["completion_photos"] = list(raw.get("completion_photos", []))
        return ReskinRequest(**fields)
