"""JSON-document implementation of LineItemRepository."""

from __future__ import annotations

from ofe.domain.exceptions import ConflictError
from ofe.domain.model.line_item import (
    BillingMode,
    LineItemCategory,
    LineItemType,
    OrderLineItem,
)
from ofe.domain.repository.line_item_repository import LineItemRepository
from ofe.infrastructure.persistence.codec import (
    datetime_from_raw,
    datetime_to_raw,
    decimal_from_raw,
    decimal_to_raw,
    money_from_raw,
    money_to_raw,
)
from ofe.infrastructure.persistence.json_store import JsonTable


class JsonLineItemRepository(JsonTable, LineItemRepository):
    table = "line_items"

    def get_by_id(self, line_item_id: str) -> OrderLineItem | None:
        raw = self._find_raw("id", line_item_id)
        return self._to_domain(raw) if raw else None

    def list_for_order(self, order_id: str) -> list[OrderLineItem]:
        return [self._to_domain(raw) for raw in self._rows if raw["order_id"] == order_id]

    def get_by_reskin_request(self, reskin_request_id: str) -> OrderLineItem | None:
        raw = self._find_raw("reskin_request_id", reskin_request_id)
        return self._to_domain(raw) if raw else None

    def codes_for_platform(self, platform_id: str) -> list[str]:
        return [raw["line_item_code"] for raw in self._rows if raw["platform_id"] == platform_id]

    def save(self, line_item: OrderLineItem) -> None:
        for raw in self._rows:
            if (
                raw["platform_id"] == line_item.platform_id
                and raw["line_item_code"] == line_item.line_item_code
                and raw["id"] != line_item.id
            ):
                raise ConflictError(f"Line item code {line_item.line_item_code} is already in use")
        self._upsert(self._to_raw(line_item))

    @staticmethod
    def _to_raw(item: OrderLineItem) -> dict:
        return {
            "id": item.id,
            "platform_id": item.platform_id,
            "order_id": item.order_id,
            "line_item_code": item.line_item_code,
            "line_item_type": item.line_item_type.value,
            "category": item.category.value,
            "description": item.description,
            "total": money_to_raw(item.total),
            "added_by": item.added_by,
            "added_at": datetime_to_raw(item.added_at),
            "quantity": decimal_to_raw(item.quantity),
            "unit": item.unit,
            "unit_rate": money_to_raw(item.unit_rate),
            "service_type_id": item.service_type_id,
            "reskin_request_id": item.reskin_request_id,
            "billing_mode": item.billing_mode.value,
            "notes": item.notes,
            "is_voided": item.is_voided,
            "voided_at": datetime_to_raw(item.voided_at),
            "voided_by": item.voided_by,
            "void_reason": item.void_reason,
        }

    @staticmethod
    def _to_domain(raw: dict) -> OrderLineItem:
        return OrderLineItem(
            id=raw["id"],
            platform_id=raw["platform_id"],
            order_id=raw["order_id"],
            line_item_code=raw["line_item_code"],
            line_item_type=LineItemType(raw["line_item_type"]),
            category=LineItemCategory(raw["category"]),
            description=raw["description"],
            total=money_from_raw(raw["total"]),
            added_by=raw["added_by"],
            added_at=datetime_from_raw(raw["added_at"]),
            quantity=decimal_from_raw(raw.get("quantity")),
            unit=raw.get("unit"),
            unit_rate=money_from_raw(raw.get("unit_rate")),
            service_type_id=raw.get("service_type_id"),
            reskin_request_id=raw.get("reskin_request_id"),
            billing_mode=BillingMode(raw.get("billing_mode", BillingMode.BILLABLE.value)),
            notes=raw.get("notes"),
            is_voided=raw.get("is_voided", False),
            voided_at=datetime_from_raw(raw.get("voided_at")),
            voided_by=raw.get("voided_by"),
            void_reason=raw.get("void_reason"),
        )
