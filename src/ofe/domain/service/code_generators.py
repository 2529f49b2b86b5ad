"""Human-readable codes for orders and line items."""

from __future__ import annotations

from datetime import date

from ofe.domain.exceptions import ConflictError
from ofe.domain.repository.line_item_repository import LineItemRepository
from ofe.domain.repository.order_repository import OrderRepository

LINE_ITEM_CODE_PREFIX = "K-"
MAX_LINE_ITEM_SEQUENCE = 999_999


def _highest_sequence(codes: list[str], prefix: str) -> int:
    highest = 0
    for code in codes:
        suffix = code[len(prefix):]
        if code.startswith(prefix) and suffix.isdigit():
            highest = max(highest, int(suffix))
    return highest


def next_order_code(orders: OrderRepository, on: date) -> str:
    """``ORD-YYYYMMDD-NNN``; the sequence is shared by all platforms for a day."""
    prefix = f"ORD-{on:%Y%m%d}-"
    sequence = _highest_sequence(orders.codes_with_prefix(prefix), prefix) + 1
    return f"{prefix}{sequence:03d}"


def next_line_item_code(line_items: LineItemRepository, platform_id: str) -> str:
    """``K-NNNNNN``, sequenced per platform."""
    codes = line_items.codes_for_platform(platform_id)
    sequence = _highest_sequence(codes, LINE_ITEM_CODE_PREFIX) + 1
    if sequence > MAX_LINE_ITEM_SEQUENCE:
        raise ConflictError("Line item code sequence exhausted for this platform")
    return f"{LINE_ITEM_CODE_PREFIX}{sequence:06d}"
