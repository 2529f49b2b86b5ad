"""Scalar conversions shared by the JSON repositories.

Decimals and money amounts are stored as strings so no precision is lost;
datetimes and dates as ISO-8601.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from ofe.domain.model.value_objects import DEFAULT_CURRENCY, Money


def money_to_raw(money: Money | None) -> dict | None:
    if money is None:
        return None
    return {"amount": str(money.amount), "currency": money.currency}


def money_from_raw(raw: dict | None) -> Money | None:
    if raw is None:
        return None
    return Money(Decimal(raw["amount"]), raw.get("currency", DEFAULT_CURRENCY))


def decimal_to_raw(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


def decimal_from_raw(raw: str | None) -> Decimal | None:
    return None if raw is None else Decimal(raw)


def datetime_to_raw(value: datetime | None) -> str | None:
    return None if value is None else value.isoformat()


def datetime_from_raw(raw: str | None) -> datetime | None:
    return None if raw is None else datetime.fromisoformat(raw)


def date_to_raw(value: date | None) -> str | None:
    return None if value is None else value.isoformat()


def date_from_raw(raw: str | None) -> date | None:
    return None if raw is None else date.fromisoformat(raw)
