"""Per-platform business parameters.

Stored as data (one row per platform) rather than process configuration,
since every tenant tunes its own lead time and margin.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal

from ofe.domain.model.value_objects import DEFAULT_CURRENCY

DEFAULT_MINIMUM_LEAD_HOURS = 24
DEFAULT_WEEKEND_DAYS = frozenset({6, 7})  # ISO weekday: Saturday, Sunday
DEFAULT_TIMEZONE = "Asia/Dubai"
DEFAULT_MARGIN_PERCENT = Decimal("25")


def non_negative_number(value: object, default: float) -> float:
    """Numbers and numeric strings pass through as floats; anything else is *default*."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return default
    try:
        number = float(value)
    except ValueError:
        return default
    if not math.isfinite(number) or number < 0:
        return default
    return number


@dataclass(frozen=True)
class FeasibilityConfig:
    """Maintenance lead-time parameters.

    Build with ``FeasibilityConfig.from_raw()`` when the values come from
    stored data: anything malformed falls back to the default for that key.
    """

    minimum_lead_hours: float = DEFAULT_MINIMUM_LEAD_HOURS
    exclude_weekends: bool = True
    weekend_days: frozenset[int] = DEFAULT_WEEKEND_DAYS
    timezone: str = DEFAULT_TIMEZONE

    @staticmethod
    def from_raw(raw: dict | None) -> FeasibilityConfig:
        raw = raw or {}

        lead = non_negative_number(raw.get("minimum_lead_hours"), DEFAULT_MINIMUM_LEAD_HOURS)

        exclude = raw.get("exclude_weekends")
        if not isinstance(exclude, bool):
            exclude = True

        days = raw.get("weekend_days")
        if (
            isinstance(days, (list, tuple, set, frozenset))
            and days
            and all(isinstance(d, int) and not isinstance(d, bool) and 1 <= d <= 7 for d in days)
        ):
            weekend = frozenset(days)
        else:
            weekend = DEFAULT_WEEKEND_DAYS

        tz = raw.get("timezone")
        if not isinstance(tz, str) or not tz.strip():
            tz = DEFAULT_TIMEZONE

        return FeasibilityConfig(
            minimum_lead_hours=lead,
            exclude_weekends=exclude,
            weekend_days=weekend,
            timezone=tz.strip(),
        )


@dataclass(frozen=True)
class PlatformConfig:
    platform_id: str
    default_margin_percent: Decimal = DEFAULT_MARGIN_PERCENT
    feasibility: FeasibilityConfig = field(default_factory=FeasibilityConfig)
    currency: str = DEFAULT_CURRENCY
