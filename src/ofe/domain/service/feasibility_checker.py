"""Domain service: maintenance feasibility.

Decides whether assets that need refurbishment can be ready before an
event starts.  RED assets are always checked; ORANGE assets only when the
client chose to have them fixed in this order.  Readiness is
``now + minimum_lead_hours`` advanced by the asset's refurbishment estimate
in business days of the platform's timezone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ofe.domain.exceptions import NotFoundError
from ofe.domain.model.asset import Asset, AssetCondition
from ofe.domain.model.order import MaintenanceDecision
from ofe.domain.model.platform import DEFAULT_TIMEZONE, FeasibilityConfig
from ofe.domain.repository.asset_repository import AssetRepository
from ofe.domain.repository.platform_repository import PlatformRepository

logger = logging.getLogger(__name__)

MANDATORY_RED = "MANDATORY_RED"
OPTIONAL_ORANGE_FIX = "OPTIONAL_ORANGE_FIX"


@dataclass(frozen=True)
class FeasibilityIssue:
    asset_id: str
    asset_name: str
    refurb_days_estimate: int
    earliest_feasible_date: str
    condition: AssetCondition
    maintenance_mode: str
    message: str


@dataclass(frozen=True)
class FeasibilityResult:
    feasible: bool
    config: FeasibilityConfig
    issues: list[FeasibilityIssue] = field(default_factory=list)


def platform_zone(config: FeasibilityConfig) -> ZoneInfo:
    try:
        return ZoneInfo(config.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r, using %s", config.timezone, DEFAULT_TIMEZONE)
        return ZoneInfo(DEFAULT_TIMEZONE)


def is_weekend(moment: datetime, config: FeasibilityConfig, zone: ZoneInfo) -> bool:
    if not config.exclude_weekends:
        return False
    return moment.astimezone(zone).isoweekday() in config.weekend_days


def add_business_days(
    start: datetime,
    days: int,
    config: FeasibilityConfig,
    zone: ZoneInfo,
) -> datetime:
    """Step one calendar day at a time, counting only non-weekend days."""
    result = start
    added = 0
    while added < days:
        result = result + timedelta(days=1)
        if not is_weekend(result, config, zone):
            added += 1
    return result


def normalize_items(
    items: list[tuple[str, MaintenanceDecision | None]],
) -> dict[str, MaintenanceDecision | None]:
    """De-duplicate by asset; FIX_IN_ORDER wins over any other decision."""
    decisions: dict[str, MaintenanceDecision | None] = {}
    for asset_id, decision in items:
        if asset_id not in decisions:
            decisions[asset_id] = decision
            continue
        current = decisions[asset_id]
        if MaintenanceDecision.FIX_IN_ORDER in (current, decision):
            decisions[asset_id] = MaintenanceDecision.FIX_IN_ORDER
        elif current is None and decision is not None:
            decisions[asset_id] = decision
    return decisions


def needs_maintenance(asset: Asset, decision: MaintenanceDecision | None) -> bool:
    if asset.condition == AssetCondition.RED:
        return True
    return asset.condition == AssetCondition.ORANGE and decision == MaintenanceDecision.FIX_IN_ORDER


def _issue(asset: Asset, ready: datetime, zone: ZoneInfo) -> FeasibilityIssue:
    refurb_days = asset.refurb_days_estimate or 0
    earliest = ready.astimezone(zone).date().isoformat()
    if asset.condition == AssetCondition.RED:
        mode = MANDATORY_RED
        message = (
            f"{asset.name} is RED and requires {refurb_days} business day(s) refurbishment "
            f"after minimum lead time. Earliest feasible date: {earliest}"
        )
    else:
        mode = OPTIONAL_ORANGE_FIX
        message = (
            f"{asset.name} is ORANGE and selected as FIX_IN_ORDER. It requires {refurb_days} "
            f"business day(s) refurbishment after minimum lead time. "
            f"Earliest feasible date: {earliest}"
        )
    return FeasibilityIssue(
        asset_id=asset.id,
        asset_name=asset.name,
        refurb_days_estimate=refurb_days,
        earliest_feasible_date=earliest,
        condition=asset.condition,
        maintenance_mode=mode,
        message=message,
    )


class FeasibilityChecker:

    def __init__(self, assets: AssetRepository, platforms: PlatformRepository) -> None:
        self._assets = assets
        self._platforms = platforms

    def config_for(self, platform_id: str) -> FeasibilityConfig:
        platform = self._platforms.get_config(platform_id)
        if platform is None:
            raise NotFoundError("Platform not found")
        return platform.feasibility

    def check(
        self,
        platform_id: str,
        items: list[tuple[str, MaintenanceDecision | None]],
        event_start_date: date,
        now: datetime,
    ) -> FeasibilityResult:
        config = self.config_for(platform_id)
        if not items:
            return FeasibilityResult(feasible=True, config=config)

        decisions = normalize_items(items)
        assets: list[Asset] = []
        for asset_id in decisions:
            asset = self._assets.get_by_id(asset_id)
            if asset is None or asset.platform_id != platform_id or asset.deleted_at is not None:
                raise NotFoundError("One or more assets not found")
            assets.append(asset)

        zone = platform_zone(config)
        event_start = datetime.combine(event_start_date, time.min, tzinfo=zone)
        lead_window_start = now + timedelta(hours=config.minimum_lead_hours)

        issues = []
        for asset in assets:
            if not needs_maintenance(asset, decisions[asset.id]):
                continue
            ready = add_business_days(
                lead_window_start, asset.refurb_days_estimate or 0, config, zone
            )
            if event_start < ready:
                issues.append(_issue(asset, ready, zone))

        return FeasibilityResult(feasible=not issues, config=config, issues=issues)
