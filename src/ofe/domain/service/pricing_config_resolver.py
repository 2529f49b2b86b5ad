"""Resolve the warehouse operations rate for a platform/company.

Two tiers: a company-specific active row wins over the platform default
(``company_id is None``).
"""

from __future__ import annotations

from ofe.domain.exceptions import NotFoundError
from ofe.domain.model.value_objects import Money
from ofe.domain.repository.pricing_repository import PricingConfigRepository


def resolve_warehouse_ops_rate(
    repo: PricingConfigRepository,
    platform_id: str,
    company_id: str | None,
) -> Money:
    if company_id is not None:
        config = repo.find(platform_id, company_id)
        if config is not None:
            return config.warehouse_ops_rate

    config = repo.find(platform_id, None)
    if config is None:
        raise NotFoundError("No pricing configuration found for this platform")
    return config.warehouse_ops_rate
