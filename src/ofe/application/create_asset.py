"""Application service: Create Asset use case.

BATCH assets are one row holding the whole pool.  INDIVIDUAL assets are
tracked one physical unit per row, so a request for N units creates N
rows, each with its own QR code (``<qr>-001``, ``<qr>-002``, ...).
"""

from __future__ import annotations

import logging
from decimal import Decimal
from uuid import uuid4

from ofe.application.common import STAFF_ROLES, require_role
from ofe.application.dto import AssetDTO, asset_to_dto
from ofe.domain.exceptions import ConflictError, ValidationError
from ofe.domain.model.actor import Actor
from ofe.domain.model.asset import Asset, AssetCondition, TrackingMethod
from ofe.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class CreateAssetHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        actor: Actor,
        company_id: str,
        name: str,
        qr_code: str,
        total_quantity: int,
        tracking_method: TrackingMethod = TrackingMethod.BATCH,
        volume_per_unit: Decimal = Decimal("0"),
        weight_per_unit: Decimal = Decimal("0"),
        condition: AssetCondition = AssetCondition.GREEN,
        refurb_days_estimate: int | None = None,
        brand_id: str | None = None,
        category: str = "",
    ) -> list[AssetDTO]:
        require_role(actor, STAFF_ROLES, "create assets")
        if not name or not name.strip():
            raise ValidationError("Asset name is required")
        if not qr_code or not qr_code.strip():
            raise ValidationError("QR code is required")
        if total_quantity <= 0:
            raise ValidationError("Asset quantity must be positive")
        if volume_per_unit < 0 or weight_per_unit < 0:
            raise ValidationError("Volume and weight cannot be negative")
        if condition == AssetCondition.GREEN:
            refurb_days_estimate = None

        if tracking_method == TrackingMethod.INDIVIDUAL and total_quantity > 1:
            rows = [
                (f"{qr_code.strip()}-{n:03d}", 1) for n in range(1, total_quantity + 1)
            ]
        else:
            rows = [(qr_code.strip(), total_quantity)]

        with self._uow as uow:
            for code, _ in rows:
                if uow.assets.get_by_qr_code(code) is not None:
                    raise ConflictError(f"QR code '{code}' is already in use")

            created = []
            for code, quantity in rows:
                asset = Asset(
                    id=str(uuid4()),
                    platform_id=actor.platform_id,
                    company_id=company_id,
                    name=name.strip(),
                    qr_code=code,
                    total_quantity=quantity,
                    available_quantity=quantity,
                    tracking_method=tracking_method,
                    volume_per_unit=volume_per_unit,
                    weight_per_unit=weight_per_unit,
                    condition=condition,
                    refurb_days_estimate=refurb_days_estimate,
                    brand_id=brand_id,
                    category=category,
                )
                uow.assets.save(asset)
                created.append(asset)
            uow.commit()

        logger.info("Created %d asset row(s) for '%s'", len(created), name.strip())
        return [asset_to_dto(a) for a in created]
