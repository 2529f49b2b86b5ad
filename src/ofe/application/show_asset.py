"""Application service: Show Asset use case (query, by id or QR code)."""

from __future__ import annotations

from ofe.application.dto import AssetDTO, asset_to_dto
from ofe.domain.exceptions import NotFoundError
from ofe.domain.model.actor import Actor
from ofe.domain.repository.unit_of_work import UnitOfWork


class ShowAssetHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, actor: Actor, asset_ref: str) -> AssetDTO:
        with self._uow as uow:
            asset = uow.assets.get_by_id(asset_ref) or uow.assets.get_by_qr_code(asset_ref)
            if asset is None or asset.platform_id != actor.platform_id:
                raise NotFoundError(f"Asset '{asset_ref}' not found")
            return asset_to_dto(asset)
