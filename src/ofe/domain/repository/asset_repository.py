"""Abstract repository for Asset aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ofe.domain.model.asset import Asset


class AssetRepository(ABC):

    @abstractmethod
    def get_by_id(self, asset_id: str) -> Asset | None:
        """Return an asset by its ID, or None if not found."""

    @abstractmethod
    def get_by_qr_code(self, qr_code: str) -> Asset | None:
        """Return the asset carrying *qr_code*, or None."""

    @abstractmethod
    def list_by_platform(self, platform_id: str) -> list[Asset]:
        """Return every non-deleted asset of a platform."""

    @abstractmethod
    def save(self, asset: Asset) -> None:
        """Persist a new or updated asset.

        Raises ConflictError if another asset already uses the QR code.
        """
