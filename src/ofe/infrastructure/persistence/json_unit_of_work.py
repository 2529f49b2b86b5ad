"""Unit of work over the JSON document store.

The store file's lock is held from ``__enter__`` to ``__exit__``: an
availability check and the bookings it admits are read and written against
the same snapshot, and no other unit of work in the process can interleave.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ofe.domain.repository.unit_of_work import UnitOfWork
from ofe.infrastructure.persistence.json_asset_repository import JsonAssetRepository
from ofe.infrastructure.persistence.json_booking_repository import (
    JsonBookingRepository,
    JsonSelfBookingRepository,
)
from ofe.infrastructure.persistence.json_line_item_repository import JsonLineItemRepository
from ofe.infrastructure.persistence.json_order_repository import JsonOrderRepository
from ofe.infrastructure.persistence.json_platform_repository import JsonPlatformRepository
from ofe.infrastructure.persistence.json_pricing_repository import (
    JsonCityRepository,
    JsonPricingConfigRepository,
    JsonServiceTypeRepository,
    JsonTransportRateRepository,
)
from ofe.infrastructure.persistence.json_reskin_repository import JsonReskinRepository
from ofe.infrastructure.persistence.json_scan_repository import JsonScanRepository
from ofe.infrastructure.persistence.json_store import JsonDocumentStore

logger = logging.getLogger(__name__)


class JsonUnitOfWork(UnitOfWork):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonDocumentStore(file_path)
        self._document: dict[str, list[dict]] = {}

    def __enter__(self) -> JsonUnitOfWork:
        self._store.lock.acquire()
        try:
            self._open(self._store.load())
        except BaseException:
            self._store.lock.release()
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            super().__exit__(exc_type, exc, tb)
        finally:
            self._store.lock.release()

    def commit(self) -> None:
        self._store.write(self._document)
        logger.debug("Committed %s", self._store.file_path)

    def rollback(self) -> None:
        # Reloading the file drops anything not yet written by commit().
        self._open(self._store.load())

    def _open(self, document: dict[str, list[dict]]) -> None:
        self._document = document
        self.orders = JsonOrderRepository(document)
        self.assets = JsonAssetRepository(document)
        self.bookings = JsonBookingRepository(document)
        self.self_bookings = JsonSelfBookingRepository(document)
        self.line_items = JsonLineItemRepository(document)
        self.reskins = JsonReskinRepository(document)
        self.scans = JsonScanRepository(document)
        self.pricing_configs = JsonPricingConfigRepository(document)
        self.transport_rates = JsonTransportRateRepository(document)
        self.service_types = JsonServiceTypeRepository(document)
        self.cities = JsonCityRepository(document)
        self.platforms = JsonPlatformRepository(document)
