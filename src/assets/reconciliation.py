"""Orphaned object reporting.

This module compares the URLs listed from object storage with the asset
references held in the relational store. The scan is read-only: it never
deletes anything, and the two reads are not taken from one consistent
snapshot, so a reference written mid-scan may show up as an orphan.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from assets.lifecycle import clamp_list_limit
from assets.object_storage import ObjectStorage
from core.constants import DEFAULT_ASSET_PREFIX, MAX_ASSET_LIST_RESULTS
from core.logging_config import get_logger
from core.types import OrphanReport
from store.inventory_store import InventoryStore

_LOGGER = get_logger(__name__)


class ReconciliationReporter:
    """Computes storage objects that no store entity references."""

    def __init__(self, storage: ObjectStorage, store: InventoryStore) -> None:
        self._storage = storage
        self._store = store

    def scan(
        self,
        prefix: str = DEFAULT_ASSET_PREFIX,
        page_limit: int = MAX_ASSET_LIST_RESULTS,
    ) -> OrphanReport:
        """Report objects under ``prefix`` that no entity references.

        URLs are compared by exact string equality; a listed URL that
        differs from a stored one only in case or format is an orphan.

        Args:
            prefix: Storage key prefix to list.
            page_limit: Maximum objects to list.

        Returns:
            Both URL sets and their difference.

        Raises:
            AssetOperationError: If the storage listing fails.
            StoreWriteError: If the store query fails.
        """
        limit = clamp_list_limit(page_limit)
        with ThreadPoolExecutor(max_workers=2) as executor:
            listing = executor.submit(self._storage.list_assets, prefix, limit)
            references = executor.submit(self._store.fetch_asset_references)
            storage_urls = frozenset(asset.url for asset in listing.result() if asset.url)
            store_urls = frozenset(references.result())
        report = OrphanReport(storage_urls=storage_urls, store_urls=store_urls, prefix=prefix)
        _LOGGER.info(
            "orphan_scan_completed",
            prefix=prefix,
            page_limit=limit,
            total_in_storage=len(storage_urls),
            total_in_store=len(store_urls),
            orphan_count=len(report.orphans),
        )
        return report
