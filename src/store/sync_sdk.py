"""Python SDK for inventory sync operations.

This module exposes high-level APIs for extraction, idempotent loading,
asset lifecycle operations, and orphan reporting.
"""

from __future__ import annotations

from typing import Any, Mapping

from assets.entity_mutations import EntityMutationService
from assets.lifecycle import AssetLifecycleManager
from assets.object_storage import CloudinaryObjectStorage, ObjectStorage
from assets.reconciliation import ReconciliationReporter
from core.config import StockSyncConfig
from core.constants import DEFAULT_ASSET_PREFIX, MAX_ASSET_LIST_RESULTS
from core.logging_config import get_logger
from core.types import (
    AssetDeletionResult,
    EntityKind,
    ExtractOptions,
    LoadOptions,
    LoadSummary,
    MutationResult,
    OrphanReport,
    StoredAsset,
)
from extract.extractor import SnapshotExport, export_snapshot
from ingest.pipeline import load_snapshot
from store.inventory_store import ASSET_BEARING_KINDS, InventoryStore, create_inventory_store
from transforms.secret_hashing import hash_secret

_LOGGER = get_logger(__name__)


class StockSyncClient:
    """Primary SDK entry point.

    Store and storage connections are created on first use, so each
    operation validates only the credentials it needs before any I/O.
    """

    def __init__(
        self,
        config: StockSyncConfig | None = None,
        store: InventoryStore | None = None,
        storage: ObjectStorage | None = None,
    ) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
            store: Optional relational store, mainly for tests.
            storage: Optional object storage, mainly for tests.
        """
        self._config = config or StockSyncConfig.from_env()
        self._store = store
        self._storage = storage

    @property
    def config(self) -> StockSyncConfig:
        return self._config

    def extract(self, options: ExtractOptions) -> SnapshotExport:
        """Export source sheets into snapshot files.

        Raises:
            ConfigurationError: If sheet credentials or the archive URI are invalid.
        """
        return export_snapshot(options, self._config)

    def load(self, options: LoadOptions) -> LoadSummary:
        """Load the snapshot into the relational store.

        Raises:
            ConfigurationError: If store credentials are invalid.
            SnapshotMissingError: If the snapshot has not been extracted.
            StoreConnectionError: If the store is unreachable.
        """
        return load_snapshot(options, self._config, self._inventory_store())

    def delete_asset_by_key(self, key: str) -> AssetDeletionResult:
        return self._lifecycle().delete_by_key(key)

    def delete_asset_by_url(self, url: str) -> AssetDeletionResult:
        return self._lifecycle().delete_by_url(url)

    def list_assets(
        self,
        prefix: str = DEFAULT_ASSET_PREFIX,
        limit: int = MAX_ASSET_LIST_RESULTS,
    ) -> list[StoredAsset]:
        return self._lifecycle().list_assets(prefix, limit)

    def orphan_report(
        self,
        prefix: str = DEFAULT_ASSET_PREFIX,
        page_limit: int = MAX_ASSET_LIST_RESULTS,
    ) -> OrphanReport:
        """Run a read-only reconciliation scan."""
        reporter = ReconciliationReporter(self._object_storage(), self._inventory_store())
        return reporter.scan(prefix, page_limit)

    def remove_entity(self, kind: EntityKind, row_id: str) -> MutationResult:
        return self._mutations(kind).remove(kind, row_id)

    def update_entity(
        self,
        kind: EntityKind,
        row_id: str,
        fields: Mapping[str, Any],
    ) -> MutationResult:
        return self._mutations(kind).update(kind, row_id, fields)

    def set_password(self, email: str, password: str) -> None:
        """Replace a user's stored secret with the hash of a new password.

        Raises:
            MappingError: If the password is longer than bcrypt accepts.
            EntityNotFoundError: If no user has the email.
        """
        self._inventory_store().update_user_password(email, hash_secret(password))
        _LOGGER.info("user_password_updated", email=email)

    def _inventory_store(self) -> InventoryStore:
        if self._store is None:
            self._store = create_inventory_store(self._config.require_store_credentials())
        return self._store

    def _object_storage(self) -> ObjectStorage:
        if self._storage is None:
            credentials = self._config.require_object_storage_credentials()
            self._storage = CloudinaryObjectStorage(credentials)
        return self._storage

    def _lifecycle(self) -> AssetLifecycleManager:
        return AssetLifecycleManager(self._object_storage())

    def _mutations(self, kind: EntityKind) -> EntityMutationService:
        # Object storage credentials are validated before the store mutation runs.
        lifecycle = self._lifecycle() if kind in ASSET_BEARING_KINDS else None
        return EntityMutationService(self._inventory_store(), lifecycle)
