"""Entity delete and update with follow-up asset cleanup.

Each operation runs in two phases: the store mutation is committed and
treated as durable, then the asset cleanup runs as a separate unit whose
result is returned for the caller to retry or ignore.
"""

from __future__ import annotations

from typing import Any, Mapping

from assets.lifecycle import AssetLifecycleManager
from core.asset_url import is_asset_url
from core.constants import ASSET_REFERENCE_COLUMN
from core.errors import ConfigurationError, MappingError
from core.logging_config import get_logger
from core.types import AssetDeletionResult, EntityKind, MutationResult
from store.inventory_store import ASSET_BEARING_KINDS, InventoryStore

_LOGGER = get_logger(__name__)


class EntityMutationService:
    """Applies store mutations and triggers lifecycle cleanup afterwards."""

    def __init__(
        self,
        store: InventoryStore,
        lifecycle: AssetLifecycleManager | None = None,
    ) -> None:
        self._store = store
        self._lifecycle = lifecycle

    def remove(self, kind: EntityKind, row_id: str) -> MutationResult:
        """Delete one entity, then delete its image.

        Raises:
            ConfigurationError: If an image-bearing kind has no object storage.
            EntityNotFoundError: If the row does not exist.
            StoreWriteError: If the store deletion fails; no cleanup runs.
        """
        lifecycle = self._lifecycle_for(kind)
        reference = self._current_reference(kind, row_id)
        self._store.delete_row(kind, row_id)
        _LOGGER.info("entity_deleted", kind=kind, row_id=row_id)
        cleanup = _no_asset(kind) if lifecycle is None else lifecycle.delete_on_remove(reference)
        _log_cleanup(kind, row_id, cleanup)
        return MutationResult(row=None, cleanup=cleanup)

    def update(
        self,
        kind: EntityKind,
        row_id: str,
        fields: Mapping[str, Any],
    ) -> MutationResult:
        """Update one entity, then delete its replaced image.

        Only the asset reference column is interpreted; every other field is
        passed to the store unchanged.

        Raises:
            MappingError: If a new asset reference is not a fully-qualified URL.
            EntityNotFoundError: If the row does not exist.
            StoreWriteError: If the store update fails; no cleanup runs.
        """
        new_reference = fields.get(ASSET_REFERENCE_COLUMN)
        if new_reference is not None and not is_asset_url(str(new_reference)):
            raise MappingError(
                f"{ASSET_REFERENCE_COLUMN} must be a fully-qualified URL, got {new_reference!r}",
                field_name=ASSET_REFERENCE_COLUMN,
            )
        lifecycle = self._lifecycle_for(kind)
        old_reference = self._current_reference(kind, row_id)
        row = self._store.update_row(kind, row_id, fields)
        _LOGGER.info("entity_updated", kind=kind, row_id=row_id, fields=sorted(fields))
        if lifecycle is None:
            cleanup = _no_asset(kind)
        elif ASSET_REFERENCE_COLUMN not in fields:
            cleanup = AssetDeletionResult(outcome="skipped", detail="asset reference not updated")
        else:
            cleanup = lifecycle.delete_on_replace(
                old_reference, str(new_reference) if new_reference else None
            )
        _log_cleanup(kind, row_id, cleanup)
        return MutationResult(row=row, cleanup=cleanup)

    def _lifecycle_for(self, kind: EntityKind) -> AssetLifecycleManager | None:
        """Return the cleanup manager for asset-bearing kinds, None otherwise.

        Raises:
            ConfigurationError: If an asset-bearing kind has no object storage.
        """
        if kind not in ASSET_BEARING_KINDS:
            return None
        if self._lifecycle is None:
            raise ConfigurationError(
                f"{kind} mutations clean up stored images and need object storage. "
                "Set the CLOUDINARY_* settings."
            )
        return self._lifecycle

    def _current_reference(self, kind: EntityKind, row_id: str) -> str | None:
        if kind not in ASSET_BEARING_KINDS:
            return None
        return self._store.fetch_asset_reference(kind, row_id)


def _no_asset(kind: EntityKind) -> AssetDeletionResult:
    return AssetDeletionResult(outcome="skipped", detail=f"{kind} entities carry no asset")


def _log_cleanup(kind: EntityKind, row_id: str, cleanup: AssetDeletionResult) -> None:
    if cleanup.outcome == "failed":
        _LOGGER.warning(
            "asset_cleanup_failed",
            kind=kind,
            row_id=row_id,
            key=cleanup.key,
            detail=cleanup.detail,
        )
