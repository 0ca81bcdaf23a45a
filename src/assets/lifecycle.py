"""Best-effort object deletion tied to store mutations.

Deletions here always run after the triggering store mutation has been
committed and never reverse it. Every call returns an
``AssetDeletionResult``; failures are logged and reported, not raised, so
a failed cleanup only shows up later as an orphan in reconciliation.
"""

from __future__ import annotations

from assets.object_storage import DESTROY_NOT_FOUND, DESTROY_OK, ObjectStorage
from core.asset_url import derive_object_key
from core.constants import DEFAULT_ASSET_PREFIX, MAX_ASSET_LIST_RESULTS
from core.errors import AssetOperationError
from core.logging_config import get_logger
from core.types import AssetDeletionResult, StoredAsset

_LOGGER = get_logger(__name__)


class AssetLifecycleManager:
    """Deletes storage objects when their store references go away."""

    def __init__(self, storage: ObjectStorage) -> None:
        self._storage = storage

    def delete_by_key(self, key: str) -> AssetDeletionResult:
        """Delete one object by its (already URL-decoded) key."""
        if not key.strip():
            return AssetDeletionResult(outcome="failed", key=key, detail="object key is empty")
        return self._destroy(key)

    def delete_by_url(self, url: str) -> AssetDeletionResult:
        """Derive the object key from a URL and delete it.

        Returns:
            ``underivable`` when the URL lacks storage structure, otherwise
            the deletion outcome with the derived key.
        """
        key = derive_object_key(url)
        if key is None:
            _LOGGER.warning("asset_key_underivable", url=url)
            return AssetDeletionResult(
                outcome="underivable",
                url=url,
                detail="cannot derive object key from URL",
            )
        result = self._destroy(key)
        return AssetDeletionResult(
            outcome=result.outcome,
            key=result.key,
            url=url,
            detail=result.detail,
        )

    def delete_on_remove(self, reference: str | None) -> AssetDeletionResult:
        """Clean up the image of an entity whose deletion was committed.

        Args:
            reference: The deleted entity's asset reference, if any.
        """
        if not reference:
            return AssetDeletionResult(outcome="skipped", detail="entity has no asset reference")
        return self.delete_by_url(reference)

    def delete_on_replace(
        self,
        old_reference: str | None,
        new_reference: str | None,
    ) -> AssetDeletionResult:
        """Clean up a replaced image after an entity update was committed.

        The old object is deleted only when both references are set and
        differ. Clearing a reference (``new_reference`` is None) leaves the
        old object in storage; the next reconciliation scan reports it.
        """
        if not old_reference:
            return AssetDeletionResult(outcome="skipped", detail="no previous asset reference")
        if not new_reference:
            return AssetDeletionResult(
                outcome="skipped",
                url=old_reference,
                detail="new asset reference is empty; previous object kept",
            )
        if old_reference == new_reference:
            return AssetDeletionResult(
                outcome="skipped",
                url=old_reference,
                detail="asset reference unchanged",
            )
        return self.delete_by_url(old_reference)

    def list_assets(
        self,
        prefix: str = DEFAULT_ASSET_PREFIX,
        limit: int = MAX_ASSET_LIST_RESULTS,
    ) -> list[StoredAsset]:
        """List stored objects under a prefix, capped at the listing maximum.

        Raises:
            AssetOperationError: If the listing call fails.
        """
        return self._storage.list_assets(prefix, clamp_list_limit(limit))

    def _destroy(self, key: str) -> AssetDeletionResult:
        try:
            raw_result = self._storage.destroy(key)
        except AssetOperationError as error:
            _LOGGER.error("asset_delete_failed", key=key, error=str(error))
            return AssetDeletionResult(outcome="failed", key=key, detail=str(error))
        if raw_result == DESTROY_OK:
            _LOGGER.info("asset_deleted", key=key)
            return AssetDeletionResult(outcome="deleted", key=key)
        if raw_result == DESTROY_NOT_FOUND:
            _LOGGER.info("asset_already_absent", key=key)
            return AssetDeletionResult(outcome="not_found", key=key)
        _LOGGER.error("asset_delete_failed", key=key, result=raw_result)
        return AssetDeletionResult(
            outcome="failed",
            key=key,
            detail=f"unexpected storage result: {raw_result or 'empty'}",
        )


def clamp_list_limit(limit: int) -> int:
    """Clamp a requested listing size into ``[1, MAX_ASSET_LIST_RESULTS]``."""
    return max(1, min(limit, MAX_ASSET_LIST_RESULTS))
