"""Object storage adapter for item images.

This module wraps the Cloudinary admin and upload APIs behind a small
protocol so lifecycle and reconciliation code can run against fakes.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from core.config import ObjectStorageCredentials
from core.constants import MAX_ASSET_LIST_RESULTS
from core.errors import AssetOperationError, DependencyError
from core.types import StoredAsset

DESTROY_OK = "ok"
DESTROY_NOT_FOUND = "not found"


class ObjectStorage(Protocol):
    """Operations the asset layer needs from object storage."""

    def destroy(self, key: str) -> str:
        """Delete one object and return the service's raw result string."""
        ...

    def list_assets(self, prefix: str, limit: int) -> list[StoredAsset]:
        """List up to ``limit`` objects whose key starts with ``prefix``."""
        ...


class CloudinaryObjectStorage:
    """Cloudinary-backed ``ObjectStorage``."""

    def __init__(self, credentials: ObjectStorageCredentials) -> None:
        self._cloudinary = _import_cloudinary()
        self._cloudinary.config(
            cloud_name=credentials.cloud_name,
            api_key=credentials.api_key,
            api_secret=credentials.api_secret,
            secure=True,
        )

    def destroy(self, key: str) -> str:
        """Delete an uploaded image by public id.

        Raises:
            AssetOperationError: If the API call fails.
        """
        try:
            response = self._cloudinary.uploader.destroy(key, invalidate=True)
        except Exception as error:
            raise AssetOperationError(f"Failed to delete object {key}: {error}") from error
        return str(response.get("result", ""))

    def list_assets(self, prefix: str, limit: int) -> list[StoredAsset]:
        """List one page of uploaded images under a folder prefix.

        Raises:
            AssetOperationError: If the API call fails.
        """
        try:
            response = self._cloudinary.api.resources(
                type="upload",
                prefix=prefix,
                max_results=min(limit, MAX_ASSET_LIST_RESULTS),
            )
        except Exception as error:
            raise AssetOperationError(f"Failed to list objects under {prefix}: {error}") from error
        return [_asset_from_resource(resource) for resource in response.get("resources", [])]


def _asset_from_resource(resource: Mapping[str, Any]) -> StoredAsset:
    size = resource.get("bytes")
    return StoredAsset(
        key=str(resource["public_id"]),
        url=str(resource.get("secure_url") or resource.get("url") or ""),
        format=resource.get("format"),
        size_bytes=int(size) if size is not None else None,
        created_at=resource.get("created_at"),
    )


def _import_cloudinary() -> Any:
    """Import the Cloudinary SDK with its uploader and admin API modules.

    Raises:
        DependencyError: If cloudinary is missing.
    """
    try:
        import cloudinary
        import cloudinary.api
        import cloudinary.uploader
    except ImportError as error:
        raise DependencyError(
            "Asset operations require the cloudinary package, but it is not installed. "
            "Install cloudinary to manage stored images."
        ) from error
    return cloudinary
