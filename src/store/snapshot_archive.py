"""S3 archive of extraction snapshots.

Each archived extraction run uploads its sheet documents and the combined
document under ``<prefix>/<run stamp>/``, so earlier runs stay retrievable
after the local snapshot directory is overwritten.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

from core.config import StockSyncConfig
from core.constants import ARCHIVE_RUN_STAMP_FORMAT, SNAPSHOT_CONTENT_TYPE
from core.errors import ConfigurationError, DependencyError, StockSyncError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)

_S3_SCHEME = "s3://"


@dataclass(frozen=True)
class ArchiveDestination:
    """Archive bucket and base key prefix; the prefix may be empty."""

    bucket: str
    prefix: str

    def run_prefix(self, run_stamp: str) -> str:
        return f"{self.prefix}/{run_stamp}" if self.prefix else run_stamp


def parse_archive_uri(uri: str) -> ArchiveDestination:
    """Parse an ``s3://bucket[/prefix]`` archive destination.

    Raises:
        ConfigurationError: If the URI is not an s3 URI naming a bucket.
    """
    if not uri.startswith(_S3_SCHEME):
        raise ConfigurationError(
            f"Invalid --archive-uri '{uri}': expected s3://bucket or s3://bucket/prefix."
        )
    bucket, _, prefix = uri[len(_S3_SCHEME):].partition("/")
    if not bucket:
        raise ConfigurationError(f"Invalid --archive-uri '{uri}': the bucket name is empty.")
    return ArchiveDestination(bucket=bucket, prefix=prefix.strip("/"))


class SnapshotArchive:
    """Uploads the snapshot documents of one extraction run."""

    def __init__(self, destination: ArchiveDestination, s3_client: Any) -> None:
        self._destination = destination
        self._s3_client = s3_client

    @classmethod
    def from_uri(cls, uri: str, config: StockSyncConfig) -> "SnapshotArchive":
        """Validate the destination and create the S3 client.

        Called before extraction starts, so a bad destination fails the run
        while the previous snapshot is still intact.

        Raises:
            ConfigurationError: If the URI is malformed.
            DependencyError: If boto3 is missing.
        """
        return cls(parse_archive_uri(uri), _create_s3_client(config))

    @property
    def destination(self) -> ArchiveDestination:
        return self._destination

    def upload(self, documents: Sequence[Path], run_stamp: str | None = None) -> list[str]:
        """Upload snapshot documents under a run-stamped prefix.

        Args:
            documents: Written snapshot files, combined document included.
            run_stamp: Optional run folder name; defaults to the current UTC time.

        Returns:
            ``s3://`` URIs of the uploaded documents, in input order.

        Raises:
            StockSyncError: If an upload fails.
        """
        stamp = run_stamp or datetime.now(timezone.utc).strftime(ARCHIVE_RUN_STAMP_FORMAT)
        bucket = self._destination.bucket
        key_prefix = self._destination.run_prefix(stamp)
        uploaded: list[str] = []
        for document in documents:
            key = f"{key_prefix}/{document.name}"
            try:
                self._s3_client.upload_file(
                    str(document),
                    bucket,
                    key,
                    ExtraArgs={"ContentType": SNAPSHOT_CONTENT_TYPE},
                )
            except Exception as error:
                raise StockSyncError(
                    f"Failed to archive {document.name} to s3://{bucket}/{key}: {error}. "
                    "The local snapshot is written; fix AWS access and re-run extract."
                ) from error
            uploaded.append(f"{_S3_SCHEME}{bucket}/{key}")
        _LOGGER.info(
            "snapshot_archived",
            bucket=bucket,
            key_prefix=key_prefix,
            document_count=len(uploaded),
        )
        return uploaded


def _create_s3_client(config: StockSyncConfig) -> Any:
    """Create an S3 client from the configured AWS profile and region.

    Raises:
        DependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise DependencyError(
            "Snapshot archives require boto3, but it is not installed. "
            "Install boto3 or run extract without --archive-uri."
        ) from error
    session = boto3.session.Session(
        profile_name=config.s3_profile,
        region_name=config.s3_region,
    )
    return session.client("s3")
