"""Unit tests for the S3 snapshot archive."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from core.constants import SNAPSHOT_CONTENT_TYPE
from core.errors import ConfigurationError, StockSyncError
from store.snapshot_archive import ArchiveDestination, SnapshotArchive, parse_archive_uri


class _FakeS3Client:
    def __init__(self, failing_names: set[str] | None = None) -> None:
        self.uploads: list[tuple[str, str, str, dict[str, Any]]] = []
        self._failing_names = failing_names or set()

    def upload_file(self, filename: str, bucket: str, key: str, ExtraArgs: dict[str, Any]) -> None:
        if Path(filename).name in self._failing_names:
            raise RuntimeError("AccessDenied")
        self.uploads.append((filename, bucket, key, ExtraArgs))


def _documents(tmp_path: Path) -> list[Path]:
    paths = [tmp_path / "barang.json", tmp_path / "combined_export.json"]
    for path in paths:
        path.write_text("[]", encoding="utf-8")
    return paths


def test_parse_archive_uri_accepts_bucket_only() -> None:
    """A bare bucket should archive at the bucket root."""
    assert parse_archive_uri("s3://trk-backups") == ArchiveDestination("trk-backups", "")


def test_parse_archive_uri_strips_prefix_slashes() -> None:
    """Trailing slashes on the prefix should be dropped."""
    destination = parse_archive_uri("s3://trk-backups/inventory/daily/")

    assert destination == ArchiveDestination("trk-backups", "inventory/daily")


@pytest.mark.parametrize(
    "uri", ["trk-backups/inventory", "https://trk-backups", "s3://", "s3:///x"]
)
def test_parse_archive_uri_rejects_invalid_destinations(uri: str) -> None:
    """Non-s3 URIs and empty bucket names should be rejected."""
    with pytest.raises(ConfigurationError, match="--archive-uri"):
        parse_archive_uri(uri)


def test_upload_places_documents_under_run_prefix(tmp_path) -> None:
    """Each document should land under prefix/run-stamp with a JSON content type."""
    s3_client = _FakeS3Client()
    archive = SnapshotArchive(ArchiveDestination("trk-backups", "inventory"), s3_client)

    uris = archive.upload(_documents(tmp_path), run_stamp="20241019T080000Z")

    assert [upload[1:] for upload in s3_client.uploads] == [
        (
            "trk-backups",
            "inventory/20241019T080000Z/barang.json",
            {"ContentType": SNAPSHOT_CONTENT_TYPE},
        ),
        (
            "trk-backups",
            "inventory/20241019T080000Z/combined_export.json",
            {"ContentType": SNAPSHOT_CONTENT_TYPE},
        ),
    ]
    assert uris[1] == "s3://trk-backups/inventory/20241019T080000Z/combined_export.json"


def test_upload_without_prefix_uses_run_stamp_as_folder(tmp_path) -> None:
    """A bucket-only destination should key documents by run stamp alone."""
    s3_client = _FakeS3Client()
    archive = SnapshotArchive(ArchiveDestination("trk-backups", ""), s3_client)

    archive.upload(_documents(tmp_path)[:1], run_stamp="20241019T080000Z")

    assert s3_client.uploads[0][2] == "20241019T080000Z/barang.json"


def test_upload_wraps_client_failures(tmp_path) -> None:
    """Upload failures should name the document and destination key."""
    archive = SnapshotArchive(
        ArchiveDestination("trk-backups", "inventory"),
        _FakeS3Client(failing_names={"combined_export.json"}),
    )

    with pytest.raises(StockSyncError, match="combined_export.json.*AccessDenied"):
        archive.upload(_documents(tmp_path), run_stamp="20241019T080000Z")
