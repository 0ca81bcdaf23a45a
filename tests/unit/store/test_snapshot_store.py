"""Unit tests for snapshot file persistence."""

from __future__ import annotations

import json

import pytest

from core.errors import SnapshotMissingError
from core.types import SheetSnapshot, SnapshotBundle
from store.snapshot_store import SnapshotStore


def _bundle() -> SnapshotBundle:
    return SnapshotBundle(
        sheets=(
            SheetSnapshot(
                sheet_name="Barang",
                records=({"Kode Barang": "BRG-001", "Nama Barang": "Bearing", "Mesin": None},),
            ),
            SheetSnapshot(sheet_name="Mutasi Gudang", records=()),
        )
    )


def test_write_bundle_then_load_bundle_returns_records(tmp_path) -> None:
    """Records written to the snapshot should load back unchanged."""
    store = SnapshotStore(tmp_path)
    store.write_bundle(_bundle())

    bundle = store.load_bundle(["Barang", "Mutasi Gudang"])

    assert bundle == _bundle()


def test_write_bundle_keeps_non_ascii_text_readable(tmp_path) -> None:
    """Snapshot files should be indented and keep non-ASCII characters."""
    bundle = SnapshotBundle(
        sheets=(SheetSnapshot(sheet_name="Vendor", records=({"Alamat": "Jl. Sudirman №5"},)),)
    )

    SnapshotStore(tmp_path).write_bundle(bundle)
    text = (tmp_path / "vendor.json").read_text("utf-8")

    assert "№5" in text and text.startswith("[\n  {")


def test_load_bundle_requires_snapshot_directory(tmp_path) -> None:
    """Loading before any extraction should tell the operator to extract."""
    with pytest.raises(SnapshotMissingError, match="stocksync extract"):
        SnapshotStore(tmp_path / "missing").load_bundle(["Users"])


def test_load_bundle_requires_every_sheet_file(tmp_path) -> None:
    """A missing sheet document should fail the load."""
    store = SnapshotStore(tmp_path)
    store.write_bundle(_bundle())

    with pytest.raises(SnapshotMissingError, match="Users"):
        store.load_bundle(["Barang", "Users"])


def test_load_bundle_rejects_non_array_document(tmp_path) -> None:
    """Sheet documents must be arrays of objects."""
    (tmp_path / "users.json").write_text(json.dumps({"Email": "a"}), encoding="utf-8")

    with pytest.raises(SnapshotMissingError, match="array of objects"):
        SnapshotStore(tmp_path).load_bundle(["Users"])
