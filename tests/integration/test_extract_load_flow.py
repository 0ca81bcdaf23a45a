"""Integration tests for the extract, load and reconcile workflow."""

from __future__ import annotations

from pathlib import Path

from core.config import StockSyncConfig
from core.types import ExtractOptions, LoadOptions
from fixture_paths import fixture_path
from inventory_fakes import FakeInventoryStore, FakeObjectStorage
from store.sync_sdk import StockSyncClient
from transforms.secret_hashing import verify_secret

_SHEETS = ("Users", "Barang", "Vendor", "Pembelian", "Mutasi Gudang")
_ITEM_IMAGE = (
    "https://res.cloudinary.com/demo/image/upload/v1700000000/trk-inventory/barang/bearing.jpg"
)


def _client(tmp_path: Path) -> tuple[StockSyncClient, FakeInventoryStore, FakeObjectStorage]:
    config = StockSyncConfig(data_root=tmp_path, snapshot_dir=tmp_path / "export")
    store = FakeInventoryStore()
    storage = FakeObjectStorage()
    return StockSyncClient(config, store=store, storage=storage), store, storage


def _extract(client: StockSyncClient) -> None:
    client.extract(
        ExtractOptions(sheet_names=_SHEETS, source_dir=str(fixture_path("workbook")))
    )


def test_extract_then_load_is_idempotent(tmp_path: Path) -> None:
    """Loading the same snapshot twice should add no rows the second time."""
    client, store, _ = _client(tmp_path)
    _extract(client)

    first = client.load(LoadOptions())
    counts_after_first = {kind: store.count(kind) for kind in store.rows}
    second = client.load(LoadOptions())

    assert (first.inserted, first.skipped, first.error) == (7, 1, 2)
    assert second.inserted == 0 and second.duplicate == 7
    assert {kind: store.count(kind) for kind in store.rows} == counts_after_first


def test_loaded_users_hold_verifiable_hashes(tmp_path: Path) -> None:
    """Plaintext sheet passwords should be stored as bcrypt hashes."""
    client, store, _ = _client(tmp_path)
    _extract(client)

    client.load(LoadOptions())
    admin = next(row for row in store.rows["user"] if row["email"] == "admin@trk-holding.com")
    stored_hash = admin["password_hash"]

    assert stored_hash != "admin123" and verify_secret("admin123", stored_hash)


def test_replacing_item_image_then_reconciling(tmp_path: Path) -> None:
    """Replacing an image should delete the old object and leave no orphan."""
    client, store, storage = _client(tmp_path)
    _extract(client)
    client.load(LoadOptions())
    replacement = _ITEM_IMAGE.replace("bearing.jpg", "bearing-v2.jpg")
    storage.objects["trk-inventory/barang/bearing"] = _ITEM_IMAGE
    storage.objects["trk-inventory/barang/bearing-v2"] = replacement
    storage.objects["trk-inventory/barang/stray"] = _ITEM_IMAGE.replace("bearing", "stray")
    item_id = next(row["id"] for row in store.rows["item"] if row["kode_barang"] == "BRG-001")

    result = client.update_entity("item", item_id, {"gambar_url": replacement})
    report = client.orphan_report()

    assert result.cleanup.key == "trk-inventory/barang/bearing"
    assert report.orphans == [_ITEM_IMAGE.replace("bearing", "stray")]
