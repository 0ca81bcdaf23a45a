"""Unit tests for entity mutations with asset cleanup."""

from __future__ import annotations

import pytest

from assets.entity_mutations import EntityMutationService
from assets.lifecycle import AssetLifecycleManager
from core.errors import ConfigurationError, EntityNotFoundError, MappingError
from inventory_fakes import FakeInventoryStore, FakeObjectStorage, asset_url

_KEY_A = "trk-inventory/barang/a"
_KEY_B = "trk-inventory/barang/b"


def _service(
    storage: FakeObjectStorage,
) -> tuple[EntityMutationService, FakeInventoryStore]:
    store = FakeInventoryStore()
    store.insert("item", {"kode_barang": "BRG-001", "gambar_url": asset_url(_KEY_A)})
    store.insert("vendor", {"kode_vendor": "VND-001", "gambar_url": None})
    return EntityMutationService(store, AssetLifecycleManager(storage)), store


def test_remove_deletes_row_then_image() -> None:
    """Removing an item should delete its row and its stored image."""
    storage = FakeObjectStorage({_KEY_A: asset_url(_KEY_A)})
    service, store = _service(storage)

    result = service.remove("item", "1")

    assert store.count("item") == 0 and result.cleanup.outcome == "deleted"


def test_remove_keeps_row_deleted_when_cleanup_fails() -> None:
    """A failed image deletion should not restore the deleted row."""
    storage = FakeObjectStorage({_KEY_A: asset_url(_KEY_A)}, failing_keys={_KEY_A})
    service, store = _service(storage)

    result = service.remove("item", "1")

    assert store.count("item") == 0 and result.cleanup.outcome == "failed"


def test_remove_unknown_row_skips_cleanup() -> None:
    """A missing row should raise before any storage call."""
    storage = FakeObjectStorage({_KEY_A: asset_url(_KEY_A)})
    service, _ = _service(storage)

    with pytest.raises(EntityNotFoundError):
        service.remove("item", "42")

    assert storage.destroyed == []


def test_update_with_new_image_deletes_previous_object() -> None:
    """Replacing the image reference should delete the previous object."""
    storage = FakeObjectStorage({_KEY_A: asset_url(_KEY_A), _KEY_B: asset_url(_KEY_B)})
    service, _ = _service(storage)

    result = service.update("item", "1", {"gambar_url": asset_url(_KEY_B)})

    assert result.row["gambar_url"] == asset_url(_KEY_B) and storage.destroyed == [_KEY_A]


def test_update_without_image_field_skips_cleanup() -> None:
    """Updating other columns should leave storage untouched."""
    storage = FakeObjectStorage({_KEY_A: asset_url(_KEY_A)})
    service, _ = _service(storage)

    result = service.update("item", "1", {"nama_barang": "Bearing 6206"})

    assert result.cleanup.outcome == "skipped" and storage.destroyed == []


def test_update_rejects_relative_image_reference() -> None:
    """Non-URL image references should be rejected before the update."""
    storage = FakeObjectStorage({_KEY_A: asset_url(_KEY_A)})
    service, store = _service(storage)

    with pytest.raises(MappingError, match="fully-qualified URL"):
        service.update("item", "1", {"gambar_url": "barang/b.jpg"})

    assert store.rows["item"][0]["gambar_url"] == asset_url(_KEY_A)


def test_remove_vendor_without_image_is_skipped() -> None:
    """Vendors without an image should delete cleanly with a skipped cleanup."""
    service, store = _service(FakeObjectStorage())

    result = service.remove("vendor", "1")

    assert store.count("vendor") == 0 and result.cleanup.outcome == "skipped"


def test_remove_purchase_order_needs_no_object_storage() -> None:
    """Kinds without images should mutate without a cleanup manager."""
    store = FakeInventoryStore()
    store.insert("vendor", {"kode_vendor": "VND-001", "gambar_url": None})
    store.insert("item", {"kode_barang": "BRG-001", "gambar_url": None})
    store.insert(
        "purchase_order",
        {"no_po": "PO-001", "kode_vendor": "VND-001", "kode_barang": "BRG-001"},
    )

    result = EntityMutationService(store).remove("purchase_order", "1")

    assert store.count("purchase_order") == 0 and result.cleanup.outcome == "skipped"


def test_remove_item_without_object_storage_keeps_row() -> None:
    """Asset-bearing kinds should refuse to mutate before touching the store."""
    store = FakeInventoryStore()
    store.insert("item", {"kode_barang": "BRG-001", "gambar_url": asset_url(_KEY_A)})

    with pytest.raises(ConfigurationError, match="CLOUDINARY_"):
        EntityMutationService(store).remove("item", "1")

    assert store.count("item") == 1
