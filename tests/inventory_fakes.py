"""In-memory store and storage fakes shared by tests."""

from __future__ import annotations

import threading
from typing import Any, Mapping

from core.errors import (
    AssetOperationError,
    DuplicateKeyError,
    EntityNotFoundError,
    StoreWriteError,
)
from core.types import ENTITY_LOAD_ORDER, EntityKind, StoredAsset

_KEY_COLUMNS: Mapping[EntityKind, str] = {
    "user": "email",
    "vendor": "kode_vendor",
    "item": "kode_barang",
    "purchase_order": "no_po",
    "stock_mutation": "no_transaksi",
}


class FakeInventoryStore:
    """Relational store fake enforcing unique natural keys and foreign keys."""

    def __init__(self) -> None:
        self.rows: dict[EntityKind, list[dict[str, Any]]] = {
            kind: [] for kind in ENTITY_LOAD_ORDER
        }
        self.insert_order: list[EntityKind] = []
        self.refresh_calls = 0
        self.fail_refresh = False
        self.connection_checks = 0
        self._lock = threading.Lock()

    def check_connection(self) -> None:
        self.connection_checks += 1

    def insert(self, kind: EntityKind, row: Mapping[str, Any]) -> None:
        with self._lock:
            key_column = _KEY_COLUMNS[kind]
            if any(existing[key_column] == row[key_column] for existing in self.rows[kind]):
                raise DuplicateKeyError("duplicate key value violates unique constraint")
            if kind in ("purchase_order", "stock_mutation") and not self._has_item(
                row["kode_barang"]
            ):
                raise StoreWriteError("insert violates foreign key constraint on kode_barang")
            if kind == "purchase_order" and not self._has_vendor(row["kode_vendor"]):
                raise StoreWriteError("insert violates foreign key constraint on kode_vendor")
            self.insert_order.append(kind)
            self.rows[kind].append({"id": str(len(self.rows[kind]) + 1), **row})

    def refresh_stock_summary(self) -> None:
        self.refresh_calls += 1
        if self.fail_refresh:
            raise StoreWriteError("function refresh_stok_summary() does not exist")

    def fetch_asset_references(self) -> set[str]:
        return {
            row["gambar_url"]
            for kind in ("item", "vendor")
            for row in self.rows[kind]
            if row.get("gambar_url")
        }

    def fetch_asset_reference(self, kind: EntityKind, row_id: str) -> str | None:
        return self._find(kind, row_id).get("gambar_url")

    def update_row(
        self, kind: EntityKind, row_id: str, fields: Mapping[str, Any]
    ) -> Mapping[str, Any]:
        row = self._find(kind, row_id)
        row.update(fields)
        return dict(row)

    def delete_row(self, kind: EntityKind, row_id: str) -> None:
        row = self._find(kind, row_id)
        self.rows[kind].remove(row)

    def update_user_password(self, email: str, password_hash: str) -> None:
        for row in self.rows["user"]:
            if row["email"] == email:
                row["password_hash"] = password_hash
                return
        raise EntityNotFoundError(f"user {email} not found")

    def count(self, kind: EntityKind) -> int:
        return len(self.rows[kind])

    def _find(self, kind: EntityKind, row_id: str) -> dict[str, Any]:
        for row in self.rows[kind]:
            if row["id"] == row_id:
                return row
        raise EntityNotFoundError(f"{kind} {row_id} not found")

    def _has_item(self, item_code: str) -> bool:
        return any(row["kode_barang"] == item_code for row in self.rows["item"])

    def _has_vendor(self, vendor_code: str) -> bool:
        return any(row["kode_vendor"] == vendor_code for row in self.rows["vendor"])


class FakeObjectStorage:
    """Object storage fake keyed by object key."""

    def __init__(
        self,
        objects: Mapping[str, str] | None = None,
        failing_keys: set[str] | None = None,
    ) -> None:
        self.objects: dict[str, str] = dict(objects or {})
        self.failing_keys = failing_keys or set()
        self.destroyed: list[str] = []
        self.list_calls: list[tuple[str, int]] = []

    def destroy(self, key: str) -> str:
        self.destroyed.append(key)
        if key in self.failing_keys:
            raise AssetOperationError(f"Failed to delete object {key}: service unavailable")
        if self.objects.pop(key, None) is None:
            return "not found"
        return "ok"

    def list_assets(self, prefix: str, limit: int) -> list[StoredAsset]:
        self.list_calls.append((prefix, limit))
        keys = sorted(key for key in self.objects if key.startswith(prefix))
        return [
            StoredAsset(
                key=key,
                url=self.objects[key],
                format="jpg",
                size_bytes=1024,
                created_at="2024-03-01T00:00:00Z",
            )
            for key in keys[:limit]
        ]


def asset_url(key: str, version: str = "v1700000000") -> str:
    """Build a public asset URL for an object key."""
    return f"https://res.cloudinary.com/demo/image/upload/{version}/{key}.jpg"
