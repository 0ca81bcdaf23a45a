"""Relational inventory store backed by Supabase.

This module maps entity kinds onto store tables and converts PostgREST
failures into the store error taxonomy: natural-key conflicts become
``DuplicateKeyError`` and everything else ``StoreWriteError``.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from postgrest.exceptions import APIError
from supabase import Client, ClientOptions, create_client

from core.config import StoreCredentials
from core.constants import (
    ASSET_REFERENCE_COLUMN,
    EMPTY_RESULT_CODE,
    STOCK_SUMMARY_REFRESH_FUNCTION,
    UNIQUE_VIOLATION_CODE,
)
from core.errors import (
    DuplicateKeyError,
    EntityNotFoundError,
    StoreConnectionError,
    StoreWriteError,
)
from core.types import EntityKind

TABLE_FOR_KIND: Mapping[EntityKind, str] = {
    "user": "users",
    "vendor": "vendor",
    "item": "barang",
    "purchase_order": "pembelian",
    "stock_mutation": "mutasi_gudang",
}

ASSET_BEARING_KINDS: tuple[EntityKind, ...] = ("item", "vendor")

_PAGE_SIZE = 1000


class InventoryStore(Protocol):
    """Operations the loader and asset layers need from the relational store."""

    def check_connection(self) -> None: ...

    def insert(self, kind: EntityKind, row: Mapping[str, Any]) -> None: ...

    def refresh_stock_summary(self) -> None: ...

    def fetch_asset_references(self) -> set[str]: ...

    def fetch_asset_reference(self, kind: EntityKind, row_id: str) -> str | None: ...

    def update_row(
        self, kind: EntityKind, row_id: str, fields: Mapping[str, Any]
    ) -> Mapping[str, Any]: ...

    def delete_row(self, kind: EntityKind, row_id: str) -> None: ...

    def update_user_password(self, email: str, password_hash: str) -> None: ...


class SupabaseInventoryStore:
    """PostgREST-backed implementation of ``InventoryStore``."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def check_connection(self) -> None:
        """Probe the users table before a run writes anything.

        Raises:
            StoreConnectionError: If the probe fails for any reason other
                than an empty result.
        """
        try:
            self._client.table(TABLE_FOR_KIND["user"]).select("count").limit(1).execute()
        except APIError as error:
            if error.code == EMPTY_RESULT_CODE:
                return
            raise StoreConnectionError(
                f"Relational store connection failed: {error.message}. "
                "Check SUPABASE_URL and SUPABASE_SERVICE_KEY."
            ) from error
        except Exception as error:
            raise StoreConnectionError(
                f"Relational store connection failed: {error}. "
                "Check network access to SUPABASE_URL."
            ) from error

    def insert(self, kind: EntityKind, row: Mapping[str, Any]) -> None:
        """Insert one row; the table's unique constraint enforces insert-if-absent.

        Raises:
            DuplicateKeyError: If the natural key already exists.
            StoreWriteError: For any other failure.
        """
        try:
            self._client.table(TABLE_FOR_KIND[kind]).insert(dict(row)).execute()
        except APIError as error:
            if error.code == UNIQUE_VIOLATION_CODE:
                raise DuplicateKeyError(error.message or "duplicate key") from error
            raise StoreWriteError(error.message or str(error)) from error
        except Exception as error:
            raise StoreWriteError(str(error)) from error

    def refresh_stock_summary(self) -> None:
        """Refresh the stock summary materialized view.

        Raises:
            StoreWriteError: If the refresh call fails.
        """
        try:
            self._client.rpc(STOCK_SUMMARY_REFRESH_FUNCTION, {}).execute()
        except Exception as error:
            raise StoreWriteError(f"Failed to refresh stock summary: {error}") from error

    def fetch_asset_references(self) -> set[str]:
        """Collect every non-null asset reference across asset-bearing tables.

        Raises:
            StoreWriteError: If a query fails.
        """
        references: set[str] = set()
        for kind in ASSET_BEARING_KINDS:
            references.update(self._fetch_table_references(TABLE_FOR_KIND[kind]))
        return references

    def fetch_asset_reference(self, kind: EntityKind, row_id: str) -> str | None:
        """Return the current asset reference of one row.

        Raises:
            EntityNotFoundError: If the row does not exist.
        """
        rows = self._execute(
            self._client.table(TABLE_FOR_KIND[kind])
            .select(ASSET_REFERENCE_COLUMN)
            .eq("id", row_id)
            .limit(1)
        )
        if not rows:
            raise EntityNotFoundError(f"{kind} {row_id} not found")
        value = rows[0].get(ASSET_REFERENCE_COLUMN)
        return str(value) if value else None

    def update_row(
        self, kind: EntityKind, row_id: str, fields: Mapping[str, Any]
    ) -> Mapping[str, Any]:
        rows = self._execute(
            self._client.table(TABLE_FOR_KIND[kind]).update(dict(fields)).eq("id", row_id)
        )
        if not rows:
            raise EntityNotFoundError(f"{kind} {row_id} not found")
        return rows[0]

    def delete_row(self, kind: EntityKind, row_id: str) -> None:
        """Delete one row by id.

        Raises:
            EntityNotFoundError: If no row was deleted.
        """
        rows = self._execute(self._client.table(TABLE_FOR_KIND[kind]).delete().eq("id", row_id))
        if not rows:
            raise EntityNotFoundError(f"{kind} {row_id} not found")

    def update_user_password(self, email: str, password_hash: str) -> None:
        rows = self._execute(
            self._client.table(TABLE_FOR_KIND["user"])
            .update({"password_hash": password_hash})
            .eq("email", email)
        )
        if not rows:
            raise EntityNotFoundError(f"user {email} not found")

    def _fetch_table_references(self, table: str) -> set[str]:
        references: set[str] = set()
        start = 0
        while True:
            rows = self._execute(
                self._client.table(table)
                .select(ASSET_REFERENCE_COLUMN)
                .not_.is_(ASSET_REFERENCE_COLUMN, "null")
                .range(start, start + _PAGE_SIZE - 1)
            )
            references.update(
                str(row[ASSET_REFERENCE_COLUMN]) for row in rows if row.get(ASSET_REFERENCE_COLUMN)
            )
            if len(rows) < _PAGE_SIZE:
                return references
            start += _PAGE_SIZE

    def _execute(self, query: Any) -> list[dict[str, Any]]:
        try:
            response = query.execute()
        except APIError as error:
            raise StoreWriteError(error.message or str(error)) from error
        except Exception as error:
            raise StoreWriteError(str(error)) from error
        return list(response.data or [])


def create_inventory_store(credentials: StoreCredentials) -> SupabaseInventoryStore:
    """Create a Supabase-backed store with session persistence disabled."""
    options = ClientOptions(auto_refresh_token=False, persist_session=False)
    client = create_client(credentials.url, credentials.service_key, options=options)
    return SupabaseInventoryStore(client)
