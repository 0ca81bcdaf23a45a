"""Shared typed models.

This module defines immutable data models used by extract, transform,
load, and asset layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Literal, Mapping, Union

SourceRecord = Mapping[str, Union[str, None]]

EntityKind = Literal["user", "vendor", "item", "purchase_order", "stock_mutation"]

ENTITY_LOAD_ORDER: tuple[EntityKind, ...] = (
    "user",
    "vendor",
    "item",
    "purchase_order",
    "stock_mutation",
)

AssetOutcome = Literal["deleted", "not_found", "failed", "underivable", "skipped"]


@dataclass(frozen=True)
class SheetSnapshot:
    """Records captured from one sheet during an extraction run.

    Attributes:
        sheet_name: Source sheet name.
        records: Header-keyed rows in sheet order.
    """

    sheet_name: str
    records: tuple[SourceRecord, ...]


@dataclass(frozen=True)
class SnapshotBundle:
    """All sheets captured by one extraction run, in request order."""

    sheets: tuple[SheetSnapshot, ...]

    def records_for(self, sheet_name: str) -> tuple[SourceRecord, ...]:
        """Return records for a sheet, or an empty tuple when absent."""
        for sheet in self.sheets:
            if sheet.sheet_name == sheet_name:
                return sheet.records
        return ()

    def combined(self) -> dict[str, list[dict[str, str | None]]]:
        """Return the combined sheet-name to records mapping."""
        return {
            sheet.sheet_name: [dict(record) for record in sheet.records]
            for sheet in self.sheets
        }


@dataclass(frozen=True)
class UserEntity:
    """Canonical user account. ``password_hash`` is always a bcrypt hash."""

    email: str
    password_hash: str
    user_id: str | None
    full_name: str | None
    role: str | None
    status: str | None
    phone: str | None
    department: str | None
    created_at: datetime
    last_login: datetime | None

    @property
    def natural_key(self) -> str:
        return self.email

    def to_row(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "password_hash": self.password_hash,
            "full_name": self.full_name,
            "role": self.role,
            "status": self.status,
            "phone": self.phone,
            "department": self.department,
            "created_at": self.created_at.isoformat(),
            "last_login": self.last_login.isoformat() if self.last_login else None,
        }


@dataclass(frozen=True)
class VendorEntity:
    """Canonical vendor record keyed by vendor code."""

    vendor_code: str
    name: str
    contact: str | None
    address: str | None
    email: str | None
    phone: str | None
    notes: str | None
    image_url: str | None = None
    is_active: bool = True

    @property
    def natural_key(self) -> str:
        return self.vendor_code

    def to_row(self) -> dict[str, Any]:
        return {
            "kode_vendor": self.vendor_code,
            "nama_vendor": self.name,
            "kontak": self.contact,
            "alamat": self.address,
            "email": self.email,
            "telepon": self.phone,
            "keterangan": self.notes,
            "gambar_url": self.image_url,
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class ItemEntity:
    """Canonical inventory item keyed by item code."""

    item_code: str
    name: str
    category: str | None
    machine: str | None
    unit: str | None
    unit_price: float
    min_stock: int
    max_stock: int | None
    warehouse_location: str | None
    primary_supplier: str | None
    notes: str | None
    image_url: str | None = None
    is_active: bool = True

    @property
    def natural_key(self) -> str:
        return self.item_code

    def to_row(self) -> dict[str, Any]:
        return {
            "kode_barang": self.item_code,
            "nama_barang": self.name,
            "kategori": self.category,
            "mesin": self.machine,
            "satuan": self.unit,
            "harga_satuan": self.unit_price,
            "min_stok": self.min_stock,
            "max_stok": self.max_stock,
            "lokasi_gudang": self.warehouse_location,
            "supplier_utama": self.primary_supplier,
            "keterangan": self.notes,
            "gambar_url": self.image_url,
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class PurchaseOrderEntity:
    """Canonical purchase order line referencing a vendor and an item."""

    po_number: str
    order_date: date
    vendor_code: str
    vendor_name: str | None
    item_code: str
    item_name: str | None
    quantity: int
    unit_price: float
    received_date: date | None
    status: str
    notes: str | None

    @property
    def natural_key(self) -> str:
        return self.po_number

    def to_row(self) -> dict[str, Any]:
        return {
            "no_po": self.po_number,
            "tanggal_po": self.order_date.isoformat(),
            "kode_vendor": self.vendor_code,
            "nama_vendor": self.vendor_name,
            "kode_barang": self.item_code,
            "nama_barang": self.item_name,
            "qty_order": self.quantity,
            "harga_satuan": self.unit_price,
            "tanggal_terima": self.received_date.isoformat() if self.received_date else None,
            "status": self.status,
            "keterangan": self.notes,
        }


@dataclass(frozen=True)
class StockMutationEntity:
    """Canonical warehouse stock movement referencing an item."""

    transaction_number: str
    transaction_date: date
    mutation_type: str
    item_code: str
    item_name: str | None
    quantity: int
    unit: str | None
    notes: str | None
    reference: str | None

    @property
    def natural_key(self) -> str:
        return self.transaction_number

    def to_row(self) -> dict[str, Any]:
        return {
            "no_transaksi": self.transaction_number,
            "tanggal": self.transaction_date.isoformat(),
            "jenis_transaksi": self.mutation_type,
            "kode_barang": self.item_code,
            "nama_barang": self.item_name,
            "qty": self.quantity,
            "satuan": self.unit,
            "keterangan": self.notes,
            "referensi": self.reference,
        }


CanonicalEntity = Union[
    UserEntity, VendorEntity, ItemEntity, PurchaseOrderEntity, StockMutationEntity
]


@dataclass(frozen=True)
class RecordFailure:
    """Identity and reason for one record that failed to load.

    Attributes:
        record_identity: Natural key, or a row locator when the key is missing.
        message: Failure reason.
    """

    record_identity: str
    message: str


@dataclass(frozen=True)
class ImportOutcome:
    """Per entity-kind tally of one load run."""

    kind: EntityKind
    inserted: int = 0
    duplicate: int = 0
    skipped: int = 0
    failures: tuple[RecordFailure, ...] = ()

    @property
    def error(self) -> int:
        return len(self.failures)

    @property
    def total(self) -> int:
        return self.inserted + self.duplicate + self.skipped + self.error


@dataclass(frozen=True)
class LoadOptions:
    """Load command options.

    Attributes:
        snapshot_dir: Optional override for the snapshot input directory.
        concurrency: Optional override for per-kind record concurrency.
        refresh_aggregates: Refresh the stock summary view after loading.
    """

    snapshot_dir: str | None = None
    concurrency: int | None = None
    refresh_aggregates: bool = True


@dataclass(frozen=True)
class LoadSummary:
    """Outcome of a full load run across all entity kinds."""

    outcomes: tuple[ImportOutcome, ...]
    aggregate_refreshed: bool

    @property
    def inserted(self) -> int:
        return sum(outcome.inserted for outcome in self.outcomes)

    @property
    def duplicate(self) -> int:
        return sum(outcome.duplicate for outcome in self.outcomes)

    @property
    def skipped(self) -> int:
        return sum(outcome.skipped for outcome in self.outcomes)

    @property
    def error(self) -> int:
        return sum(outcome.error for outcome in self.outcomes)

    def outcome_for(self, kind: EntityKind) -> ImportOutcome:
        """Return the outcome for one entity kind."""
        for outcome in self.outcomes:
            if outcome.kind == kind:
                return outcome
        return ImportOutcome(kind=kind)


@dataclass(frozen=True)
class ExtractOptions:
    """Extract command options.

    Attributes:
        sheet_names: Sheets to export, in order.
        source_dir: Optional local CSV workbook directory instead of the sheets API.
        output_dir: Optional override for the snapshot output directory.
        archive_uri: Optional ``s3://bucket/prefix`` archive destination.
    """

    sheet_names: tuple[str, ...]
    source_dir: str | None = None
    output_dir: str | None = None
    archive_uri: str | None = None


@dataclass(frozen=True)
class StoredAsset:
    """One object listed from object storage."""

    key: str
    url: str
    format: str | None
    size_bytes: int | None
    created_at: str | None

    def to_payload(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "url": self.url,
            "format": self.format,
            "sizeBytes": self.size_bytes,
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class AssetDeletionResult:
    """Outcome of one best-effort object deletion.

    Attributes:
        outcome: Deletion classification.
        key: Object key addressed, when one was derived.
        url: Source URL when the deletion started from a URL.
        detail: Failure or skip reason for operator review.
    """

    outcome: AssetOutcome
    key: str | None = None
    url: str | None = None
    detail: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome in ("deleted", "not_found")

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"outcome": self.outcome}
        if self.url is not None:
            payload["derivedKey"] = self.key
        else:
            payload["key"] = self.key
        if self.detail:
            payload["detail"] = self.detail
        return payload


@dataclass(frozen=True)
class MutationResult:
    """Committed store mutation plus its follow-up asset cleanup."""

    row: Mapping[str, Any] | None
    cleanup: AssetDeletionResult


@dataclass(frozen=True)
class OrphanReport:
    """Storage URLs against store-referenced URLs at scan time."""

    storage_urls: frozenset[str]
    store_urls: frozenset[str]
    prefix: str
    scanned_at: datetime = field(
        compare=False,
        default_factory=lambda: datetime.now(timezone.utc),
    )

    @property
    def orphans(self) -> list[str]:
        return sorted(self.storage_urls - self.store_urls)

    def to_payload(self) -> dict[str, Any]:
        orphans = self.orphans
        return {
            "totalInStorage": len(self.storage_urls),
            "totalInStore": len(self.store_urls),
            "orphanCount": len(orphans),
            "orphans": orphans,
        }
