"""Per-kind schema mapping from sheet records to canonical entities.

Each entity kind has one mapper that renames source columns, coerces
field types with a fixed default policy, and validates required fields.
``map_records`` runs a mapper over a sheet and classifies every row as
mapped, skipped, or failed without aborting the sheet.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, Mapping

from core.constants import (
    DEFAULT_PURCHASE_ORDER_STATUS,
    ITEMS_SHEET,
    PURCHASE_ORDERS_SHEET,
    STOCK_MUTATIONS_SHEET,
    USERS_SHEET,
    VENDORS_SHEET,
)
from core.errors import MappingError
from core.types import (
    CanonicalEntity,
    EntityKind,
    ItemEntity,
    PurchaseOrderEntity,
    RecordFailure,
    SourceRecord,
    StockMutationEntity,
    UserEntity,
    VendorEntity,
)
from transforms.coercion import (
    float_or_default,
    int_or_default,
    optional_date,
    optional_text,
    optional_timestamp,
    optional_url,
    required_date,
    required_float,
    required_int,
    required_text,
)
from transforms.secret_hashing import ensure_hashed

SHEET_FOR_KIND: Mapping[EntityKind, str] = {
    "user": USERS_SHEET,
    "vendor": VENDORS_SHEET,
    "item": ITEMS_SHEET,
    "purchase_order": PURCHASE_ORDERS_SHEET,
    "stock_mutation": STOCK_MUTATIONS_SHEET,
}

# Column holding each kind's natural key, used to label failures.
NATURAL_KEY_COLUMN: Mapping[EntityKind, str] = {
    "user": "Email",
    "vendor": "Kode Vendor",
    "item": "Kode Barang",
    "purchase_order": "No PO",
    "stock_mutation": "No Transaksi",
}


class SkipRecord(Exception):
    """Signals a record that is intentionally not loaded."""


@dataclass(frozen=True)
class MappedRecord:
    """One successfully mapped source row."""

    row_number: int
    entity: CanonicalEntity


@dataclass(frozen=True)
class MappingResult:
    """Mapping output for one sheet.

    Attributes:
        kind: Entity kind that was mapped.
        mapped: Entities in sheet order.
        skipped: Identities of rows intentionally not loaded.
        failures: Rows that failed validation.
    """

    kind: EntityKind
    mapped: tuple[MappedRecord, ...]
    skipped: tuple[str, ...]
    failures: tuple[RecordFailure, ...]


def map_user(record: SourceRecord) -> UserEntity:
    """Map a ``Users`` row. Rows without a password are skipped."""
    secret = optional_text(record.get("Password"))
    if secret is None:
        email_text = optional_text(record.get("Email")) or "without email"
        raise SkipRecord(f"user {email_text} has no password")
    email = required_text(record.get("Email"), "Email")
    return UserEntity(
        email=email,
        password_hash=ensure_hashed(secret),
        user_id=optional_text(record.get("User ID")),
        full_name=optional_text(record.get("Full Name")),
        role=optional_text(record.get("Role")),
        status=optional_text(record.get("Status")),
        phone=optional_text(record.get("Phone")),
        department=optional_text(record.get("Department")),
        created_at=optional_timestamp(record.get("Created Date"), "Created Date")
        or datetime.now(timezone.utc),
        last_login=optional_timestamp(record.get("Last Login"), "Last Login"),
    )


def map_vendor(record: SourceRecord) -> VendorEntity:
    return VendorEntity(
        vendor_code=required_text(record.get("Kode Vendor"), "Kode Vendor"),
        name=required_text(record.get("Nama Vendor"), "Nama Vendor"),
        contact=optional_text(record.get("Kontak")),
        address=optional_text(record.get("Alamat")),
        email=optional_text(record.get("Email")),
        phone=optional_text(record.get("Telepon")),
        notes=optional_text(record.get("Keterangan")),
        image_url=optional_url(record.get("Logo URL"), "Logo URL"),
    )


def map_item(record: SourceRecord) -> ItemEntity:
    """Map a ``Barang`` row; price and minimum stock default to zero."""
    return ItemEntity(
        item_code=required_text(record.get("Kode Barang"), "Kode Barang"),
        name=required_text(record.get("Nama Barang"), "Nama Barang"),
        category=optional_text(record.get("Kategori")),
        machine=optional_text(record.get("Mesin")),
        unit=optional_text(record.get("Satuan")),
        unit_price=float_or_default(record.get("Harga Satuan"), "Harga Satuan", 0.0) or 0.0,
        min_stock=int_or_default(record.get("Min Stok"), "Min Stok", 0) or 0,
        max_stock=int_or_default(record.get("Max Stok"), "Max Stok", None),
        warehouse_location=optional_text(record.get("Lokasi Gudang")),
        primary_supplier=optional_text(record.get("Supplier Utama")),
        notes=optional_text(record.get("Keterangan")),
        image_url=optional_url(record.get("Gambar URL"), "Gambar URL"),
    )


def map_purchase_order(record: SourceRecord) -> PurchaseOrderEntity:
    return PurchaseOrderEntity(
        po_number=required_text(record.get("No PO"), "No PO"),
        order_date=required_date(record.get("Tanggal PO"), "Tanggal PO"),
        vendor_code=required_text(record.get("Kode Vendor"), "Kode Vendor"),
        vendor_name=optional_text(record.get("Nama Vendor")),
        item_code=required_text(record.get("Kode Barang"), "Kode Barang"),
        item_name=optional_text(record.get("Nama Barang")),
        quantity=required_int(record.get("Qty Order"), "Qty Order"),
        unit_price=required_float(record.get("Harga Satuan"), "Harga Satuan"),
        received_date=optional_date(record.get("Tanggal Terima"), "Tanggal Terima"),
        status=optional_text(record.get("Status")) or DEFAULT_PURCHASE_ORDER_STATUS,
        notes=optional_text(record.get("Keterangan")),
    )


def map_stock_mutation(record: SourceRecord) -> StockMutationEntity:
    return StockMutationEntity(
        transaction_number=required_text(record.get("No Transaksi"), "No Transaksi"),
        transaction_date=required_date(record.get("Tanggal"), "Tanggal"),
        mutation_type=required_text(record.get("Jenis Transaksi"), "Jenis Transaksi"),
        item_code=required_text(record.get("Kode Barang"), "Kode Barang"),
        item_name=optional_text(record.get("Nama Barang")),
        quantity=required_int(record.get("Qty"), "Qty"),
        unit=optional_text(record.get("Satuan")),
        notes=optional_text(record.get("Keterangan")),
        reference=optional_text(record.get("Referensi")),
    )


_MAPPERS: Mapping[EntityKind, Callable[[SourceRecord], CanonicalEntity]] = {
    "user": map_user,
    "vendor": map_vendor,
    "item": map_item,
    "purchase_order": map_purchase_order,
    "stock_mutation": map_stock_mutation,
}


def map_records(kind: EntityKind, records: Iterable[SourceRecord]) -> MappingResult:
    """Map every record of one sheet into canonical entities.

    Args:
        kind: Entity kind of the sheet.
        records: Header-keyed source rows.

    Returns:
        Mapped entities plus skipped and failed row identities.
    """
    mapper = _MAPPERS[kind]
    mapped: list[MappedRecord] = []
    skipped: list[str] = []
    failures: list[RecordFailure] = []
    for row_number, record in enumerate(records, 2):
        try:
            mapped.append(MappedRecord(row_number=row_number, entity=mapper(record)))
        except SkipRecord as skip:
            skipped.append(str(skip))
        except MappingError as error:
            identity = record_identity(kind, record, row_number)
            failures.append(RecordFailure(record_identity=identity, message=str(error)))
    return MappingResult(
        kind=kind,
        mapped=tuple(mapped),
        skipped=tuple(skipped),
        failures=tuple(failures),
    )


def record_identity(kind: EntityKind, record: SourceRecord, row_number: int) -> str:
    """Return the natural key of a raw record, or its sheet row locator."""
    key = optional_text(record.get(NATURAL_KEY_COLUMN[kind]))
    if key is not None:
        return key
    return f"{SHEET_FOR_KIND[kind]}!row{row_number}"
