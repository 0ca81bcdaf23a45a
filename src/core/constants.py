"""Core constants used across stocksync modules.

This module centralizes file names, store identifiers, and limits.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".stocksync")
SNAPSHOT_DIR_NAME = "export"
COMBINED_SNAPSHOT_FILE_NAME = "combined_export.json"
SNAPSHOT_FILE_SUFFIX = ".json"
CSV_SHEET_FILE_SUFFIX = ".csv"
DEFAULT_GOOGLE_CREDENTIALS_FILE = "credentials.json"
SHEETS_READONLY_SCOPE = "https://www.googleapis.com/auth/spreadsheets.readonly"
SHEET_COLUMN_RANGE = "A:Z"

USERS_SHEET = "Users"
ITEMS_SHEET = "Barang"
VENDORS_SHEET = "Vendor"
PURCHASE_ORDERS_SHEET = "Pembelian"
STOCK_MUTATIONS_SHEET = "Mutasi Gudang"
DEFAULT_SHEET_NAMES = (
    USERS_SHEET,
    ITEMS_SHEET,
    VENDORS_SHEET,
    PURCHASE_ORDERS_SHEET,
    STOCK_MUTATIONS_SHEET,
)

UNIQUE_VIOLATION_CODE = "23505"
EMPTY_RESULT_CODE = "PGRST116"
STOCK_SUMMARY_REFRESH_FUNCTION = "refresh_stok_summary"
ASSET_REFERENCE_COLUMN = "gambar_url"
SUPABASE_HOST_SUFFIX = ".supabase.co"
JWT_PREFIX = "eyJ"

BCRYPT_ROUNDS = 10
BCRYPT_SIGNATURES = ("$2a$", "$2b$", "$2y$")

ASSET_DOMAIN_MARKER = "cloudinary.com"
ASSET_PATH_DELIMITER = "/upload/"
DEFAULT_ASSET_PREFIX = "trk-inventory/barang"
MAX_ASSET_LIST_RESULTS = 500
DEFAULT_LOAD_CONCURRENCY = 1
DEFAULT_PURCHASE_ORDER_STATUS = "Pending"
MAX_SECRET_BYTES = 72
SNAPSHOT_CONTENT_TYPE = "application/json; charset=utf-8"
ARCHIVE_RUN_STAMP_FORMAT = "%Y%m%dT%H%M%SZ"
