"""Tabular sources for extraction.

This module fetches full rectangular grids per sheet name, either from
the Google Sheets API or from a local directory of CSV exports.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Protocol

from core.config import SheetCredentials
from core.constants import CSV_SHEET_FILE_SUFFIX, SHEET_COLUMN_RANGE, SHEETS_READONLY_SCOPE
from core.errors import DependencyError, ExtractError


class SheetSource(Protocol):
    """Source of raw sheet grids. Row 0 of a grid is the header row."""

    def fetch_grid(self, sheet_name: str) -> list[list[str]]:
        """Return every row of a sheet, or an empty list when it has none."""
        ...


def sheet_slug(sheet_name: str) -> str:
    """Return the file-name slug used for a sheet's snapshot and CSV files."""
    return sheet_name.strip().lower().replace(" ", "_")


class GoogleSheetsSource:
    """Read-only Google Sheets API source."""

    def __init__(self, credentials: SheetCredentials, service: Any | None = None) -> None:
        self._spreadsheet_id = credentials.spreadsheet_id
        self._service = service or _build_sheets_service(credentials)

    def fetch_grid(self, sheet_name: str) -> list[list[str]]:
        """Fetch columns A:Z of a sheet.

        Raises:
            ExtractError: If the API call fails.
        """
        try:
            response = (
                self._service.spreadsheets()
                .values()
                .get(spreadsheetId=self._spreadsheet_id, range=_sheet_range(sheet_name))
                .execute()
            )
        except Exception as error:
            raise ExtractError(
                f"Failed to read sheet '{sheet_name}' from spreadsheet "
                f"{self._spreadsheet_id}: {error}. Check the sheet name and that the "
                "service account has read access."
            ) from error
        return [[str(cell) for cell in row] for row in response.get("values", [])]


class CsvWorkbookSource:
    """Offline source reading ``<sheet_slug>.csv`` files from a directory."""

    def __init__(self, source_dir: Path) -> None:
        if not source_dir.is_dir():
            raise ExtractError(
                f"CSV workbook directory {source_dir} does not exist. "
                "Provide a directory holding one CSV export per sheet."
            )
        self._source_dir = source_dir

    def fetch_grid(self, sheet_name: str) -> list[list[str]]:
        """Read one sheet's CSV file; a missing file is an empty sheet."""
        csv_path = self._source_dir / f"{sheet_slug(sheet_name)}{CSV_SHEET_FILE_SUFFIX}"
        if not csv_path.exists():
            return []
        try:
            with csv_path.open(newline="", encoding="utf-8-sig") as handle:
                return [row for row in csv.reader(handle)]
        except (OSError, csv.Error, UnicodeDecodeError) as error:
            raise ExtractError(f"Failed to read CSV sheet at {csv_path}: {error}.") from error


def _sheet_range(sheet_name: str) -> str:
    escaped_name = sheet_name.replace("'", "''")
    return f"'{escaped_name}'!{SHEET_COLUMN_RANGE}"


def _build_sheets_service(credentials: SheetCredentials) -> Any:
    """Create a Google Sheets v4 API client.

    Raises:
        DependencyError: If the Google client libraries are missing.
    """
    try:
        from google.oauth2 import service_account
        from googleapiclient.discovery import build
    except ImportError as error:
        raise DependencyError(
            "Google Sheets extraction requires google-api-python-client and google-auth. "
            "Install the 'sheets' extra or extract from a CSV directory with --source-dir."
        ) from error
    google_credentials = service_account.Credentials.from_service_account_file(
        str(credentials.credentials_path),
        scopes=[SHEETS_READONLY_SCOPE],
    )
    return build("sheets", "v4", credentials=google_credentials, cache_discovery=False)
