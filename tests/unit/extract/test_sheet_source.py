"""Unit tests for sheet grid sources."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.config import SheetCredentials
from core.errors import ExtractError
from extract.sheet_source import CsvWorkbookSource, GoogleSheetsSource, sheet_slug
from fixture_paths import fixture_path


class _FakeRequest:
    def __init__(self, response: dict | None, error: Exception | None = None) -> None:
        self._response = response
        self._error = error

    def execute(self) -> dict:
        if self._error is not None:
            raise self._error
        return self._response or {}


class _FakeValues:
    def __init__(self, response: dict | None, error: Exception | None) -> None:
        self._response = response
        self._error = error
        self.ranges: list[str] = []

    def get(self, spreadsheetId: str, range: str) -> _FakeRequest:
        self.ranges.append(range)
        return _FakeRequest(self._response, self._error)


class _FakeSpreadsheets:
    def __init__(self, values: _FakeValues) -> None:
        self._values = values

    def values(self) -> _FakeValues:
        return self._values


class _FakeService:
    def __init__(self, response: dict | None = None, error: Exception | None = None) -> None:
        self.values = _FakeValues(response, error)

    def spreadsheets(self) -> _FakeSpreadsheets:
        return _FakeSpreadsheets(self.values)


def _credentials() -> SheetCredentials:
    return SheetCredentials(spreadsheet_id="sheet-123", credentials_path=Path("credentials.json"))


def test_sheet_slug_lowercases_and_joins_words() -> None:
    """Sheet names with spaces should map to underscore slugs."""
    assert sheet_slug("Mutasi Gudang") == "mutasi_gudang"


def test_csv_source_reads_header_and_rows() -> None:
    """CSV workbook source should return the header as row 0."""
    grid = CsvWorkbookSource(fixture_path("workbook")).fetch_grid("Vendor")

    assert grid[0][0] == "Kode Vendor" and grid[1][0] == "VND-001"


def test_csv_source_treats_missing_file_as_empty_sheet() -> None:
    """A sheet without a CSV file should be empty."""
    assert CsvWorkbookSource(fixture_path("workbook")).fetch_grid("Laporan") == []


def test_csv_source_rejects_missing_directory(tmp_path) -> None:
    """A missing workbook directory should fail at construction."""
    with pytest.raises(ExtractError, match="does not exist"):
        CsvWorkbookSource(tmp_path / "missing")


def test_google_source_quotes_sheet_range() -> None:
    """Sheet names should be quoted in the A:Z range request."""
    service = _FakeService({"values": [["Kode Barang"], ["BRG-001"]]})

    grid = GoogleSheetsSource(_credentials(), service=service).fetch_grid("Mutasi Gudang")

    assert service.values.ranges == ["'Mutasi Gudang'!A:Z"] and grid[1] == ["BRG-001"]


def test_google_source_wraps_api_errors() -> None:
    """API failures should surface as extract errors naming the sheet."""
    service = _FakeService(error=RuntimeError("403 forbidden"))

    with pytest.raises(ExtractError, match="Barang"):
        GoogleSheetsSource(_credentials(), service=service).fetch_grid("Barang")
