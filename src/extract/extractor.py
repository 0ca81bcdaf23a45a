"""Sheet extraction into header-keyed records.

This module zips sheet rows against the header row and collects one
snapshot per sheet. A failing or empty sheet never stops the others.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from core.config import StockSyncConfig
from core.errors import ExtractError
from core.logging_config import get_logger
from core.types import ExtractOptions, SheetSnapshot, SnapshotBundle, SourceRecord
from extract.sheet_source import CsvWorkbookSource, GoogleSheetsSource, SheetSource
from store.snapshot_archive import SnapshotArchive
from store.snapshot_store import SnapshotStore

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class SnapshotExport:
    """Result of one extraction run."""

    bundle: SnapshotBundle
    written_paths: tuple[Path, ...]
    archived_uris: tuple[str, ...] = ()


def rows_to_records(grid: Sequence[Sequence[str]]) -> list[SourceRecord]:
    """Convert a raw grid into header-keyed records.

    Args:
        grid: Sheet rows; row 0 is the header row.

    Returns:
        One record per non-blank data row. Cells beyond a short row and
        empty cells map to None.
    """
    if not grid:
        return []
    headers = [header.strip() for header in grid[0]]
    records: list[SourceRecord] = []
    for row in grid[1:]:
        if _is_blank_row(row):
            continue
        record: dict[str, str | None] = {}
        for index, header in enumerate(headers):
            if not header:
                continue
            cell = row[index] if index < len(row) else None
            record[header] = cell if cell not in (None, "") else None
        records.append(record)
    return records


def extract_sheets(source: SheetSource, sheet_names: Iterable[str]) -> SnapshotBundle:
    """Extract every named sheet from a source.

    Args:
        source: Sheet grid source.
        sheet_names: Sheets to extract, in output order.

    Returns:
        Snapshot bundle holding one entry per requested sheet.
    """
    sheets: list[SheetSnapshot] = []
    for sheet_name in sheet_names:
        records = _extract_sheet(source, sheet_name)
        sheets.append(SheetSnapshot(sheet_name=sheet_name, records=tuple(records)))
    return SnapshotBundle(sheets=tuple(sheets))


def _extract_sheet(source: SheetSource, sheet_name: str) -> list[SourceRecord]:
    try:
        grid = source.fetch_grid(sheet_name)
    except ExtractError as error:
        _LOGGER.warning("sheet_extract_failed", sheet_name=sheet_name, error=str(error))
        return []
    records = rows_to_records(grid)
    if not records:
        _LOGGER.warning("sheet_empty", sheet_name=sheet_name)
        return []
    _LOGGER.info("sheet_extracted", sheet_name=sheet_name, record_count=len(records))
    return records


def _is_blank_row(row: Sequence[str]) -> bool:
    return all(not (cell or "").strip() for cell in row)


def export_snapshot(
    options: ExtractOptions,
    config: StockSyncConfig,
    source: SheetSource | None = None,
) -> SnapshotExport:
    """Extract sheets and write the snapshot files for a load run.

    Args:
        options: Extract request options.
        config: Runtime configuration.
        source: Optional pre-built source; built from options and config when omitted.

    Returns:
        The extracted bundle, the written file paths, and any archived URIs.

    Raises:
        ConfigurationError: If sheet credentials or the archive URI are invalid;
            raised before any sheet is read.
        ExtractError: If a local CSV directory is missing.
    """
    archive = (
        SnapshotArchive.from_uri(options.archive_uri, config) if options.archive_uri else None
    )
    if source is None:
        source = _build_source(options, config)
    output_dir = Path(options.output_dir) if options.output_dir else config.snapshot_dir
    bundle = extract_sheets(source, options.sheet_names)
    written_paths = SnapshotStore(output_dir).write_bundle(bundle)
    archived_uris = archive.upload(written_paths) if archive is not None else []
    return SnapshotExport(
        bundle=bundle,
        written_paths=tuple(written_paths),
        archived_uris=tuple(archived_uris),
    )


def _build_source(options: ExtractOptions, config: StockSyncConfig) -> SheetSource:
    if options.source_dir:
        return CsvWorkbookSource(Path(options.source_dir).expanduser())
    return GoogleSheetsSource(config.require_sheet_credentials())
