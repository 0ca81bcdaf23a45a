"""Snapshot file store.

This module persists extraction snapshots as human-readable JSON files:
one array-of-objects document per sheet and one combined document.
Re-running an extraction replaces the files rather than merging them.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from core.constants import COMBINED_SNAPSHOT_FILE_NAME, SNAPSHOT_FILE_SUFFIX
from core.errors import SnapshotMissingError, StockSyncError
from core.logging_config import get_logger
from core.types import SheetSnapshot, SnapshotBundle, SourceRecord
from extract.sheet_source import sheet_slug

_LOGGER = get_logger(__name__)


class SnapshotStore:
    """Filesystem-backed snapshot store rooted at one directory."""

    def __init__(self, snapshot_dir: Path) -> None:
        self._snapshot_dir = snapshot_dir

    @property
    def snapshot_dir(self) -> Path:
        return self._snapshot_dir

    def write_bundle(self, bundle: SnapshotBundle) -> list[Path]:
        """Write per-sheet documents and the combined document.

        Args:
            bundle: Extracted sheets.

        Returns:
            Written file paths, combined document last.

        Raises:
            StockSyncError: If files cannot be written.
        """
        self._snapshot_dir.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        for sheet in bundle.sheets:
            sheet_path = self.sheet_path(sheet.sheet_name)
            _write_json(sheet_path, [dict(record) for record in sheet.records])
            written.append(sheet_path)
        combined_path = self._snapshot_dir / COMBINED_SNAPSHOT_FILE_NAME
        _write_json(combined_path, bundle.combined())
        written.append(combined_path)
        _LOGGER.info(
            "snapshot_written",
            snapshot_dir=str(self._snapshot_dir),
            sheet_counts={sheet.sheet_name: len(sheet.records) for sheet in bundle.sheets},
        )
        return written

    def load_bundle(self, sheet_names: Iterable[str]) -> SnapshotBundle:
        """Read per-sheet documents for a load run.

        Args:
            sheet_names: Sheets required by the load, in load order.

        Returns:
            Snapshot bundle with one entry per requested sheet.

        Raises:
            SnapshotMissingError: If the directory or any sheet document is missing.
        """
        if not self._snapshot_dir.is_dir():
            raise SnapshotMissingError(
                f"Snapshot directory {self._snapshot_dir} not found. "
                "Run `stocksync extract` first or pass --snapshot-dir."
            )
        sheets = [
            SheetSnapshot(sheet_name=name, records=tuple(self._read_sheet(name)))
            for name in sheet_names
        ]
        return SnapshotBundle(sheets=tuple(sheets))

    def sheet_path(self, sheet_name: str) -> Path:
        return self._snapshot_dir / f"{sheet_slug(sheet_name)}{SNAPSHOT_FILE_SUFFIX}"

    def _read_sheet(self, sheet_name: str) -> list[SourceRecord]:
        sheet_path = self.sheet_path(sheet_name)
        if not sheet_path.exists():
            raise SnapshotMissingError(
                f"Snapshot file {sheet_path} for sheet '{sheet_name}' not found. "
                "Run `stocksync extract` first to export the source sheets."
            )
        try:
            payload = json.loads(sheet_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as error:
            raise SnapshotMissingError(
                f"Failed to read snapshot file {sheet_path}: {error}. "
                "Re-run `stocksync extract` to rebuild the snapshot."
            ) from error
        return _records_from_payload(sheet_path, payload)


def _records_from_payload(sheet_path: Path, payload: Any) -> list[SourceRecord]:
    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        raise SnapshotMissingError(
            f"Snapshot file {sheet_path} is not an array of objects. "
            "Re-run `stocksync extract` to rebuild the snapshot."
        )
    return [
        {str(key): None if value is None else str(value) for key, value in item.items()}
        for item in payload
    ]


def _write_json(path: Path, payload: Any) -> None:
    try:
        path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
    except OSError as error:
        raise StockSyncError(
            f"Failed to write snapshot file {path}: {error}. "
            "Check write permissions and available disk space."
        ) from error
