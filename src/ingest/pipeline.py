"""Idempotent load orchestration.

This module maps snapshot records into canonical entities and inserts
them kind by kind in dependency order. Natural-key conflicts count as
duplicates, so a snapshot can be loaded any number of times.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Sequence

from core.config import StockSyncConfig
from core.errors import DuplicateKeyError, StoreWriteError
from core.logging_config import get_logger
from core.types import (
    ENTITY_LOAD_ORDER,
    EntityKind,
    ImportOutcome,
    LoadOptions,
    LoadSummary,
    RecordFailure,
    SnapshotBundle,
    SourceRecord,
)
from store.inventory_store import InventoryStore, create_inventory_store
from store.snapshot_store import SnapshotStore
from transforms.schema_mapping import SHEET_FOR_KIND, MappedRecord, map_records

_LOGGER = get_logger(__name__)

InsertStatus = Literal["inserted", "duplicate", "error"]


@dataclass(frozen=True)
class _InsertResult:
    status: InsertStatus
    failure: RecordFailure | None = None


class LoadPipelineRunner:
    """Runner for one dependency-ordered load of a snapshot bundle."""

    def __init__(
        self,
        store: InventoryStore,
        concurrency: int = 1,
        refresh_aggregates: bool = True,
    ) -> None:
        self._store = store
        self._concurrency = max(1, concurrency)
        self._refresh_aggregates = refresh_aggregates

    def run(self, bundle: SnapshotBundle) -> LoadSummary:
        """Load every entity kind and refresh aggregates.

        Kinds run strictly in ``ENTITY_LOAD_ORDER``; a kind starts only
        after every record of the previous kind has been attempted.
        """
        outcomes = tuple(
            self.load_kind(kind, bundle.records_for(SHEET_FOR_KIND[kind]))
            for kind in ENTITY_LOAD_ORDER
        )
        summary = LoadSummary(
            outcomes=outcomes,
            aggregate_refreshed=self._refresh_stock_summary(),
        )
        _log_load_completion(summary)
        return summary

    def load_kind(self, kind: EntityKind, records: Sequence[SourceRecord]) -> ImportOutcome:
        """Map and insert all records of one kind.

        Args:
            kind: Entity kind being loaded.
            records: Raw records from the kind's sheet.

        Returns:
            Per-kind tally of inserted, duplicate, skipped, and failed records.
        """
        mapping = map_records(kind, records)
        for reason in mapping.skipped:
            _LOGGER.info("record_skipped", kind=kind, reason=reason)
        for failure in mapping.failures:
            _log_failure(kind, failure, stage="mapping")
        results = self._insert_all(kind, mapping.mapped)
        outcome = ImportOutcome(
            kind=kind,
            inserted=sum(1 for result in results if result.status == "inserted"),
            duplicate=sum(1 for result in results if result.status == "duplicate"),
            skipped=len(mapping.skipped),
            failures=mapping.failures
            + tuple(result.failure for result in results if result.failure is not None),
        )
        _LOGGER.info(
            "kind_loaded",
            kind=kind,
            inserted=outcome.inserted,
            duplicate=outcome.duplicate,
            skipped=outcome.skipped,
            error=outcome.error,
        )
        return outcome

    def _insert_all(
        self,
        kind: EntityKind,
        mapped: Sequence[MappedRecord],
    ) -> list[_InsertResult]:
        if self._concurrency == 1 or len(mapped) < 2:
            return [self._insert_one(kind, record) for record in mapped]
        with ThreadPoolExecutor(max_workers=self._concurrency) as executor:
            return list(executor.map(lambda record: self._insert_one(kind, record), mapped))

    def _insert_one(self, kind: EntityKind, record: MappedRecord) -> _InsertResult:
        natural_key = record.entity.natural_key
        try:
            self._store.insert(kind, record.entity.to_row())
        except DuplicateKeyError:
            _LOGGER.info("record_duplicate", kind=kind, natural_key=natural_key)
            return _InsertResult(status="duplicate")
        except StoreWriteError as error:
            failure = RecordFailure(record_identity=natural_key, message=str(error))
            _log_failure(kind, failure, stage="insert")
            return _InsertResult(status="error", failure=failure)
        _LOGGER.info("record_inserted", kind=kind, natural_key=natural_key)
        return _InsertResult(status="inserted")

    def _refresh_stock_summary(self) -> bool:
        if not self._refresh_aggregates:
            return False
        try:
            self._store.refresh_stock_summary()
        except StoreWriteError as error:
            _LOGGER.error("aggregate_refresh_failed", error=str(error))
            return False
        _LOGGER.info("aggregate_refreshed")
        return True


def load_snapshot(
    options: LoadOptions,
    config: StockSyncConfig,
    store: InventoryStore | None = None,
) -> LoadSummary:
    """Run a full load of the extraction snapshot into the relational store.

    Args:
        options: Load request options.
        config: Runtime configuration.
        store: Optional pre-built store; built from config credentials when omitted.

    Returns:
        Per-kind and aggregate load summary.

    Raises:
        ConfigurationError: If store credentials are missing or malformed.
        SnapshotMissingError: If the snapshot has not been extracted.
        StoreConnectionError: If the store cannot be reached.
    """
    if store is None:
        store = create_inventory_store(config.require_store_credentials())
    snapshot_dir = Path(options.snapshot_dir) if options.snapshot_dir else config.snapshot_dir
    bundle = SnapshotStore(snapshot_dir).load_bundle(
        SHEET_FOR_KIND[kind] for kind in ENTITY_LOAD_ORDER
    )
    _LOGGER.info(
        "snapshot_loaded",
        snapshot_dir=str(snapshot_dir),
        sheet_counts={sheet.sheet_name: len(sheet.records) for sheet in bundle.sheets},
    )
    store.check_connection()
    runner = LoadPipelineRunner(
        store,
        concurrency=options.concurrency or config.load_concurrency,
        refresh_aggregates=options.refresh_aggregates,
    )
    return runner.run(bundle)


def _log_failure(kind: EntityKind, failure: RecordFailure, stage: str) -> None:
    _LOGGER.error(
        "record_failed",
        kind=kind,
        natural_key=failure.record_identity,
        stage=stage,
        error=failure.message,
    )


def _log_load_completion(summary: LoadSummary) -> None:
    """Log run completion with per-kind and aggregate counts."""
    _LOGGER.info(
        "load_completed",
        inserted=summary.inserted,
        duplicate=summary.duplicate,
        skipped=summary.skipped,
        error=summary.error,
        aggregate_refreshed=summary.aggregate_refreshed,
        per_kind={
            outcome.kind: {
                "inserted": outcome.inserted,
                "duplicate": outcome.duplicate,
                "skipped": outcome.skipped,
                "error": outcome.error,
            }
            for outcome in summary.outcomes
        },
    )
