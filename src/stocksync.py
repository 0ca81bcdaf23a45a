"""Public SDK surface for stocksync.

This module provides a stable import path for SDK users.
It re-exports the primary client and typed option models.
"""

from __future__ import annotations

from core.asset_url import derive_object_key
from core.config import StockSyncConfig
from core.types import (
    AssetDeletionResult,
    ExtractOptions,
    ImportOutcome,
    LoadOptions,
    LoadSummary,
    OrphanReport,
    StoredAsset,
)
from ingest.pipeline import LoadPipelineRunner
from store.sync_sdk import StockSyncClient

__all__ = [
    "AssetDeletionResult",
    "ExtractOptions",
    "ImportOutcome",
    "LoadOptions",
    "LoadPipelineRunner",
    "LoadSummary",
    "OrphanReport",
    "StockSyncClient",
    "StockSyncConfig",
    "StoredAsset",
    "derive_object_key",
]
