"""stocksync exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class StockSyncError(Exception):
    """Base exception for all stocksync failures."""


class ConfigurationError(StockSyncError):
    """Raised for missing or malformed credentials and endpoints."""


class DependencyError(StockSyncError):
    """Raised when an optional runtime dependency is missing."""


class ExtractError(StockSyncError):
    """Raised when a source sheet cannot be read."""


class SnapshotMissingError(StockSyncError):
    """Raised when a load run cannot find its snapshot input."""


class MappingError(StockSyncError):
    """Raised when a source record cannot become a canonical entity."""

    def __init__(self, message: str, field_name: str | None = None) -> None:
        super().__init__(message)
        self.field_name = field_name


class StoreError(StockSyncError):
    """Base class for relational store failures."""


class DuplicateKeyError(StoreError):
    """Raised when an insert conflicts on the natural key."""


class StoreWriteError(StoreError):
    """Raised for any non-duplicate store write failure."""


class StoreConnectionError(StoreError):
    """Raised when the relational store cannot be reached at run start."""


class EntityNotFoundError(StoreError):
    """Raised when a mutation targets a row that does not exist."""


class AssetOperationError(StockSyncError):
    """Raised by object storage adapters for listing or deletion failures."""
