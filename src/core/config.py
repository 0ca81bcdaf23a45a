"""Runtime configuration model for stocksync.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from urllib.parse import urlparse

from core.constants import (
    DEFAULT_DATA_ROOT,
    DEFAULT_GOOGLE_CREDENTIALS_FILE,
    DEFAULT_LOAD_CONCURRENCY,
    JWT_PREFIX,
    SNAPSHOT_DIR_NAME,
    SUPABASE_HOST_SUFFIX,
)
from core.errors import ConfigurationError


@dataclass(frozen=True)
class StoreCredentials:
    """Validated relational store endpoint and service key."""

    url: str
    service_key: str


@dataclass(frozen=True)
class ObjectStorageCredentials:
    """Validated object storage account credentials."""

    cloud_name: str
    api_key: str
    api_secret: str


@dataclass(frozen=True)
class SheetCredentials:
    """Validated spreadsheet id and service-account credentials path."""

    spreadsheet_id: str
    credentials_path: Path


@dataclass(frozen=True)
class StockSyncConfig:
    """Runtime configuration.

    Attributes:
        data_root: Local root directory for run artifacts.
        snapshot_dir: Directory holding extraction snapshot files.
        load_concurrency: Per-kind record concurrency bound for loads.
        spreadsheet_id: Source spreadsheet identifier.
        google_credentials_path: Service-account JSON for the sheets API.
        supabase_url: Relational store endpoint.
        supabase_service_key: Relational store service-role key.
        cloudinary_cloud_name: Object storage account name.
        cloudinary_api_key: Object storage API key.
        cloudinary_api_secret: Object storage API secret.
        s3_region: Optional default AWS region for snapshot archives.
        s3_profile: Optional AWS profile for boto3 session initialization.
    """

    data_root: Path
    snapshot_dir: Path
    load_concurrency: int = DEFAULT_LOAD_CONCURRENCY
    spreadsheet_id: str | None = None
    google_credentials_path: Path = Path(DEFAULT_GOOGLE_CREDENTIALS_FILE)
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    cloudinary_cloud_name: str | None = None
    cloudinary_api_key: str | None = None
    cloudinary_api_secret: str | None = None
    s3_region: str | None = None
    s3_profile: str | None = None

    @classmethod
    def from_env(cls) -> "StockSyncConfig":
        """Build config from process environment variables.

        Returns:
            A parsed config object. Service credentials are validated
            separately by the ``require_*`` methods.

        Raises:
            ConfigurationError: If environment values are invalid.
        """
        data_root = Path(os.getenv("STOCKSYNC_DATA_ROOT", str(DEFAULT_DATA_ROOT)))
        data_root = data_root.expanduser().resolve()
        snapshot_dir_value = os.getenv("STOCKSYNC_SNAPSHOT_DIR")
        snapshot_dir = (
            Path(snapshot_dir_value).expanduser().resolve()
            if snapshot_dir_value
            else data_root / SNAPSHOT_DIR_NAME
        )
        return cls(
            data_root=data_root,
            snapshot_dir=snapshot_dir,
            load_concurrency=_parse_concurrency(
                os.getenv("STOCKSYNC_LOAD_CONCURRENCY", str(DEFAULT_LOAD_CONCURRENCY))
            ),
            spreadsheet_id=_optional_env("SPREADSHEET_ID"),
            google_credentials_path=Path(
                os.getenv("GOOGLE_CREDENTIALS_FILE", DEFAULT_GOOGLE_CREDENTIALS_FILE)
            ).expanduser(),
            supabase_url=_optional_env("SUPABASE_URL"),
            supabase_service_key=_optional_env("SUPABASE_SERVICE_KEY"),
            cloudinary_cloud_name=_optional_env("CLOUDINARY_CLOUD_NAME"),
            cloudinary_api_key=_optional_env("CLOUDINARY_API_KEY"),
            cloudinary_api_secret=_optional_env("CLOUDINARY_API_SECRET"),
            s3_region=_optional_env("STOCKSYNC_S3_REGION"),
            s3_profile=_optional_env("STOCKSYNC_S3_PROFILE"),
        )

    def require_store_credentials(self) -> StoreCredentials:
        """Validate relational store settings before any store I/O.

        Raises:
            ConfigurationError: If the URL or service key is missing or malformed.
        """
        if not self.supabase_url:
            raise ConfigurationError(
                "SUPABASE_URL is not set. Add SUPABASE_URL=https://<project>.supabase.co "
                "to the environment or .env file."
            )
        if not self.supabase_service_key:
            raise ConfigurationError(
                "SUPABASE_SERVICE_KEY is not set. Copy the service_role key (not the anon key) "
                "from Settings -> API in the Supabase dashboard."
            )
        _validate_supabase_url(self.supabase_url)
        if not self.supabase_service_key.startswith(JWT_PREFIX):
            raise ConfigurationError(
                "SUPABASE_SERVICE_KEY does not look like a JWT token "
                f"(expected prefix '{JWT_PREFIX}'). Use the service_role key, not the anon key."
            )
        return StoreCredentials(url=self.supabase_url, service_key=self.supabase_service_key)

    def require_object_storage_credentials(self) -> ObjectStorageCredentials:
        """Validate object storage account settings.

        Raises:
            ConfigurationError: If any Cloudinary setting is missing.
        """
        settings = {
            "CLOUDINARY_CLOUD_NAME": self.cloudinary_cloud_name,
            "CLOUDINARY_API_KEY": self.cloudinary_api_key,
            "CLOUDINARY_API_SECRET": self.cloudinary_api_secret,
        }
        missing = [name for name, value in settings.items() if not value]
        if missing:
            raise ConfigurationError(
                f"Missing object storage setting(s): {', '.join(missing)}. "
                "Copy them from the Cloudinary dashboard into the environment or .env file."
            )
        return ObjectStorageCredentials(
            cloud_name=str(self.cloudinary_cloud_name),
            api_key=str(self.cloudinary_api_key),
            api_secret=str(self.cloudinary_api_secret),
        )

    def require_sheet_credentials(self) -> SheetCredentials:
        """Validate spreadsheet source settings.

        Raises:
            ConfigurationError: If the spreadsheet id or credentials file is missing.
        """
        if not self.spreadsheet_id:
            raise ConfigurationError(
                "SPREADSHEET_ID is not set. Copy the id from the spreadsheet URL "
                "(the part between /d/ and /edit)."
            )
        if not self.google_credentials_path.is_file():
            raise ConfigurationError(
                f"Google credentials file not found at {self.google_credentials_path}. "
                "Download a service-account key and set GOOGLE_CREDENTIALS_FILE."
            )
        return SheetCredentials(
            spreadsheet_id=self.spreadsheet_id,
            credentials_path=self.google_credentials_path,
        )


def _optional_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _parse_concurrency(raw_value: str) -> int:
    """Parse the load concurrency environment value.

    Raises:
        ConfigurationError: If value is not a positive integer.
    """
    try:
        concurrency = int(raw_value)
    except ValueError as error:
        raise ConfigurationError(
            "Invalid STOCKSYNC_LOAD_CONCURRENCY value: "
            f"expected integer, got '{raw_value}'. "
            "Set STOCKSYNC_LOAD_CONCURRENCY to a positive number."
        ) from error
    if concurrency < 1:
        raise ConfigurationError(
            f"Invalid STOCKSYNC_LOAD_CONCURRENCY value {concurrency}: must be at least 1."
        )
    return concurrency


def _validate_supabase_url(url: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme != "https" or not parsed.hostname:
        raise ConfigurationError(
            f"SUPABASE_URL is not a valid URL: '{url}'. Expected https://<project>.supabase.co"
        )
    if not parsed.hostname.endswith(SUPABASE_HOST_SUFFIX):
        raise ConfigurationError(
            f"Invalid SUPABASE_URL format: '{url}'. Expected https://<project>.supabase.co"
        )
