"""stocksync CLI entry points.
This module exposes extract, load, asset, and entity commands.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from dotenv import load_dotenv

from cli.asset_command import add_assets_command, run_assets_command
from cli.entity_command import (
    add_entity_command,
    add_set_password_command,
    run_entity_command,
    run_set_password_command,
)
from core.config import StockSyncConfig
from core.constants import DEFAULT_SHEET_NAMES, SNAPSHOT_DIR_NAME
from core.errors import StockSyncError
from core.types import ExtractOptions, LoadOptions
from store.sync_sdk import StockSyncClient


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="stocksync", description="Inventory sync CLI")
    parser.add_argument("--data-root", help="Override STOCKSYNC_DATA_ROOT for this command")
    parser.add_argument("--env-file", help="Load environment variables from this .env file")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_extract_command(subparsers)
    _add_load_command(subparsers)
    add_assets_command(subparsers)
    add_entity_command(subparsers)
    add_set_password_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the stocksync CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.env_file:
        load_dotenv(args.env_file)
    else:
        load_dotenv()
    try:
        client = _build_client(args.data_root)
        return _dispatch(parser, client, args)
    except StockSyncError as error:
        print(f"error={error}")
        return 1


def _dispatch(
    parser: argparse.ArgumentParser,
    client: StockSyncClient,
    args: argparse.Namespace,
) -> int:
    if args.command == "extract":
        return _run_extract_command(client, args)
    if args.command == "load":
        return _run_load_command(client, args)
    if args.command == "assets":
        return run_assets_command(client, args)
    if args.command == "entity":
        return run_entity_command(client, args)
    if args.command == "set-password":
        return run_set_password_command(client, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_client(data_root: str | None) -> StockSyncClient:
    """Build SDK client with optional data-root override.

    Args:
        data_root: Optional override path.

    Returns:
        Configured SDK client.
    """
    config = StockSyncConfig.from_env()
    if data_root:
        root = Path(data_root).expanduser().resolve()
        config = replace(config, data_root=root, snapshot_dir=root / SNAPSHOT_DIR_NAME)
    return StockSyncClient(config)


def _run_extract_command(client: StockSyncClient, args: argparse.Namespace) -> int:
    """Handle extract command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    options = ExtractOptions(
        sheet_names=tuple(args.sheet or DEFAULT_SHEET_NAMES),
        source_dir=args.source_dir,
        output_dir=args.output_dir,
        archive_uri=args.archive_uri,
    )
    export = client.extract(options)
    for sheet in export.bundle.sheets:
        print(f"{sheet.sheet_name}\t{len(sheet.records)}")
    for path in export.written_paths:
        print(f"saved={path}")
    for uri in export.archived_uris:
        print(f"archived={uri}")
    return 0


def _run_load_command(client: StockSyncClient, args: argparse.Namespace) -> int:
    """Handle load command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code; 1 when any record failed.
    """
    options = LoadOptions(
        snapshot_dir=args.snapshot_dir,
        concurrency=args.concurrency,
        refresh_aggregates=not args.skip_refresh,
    )
    summary = client.load(options)
    print("kind\tinserted\tduplicate\tskipped\terror")
    for outcome in summary.outcomes:
        print(
            f"{outcome.kind}\t{outcome.inserted}\t{outcome.duplicate}\t"
            f"{outcome.skipped}\t{outcome.error}"
        )
        for failure in outcome.failures:
            print(f"  failed\t{failure.record_identity}\t{failure.message}")
    print(
        f"total\t{summary.inserted}\t{summary.duplicate}\t{summary.skipped}\t{summary.error}"
    )
    print(f"aggregate_refreshed={str(summary.aggregate_refreshed).lower()}")
    return 0 if summary.error == 0 else 1


def _add_extract_command(subparsers: Any) -> None:
    """Register extract subcommand."""
    parser = subparsers.add_parser("extract", help="Export source sheets into snapshot files")
    parser.add_argument(
        "--sheet",
        action="append",
        help="Sheet name to export; repeat for several (default: all inventory sheets)",
    )
    parser.add_argument("--source-dir", help="Read <sheet>.csv files instead of the sheets API")
    parser.add_argument("--output-dir", help="Snapshot output directory")
    parser.add_argument(
        "--archive-uri",
        help="Also upload the snapshot to s3://bucket[/prefix]/<run stamp>/",
    )


def _add_load_command(subparsers: Any) -> None:
    """Register load subcommand."""
    parser = subparsers.add_parser("load", help="Load the snapshot into the relational store")
    parser.add_argument("--snapshot-dir", help="Snapshot input directory")
    parser.add_argument(
        "--concurrency",
        type=int,
        help="Records inserted concurrently within one entity kind",
    )
    parser.add_argument(
        "--skip-refresh",
        action="store_true",
        help="Do not refresh the stock summary view after loading",
    )
