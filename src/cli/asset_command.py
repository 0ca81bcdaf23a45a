"""Asset command wiring for stocksync CLI."""

from __future__ import annotations

import argparse
import json
from typing import Any
from urllib.parse import unquote

from core.constants import DEFAULT_ASSET_PREFIX, MAX_ASSET_LIST_RESULTS
from store.sync_sdk import StockSyncClient


def add_assets_command(subparsers: Any) -> None:
    """Register assets subcommand group."""
    parser = subparsers.add_parser("assets", help="Manage stored item images")
    actions = parser.add_subparsers(dest="assets_action", required=True)

    list_parser = actions.add_parser("list", help="List stored images under a prefix")
    list_parser.add_argument("--prefix", default=DEFAULT_ASSET_PREFIX, help="Object key prefix")
    list_parser.add_argument(
        "--limit",
        type=int,
        default=MAX_ASSET_LIST_RESULTS,
        help=f"Maximum images to list (capped at {MAX_ASSET_LIST_RESULTS})",
    )

    delete_parser = actions.add_parser("delete", help="Delete one stored image")
    target = delete_parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--key", help="Object key, URL-encoded or plain")
    target.add_argument("--url", help="Public image URL")

    orphans_parser = actions.add_parser(
        "orphans",
        help="Report stored images that no item or vendor references",
    )
    orphans_parser.add_argument("--prefix", default=DEFAULT_ASSET_PREFIX, help="Object key prefix")
    orphans_parser.add_argument(
        "--limit",
        type=int,
        default=MAX_ASSET_LIST_RESULTS,
        help="Maximum images to scan",
    )


def run_assets_command(client: StockSyncClient, args: argparse.Namespace) -> int:
    """Execute an assets action and print its JSON result."""
    if args.assets_action == "list":
        assets = client.list_assets(args.prefix, args.limit)
        payload: Any = {"count": len(assets), "images": [asset.to_payload() for asset in assets]}
        print(json.dumps(payload, indent=2))
        return 0
    if args.assets_action == "delete":
        if args.url:
            result = client.delete_asset_by_url(args.url)
        else:
            result = client.delete_asset_by_key(unquote(args.key))
        print(json.dumps(result.to_payload(), indent=2))
        return 0 if result.succeeded else 1
    report = client.orphan_report(args.prefix, args.limit)
    print(json.dumps(report.to_payload(), indent=2))
    return 0
