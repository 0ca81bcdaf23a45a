"""Entity mutation and password command wiring for stocksync CLI."""

from __future__ import annotations

import argparse
import getpass
import json
from typing import Any, cast

from core.errors import StockSyncError
from core.types import ENTITY_LOAD_ORDER, EntityKind
from store.sync_sdk import StockSyncClient


def add_entity_command(subparsers: Any) -> None:
    """Register entity subcommand group."""
    parser = subparsers.add_parser(
        "entity",
        help="Delete or update one stored entity and clean up its image",
    )
    actions = parser.add_subparsers(dest="entity_action", required=True)

    remove_parser = actions.add_parser("remove", help="Delete an entity by row id")
    remove_parser.add_argument("kind", choices=ENTITY_LOAD_ORDER, help="Entity kind")
    remove_parser.add_argument("row_id", help="Store row id")

    update_parser = actions.add_parser("update", help="Update entity fields by row id")
    update_parser.add_argument("kind", choices=ENTITY_LOAD_ORDER, help="Entity kind")
    update_parser.add_argument("row_id", help="Store row id")
    update_parser.add_argument(
        "--fields",
        required=True,
        help='JSON object of column values, e.g. \'{"gambar_url": "https://..."}\'',
    )


def add_set_password_command(subparsers: Any) -> None:
    """Register set-password subcommand."""
    parser = subparsers.add_parser("set-password", help="Replace a user's password hash")
    parser.add_argument("--email", required=True, help="User email")
    parser.add_argument("--password", help="New password (prompted when omitted)")


def run_entity_command(client: StockSyncClient, args: argparse.Namespace) -> int:
    """Execute an entity action and print the mutation and cleanup results."""
    kind = cast(EntityKind, args.kind)
    if args.entity_action == "remove":
        result = client.remove_entity(kind, args.row_id)
    else:
        result = client.update_entity(kind, args.row_id, _parse_fields(args.fields))
    payload = {
        "row": dict(result.row) if result.row is not None else None,
        "assetCleanup": result.cleanup.to_payload(),
    }
    print(json.dumps(payload, indent=2, default=str))
    return 0


def run_set_password_command(client: StockSyncClient, args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("New password: ")
    if not password:
        print("error=password must not be empty")
        return 1
    client.set_password(args.email, password)
    print(f"password_updated={args.email}")
    return 0


def _parse_fields(raw_fields: str) -> dict[str, Any]:
    try:
        fields = json.loads(raw_fields)
    except json.JSONDecodeError as error:
        raise StockSyncError(f"--fields is not valid JSON: {error.msg}.") from error
    if not isinstance(fields, dict) or not fields:
        raise StockSyncError("--fields must be a non-empty JSON object.")
    return fields
