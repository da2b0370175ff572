from __future__ import annotations

import argparse

from rich.table import Table

from pdfrecog.application.bootstrap import build_library_service
from pdfrecog.application.services.project_service import ProjectService
from pdfrecog.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("collections", help="Collection management")
    collections_subparsers = parser.add_subparsers(dest="collections_command", required=True)

    create = collections_subparsers.add_parser("create", help="Create a collection")
    create.add_argument("name")
    create.set_defaults(handler=run_create)

    list_collections = collections_subparsers.add_parser("list", help="List collections")
    list_collections.add_argument("--limit", type=int, default=50)
    list_collections.set_defaults(handler=run_list)

    add_item = collections_subparsers.add_parser("add-item", help="Add an item to a collection")
    add_item.add_argument("collection_id")
    add_item.add_argument("item_id")
    add_item.set_defaults(handler=run_add_item)


def run_create(args: argparse.Namespace, ctx: CLIContext) -> int:
    ProjectService(ctx.paths).require_initialized()
    collection = build_library_service(ctx.paths).create_collection(args.name)
    ctx.console.print(f"[green]Created collection[/green] {collection.id} {collection.name}")
    return 0


def run_list(args: argparse.Namespace, ctx: CLIContext) -> int:
    ProjectService(ctx.paths).require_initialized()
    collections = build_library_service(ctx.paths).list_collections(limit=args.limit)

    table = Table(title=f"Collections ({len(collections)})")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Added")
    for collection in collections:
        table.add_row(collection.id, collection.name, collection.date_added)

    ctx.console.print(table)
    return 0


def run_add_item(args: argparse.Namespace, ctx: CLIContext) -> int:
    ProjectService(ctx.paths).require_initialized()
    build_library_service(ctx.paths).add_to_collection(args.collection_id, args.item_id)
    ctx.console.print(f"[green]Added[/green] item {args.item_id} to collection {args.collection_id}")
    return 0
