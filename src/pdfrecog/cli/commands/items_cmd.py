from __future__ import annotations

import argparse
from pathlib import Path

from rich.panel import Panel
from rich.table import Table

from pdfrecog.application.bootstrap import build_library_service
from pdfrecog.application.services.project_service import ProjectService
from pdfrecog.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("items", help="Library item management")
    items_subparsers = parser.add_subparsers(dest="items_command", required=True)

    add_pdf = items_subparsers.add_parser("add-pdf", help="Add a PDF file as a top-level attachment")
    add_pdf.add_argument("path", help="Path to the PDF file")
    add_pdf.add_argument("--title", default=None)
    add_pdf.add_argument("--collection-id", default=None)
    add_pdf.set_defaults(handler=run_add_pdf)

    list_items = items_subparsers.add_parser("list", help="List items")
    list_items.add_argument("--limit", type=int, default=50)
    list_items.add_argument("--top-level", action="store_true", help="Only show unparented items")
    list_items.set_defaults(handler=run_list)

    show = items_subparsers.add_parser("show", help="Show one item with its fields and children")
    show.add_argument("item_id")
    show.set_defaults(handler=run_show)


def run_add_pdf(args: argparse.Namespace, ctx: CLIContext) -> int:
    ProjectService(ctx.paths).require_initialized()
    item = build_library_service(ctx.paths).import_pdf(
        Path(args.path),
        title=args.title,
        collection_id=args.collection_id,
    )
    ctx.console.print(f"[green]Added[/green] {item.id} ({item.content_type}) {item.title}")
    return 0


def run_list(args: argparse.Namespace, ctx: CLIContext) -> int:
    ProjectService(ctx.paths).require_initialized()
    items = build_library_service(ctx.paths).list_items(limit=args.limit, top_level_only=args.top_level)

    table = Table(title=f"Items ({len(items)})")
    table.add_column("ID")
    table.add_column("Type")
    table.add_column("Title", overflow="fold")
    table.add_column("Parent")
    table.add_column("Added")

    for item in items:
        table.add_row(
            item.id,
            item.item_type,
            item.title,
            item.parent_id or "",
            item.date_added or "",
        )

    ctx.console.print(table)
    return 0


def run_show(args: argparse.Namespace, ctx: CLIContext) -> int:
    ProjectService(ctx.paths).require_initialized()
    service = build_library_service(ctx.paths)
    item = service.get_item(args.item_id)

    lines = [
        f"ID: {item.id}",
        f"Key: {item.key}",
        f"Type: {item.item_type}",
        f"Parent: {item.parent_id or '-'}",
    ]
    if item.file_path:
        lines.append(f"File: {item.file_path} ({item.content_type})")
    for name, value in sorted(item.fields.items()):
        lines.append(f"{name}: {value}")
    for creator in item.creators:
        lines.append(f"{creator.creator_type}: {creator.last_name}, {creator.first_name}".rstrip(", "))
    collections = service.collections_for_item(item.id)
    if collections:
        lines.append(f"Collections: {', '.join(collections)}")
    for child in service.list_children(item.id):
        lines.append(f"Child: {child.id} {child.title}")

    ctx.console.print(Panel.fit("\n".join(lines), title=item.title or item.id))
    return 0
