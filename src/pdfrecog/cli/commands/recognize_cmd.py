from __future__ import annotations

import argparse
import time

from rich.panel import Panel
from rich.table import Table

from pdfrecog.application.bootstrap import build_library_service, build_recognize_queue
from pdfrecog.application.services.project_service import ProjectService
from pdfrecog.application.services.row_table import ROW_UPDATED
from pdfrecog.cli.context import CLIContext
from pdfrecog.core.errors import ValidationError
from pdfrecog.core.time import format_elapsed
from pdfrecog.domain.models.row import RowStatus

_STATUS_STYLES = {
    RowStatus.QUEUED: "dim",
    RowStatus.PROCESSING: "cyan",
    RowStatus.FAILED: "red",
    RowStatus.SUCCEEDED: "green",
}


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("recognize", help="Recognize PDF attachments and file them under new items")
    parser.add_argument("item_ids", nargs="*", help="Attachment item IDs")
    parser.add_argument("--all", action="store_true", help="Queue every recognizable top-level PDF")
    parser.add_argument("--limit", type=int, default=1000, help="Maximum items scanned with --all")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    ProjectService(ctx.paths).require_initialized()
    if not args.item_ids and not args.all:
        raise ValidationError("Give one or more item IDs, or --all.")

    library = build_library_service(ctx.paths)
    queue = build_recognize_queue(ctx.paths)

    if args.all:
        candidates = library.list_items(limit=args.limit, top_level_only=True)
    else:
        candidates = [library.get_item(item_id) for item_id in args.item_ids]

    recognizable = [item for item in candidates if queue.can_recognize(item)]
    skipped = [item for item in candidates if not queue.can_recognize(item)]
    if not args.all:
        for item in skipped:
            ctx.console.print(f"[yellow]Skipped[/yellow] {item.id}: not a top-level PDF attachment")

    if not recognizable:
        ctx.console.print("[yellow]Nothing to recognize[/yellow]")
        return 0

    def on_row_updated(update: dict[str, object]) -> None:
        status = RowStatus(update["status"])
        ctx.console.print(
            f"[{_STATUS_STYLES[status]}]{status.label}[/{_STATUS_STYLES[status]}] "
            f"{update['id']} {update['message']}"
        )

    queue.add_listener(ROW_UPDATED, on_row_updated)
    started = time.monotonic()
    try:
        queue.recognize_items(recognizable)
        queue.wait_idle()
    except KeyboardInterrupt:
        queue.cancel_all()
        ctx.console.print("[yellow]Cancelled[/yellow]")
        return 130
    finally:
        queue.shutdown()

    rows = queue.list_rows()
    table = Table(title="Recognition results")
    table.add_column("ID")
    table.add_column("Document", overflow="fold")
    table.add_column("Status")
    table.add_column("Result", overflow="fold")
    for row in rows:
        style = _STATUS_STYLES[row.status]
        table.add_row(row.id, row.display_name, f"[{style}]{row.status.label}[/{style}]", row.message)
    ctx.console.print(table)

    succeeded = sum(1 for row in rows if row.status == RowStatus.SUCCEEDED)
    ctx.console.print(
        Panel.fit(
            "\n".join(
                [
                    f"Processed: {queue.count_processed()} / {queue.count_total()}",
                    f"Succeeded: {succeeded}",
                    f"Failed: {queue.count_processed() - succeeded}",
                    f"Elapsed: {format_elapsed(time.monotonic() - started)}",
                ]
            ),
            title="Recognition Summary",
        )
    )
    return 0 if succeeded == len(rows) else 1
