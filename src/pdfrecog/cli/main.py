from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rich.console import Console

from pdfrecog.cli.commands import (
    collections_cmd,
    init_cmd,
    items_cmd,
    recognize_cmd,
    web_cmd,
)
from pdfrecog.cli.context import CLIContext
from pdfrecog.core.config import load_paths
from pdfrecog.core.errors import RecogError
from pdfrecog.core.logging import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdfrecog",
        description="Recognize PDF attachments and file them under bibliographic items",
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        default=Path.cwd(),
        help="Project root to use for .pdfrecog data (default: current working directory)",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)

    subparsers = parser.add_subparsers(dest="command", required=True)
    init_cmd.register(subparsers)
    items_cmd.register(subparsers)
    collections_cmd.register(subparsers)
    recognize_cmd.register(subparsers)
    web_cmd.register(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    paths = load_paths(args.project_root)
    ctx = CLIContext(paths=paths, console=console)

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 2

    try:
        return handler(args, ctx)
    except RecogError as exc:
        logger.error(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
