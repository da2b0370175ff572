"""Dump the text of the first pages of a PDF as JSON.

Called as a converter process by ``PdfTextExtractor``::

    python -m pdfrecog.infrastructure.extractors.page_dump -json -l 5 input.pdf output.json
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

import fitz  # PyMuPDF


def dump_pages(pdf_path: Path, max_pages: int) -> dict[str, Any]:
    doc = fitz.open(str(pdf_path))
    try:
        pages: list[list[Any]] = []
        for index in range(min(max_pages, doc.page_count)):
            page = doc[index]
            pages.append(
                [
                    round(float(page.rect.width), 2),
                    round(float(page.rect.height), 2),
                    page.get_text("text") or "",
                ]
            )
        metadata = {
            str(key): str(value).strip()
            for key, value in (doc.metadata or {}).items()
            if value and str(value).strip()
        }
        return {"totalPages": doc.page_count, "metadata": metadata, "pages": pages}
    finally:
        doc.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="page_dump",
        description="Write per-page text of a PDF as JSON.",
    )
    parser.add_argument("-json", dest="as_json", action="store_true", help="Write JSON output (the only format).")
    parser.add_argument("-l", dest="max_pages", type=int, default=5, help="Last page to dump.")
    parser.add_argument("input", type=Path)
    parser.add_argument("output", type=Path)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.max_pages < 1:
        raise SystemExit("page_dump: -l must be at least 1")
    payload = dump_pages(args.input, args.max_pages)
    args.output.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
