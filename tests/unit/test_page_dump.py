from __future__ import annotations

import json
from pathlib import Path

import fitz

from pdfrecog.infrastructure.extractors.page_dump import dump_pages, main
from pdfrecog.infrastructure.extractors.pdf_text_extractor import PdfTextExtractor


def _make_pdf(path: Path) -> Path:
    doc = fitz.open()
    first = doc.new_page(width=595, height=842)
    first.insert_text((72, 72), "Sequential Recognition of Scholarly PDFs")
    doc.new_page(width=595, height=842)
    third = doc.new_page(width=595, height=842)
    third.insert_text((72, 72), "References")
    doc.set_metadata({"title": "Sample Paper", "author": "A. Tester"})
    doc.save(str(path))
    doc.close()
    return path


def test_dump_pages_limits_pages_and_keeps_blank_ones(tmp_path: Path) -> None:
    pdf = _make_pdf(tmp_path / "sample.pdf")

    payload = dump_pages(pdf, max_pages=2)

    assert payload["totalPages"] == 3
    assert len(payload["pages"]) == 2
    width, height, text = payload["pages"][0]
    assert (width, height) == (595, 842)
    assert "Sequential Recognition" in text
    assert payload["pages"][1][2].strip() == ""
    assert payload["metadata"]["title"] == "Sample Paper"


def test_main_writes_json_output(tmp_path: Path) -> None:
    pdf = _make_pdf(tmp_path / "sample.pdf")
    out = tmp_path / "out.json"

    assert main(["-json", "-l", "5", str(pdf), str(out)]) == 0

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert payload["totalPages"] == 3
    assert len(payload["pages"]) == 3
    assert "References" in payload["pages"][2][2]


def test_default_extractor_runs_page_dump_in_child_process(tmp_path: Path) -> None:
    pdf = _make_pdf(tmp_path / "sample.pdf")
    scratch = tmp_path / "scratch"

    document = PdfTextExtractor(scratch_dir=scratch).extract(pdf, max_pages=5)

    assert document.total_pages == 3
    assert [bool(page.text.strip()) for page in document.pages] == [True, False, True]
    assert list(scratch.iterdir()) == []
