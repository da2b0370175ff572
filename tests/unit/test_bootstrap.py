from __future__ import annotations

import sys
from pathlib import Path

import pytest

from pdfrecog.application.bootstrap import build_library_service, build_recognize_queue
from pdfrecog.application.services.project_service import ProjectService
from pdfrecog.core.config import RecognizerSettings, load_paths
from pdfrecog.core.messages import ERROR, get_string
from pdfrecog.domain.models.row import RowStatus

_ONE_TEXT_PAGE = """
import json, sys
with open(sys.argv[-1], "w", encoding="utf-8") as handle:
    json.dump({"pages": [[612, 792, "A Paper Title"]]}, handle)
"""


def test_unreachable_recognizer_fails_row_instead_of_waiting(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    for name in ("PDFRECOG_HOME", "http_proxy", "HTTP_PROXY", "all_proxy", "ALL_PROXY"):
        monkeypatch.delenv(name, raising=False)
    paths = load_paths(tmp_path)
    ProjectService(paths).init_project()
    pdf = tmp_path / "paper.pdf"
    pdf.write_bytes(b"%PDF-1.4\n")
    item = build_library_service(paths).import_pdf(pdf)

    settings = RecognizerSettings(
        recognizer_url="http://127.0.0.1:9/recognize",
        request_timeout_seconds=2.0,
        offline_recheck_seconds=0.05,
        extractor_command=(sys.executable, "-c", _ONE_TEXT_PAGE),
    )
    queue = build_recognize_queue(paths, settings)
    try:
        assert queue.recognize_items([item]) == [item.id]
        assert queue.wait_idle(timeout=15)
    finally:
        queue.shutdown()

    row = queue.rows.get_row(item.id)
    assert row is not None
    assert row.status == RowStatus.FAILED
    assert row.message == get_string(ERROR)
