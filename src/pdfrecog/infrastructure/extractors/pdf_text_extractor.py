from __future__ import annotations

import json
import logging
import os
import shlex
import subprocess
import sys
import tempfile
from collections.abc import Sequence
from pathlib import Path

from pdfrecog.core.errors import ExtractionError
from pdfrecog.domain.models.recognition import ExtractedDocument

logger = logging.getLogger(__name__)

DEFAULT_COMMAND: tuple[str, ...] = (sys.executable, "-m", "pdfrecog.infrastructure.extractors.page_dump")


class PdfTextExtractor:
    """Runs a one-shot converter process that writes page text as JSON.

    The converter is called as ``<command> -json -l <pages> <pdf> <output>``.
    The output file is always removed, whether or not it could be parsed.
    """

    def __init__(
        self,
        command: Sequence[str] | None = None,
        timeout_seconds: float = 120.0,
        scratch_dir: Path | None = None,
    ) -> None:
        self.command = tuple(command) if command else DEFAULT_COMMAND
        self.timeout_seconds = timeout_seconds
        self.scratch_dir = scratch_dir

    def extract(self, pdf_path: Path, max_pages: int) -> ExtractedDocument:
        if self.scratch_dir is not None:
            self.scratch_dir.mkdir(parents=True, exist_ok=True)
        fd, output_raw = tempfile.mkstemp(
            prefix="pdfrecog-",
            suffix=".json",
            dir=str(self.scratch_dir) if self.scratch_dir is not None else None,
        )
        os.close(fd)
        output_path = Path(output_raw)
        cmd = [*self.command, "-json", "-l", str(max_pages), str(pdf_path), str(output_path)]
        logger.debug("Running extractor: %s", shlex.join(cmd))

        try:
            try:
                proc = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout_seconds,
                    check=False,
                )
            except subprocess.TimeoutExpired as exc:
                raise ExtractionError(
                    f"Extractor timed out after {self.timeout_seconds:.0f}s for {pdf_path.name}"
                ) from exc
            except OSError as exc:
                raise ExtractionError(f"Extractor could not be started: {exc}") from exc

            if proc.returncode != 0:
                stderr = (proc.stderr or "").strip()
                raise ExtractionError(f"Extractor failed (exit={proc.returncode}): {stderr[:320]}")

            try:
                raw = output_path.read_text(encoding="utf-8")
            except OSError as exc:
                raise ExtractionError(f"Extractor output is missing: {exc}") from exc
            if not raw.strip():
                raise ExtractionError("Extractor wrote an empty output file.")
            try:
                return ExtractedDocument.from_payload(json.loads(raw))
            except (TypeError, ValueError) as exc:
                # json.JSONDecodeError is a ValueError too.
                raise ExtractionError(f"Extractor output could not be parsed: {exc}") from exc
        finally:
            output_path.unlink(missing_ok=True)
