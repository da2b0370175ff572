from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from pdfrecog.application.services.metadata_resolver import MetadataResolver
from pdfrecog.core.config import DEFAULT_MAX_PAGES
from pdfrecog.core.errors import ExtractionError, RecognitionAlert
from pdfrecog.core.messages import COULD_NOT_READ, NO_OCR
from pdfrecog.domain.models.item import Item
from pdfrecog.domain.models.recognition import ExtractedDocument, RecognitionResult

logger = logging.getLogger(__name__)


class TextExtractor(Protocol):
    def extract(self, pdf_path: Path, max_pages: int) -> ExtractedDocument: ...


class RecognitionQuery(Protocol):
    def query(self, document: ExtractedDocument) -> RecognitionResult | None: ...


class RecognitionService:
    def __init__(
        self,
        extractor: TextExtractor,
        client: RecognitionQuery,
        resolver: MetadataResolver,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> None:
        self.extractor = extractor
        self.client = client
        self.resolver = resolver
        self.max_pages = max_pages

    def recognize(self, item: Item) -> Item | None:
        """Extract, query and resolve one PDF. Returns the saved new item or None for no match."""
        document = self.extract(item)

        if document.text_page_count() == 0:
            raise RecognitionAlert(NO_OCR)

        candidate = self.client.query(document)
        if candidate is None:
            return None
        return self.resolver.resolve(candidate, item.library_id)

    def extract(self, item: Item) -> ExtractedDocument:
        if not item.file_path:
            logger.error("Item %s has no file attached", item.id)
            raise RecognitionAlert(COULD_NOT_READ)
        try:
            return self.extractor.extract(Path(item.file_path), self.max_pages)
        except ExtractionError as exc:
            logger.error("Could not extract text from %s: %s", item.file_path, exc)
            raise RecognitionAlert(COULD_NOT_READ) from exc
