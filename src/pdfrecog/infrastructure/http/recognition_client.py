from __future__ import annotations

import logging

from pdfrecog.core.config import DEFAULT_RECOGNIZER_URL
from pdfrecog.core.errors import HttpRequestError, RecognitionRequestError
from pdfrecog.domain.models.recognition import ExtractedDocument, RecognitionResult
from pdfrecog.infrastructure.http.json_http import request_json

logger = logging.getLogger(__name__)


class RecognitionClient:
    """Sends extracted page text to the remote recognition service.

    The service takes the extractor's JSON document as the request body and
    answers with a single candidate record, or ``null`` when nothing matched.
    No API credentials are attached.
    """

    def __init__(self, endpoint: str = DEFAULT_RECOGNIZER_URL, timeout_seconds: float = 30.0) -> None:
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds

    def query(self, document: ExtractedDocument) -> RecognitionResult | None:
        try:
            payload = request_json(
                self.endpoint,
                method="POST",
                payload=document.to_payload(),
                timeout=self.timeout_seconds,
                success_codes=(200,),
            )
        except HttpRequestError as exc:
            logger.error("Recognition request to %s failed: %s", self.endpoint, exc)
            raise RecognitionRequestError("Request error") from exc

        if not payload:
            return None
        if not isinstance(payload, dict):
            logger.error("Recognition service returned %s instead of an object", type(payload).__name__)
            raise RecognitionRequestError("Request error")
        return RecognitionResult.from_payload(payload)
