from __future__ import annotations

from pdfrecog.core.messages import get_string


class RecogError(Exception):
    """Base error for all pdfrecog exceptions."""


class ConfigurationError(RecogError):
    """Raised when configuration is invalid or incomplete."""


class ProjectNotInitializedError(RecogError):
    """Raised when .pdfrecog metadata is missing."""


class ValidationError(RecogError):
    """Raised when model invariants fail."""


class LibraryError(RecogError):
    """Raised when item or collection operations fail."""


class ExtractionError(RecogError):
    """Raised when the PDF text extractor cannot produce a document."""


class HttpRequestError(RecogError):
    """Raised when a JSON HTTP request fails at transport, status or parse level."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class RecognitionRequestError(RecogError):
    """Raised when the remote recognition service cannot be queried."""


class IdentifierLookupError(RecogError):
    """Raised when a DOI/ISBN lookup fails."""


class MaterializationError(RecogError):
    """Raised when a recognized item cannot be linked to its source document."""


class RecognitionAlert(RecogError):
    """A recognized failure carrying a stable, user-presentable message key.

    Unlike every other error, an alert's text is safe to show verbatim in a
    row's status message.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(get_string(key))

    @property
    def user_message(self) -> str:
        return str(self)
