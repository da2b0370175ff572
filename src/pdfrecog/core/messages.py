from __future__ import annotations

PROCESSING = "recognize.processing"
NO_MATCHES = "recognize.noMatches"
ERROR = "recognize.error"
FILE_NOT_FOUND = "recognize.fileNotFound"
COULD_NOT_READ = "recognize.couldNotRead"
NO_OCR = "recognize.noOCR"

_STRINGS: dict[str, str] = {
    PROCESSING: "Processing...",
    NO_MATCHES: "No matches found.",
    ERROR: "An unexpected error occurred.",
    FILE_NOT_FOUND: "The file was not found or is no longer a top-level item.",
    COULD_NOT_READ: "The PDF could not be read.",
    NO_OCR: "The PDF does not contain OCRed text.",
}


def get_string(key: str) -> str:
    """Return the display text for a message key, or the key itself when unknown."""
    return _STRINGS.get(key, key)
