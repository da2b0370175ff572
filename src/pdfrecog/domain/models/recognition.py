from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class ExtractedPage:
    width: float
    height: float
    text: str

    @property
    def has_text(self) -> bool:
        return bool(self.text)


@dataclass(slots=True)
class ExtractedDocument:
    """Per-page text of the first pages of a PDF, as written by the extractor."""

    pages: list[ExtractedPage]
    total_pages: int | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    def text_page_count(self) -> int:
        return sum(1 for page in self.pages if page.has_text)

    def to_payload(self) -> dict[str, Any]:
        return {
            "totalPages": self.total_pages,
            "metadata": dict(self.metadata),
            "pages": [[page.width, page.height, page.text] for page in self.pages],
        }

    @classmethod
    def from_payload(cls, payload: Any) -> ExtractedDocument:
        if not isinstance(payload, dict):
            raise ValueError("Extractor output must be a JSON object.")
        raw_pages = payload.get("pages")
        if not isinstance(raw_pages, list):
            raise ValueError("Extractor output is missing a 'pages' list.")

        pages: list[ExtractedPage] = []
        for index, raw in enumerate(raw_pages):
            if not isinstance(raw, (list, tuple)) or len(raw) < 3:
                raise ValueError(f"Malformed page entry at index {index}.")
            width, height, text = raw[0], raw[1], raw[2]
            if isinstance(text, list):
                text = "\n".join(str(part) for part in text if part)
            pages.append(
                ExtractedPage(
                    width=float(width or 0),
                    height=float(height or 0),
                    text=str(text or ""),
                )
            )

        total_raw = payload.get("totalPages")
        metadata_raw = payload.get("metadata")
        return cls(
            pages=pages,
            total_pages=int(total_raw) if isinstance(total_raw, (int, float)) else None,
            metadata=(
                {str(k): str(v) for k, v in metadata_raw.items() if v}
                if isinstance(metadata_raw, dict)
                else {}
            ),
        )


@dataclass(slots=True)
class RecognizedAuthor:
    first_name: str
    last_name: str


@dataclass(slots=True)
class RecognitionResult:
    """Candidate metadata returned by the recognition service."""

    doi: str | None = None
    isbn: str | None = None
    title: str | None = None
    authors: list[RecognizedAuthor] = field(default_factory=list)
    abstract: str | None = None
    year: str | None = None
    pages: str | None = None
    volume: str | None = None
    issue: str | None = None
    issn: str | None = None
    url: str | None = None
    container: str | None = None
    publisher: str | None = None
    type: str | None = None

    @property
    def is_book_chapter(self) -> bool:
        return self.type == "book-chapter"

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> RecognitionResult:
        authors: list[RecognizedAuthor] = []
        for raw in payload.get("authors") or []:
            if not isinstance(raw, dict):
                continue
            authors.append(
                RecognizedAuthor(
                    first_name=str(raw.get("firstName") or "").strip(),
                    last_name=str(raw.get("lastName") or "").strip(),
                )
            )
        return cls(
            doi=_text(payload.get("doi")),
            isbn=_text(payload.get("isbn")),
            title=_text(payload.get("title")),
            authors=authors,
            abstract=_text(payload.get("abstract")),
            year=_text(payload.get("year")),
            pages=_text(payload.get("pages")),
            volume=_text(payload.get("volume")),
            issue=_text(payload.get("issue")),
            issn=_text(payload.get("issn") or payload.get("ISSN")),
            url=_text(payload.get("url")),
            container=_text(payload.get("container")),
            publisher=_text(payload.get("publisher")),
            type=_text(payload.get("type")),
        )


def _text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
