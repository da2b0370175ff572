from __future__ import annotations

import logging
import re
import urllib.parse
from typing import Any

from pdfrecog.core.config import DEFAULT_DOI_LOOKUP_URL
from pdfrecog.core.errors import HttpRequestError, IdentifierLookupError
from pdfrecog.domain.models.item import BOOK_SECTION, JOURNAL_ARTICLE
from pdfrecog.infrastructure.http.json_http import request_json

logger = logging.getLogger(__name__)

_JATS_TITLE_RE = re.compile(r"<jats:title>.*?</jats:title>", re.DOTALL)
_JATS_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")
_SPACE_BEFORE_PUNCT_RE = re.compile(r"\s+([.,;:!?)])")


class CrossrefDoiLookup:
    """Resolves a DOI to item JSON through the Crossref works API."""

    def __init__(self, base_url: str = DEFAULT_DOI_LOOKUP_URL, timeout_seconds: float = 20.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def search(self, query: dict[str, Any]) -> list[dict[str, Any]]:
        doi = normalize_doi(str(query.get("DOI") or ""))
        if not doi:
            raise IdentifierLookupError("DOI lookup requires a DOI.")

        url = f"{self.base_url}/{urllib.parse.quote(doi, safe='/')}"
        try:
            payload = request_json(url, timeout=self.timeout_seconds)
        except HttpRequestError as exc:
            if exc.status == 404:
                logger.debug("Crossref has no record for %s", doi)
                return []
            raise IdentifierLookupError(f"Crossref lookup failed for {doi}: {exc}") from exc

        message = payload.get("message") if isinstance(payload, dict) else None
        if not isinstance(message, dict):
            return []
        try:
            return [work_to_item_json(message, item_type=str(query.get("itemType") or JOURNAL_ARTICLE))]
        except (AttributeError, TypeError, ValueError) as exc:
            raise IdentifierLookupError(f"Crossref record for {doi} is malformed: {exc}") from exc


def normalize_doi(value: str) -> str:
    doi = value.strip()
    lowered = doi.lower()
    for prefix in ("https://doi.org/", "http://doi.org/", "https://dx.doi.org/", "http://dx.doi.org/", "doi:"):
        if lowered.startswith(prefix):
            doi = doi[len(prefix):].strip()
            break
    return doi


def strip_jats(text: str) -> str:
    text = _JATS_TAG_RE.sub(" ", _JATS_TITLE_RE.sub("", text))
    return _SPACE_BEFORE_PUNCT_RE.sub(r"\1", _WHITESPACE_RE.sub(" ", text)).strip()


def work_to_item_json(work: dict[str, Any], *, item_type: str = JOURNAL_ARTICLE) -> dict[str, Any]:
    if work.get("type") == "book-chapter":
        item_type = BOOK_SECTION

    data: dict[str, Any] = {"itemType": item_type}
    data["title"] = _first(work.get("title"))
    container = _first(work.get("container-title"))
    if item_type == BOOK_SECTION:
        data["bookTitle"] = container
        data["publisher"] = work.get("publisher")
    else:
        data["publicationTitle"] = container
        data["journalAbbreviation"] = _first(work.get("short-container-title"))
        data["volume"] = work.get("volume")
        data["issue"] = work.get("issue")
        data["ISSN"] = ", ".join(str(v) for v in work.get("ISSN") or [] if v)
    data["pages"] = work.get("page")
    data["DOI"] = work.get("DOI")
    data["url"] = work.get("URL")
    data["date"] = _date(work)
    data["language"] = work.get("language")

    abstract = work.get("abstract")
    if isinstance(abstract, str) and abstract.strip():
        data["abstractNote"] = strip_jats(abstract)

    creators: list[dict[str, str]] = []
    for role, creator_type in (("author", "author"), ("editor", "editor")):
        for person in work.get(role) or []:
            if not isinstance(person, dict):
                continue
            family = str(person.get("family") or person.get("name") or "").strip()
            given = str(person.get("given") or "").strip()
            if family or given:
                creators.append({"firstName": given, "lastName": family, "creatorType": creator_type})
    data["creators"] = creators
    return {key: value for key, value in data.items() if value not in (None, "")}


def _first(value: Any) -> str | None:
    if isinstance(value, list):
        for entry in value:
            if entry:
                return str(entry).strip()
        return None
    if value:
        return str(value).strip()
    return None


def _date(work: dict[str, Any]) -> str | None:
    for key in ("published-print", "published-online", "issued", "created"):
        parts = (work.get(key) or {}).get("date-parts") or []
        if parts and parts[0] and parts[0][0]:
            return "-".join(f"{int(part):02d}" if index else str(int(part)) for index, part in enumerate(parts[0]))
    return None
