from __future__ import annotations

import logging
import re
import urllib.parse
from typing import Any

from pdfrecog.core.config import DEFAULT_ISBN_LOOKUP_URL
from pdfrecog.core.errors import HttpRequestError, IdentifierLookupError
from pdfrecog.domain.models.item import BOOK
from pdfrecog.infrastructure.http.json_http import request_json

logger = logging.getLogger(__name__)

_ISBN_CLEAN_RE = re.compile(r"[^0-9Xx]")


class OpenLibraryIsbnLookup:
    """Resolves an ISBN to book item JSON through the Open Library books API."""

    def __init__(self, base_url: str = DEFAULT_ISBN_LOOKUP_URL, timeout_seconds: float = 20.0) -> None:
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds

    def search(self, query: dict[str, Any]) -> list[dict[str, Any]]:
        isbn = clean_isbn(str(query.get("ISBN") or ""))
        if not isbn:
            raise IdentifierLookupError("ISBN lookup requires an ISBN.")

        bibkey = f"ISBN:{isbn}"
        params = urllib.parse.urlencode({"bibkeys": bibkey, "format": "json", "jscmd": "data"})
        try:
            payload = request_json(f"{self.base_url}?{params}", timeout=self.timeout_seconds)
        except HttpRequestError as exc:
            if exc.status == 404:
                return []
            raise IdentifierLookupError(f"Open Library lookup failed for {isbn}: {exc}") from exc

        record = payload.get(bibkey) if isinstance(payload, dict) else None
        if not isinstance(record, dict):
            logger.debug("Open Library has no record for %s", isbn)
            return []
        try:
            return [record_to_item_json(record, isbn=isbn)]
        except (AttributeError, TypeError, ValueError) as exc:
            raise IdentifierLookupError(f"Open Library record for {isbn} is malformed: {exc}") from exc


def clean_isbn(value: str) -> str:
    return _ISBN_CLEAN_RE.sub("", value).upper()


def split_name(name: str) -> tuple[str, str]:
    """Split "Given Names Family" into (given, family)."""
    parts = name.strip().split()
    if not parts:
        return "", ""
    if len(parts) == 1:
        return "", parts[0]
    return " ".join(parts[:-1]), parts[-1]


def record_to_item_json(record: dict[str, Any], *, isbn: str) -> dict[str, Any]:
    data: dict[str, Any] = {"itemType": BOOK, "ISBN": isbn}
    title = str(record.get("title") or "").strip()
    subtitle = str(record.get("subtitle") or "").strip()
    data["title"] = f"{title}: {subtitle}" if title and subtitle else title
    data["publisher"] = _names(record.get("publishers"))
    data["place"] = _names(record.get("publish_places"))
    data["date"] = record.get("publish_date")
    pages = record.get("number_of_pages")
    data["numPages"] = str(pages) if pages else None
    data["url"] = record.get("url")

    creators: list[dict[str, str]] = []
    for author in record.get("authors") or []:
        if not isinstance(author, dict):
            continue
        first, last = split_name(str(author.get("name") or ""))
        if first or last:
            creators.append({"firstName": first, "lastName": last, "creatorType": "author"})
    data["creators"] = creators
    return {key: value for key, value in data.items() if value not in (None, "")}


def _names(entries: Any) -> str | None:
    names = [
        str(entry.get("name") or "").strip()
        for entry in entries or []
        if isinstance(entry, dict)
    ]
    joined = ", ".join(name for name in names if name)
    return joined or None
