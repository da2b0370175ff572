from __future__ import annotations

import logging
from typing import Any, Protocol

from pdfrecog.core.errors import IdentifierLookupError, ValidationError
from pdfrecog.core.ids import new_item_key, new_uuid
from pdfrecog.domain.models.item import BOOK, BOOK_SECTION, JOURNAL_ARTICLE, Creator, Item
from pdfrecog.domain.models.recognition import RecognitionResult
from pdfrecog.infrastructure.db.repos.item_repo import ItemRepo

logger = logging.getLogger(__name__)

LIBRARY_CATALOG = "pdfrecog"


class IdentifierLookup(Protocol):
    def search(self, query: dict[str, Any]) -> list[dict[str, Any]]: ...


class MetadataResolver:
    """Turns a recognition candidate into a saved bibliographic item.

    Branches are tried in order (DOI, ISBN, title). A lookup branch that
    fails or finds nothing falls through to the next one; the first branch
    to produce an item wins.
    """

    def __init__(
        self,
        item_repo: ItemRepo,
        doi_lookup: IdentifierLookup,
        isbn_lookup: IdentifierLookup,
    ) -> None:
        self.item_repo = item_repo
        self.doi_lookup = doi_lookup
        self.isbn_lookup = isbn_lookup

    def resolve(self, candidate: RecognitionResult, library_id: int) -> Item | None:
        if candidate.doi:
            logger.debug("Getting metadata by DOI %s", candidate.doi)
            item = self._from_lookup(
                self.doi_lookup,
                {"itemType": JOURNAL_ARTICLE, "DOI": candidate.doi},
                candidate,
                library_id,
            )
            if item is not None:
                return item

        if candidate.isbn:
            logger.debug("Getting metadata by ISBN %s", candidate.isbn)
            item = self._from_lookup(
                self.isbn_lookup,
                {"itemType": BOOK, "ISBN": candidate.isbn},
                candidate,
                library_id,
            )
            if item is not None:
                return item

        if candidate.title:
            item = self.build_from_candidate(candidate, library_id)
            self.item_repo.save(item)
            return item

        return None

    def _from_lookup(
        self,
        lookup: IdentifierLookup,
        query: dict[str, Any],
        candidate: RecognitionResult,
        library_id: int,
    ) -> Item | None:
        try:
            results = lookup.search(query)
            if not results:
                raise IdentifierLookupError("No items found")
            item = Item.from_json(results[0], item_id=new_uuid(), key=new_item_key(), library_id=library_id)
        except (IdentifierLookupError, ValidationError) as exc:
            logger.debug("Lookup %s failed: %s", query, exc)
            return None

        if not item.get_field("abstractNote") and candidate.abstract:
            item.set_field("abstractNote", candidate.abstract)
        self.item_repo.save(item)
        return item

    @staticmethod
    def build_from_candidate(candidate: RecognitionResult, library_id: int) -> Item:
        item_type = BOOK_SECTION if candidate.is_book_chapter else JOURNAL_ARTICLE
        item = Item(id=new_uuid(), key=new_item_key(), library_id=library_id, item_type=item_type)
        item.set_field("title", candidate.title)
        item.creators = [
            Creator(first_name=author.first_name, last_name=author.last_name, creator_type="author")
            for author in candidate.authors
        ]
        item.set_field("abstractNote", candidate.abstract)
        item.set_field("date", candidate.year)
        item.set_field("pages", candidate.pages)
        item.set_field("volume", candidate.volume)
        item.set_field("url", candidate.url)

        if item_type == JOURNAL_ARTICLE:
            item.set_field("issue", candidate.issue)
            item.set_field("ISSN", candidate.issn)
            item.set_field("publicationTitle", candidate.container)
        else:
            item.set_field("bookTitle", candidate.container)
            item.set_field("publisher", candidate.publisher)

        item.set_field("libraryCatalog", LIBRARY_CATALOG)
        return item
