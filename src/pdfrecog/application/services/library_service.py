from __future__ import annotations

import logging
import mimetypes
from pathlib import Path

from pdfrecog.core.errors import LibraryError
from pdfrecog.core.ids import new_item_key, new_uuid
from pdfrecog.core.time import now_utc_iso
from pdfrecog.domain.models.item import ATTACHMENT, Collection, Item
from pdfrecog.infrastructure.db.repos.collection_repo import CollectionRepo
from pdfrecog.infrastructure.db.repos.item_repo import ItemRepo

logger = logging.getLogger(__name__)

DEFAULT_LIBRARY_ID = 1


class LibraryService:
    def __init__(self, item_repo: ItemRepo, collection_repo: CollectionRepo) -> None:
        self.item_repo = item_repo
        self.collection_repo = collection_repo

    def import_pdf(self, path: Path, title: str | None = None, collection_id: str | None = None) -> Item:
        """Create a top-level attachment item linked to a file on disk."""
        source = path.expanduser().resolve()
        if not source.is_file():
            raise LibraryError(f"File not found: {source}")
        if collection_id is not None and self.collection_repo.get_by_id(collection_id) is None:
            raise LibraryError(f"Collection not found: {collection_id}")

        content_type, _ = mimetypes.guess_type(source.name)
        item = Item(
            id=new_uuid(),
            key=new_item_key(),
            library_id=DEFAULT_LIBRARY_ID,
            item_type=ATTACHMENT,
            content_type=content_type or "application/octet-stream",
            file_path=str(source),
        )
        item.set_field("title", title or source.name)
        self.item_repo.save(item)
        if collection_id is not None:
            self.collection_repo.add_item(collection_id, item.id)
        logger.info("Imported %s as %s", source, item.id)
        return item

    def create_collection(self, name: str) -> Collection:
        clean = name.strip()
        if not clean:
            raise LibraryError("Collection name must not be empty.")
        collection = Collection(
            id=new_uuid(),
            key=new_item_key(),
            library_id=DEFAULT_LIBRARY_ID,
            name=clean,
            date_added=now_utc_iso(),
        )
        self.collection_repo.create(collection)
        return collection

    def add_to_collection(self, collection_id: str, item_id: str) -> None:
        if self.collection_repo.get_by_id(collection_id) is None:
            raise LibraryError(f"Collection not found: {collection_id}")
        if self.item_repo.get_by_id(item_id) is None:
            raise LibraryError(f"Item not found: {item_id}")
        self.collection_repo.add_item(collection_id, item_id)

    def get_item(self, item_id: str) -> Item:
        item = self.item_repo.get_by_id(item_id)
        if item is None:
            raise LibraryError(f"Item not found: {item_id}")
        return item

    def list_items(self, limit: int = 100, *, top_level_only: bool = False) -> list[Item]:
        return self.item_repo.list(limit=limit, top_level_only=top_level_only)

    def list_children(self, item_id: str) -> list[Item]:
        return self.item_repo.list_children(item_id)

    def list_collections(self, limit: int = 100) -> list[Collection]:
        return self.collection_repo.list(limit=limit)

    def collections_for_item(self, item_id: str) -> list[str]:
        return self.collection_repo.list_ids_for_item(item_id)
