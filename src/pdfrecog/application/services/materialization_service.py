from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from pdfrecog.core.errors import MaterializationError
from pdfrecog.domain.models.item import Item
from pdfrecog.infrastructure.db.repos.collection_repo import CollectionRepo
from pdfrecog.infrastructure.db.repos.item_repo import ItemRepo
from pdfrecog.infrastructure.db.sqlite import transaction

logger = logging.getLogger(__name__)


class ItemMaterializer:
    """Links a source document under its newly recognized parent item."""

    def __init__(self, db_path: Path, item_repo: ItemRepo, collection_repo: CollectionRepo) -> None:
        self.db_path = db_path
        self.item_repo = item_repo
        self.collection_repo = collection_repo

    def attach(self, source: Item, new_item: Item) -> None:
        """Copy the source's collections onto new_item and reparent source, in one transaction."""
        try:
            with transaction(self.db_path) as conn:
                collection_ids = self.collection_repo.list_ids_for_item(source.id, conn=conn)
                for collection_id in collection_ids:
                    self.collection_repo.add_item(collection_id, new_item.id, conn=conn)
                self.item_repo.set_parent(source.id, new_item.id, conn=conn)
        except sqlite3.Error as exc:
            raise MaterializationError(
                f"Could not attach item {source.id} under {new_item.id}: {exc}"
            ) from exc

        source.parent_id = new_item.id
        logger.info(
            "Attached %s under %s (%d collection(s))",
            source.id,
            new_item.id,
            len(collection_ids),
        )
