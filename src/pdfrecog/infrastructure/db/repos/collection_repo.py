from __future__ import annotations

import sqlite3
from pathlib import Path

from pdfrecog.core.time import now_utc_iso
from pdfrecog.domain.models.item import Collection
from pdfrecog.infrastructure.db.sqlite import get_connection


class CollectionRepo:
    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def create(self, collection: Collection) -> None:
        with get_connection(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO collections (id, collection_key, library_id, name, date_added)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    collection.id,
                    collection.key,
                    collection.library_id,
                    collection.name,
                    collection.date_added,
                ),
            )
            conn.commit()

    def get_by_id(self, collection_id: str) -> Collection | None:
        with get_connection(self.db_path) as conn:
            row = conn.execute("SELECT * FROM collections WHERE id = ?", (collection_id,)).fetchone()
        return self._to_model(row) if row else None

    def list(self, limit: int = 100) -> list[Collection]:
        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                "SELECT * FROM collections ORDER BY name COLLATE NOCASE ASC LIMIT ?",
                (limit,),
            ).fetchall()
        return [self._to_model(row) for row in rows]

    def add_item(
        self,
        collection_id: str,
        item_id: str,
        *,
        conn: sqlite3.Connection | None = None,
    ) -> None:
        statement = """
            INSERT OR IGNORE INTO collection_items (collection_id, item_id, added_at)
            VALUES (?, ?, ?)
        """
        params = (collection_id, item_id, now_utc_iso())
        if conn is not None:
            conn.execute(statement, params)
            return
        with get_connection(self.db_path) as owned:
            owned.execute(statement, params)
            owned.commit()

    def list_ids_for_item(self, item_id: str, *, conn: sqlite3.Connection | None = None) -> list[str]:
        statement = "SELECT collection_id FROM collection_items WHERE item_id = ? ORDER BY added_at ASC, collection_id ASC"
        if conn is not None:
            rows = conn.execute(statement, (item_id,)).fetchall()
        else:
            with get_connection(self.db_path) as owned:
                rows = owned.execute(statement, (item_id,)).fetchall()
        return [row["collection_id"] for row in rows]

    def list_item_ids(self, collection_id: str) -> list[str]:
        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                "SELECT item_id FROM collection_items WHERE collection_id = ? ORDER BY added_at ASC, item_id ASC",
                (collection_id,),
            ).fetchall()
        return [row["item_id"] for row in rows]

    @staticmethod
    def _to_model(row) -> Collection:
        return Collection(
            id=row["id"],
            key=row["collection_key"],
            library_id=int(row["library_id"]),
            name=row["name"],
            date_added=row["date_added"],
        )
