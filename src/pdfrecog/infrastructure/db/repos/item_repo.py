from __future__ import annotations

import sqlite3
from pathlib import Path

from pdfrecog.core.time import now_utc_iso
from pdfrecog.domain.models.item import Creator, Item
from pdfrecog.infrastructure.db.sqlite import get_connection, transaction


class ItemRepo:
    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def save(self, item: Item, *, conn: sqlite3.Connection | None = None) -> None:
        """Insert or update the item together with its fields and creators."""
        if conn is not None:
            self._write(conn, item)
            return
        with transaction(self.db_path) as owned:
            self._write(owned, item)

    def set_parent(
        self,
        item_id: str,
        parent_id: str | None,
        *,
        conn: sqlite3.Connection | None = None,
    ) -> None:
        if conn is not None:
            self._write_parent(conn, item_id, parent_id)
            return
        with transaction(self.db_path) as owned:
            self._write_parent(owned, item_id, parent_id)

    def get_by_id(self, item_id: str) -> Item | None:
        with get_connection(self.db_path) as conn:
            row = conn.execute("SELECT * FROM items WHERE id = ?", (item_id,)).fetchone()
            if row is None:
                return None
            return self._load(conn, row)

    def list(self, limit: int = 100, *, top_level_only: bool = False) -> list[Item]:
        where = "WHERE parent_item_id IS NULL" if top_level_only else ""
        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM items
                {where}
                ORDER BY date_added DESC, id DESC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
            return [self._load(conn, row) for row in rows]

    def list_children(self, parent_id: str) -> list[Item]:
        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                "SELECT * FROM items WHERE parent_item_id = ? ORDER BY date_added ASC, id ASC",
                (parent_id,),
            ).fetchall()
            return [self._load(conn, row) for row in rows]

    def _write(self, conn: sqlite3.Connection, item: Item) -> None:
        now = now_utc_iso()
        if item.date_added is None:
            item.date_added = now
        item.date_modified = now

        conn.execute(
            """
            INSERT INTO items (
                id,
                item_key,
                library_id,
                item_type,
                parent_item_id,
                content_type,
                file_path,
                date_added,
                date_modified
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                item_type = excluded.item_type,
                parent_item_id = excluded.parent_item_id,
                content_type = excluded.content_type,
                file_path = excluded.file_path,
                date_modified = excluded.date_modified
            """,
            (
                item.id,
                item.key,
                item.library_id,
                item.item_type,
                item.parent_id,
                item.content_type,
                item.file_path,
                item.date_added,
                item.date_modified,
            ),
        )
        conn.execute("DELETE FROM item_fields WHERE item_id = ?", (item.id,))
        conn.executemany(
            "INSERT INTO item_fields (item_id, field_name, value) VALUES (?, ?, ?)",
            [(item.id, name, value) for name, value in sorted(item.fields.items())],
        )
        conn.execute("DELETE FROM item_creators WHERE item_id = ?", (item.id,))
        conn.executemany(
            """
            INSERT INTO item_creators (item_id, order_index, first_name, last_name, creator_type)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                (item.id, index, creator.first_name, creator.last_name, creator.creator_type)
                for index, creator in enumerate(item.creators)
            ],
        )

    @staticmethod
    def _write_parent(conn: sqlite3.Connection, item_id: str, parent_id: str | None) -> None:
        cursor = conn.execute(
            "UPDATE items SET parent_item_id = ?, date_modified = ? WHERE id = ?",
            (parent_id, now_utc_iso(), item_id),
        )
        if int(cursor.rowcount or 0) == 0:
            raise sqlite3.IntegrityError(f"Item not found: {item_id}")

    @staticmethod
    def _load(conn: sqlite3.Connection, row) -> Item:
        fields = {
            field_row["field_name"]: field_row["value"]
            for field_row in conn.execute(
                "SELECT field_name, value FROM item_fields WHERE item_id = ?",
                (row["id"],),
            ).fetchall()
        }
        creators = [
            Creator(
                first_name=creator_row["first_name"],
                last_name=creator_row["last_name"],
                creator_type=creator_row["creator_type"],
            )
            for creator_row in conn.execute(
                """
                SELECT first_name, last_name, creator_type
                FROM item_creators
                WHERE item_id = ?
                ORDER BY order_index ASC
                """,
                (row["id"],),
            ).fetchall()
        ]
        return Item(
            id=row["id"],
            key=row["item_key"],
            library_id=int(row["library_id"]),
            item_type=row["item_type"],
            fields=fields,
            creators=creators,
            parent_id=row["parent_item_id"],
            content_type=row["content_type"],
            file_path=row["file_path"],
            date_added=row["date_added"],
            date_modified=row["date_modified"],
        )
