from __future__ import annotations

import logging
import itertools
import threading
from collections import deque
from collections.abc import Callable
from dataclasses import replace

from pdfrecog.domain.models.row import Row, RowStatus

logger = logging.getLogger(__name__)

ROW_ADDED = "rowadded"
ROW_UPDATED = "rowupdated"
ROW_DELETED = "rowdeleted"
NON_EMPTY = "nonempty"
EMPTY = "empty"

EVENT_NAMES = frozenset({ROW_ADDED, ROW_UPDATED, ROW_DELETED, NON_EMPTY, EMPTY})


class RowTable:
    """Display rows plus the pending queue, guarded by a single lock.

    Rows are kept newest-first for display. Pending ids are kept
    oldest-first and are consumed from the front, so processing order is
    independent of display order.

    One callback per event name; registering again replaces it. Callbacks
    run synchronously under the table lock, so they may read the table but
    should not block.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._rows: list[Row] = []
        self._pending: deque[str] = deque()
        self._listeners: dict[str, Callable[..., None]] = {}
        self._generations = itertools.count(1)

    def add_listener(self, name: str, callback: Callable[..., None]) -> None:
        if name not in EVENT_NAMES:
            raise ValueError(f"Unknown row table event: {name}")
        with self._lock:
            self._listeners[name] = callback

    def remove_listener(self, name: str) -> None:
        with self._lock:
            self._listeners.pop(name, None)

    def enqueue(self, item_id: str, display_name: str) -> bool:
        """Add a Queued row and a pending entry. Returns False if the id is already active."""
        with self._lock:
            existing = self._find(item_id)
            if existing is not None:
                if not existing.status.is_terminal:
                    return False
                self.delete_row(item_id)

            row = Row(
                id=item_id,
                status=RowStatus.QUEUED,
                display_name=display_name,
                generation=next(self._generations),
            )
            self._rows.insert(0, row)
            self._pending.append(item_id)
            self._emit(ROW_ADDED, replace(row))
            if len(self._rows) == 1:
                self._emit(NON_EMPTY)
            return True

    def update_status(
        self,
        item_id: str,
        status: RowStatus,
        message: str | None = None,
        *,
        generation: int | None = None,
    ) -> bool:
        """Update a row in place. With ``generation``, only that exact row is touched."""
        with self._lock:
            row = self._find(item_id)
            if row is None:
                return False
            if generation is not None and row.generation != generation:
                return False
            row.status = status
            row.message = message or ""
            self._emit(ROW_UPDATED, {"id": row.id, "status": status, "message": row.message})
            return True

    def delete_row(self, item_id: str) -> bool:
        with self._lock:
            for index, row in enumerate(self._rows):
                if row.id == item_id:
                    del self._rows[index]
                    self._emit(ROW_DELETED, {"id": row.id})
                    return True
            return False

    def claim_next(self, message: str) -> Row | None:
        """Pop the oldest pending id and mark its row Processing.

        Returns a copy of the claimed row, or None when nothing is pending.
        """
        with self._lock:
            while self._pending:
                item_id = self._pending.popleft()
                if self.update_status(item_id, RowStatus.PROCESSING, message):
                    return self.get_row(item_id)
                logger.debug("Dropping pending id %s with no row", item_id)
            return None

    def has_pending(self) -> bool:
        with self._lock:
            return bool(self._pending)

    def pending_ids(self) -> list[str]:
        with self._lock:
            return list(self._pending)

    def cancel_all(self) -> None:
        with self._lock:
            self._pending.clear()
            self._rows.clear()
            self._emit(EMPTY)

    def get_row(self, item_id: str) -> Row | None:
        with self._lock:
            row = self._find(item_id)
            return replace(row) if row is not None else None

    def list_rows(self) -> list[Row]:
        with self._lock:
            return [replace(row) for row in self._rows]

    def count_total(self) -> int:
        with self._lock:
            return len(self._rows)

    def count_processed(self) -> int:
        with self._lock:
            return sum(1 for row in self._rows if row.status.is_terminal)

    def _find(self, item_id: str) -> Row | None:
        for row in self._rows:
            if row.id == item_id:
                return row
        return None

    def _emit(self, name: str, *args: object) -> None:
        callback = self._listeners.get(name)
        if callback is not None:
            callback(*args)
