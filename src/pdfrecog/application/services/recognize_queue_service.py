from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Protocol

from pdfrecog.application.services.row_table import RowTable
from pdfrecog.core.config import DEFAULT_OFFLINE_RECHECK_SECONDS
from pdfrecog.core.errors import RecognitionAlert
from pdfrecog.core.messages import ERROR, NO_MATCHES, PROCESSING, get_string
from pdfrecog.domain.models.item import PDF_CONTENT_TYPE, Item
from pdfrecog.domain.models.row import Row, RowStatus

logger = logging.getLogger(__name__)


class ItemPipeline(Protocol):
    def process_item(self, item_id: str) -> Item | None: ...


class Connectivity(Protocol):
    def is_offline(self) -> bool: ...


class RecognizeQueueService:
    """Sequential recognition queue with a single-flight worker thread.

    ``start()`` spawns the worker only when none is running. The worker
    waits for ``ready``, then claims pending ids one at a time until the
    queue is empty. While the network is down it sleeps and re-checks
    instead of consuming the queue.

    Lock order is flight lock, then row table lock. Row table listeners
    must not call ``start()``.
    """

    def __init__(
        self,
        *,
        pipeline: ItemPipeline,
        rows: RowTable | None = None,
        connectivity: Connectivity | None = None,
        ready: threading.Event | None = None,
        offline_recheck_seconds: float = DEFAULT_OFFLINE_RECHECK_SECONDS,
    ) -> None:
        self._pipeline = pipeline
        self.rows = rows if rows is not None else RowTable()
        self._connectivity = connectivity
        if ready is None:
            ready = threading.Event()
            ready.set()
        self._ready = ready
        self.offline_recheck_seconds = offline_recheck_seconds
        self._flight_lock = threading.Lock()
        self._idle = threading.Condition(self._flight_lock)
        self._processing = False
        self._stop = threading.Event()
        self._worker: threading.Thread | None = None

    @staticmethod
    def can_recognize(item: Item | None) -> bool:
        return (
            item is not None
            and item.is_attachment()
            and item.content_type == PDF_CONTENT_TYPE
            and item.is_top_level()
        )

    @property
    def is_processing(self) -> bool:
        with self._flight_lock:
            return self._processing

    def mark_ready(self) -> None:
        self._ready.set()

    def enqueue_many(self, items: Iterable[Item]) -> list[str]:
        """Add rows for items; returns the ids that were actually queued."""
        queued: list[str] = []
        for item in items:
            if self.rows.enqueue(item.id, _display_name(item)):
                queued.append(item.id)
        return queued

    def recognize_items(self, items: Iterable[Item]) -> list[str]:
        queued = self.enqueue_many(items)
        self.start()
        return queued

    def start(self) -> bool:
        """Start the worker unless one is active. Never blocks on processing."""
        with self._flight_lock:
            if self._processing or self._stop.is_set():
                return False
            if not self.rows.has_pending():
                return False
            self._processing = True
            self._worker = threading.Thread(
                target=self._process_queue,
                daemon=True,
                name="recognize-queue",
            )
            self._worker.start()
            return True

    def wait_idle(self, timeout: float | None = None) -> bool:
        with self._idle:
            return self._idle.wait_for(lambda: not self._processing, timeout=timeout)

    def shutdown(self, timeout: float = 2.0) -> None:
        self._stop.set()
        self._ready.set()
        worker = self._worker
        if worker is not None and worker.is_alive() and worker is not threading.current_thread():
            worker.join(timeout=timeout)

    # Row table surface

    def add_listener(self, name: str, callback: Callable[..., None]) -> None:
        self.rows.add_listener(name, callback)

    def remove_listener(self, name: str) -> None:
        self.rows.remove_listener(name)

    def list_rows(self) -> list[Row]:
        return self.rows.list_rows()

    def count_total(self) -> int:
        return self.rows.count_total()

    def count_processed(self) -> int:
        return self.rows.count_processed()

    def cancel_all(self) -> None:
        self.rows.cancel_all()

    # Worker

    def _process_queue(self) -> None:
        finished = False
        try:
            self._ready.wait()
            while not self._stop.is_set():
                if self._is_offline():
                    logger.warning("Offline; re-checking in %.0fs", self.offline_recheck_seconds)
                    self._stop.wait(self.offline_recheck_seconds)
                    continue

                row = self._claim_next_or_finish()
                if row is None:
                    finished = True
                    return
                self._process_item(row)
        finally:
            if not finished:
                self._release_flight()

    def _claim_next_or_finish(self) -> Row | None:
        # Checked under the flight lock so a concurrent start() either sees
        # this loop still active or starts a fresh one.
        with self._flight_lock:
            row = self.rows.claim_next(get_string(PROCESSING))
            if row is None:
                self._processing = False
                self._idle.notify_all()
            return row

    def _release_flight(self) -> None:
        with self._flight_lock:
            self._processing = False
            self._idle.notify_all()

    def _process_item(self, claimed: Row) -> None:
        item_id = claimed.id
        try:
            new_item = self._pipeline.process_item(item_id)
        except RecognitionAlert as exc:
            logger.exception("Recognition failed for %s", item_id)
            self._finish(claimed, RowStatus.FAILED, exc.user_message)
            return
        except Exception:
            logger.exception("Recognition failed for %s", item_id)
            self._finish(claimed, RowStatus.FAILED, get_string(ERROR))
            return

        if new_item is None:
            self._finish(claimed, RowStatus.FAILED, get_string(NO_MATCHES))
        else:
            self._finish(claimed, RowStatus.SUCCEEDED, new_item.title)

    def _finish(self, claimed: Row, status: RowStatus, message: str) -> None:
        # A cancelled or re-enqueued row is no longer the one this worker claimed.
        if not self.rows.update_status(claimed.id, status, message, generation=claimed.generation):
            logger.debug("Discarding result for %s; its row was replaced", claimed.id)

    def _is_offline(self) -> bool:
        if self._connectivity is None:
            return False
        return self._connectivity.is_offline()


def _display_name(item: Item) -> str:
    if item.title:
        return item.title
    if item.file_path:
        return Path(item.file_path).name
    return item.key
