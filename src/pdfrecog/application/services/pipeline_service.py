from __future__ import annotations

from pdfrecog.application.services.materialization_service import ItemMaterializer
from pdfrecog.application.services.recognition_service import RecognitionService
from pdfrecog.core.errors import RecognitionAlert
from pdfrecog.core.messages import FILE_NOT_FOUND
from pdfrecog.domain.models.item import Item
from pdfrecog.infrastructure.db.repos.item_repo import ItemRepo


class RecognitionPipelineService:
    """One unit of queue work: load, recognize, then attach under the new item."""

    def __init__(
        self,
        item_repo: ItemRepo,
        recognition: RecognitionService,
        materializer: ItemMaterializer,
    ) -> None:
        self.item_repo = item_repo
        self.recognition = recognition
        self.materializer = materializer

    def process_item(self, item_id: str) -> Item | None:
        # Re-read: the item may have been deleted or reparented since it was queued.
        item = self.item_repo.get_by_id(item_id)
        if item is None or not item.is_top_level():
            raise RecognitionAlert(FILE_NOT_FOUND)

        new_item = self.recognition.recognize(item)
        if new_item is None:
            return None

        self.materializer.attach(item, new_item)
        return new_item
