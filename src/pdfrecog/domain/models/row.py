from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class RowStatus(IntEnum):
    # Ordered: anything above PROCESSING counts as processed.
    QUEUED = 1
    PROCESSING = 2
    FAILED = 3
    SUCCEEDED = 4

    @property
    def is_terminal(self) -> bool:
        return self > RowStatus.PROCESSING

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(slots=True)
class Row:
    id: str
    status: RowStatus
    display_name: str
    message: str = ""
    # Distinguishes a re-enqueued row from an earlier row with the same id.
    generation: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "status": int(self.status),
            "status_label": self.status.label,
            "display_name": self.display_name,
            "message": self.message,
        }
