from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pdfrecog.core.errors import ValidationError

ATTACHMENT = "attachment"
JOURNAL_ARTICLE = "journalArticle"
BOOK = "book"
BOOK_SECTION = "bookSection"

PDF_CONTENT_TYPE = "application/pdf"

# Keys of item JSON that are not plain string fields.
_STRUCTURAL_KEYS = {"itemType", "creators", "key", "parentItem", "collections", "relations", "tags"}


@dataclass(slots=True)
class Creator:
    first_name: str
    last_name: str
    creator_type: str = "author"

    def to_json(self) -> dict[str, str]:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "creatorType": self.creator_type,
        }


@dataclass(slots=True)
class Collection:
    id: str
    key: str
    library_id: int
    name: str
    date_added: str


@dataclass(slots=True)
class Item:
    id: str
    key: str
    library_id: int
    item_type: str
    fields: dict[str, str] = field(default_factory=dict)
    creators: list[Creator] = field(default_factory=list)
    parent_id: str | None = None
    content_type: str | None = None
    file_path: str | None = None
    date_added: str | None = None
    date_modified: str | None = None

    @property
    def title(self) -> str:
        return self.get_field("title")

    def get_field(self, name: str) -> str:
        return self.fields.get(name, "")

    def set_field(self, name: str, value: object) -> None:
        if value is None or str(value).strip() == "":
            self.fields.pop(name, None)
            return
        self.fields[name] = str(value).strip()

    def is_top_level(self) -> bool:
        return self.parent_id is None

    def is_attachment(self) -> bool:
        return self.item_type == ATTACHMENT

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "key": self.key,
            "itemType": self.item_type,
        }
        data.update(self.fields)
        if self.creators:
            data["creators"] = [creator.to_json() for creator in self.creators]
        if self.parent_id:
            data["parentItem"] = self.parent_id
        return data

    @classmethod
    def from_json(cls, data: dict[str, Any], *, item_id: str, key: str, library_id: int) -> Item:
        """Build an unsaved item from item JSON (as produced by identifier lookups)."""
        item_type = str(data.get("itemType") or "").strip()
        if not item_type:
            raise ValidationError("Item JSON is missing 'itemType'.")

        item = cls(id=item_id, key=key, library_id=library_id, item_type=item_type)
        for name, value in data.items():
            if name in _STRUCTURAL_KEYS or isinstance(value, (dict, list)):
                continue
            item.set_field(name, value)

        for raw in data.get("creators") or []:
            if not isinstance(raw, dict):
                continue
            first = str(raw.get("firstName") or "").strip()
            last = str(raw.get("lastName") or raw.get("name") or "").strip()
            if not first and not last:
                continue
            item.creators.append(
                Creator(
                    first_name=first,
                    last_name=last,
                    creator_type=str(raw.get("creatorType") or "author"),
                )
            )
        return item
