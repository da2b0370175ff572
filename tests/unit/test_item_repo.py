from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from pdfrecog.core.errors import ValidationError
from pdfrecog.domain.models.item import ATTACHMENT, BOOK, Collection, Creator, Item
from pdfrecog.infrastructure.db.repos.collection_repo import CollectionRepo
from pdfrecog.infrastructure.db.repos.item_repo import ItemRepo
from pdfrecog.infrastructure.db.sqlite import initialize_schema


def _repos(tmp_path: Path) -> tuple[ItemRepo, CollectionRepo]:
    db_path = tmp_path / "pdfrecog.db"
    initialize_schema(db_path)
    return ItemRepo(db_path), CollectionRepo(db_path)


def test_save_and_reload_item_with_fields_and_creators(tmp_path: Path) -> None:
    item_repo, _ = _repos(tmp_path)
    item = Item(id="i1", key="ABCDEFGH", library_id=1, item_type=BOOK)
    item.set_field("title", "  The Art of Computer Programming ")
    item.set_field("date", "1968")
    item.set_field("publisher", "")
    item.creators = [
        Creator(first_name="Donald", last_name="Knuth"),
        Creator(first_name="", last_name="Editorial Board", creator_type="editor"),
    ]

    item_repo.save(item)
    loaded = item_repo.get_by_id("i1")

    assert loaded is not None
    assert loaded.fields == {"title": "The Art of Computer Programming", "date": "1968"}
    assert [(c.first_name, c.last_name, c.creator_type) for c in loaded.creators] == [
        ("Donald", "Knuth", "author"),
        ("", "Editorial Board", "editor"),
    ]
    assert loaded.date_added is not None
    assert loaded.date_modified is not None


def test_save_replaces_fields_and_creators(tmp_path: Path) -> None:
    item_repo, _ = _repos(tmp_path)
    item = Item(id="i1", key="ABCDEFGH", library_id=1, item_type=BOOK)
    item.set_field("title", "Old")
    item.set_field("volume", "2")
    item.creators = [Creator("A", "One"), Creator("B", "Two")]
    item_repo.save(item)
    added = item.date_added

    item.set_field("title", "New")
    item.set_field("volume", None)
    item.creators = [Creator("C", "Three")]
    item_repo.save(item)
    loaded = item_repo.get_by_id("i1")

    assert loaded is not None
    assert loaded.fields == {"title": "New"}
    assert [c.last_name for c in loaded.creators] == ["Three"]
    assert loaded.date_added == added


def test_set_parent_and_list_children(tmp_path: Path) -> None:
    item_repo, _ = _repos(tmp_path)
    parent = Item(id="parent", key="PARENT22", library_id=1, item_type=BOOK)
    child = Item(id="child", key="CHILD222", library_id=1, item_type=ATTACHMENT)
    item_repo.save(parent)
    item_repo.save(child)

    item_repo.set_parent("child", "parent")

    loaded = item_repo.get_by_id("child")
    assert loaded is not None
    assert loaded.parent_id == "parent"
    assert not loaded.is_top_level()
    assert [item.id for item in item_repo.list_children("parent")] == ["child"]
    assert [item.id for item in item_repo.list(top_level_only=True)] == ["parent"]
    assert {item.id for item in item_repo.list()} == {"parent", "child"}


def test_set_parent_on_missing_item_raises(tmp_path: Path) -> None:
    item_repo, _ = _repos(tmp_path)
    with pytest.raises(sqlite3.IntegrityError):
        item_repo.set_parent("nope", None)


def test_collection_membership_is_idempotent(tmp_path: Path) -> None:
    item_repo, collection_repo = _repos(tmp_path)
    item_repo.save(Item(id="i1", key="ABCDEFGH", library_id=1, item_type=ATTACHMENT))
    collection_repo.create(
        Collection(id="c1", key="COLL2222", library_id=1, name="Reading", date_added="2024-01-01T00:00:00+00:00")
    )

    collection_repo.add_item("c1", "i1")
    collection_repo.add_item("c1", "i1")

    assert collection_repo.list_ids_for_item("i1") == ["c1"]
    assert collection_repo.list_item_ids("c1") == ["i1"]
    collection = collection_repo.get_by_id("c1")
    assert collection is not None
    assert collection.name == "Reading"


def test_item_from_json_keeps_plain_fields_and_creators() -> None:
    item = Item.from_json(
        {
            "itemType": "book",
            "title": "Structure and Interpretation of Computer Programs",
            "ISBN": "9780262510875",
            "numPages": 657,
            "tags": [{"tag": "lisp"}],
            "key": "IGNORED",
            "creators": [
                {"firstName": "Harold", "lastName": "Abelson", "creatorType": "author"},
                {"name": "MIT Press", "creatorType": "contributor"},
                {"firstName": "", "lastName": ""},
            ],
        },
        item_id="i1",
        key="SICPSICP",
        library_id=1,
    )

    assert item.key == "SICPSICP"
    assert item.fields == {
        "title": "Structure and Interpretation of Computer Programs",
        "ISBN": "9780262510875",
        "numPages": "657",
    }
    assert [(c.first_name, c.last_name, c.creator_type) for c in item.creators] == [
        ("Harold", "Abelson", "author"),
        ("", "MIT Press", "contributor"),
    ]


def test_item_from_json_requires_item_type() -> None:
    with pytest.raises(ValidationError):
        Item.from_json({"title": "No type"}, item_id="i1", key="ABCDEFGH", library_id=1)
