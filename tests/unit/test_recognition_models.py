from __future__ import annotations

import pytest

from pdfrecog.core.errors import RecognitionAlert, RecogError
from pdfrecog.core.ids import ITEM_KEY_LENGTH, new_item_key
from pdfrecog.core.messages import NO_OCR, get_string
from pdfrecog.core.time import format_elapsed
from pdfrecog.domain.models.recognition import ExtractedDocument, RecognitionResult
from pdfrecog.domain.models.row import Row, RowStatus


def test_extracted_document_from_payload_joins_text_lists() -> None:
    document = ExtractedDocument.from_payload(
        {
            "totalPages": 7,
            "metadata": {"Title": "x", "Empty": ""},
            "pages": [[612, 792, ["line one", "line two"]], [612, 792, None]],
        }
    )

    assert document.total_pages == 7
    assert document.metadata == {"Title": "x"}
    assert document.pages[0].text == "line one\nline two"
    assert document.pages[1].text == ""
    assert document.text_page_count() == 1


@pytest.mark.parametrize("payload", [[], {"pages": None}, {"pages": [[1, 2]]}, {"pages": ["text"]}])
def test_extracted_document_rejects_bad_shapes(payload: object) -> None:
    with pytest.raises(ValueError):
        ExtractedDocument.from_payload(payload)


def test_recognition_result_from_payload() -> None:
    result = RecognitionResult.from_payload(
        {
            "title": "  A Chapter  ",
            "type": "book-chapter",
            "authors": [{"firstName": "Alan", "lastName": "Turing"}, "bogus"],
            "issn": "",
            "pages": 12,
        }
    )

    assert result.title == "A Chapter"
    assert result.is_book_chapter
    assert [(a.first_name, a.last_name) for a in result.authors] == [("Alan", "Turing")]
    assert result.issn is None
    assert result.pages == "12"
    assert result.doi is None


def test_recognition_alert_carries_key_and_catalog_text() -> None:
    alert = RecognitionAlert(NO_OCR)

    assert isinstance(alert, RecogError)
    assert alert.key == NO_OCR
    assert alert.user_message == get_string(NO_OCR)
    assert get_string("recognize.unknownKey") == "recognize.unknownKey"


def test_row_status_ranking_and_serialization() -> None:
    assert [status for status in RowStatus if status.is_terminal] == [RowStatus.FAILED, RowStatus.SUCCEEDED]
    row = Row(id="a", status=RowStatus.FAILED, display_name="paper.pdf", message="No matches found.")

    assert row.to_dict() == {
        "id": "a",
        "status": 3,
        "status_label": "failed",
        "display_name": "paper.pdf",
        "message": "No matches found.",
    }


def test_format_elapsed() -> None:
    assert format_elapsed(2.345) == "2.3s"
    assert format_elapsed(125) == "2m05s"


def test_item_keys_avoid_ambiguous_characters() -> None:
    keys = {new_item_key() for _ in range(200)}

    assert all(len(key) == ITEM_KEY_LENGTH for key in keys)
    assert not any(ch in key for key in keys for ch in "01O")
