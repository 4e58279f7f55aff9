"""Tests for vocabulary export formats."""
from __future__ import annotations

import json
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from xenolexia.services.export import (
    ANKI_HEADER,
    EXPORT_FORMAT_ID,
    ExportOptions,
    ExportService,
    suggested_filename,
)
from xenolexia.utils.exceptions import NoItemsToExportError, ValidationError

NOW = datetime(2026, 10, 18, 9, 5, tzinfo=timezone.utc)


def make_item(source: str, target: str, **fields) -> SimpleNamespace:
    values = {
        "source_word": source,
        "target_word": target,
        "source_lang": "en",
        "target_lang": "es",
        "context_sentence": None,
        "book_id": None,
        "book_title": None,
        "status": "new",
        "review_count": 0,
        "ease_factor": 2.5,
        "interval": 0,
        "added_at": datetime(2026, 10, 1, 7, 0),
        "last_reviewed_at": None,
    }
    values.update(fields)
    return SimpleNamespace(**values)


@pytest.fixture()
def items() -> list[SimpleNamespace]:
    return [
        make_item(
            "house",
            "casa",
            context_sentence="The casa was old.",
            book_id="b1",
            book_title="The Old House",
            status="review",
            review_count=3,
            ease_factor=2.36,
            interval=15,
            last_reviewed_at=datetime(2026, 10, 10, 12, 0, tzinfo=timezone.utc),
        ),
        make_item("word, with comma", 'word "quoted"', context_sentence="line one\nline two"),
        make_item("tree", "arbre", target_lang="fr", status="learned"),
    ]


def test_csv_quotes_only_fields_that_need_it(items) -> None:
    result = ExportService().export(items, ExportOptions(format="csv"), now=NOW)
    lines = result.content.split("\n")

    assert lines[0] == "source_word,target_word,source_language,target_language,context_sentence,book_title"
    assert lines[1] == "house,casa,en,es,The casa was old.,The Old House"
    assert lines[2].startswith('"word, with comma","word ""quoted""",en,es,"line one')
    assert result.item_count == 3
    assert result.mime_type == "text/csv"
    assert result.filename == "xenolexia_vocabulary_2026-10-18_0905.csv"


def test_csv_with_srs_columns(items) -> None:
    options = ExportOptions(
        format="csv", include_context=False, include_book_info=False, include_srs_data=True
    )
    content = ExportService().export(items[:1], options, now=NOW).content

    assert content.split("\n") == [
        "source_word,target_word,source_language,target_language,status,review_count,ease_factor,interval,added_at",
        "house,casa,en,es,review,3,2.36,15,2026-10-01",
    ]


def test_anki_rows_are_tab_separated_with_tags(items) -> None:
    result = ExportService().export(items, ExportOptions(format="anki"), now=NOW)

    assert result.content.startswith(ANKI_HEADER)
    rows = result.content[len(ANKI_HEADER):].split("\n")
    front, back, tags = rows[0].split("\t")
    assert front == "casa"
    assert back == 'house<br><br><i>"The casa was old."</i><br><small>From: The Old House</small>'
    assert tags == "en-es review"
    # Embedded newlines must not break the row
    assert len(rows) == 3
    assert rows[1].split("\t")[1] == 'word, with comma<br><br><i>"line one line two"</i>'
    assert result.filename.endswith(".txt")


def test_json_backup_is_self_describing(items) -> None:
    options = ExportOptions(format="json", include_srs_data=True)
    payload = json.loads(ExportService().export(items, options, now=NOW).content)

    assert payload["format"] == EXPORT_FORMAT_ID
    assert payload["itemCount"] == 3
    assert payload["exportedAt"] == "2026-10-18T09:05:00+00:00"
    first = payload["items"][0]
    assert first["sourceWord"] == "house"
    assert first["targetWord"] == "casa"
    assert first["contextSentence"] == "The casa was old."
    assert first["bookTitle"] == "The Old House"
    assert first["easeFactor"] == 2.36
    assert first["addedAt"] == "2026-10-01T07:00:00+00:00"
    assert "contextSentence" not in payload["items"][2]


def test_filters_apply_before_rendering(items) -> None:
    options = ExportOptions(format="json", statuses=("review", "learned"), target_lang="es")
    payload = json.loads(ExportService().export(items, options, now=NOW).content)

    assert [item["sourceWord"] for item in payload["items"]] == ["house"]


def test_empty_selection_raises(items) -> None:
    with pytest.raises(NoItemsToExportError):
        ExportService().export(items, ExportOptions(statuses=("learning",)), now=NOW)
    with pytest.raises(NoItemsToExportError):
        ExportService().export([], ExportOptions(), now=NOW)


def test_unknown_format_is_rejected(items) -> None:
    with pytest.raises(ValidationError):
        ExportService().export(items, ExportOptions(format="xlsx"), now=NOW)  # type: ignore[arg-type]


def test_write_to_export_directory(items, tmp_path) -> None:
    result = ExportService(tmp_path / "exports").export(
        items, ExportOptions(format="csv"), now=NOW, write=True
    )

    assert result.path == tmp_path / "exports" / "xenolexia_vocabulary_2026-10-18_0905.csv"
    assert result.path.read_text(encoding="utf-8") == result.content


def test_write_without_directory_fails(items) -> None:
    with pytest.raises(ValidationError):
        ExportService().export(items, ExportOptions(), now=NOW, write=True)


def test_suggested_filenames() -> None:
    assert suggested_filename("csv", NOW) == "xenolexia_vocabulary_2026-10-18.csv"
    assert suggested_filename("anki", NOW) == "xenolexia_anki_2026-10-18.txt"
    assert suggested_filename("json", NOW) == "xenolexia_backup_2026-10-18.json"
