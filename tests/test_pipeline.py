"""Tests for turning chapters into reader markup."""
from __future__ import annotations

import pytest

from xenolexia.core.reader.pipeline import (
    Chapter,
    ChapterContentPipeline,
    text_to_html,
)
from xenolexia.core.reader.styles import THEME_COLORS, ReaderStyle
from xenolexia.core.translation.replacer import WordReplacementEngine
from xenolexia.core.translation.tokenizer import TokenStream
from xenolexia.core.translation.types import ReplacementConfig, WordEntry
from xenolexia.utils.exceptions import ChapterProcessingError, DatabaseError, ValidationError

ENTRIES = {
    "house": WordEntry(
        id="en_es_house",
        source_word="house",
        target_word="casa",
        source_language="en",
        target_language="es",
        part_of_speech="noun",
        pronunciation="KAH-sah",
    ),
    "cat": WordEntry(
        id="en_es_cat",
        source_word="cat",
        target_word="gato",
        source_language="en",
        target_language="es",
        part_of_speech="noun",
    ),
    "river": WordEntry(
        id="en_es_river",
        source_word="river",
        target_word="río",
        source_language="en",
        target_language="es",
        proficiency_level="intermediate",
    ),
}

CONFIG = ReplacementConfig("en", "es", density=0.5, min_word_spacing=0)


class DictLookup:
    def __init__(self, entries=ENTRIES, error: Exception | None = None):
        self.entries = entries
        self.error = error

    async def lookup_words(self, words, source_language, target_language):
        if self.error is not None:
            raise self.error
        return {word: self.entries.get(word) for word in words}


def make_pipeline(**kwargs) -> ChapterContentPipeline:
    return ChapterContentPipeline(WordReplacementEngine(DictLookup()), **kwargs)


def test_text_to_html_escapes_and_splits_paragraphs() -> None:
    assert text_to_html("Fish & chips\nfor   two.\n\n\n<b>Done</b>") == (
        "<p>Fish &amp; chips for two.</p>\n<p>&lt;b&gt;Done&lt;/b&gt;</p>"
    )


@pytest.mark.asyncio
async def test_plain_text_chapter_gets_markers() -> None:
    chapter = Chapter(
        id="ch1",
        index=0,
        title="One",
        content="The house is near the river.\n\nThe cat sleeps in the house.",
    )

    processed = await make_pipeline().process_chapter(chapter, CONFIG)

    assert processed.chapter_id == "ch1"
    assert [m.foreign_word for m in processed.markers] == ["casa", "gato"]
    assert processed.html.startswith("<p>The <span ")
    assert (
        '<span class="foreign-word" data-index="0" data-original="house" '
        'data-word-id="en_es_house" data-pronunciation="KAH-sah" data-pos="noun">casa</span>'
    ) in processed.html
    assert "river" in processed.html
    first, second = processed.markers
    assert (first.block, second.block) == (0, 1)
    assert first.context == "The casa is near the river"
    assert second.context == "The gato sleeps in the house"
    assert processed.stats.replaced_words == 2
    assert processed.marker_for_word("en_es_cat") is second
    assert processed.marker(5) is None


@pytest.mark.asyncio
async def test_context_is_truncated_with_ellipsis() -> None:
    chapter = Chapter(
        id="ch2",
        index=1,
        title="Two",
        content="<p>Yesterday we finally saw the cat near home again.</p>",
    )

    processed = await make_pipeline(context_words=2).process_chapter(chapter, CONFIG)

    assert processed.markers[0].context == "...saw the gato near home..."


@pytest.mark.asyncio
async def test_blocks_are_grouped_once_per_chapter(monkeypatch) -> None:
    calls = []
    original = TokenStream.by_block

    def counting(stream):
        calls.append(stream)
        return original(stream)

    monkeypatch.setattr(TokenStream, "by_block", counting)
    content = "\n\n".join(["The cat sat in the house today."] * 20)
    chapter = Chapter(id="ch9", index=8, title="Many", content=content)

    processed = await make_pipeline().process_chapter(chapter, CONFIG)

    assert len(calls) == 1
    assert len(processed.markers) == 20
    assert {m.block for m in processed.markers} == set(range(20))
    assert processed.markers[-1].context == "The gato sat in the house today"


@pytest.mark.asyncio
async def test_markup_is_preserved_and_code_left_alone() -> None:
    content = "<h1>Chapter One</h1><p>The house is <b>very</b> big.</p><pre>house</pre>"
    chapter = Chapter(id="ch3", index=2, title="Three", content=content)

    processed = await make_pipeline().process_chapter(chapter, CONFIG)

    assert len(processed.markers) == 1
    assert processed.html.startswith("<h1>Chapter One</h1><p>The <span ")
    assert processed.html.endswith("</span> is <b>very</b> big.</p><pre>house</pre>")


@pytest.mark.asyncio
async def test_document_applies_the_theme() -> None:
    chapter = Chapter(id="ch4", index=3, title="Four & More", content="The house is quiet tonight.")

    processed = await make_pipeline().process_chapter(chapter, CONFIG)
    document = processed.document(ReaderStyle(theme="dark", font_size=20))

    assert document.startswith("<!DOCTYPE html>")
    assert "<title>Four &amp; More</title>" in document
    assert THEME_COLORS["dark"]["background"] in document
    assert "--font-size: 20px;" in document
    assert '<div id="progress-indicator"></div>' in document
    assert f'<div id="content">{processed.html}</div>' in document


def test_reader_style_validation() -> None:
    with pytest.raises(ValidationError):
        ReaderStyle(theme="neon")  # type: ignore[arg-type]
    with pytest.raises(ValidationError):
        ReaderStyle(font_size=0)
    assert ReaderStyle(foreign_word_color="#ff0000").colors["foreign_word"] == "#ff0000"
    assert "theme" not in ReaderStyle().settings_payload()


@pytest.mark.asyncio
async def test_missing_content_is_a_processing_error() -> None:
    chapter = Chapter(id="ch5", index=4, title="Five", content=None)  # type: ignore[arg-type]

    with pytest.raises(ChapterProcessingError):
        await make_pipeline().process_chapter(chapter, CONFIG)


@pytest.mark.asyncio
async def test_lookup_failures_are_wrapped() -> None:
    pipeline = ChapterContentPipeline(
        WordReplacementEngine(DictLookup(error=DatabaseError("Failed to load language pair")))
    )
    chapter = Chapter(id="ch6", index=5, title="Six", content="The house is quiet tonight.")

    with pytest.raises(ChapterProcessingError) as exc_info:
        await pipeline.process_chapter(chapter, CONFIG)

    assert exc_info.value.details["chapter_id"] == "ch6"
    assert "Failed to load language pair" in exc_info.value.message
