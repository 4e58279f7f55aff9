"""Turn upstream chapters into reader markup with interactive foreign words."""
from __future__ import annotations

import asyncio
import html
import re
from dataclasses import dataclass, field

from loguru import logger

from xenolexia.config import settings
from xenolexia.core.reader.styles import ReaderStyle, build_document
from xenolexia.core.translation.replacer import (
    ReplacementStats,
    Selection,
    WordReplacementEngine,
)
from xenolexia.core.translation.tokenizer import Token, TokenStream
from xenolexia.core.translation.types import ReplacementConfig
from xenolexia.utils.exceptions import ChapterProcessingError, XenolexiaException

_LOOKS_LIKE_MARKUP = re.compile(r"<(?:[a-zA-Z][\w:-]*|/[a-zA-Z][\w:-]*|!--)[^>]*>")
_BLANK_LINES = re.compile(r"\n[ \t\r\f\v]*\n+")

ELLIPSIS = "..."


@dataclass(slots=True, frozen=True)
class Chapter:
    """A chapter as produced by the upstream book parser."""

    id: str
    index: int
    title: str
    content: str
    word_count: int = 0


@dataclass(slots=True, frozen=True)
class WordMarker:
    """Metadata of one interactive foreign word in the processed markup."""

    index: int
    foreign_word: str
    original_word: str
    word_id: str
    pronunciation: str | None
    part_of_speech: str
    position: int
    sentence: int
    block: int
    context: str


@dataclass(slots=True)
class ProcessedChapter:
    """Reader payload for one chapter under one configuration."""

    chapter: Chapter
    config: ReplacementConfig
    html: str
    markers: list[WordMarker] = field(default_factory=list)
    stats: ReplacementStats = field(default_factory=ReplacementStats)

    @property
    def chapter_id(self) -> str:
        return self.chapter.id

    def marker(self, index: int) -> WordMarker | None:
        if 0 <= index < len(self.markers):
            return self.markers[index]
        return None

    def marker_for_word(self, word_id: str) -> WordMarker | None:
        return next((m for m in self.markers if m.word_id == word_id), None)

    def document(self, style: ReaderStyle | None = None) -> str:
        return build_document(self.html, style or ReaderStyle(), title=self.chapter.title)


def looks_like_markup(content: str) -> bool:
    return bool(_LOOKS_LIKE_MARKUP.search(content))


def text_to_html(text: str) -> str:
    """Escape plain text and wrap each blank-line separated paragraph in ``<p>``."""

    paragraphs = [p.strip() for p in _BLANK_LINES.split(text.replace("\r\n", "\n"))]
    return "\n".join(
        f"<p>{html.escape(' '.join(p.split()), quote=False)}</p>" for p in paragraphs if p
    )


def marker_html(marker: WordMarker) -> str:
    attributes = {
        "class": "foreign-word",
        "data-index": str(marker.index),
        "data-original": marker.original_word,
        "data-word-id": marker.word_id,
        "data-pronunciation": marker.pronunciation or "",
        "data-pos": marker.part_of_speech,
    }
    rendered = " ".join(f'{name}="{html.escape(value, quote=True)}"' for name, value in attributes.items())
    return f"<span {rendered}>{html.escape(marker.foreign_word, quote=False)}</span>"


def extract_context(
    block: list[Token],
    position: int,
    displayed: dict[int, str],
    words: int,
) -> str:
    """Up to ``words`` words either side of ``position``, within ``block``.

    ``block`` holds the tokens of one block in reading order. Replaced words
    appear in their displayed (foreign) form.
    """
    # Positions are consecutive within a block
    at = position - block[0].position
    start = max(0, at - words)
    end = min(len(block), at + words + 1)
    excerpt = " ".join(displayed.get(t.position, t.original) for t in block[start:end])
    if start > 0:
        excerpt = ELLIPSIS + excerpt
    if end < len(block):
        excerpt += ELLIPSIS
    return excerpt


class ChapterContentPipeline:
    """Tokenize, replace and re-serialise chapter content.

    Every call works on its own token stream and selection list, so
    concurrent runs for different chapters share no mutable state.
    """

    def __init__(self, engine: WordReplacementEngine, *, context_words: int | None = None):
        self.engine = engine
        self.context_words = context_words if context_words is not None else settings.CONTEXT_WORDS

    async def process_chapter(self, chapter: Chapter, config: ReplacementConfig) -> ProcessedChapter:
        """Produce reader markup for ``chapter``; safe to cancel at any await."""

        if not isinstance(chapter.content, str):
            raise ChapterProcessingError(
                "Chapter content is missing or not text", {"chapter_id": chapter.id}
            )
        content = chapter.content if looks_like_markup(chapter.content) else text_to_html(chapter.content)

        try:
            stream = self.engine.tokenizer.tokenize(content, markup=True)
            entries = await self.engine.resolve(stream, config)
            selections, stats = self.engine.select(stream, entries, config)
        except asyncio.CancelledError:
            logger.debug(f"Processing of chapter {chapter.id} cancelled")
            raise
        except XenolexiaException as exc:
            raise ChapterProcessingError(
                f"Failed to process chapter '{chapter.title}': {exc.message}",
                {"chapter_id": chapter.id, **exc.details},
            ) from exc

        processed = self.render(chapter, config, content, stream, selections, stats)
        logger.info(
            "Processed chapter",
            chapter_id=chapter.id,
            words=stats.total_words,
            replaced=stats.replaced_words,
        )
        return processed

    def render(
        self,
        chapter: Chapter,
        config: ReplacementConfig,
        content: str,
        stream: TokenStream,
        selections: list[Selection],
        stats: ReplacementStats,
    ) -> ProcessedChapter:
        displayed = {s.token.position: s.foreign_word for s in selections}
        blocks = stream.by_block()
        markers: list[WordMarker] = []
        pieces: list[str] = []
        cursor = 0
        for index, selection in enumerate(selections):
            token = selection.token
            marker = WordMarker(
                index=index,
                foreign_word=selection.foreign_word,
                original_word=token.original,
                word_id=selection.entry.id,
                pronunciation=selection.entry.pronunciation,
                part_of_speech=selection.entry.part_of_speech,
                position=token.position,
                sentence=token.sentence,
                block=token.block,
                context=extract_context(blocks[token.block], token.position, displayed, self.context_words),
            )
            markers.append(marker)
            pieces.append(content[cursor:token.start])
            pieces.append(marker_html(marker))
            cursor = token.end
        pieces.append(content[cursor:])
        return ProcessedChapter(
            chapter=chapter,
            config=config,
            html="".join(pieces),
            markers=markers,
            stats=stats,
        )
