"""Per-book reading session: chapter lifecycle, surface events and progress.

A session owns everything that changes while one book is open: the active
configuration, the processed chapter, event listeners and the progress
throttle. Two sessions never share state, so several books can be open at
once.
"""
from __future__ import annotations

import asyncio
import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Protocol, TypeVar

from loguru import logger

from xenolexia.config import settings
from xenolexia.core.reader.pipeline import (
    Chapter,
    ChapterContentPipeline,
    ProcessedChapter,
    WordMarker,
)
from xenolexia.core.reader.styles import ReaderStyle
from xenolexia.core.translation.types import ReplacementConfig
from xenolexia.utils.exceptions import ChapterProcessingCancelled, ValidationError


class RenderingSurface(Protocol):
    """Whatever displays chapters and captures gestures."""

    def render(self, document: str, chapter: ProcessedChapter) -> None: ...

    def apply_settings(self, settings: Mapping[str, Any]) -> None: ...


@dataclass(slots=True, frozen=True)
class WordTapEvent:
    chapter_id: str
    foreign_word: str
    original_word: str
    word_id: str
    context: str
    pronunciation: str | None = None
    part_of_speech: str = "other"

    @classmethod
    def from_marker(cls, chapter_id: str, marker: WordMarker) -> "WordTapEvent":
        return cls(
            chapter_id=chapter_id,
            foreign_word=marker.foreign_word,
            original_word=marker.original_word,
            word_id=marker.word_id,
            context=marker.context,
            pronunciation=marker.pronunciation,
            part_of_speech=marker.part_of_speech,
        )


@dataclass(slots=True, frozen=True)
class WordLongPressEvent(WordTapEvent):
    pass


@dataclass(slots=True, frozen=True)
class ProgressEvent:
    chapter_id: str
    progress: float


@dataclass(slots=True, frozen=True)
class ContentReadyEvent:
    chapter_id: str
    marker_count: int


ReaderEvent = WordTapEvent | WordLongPressEvent | ProgressEvent | ContentReadyEvent
E = TypeVar("E")


class ReadingSession:
    """State for one open book."""

    def __init__(
        self,
        book_id: str,
        pipeline: ChapterContentPipeline,
        config: ReplacementConfig,
        *,
        style: ReaderStyle | None = None,
        surface: RenderingSurface | None = None,
        progress_step: float | None = None,
    ) -> None:
        self.book_id = book_id
        self.pipeline = pipeline
        self.config = config
        self.style = style or ReaderStyle()
        self.surface = surface
        self.progress_step = progress_step if progress_step is not None else settings.PROGRESS_STEP

        self.current: ProcessedChapter | None = None
        self._chapter: Chapter | None = None
        self._listeners: dict[type, list[Callable[[Any], None]]] = {}
        self._last_progress: float | None = None
        self._generation = 0
        self._task: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def subscribe(self, event_type: type[E], callback: Callable[[E], None]) -> Callable[[], None]:
        """Register ``callback`` for ``event_type``; returns an unsubscribe function."""

        callbacks = self._listeners.setdefault(event_type, [])
        callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def emit(self, event: ReaderEvent) -> None:
        for callback in list(self._listeners.get(type(event), ())):
            try:
                callback(event)
            except Exception as exc:
                logger.warning(
                    "Reader event listener failed",
                    event=type(event).__name__,
                    error=str(exc),
                )

    # ------------------------------------------------------------------
    # Chapter lifecycle
    # ------------------------------------------------------------------
    @property
    def is_processing(self) -> bool:
        return self._task is not None and not self._task.done()

    async def open_chapter(self, chapter: Chapter) -> ProcessedChapter:
        """Process and display ``chapter``, superseding any run in flight.

        Raises:
            ChapterProcessingCancelled: if another chapter or configuration
                change replaced this run before it finished.
            ChapterProcessingError: if the content cannot be processed; the
                previously displayed chapter stays current.
        """
        return await self._run(chapter, self.config)

    async def update_config(
        self, config: ReplacementConfig | None = None, **changes: Any
    ) -> ProcessedChapter | None:
        """Switch configuration and re-process the chapter already in memory."""

        new_config = config or dataclasses.replace(self.config, **changes)
        self.config = new_config
        if self._chapter is None:
            return None
        return await self._run(self._chapter, new_config)

    def apply_style(self, style: ReaderStyle | None = None, **changes: Any) -> ReaderStyle:
        self.style = style or dataclasses.replace(self.style, **changes)
        if self.surface is not None:
            self.surface.apply_settings(self.style.settings_payload())
        return self.style

    def cancel(self) -> None:
        """Abandon any in-flight processing; the displayed chapter is kept."""

        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def close(self) -> None:
        self.cancel()
        self._listeners.clear()
        self.current = None
        self._chapter = None

    async def _run(self, chapter: Chapter, config: ReplacementConfig) -> ProcessedChapter:
        self.cancel()
        generation = self._generation
        task = asyncio.get_running_loop().create_task(self.pipeline.process_chapter(chapter, config))
        self._task = task
        try:
            processed = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                raise ChapterProcessingCancelled(
                    "Chapter processing was superseded", {"chapter_id": chapter.id}
                ) from None
            raise
        finally:
            if self._task is task:
                self._task = None

        if generation != self._generation:
            raise ChapterProcessingCancelled(
                "Chapter processing was superseded", {"chapter_id": chapter.id}
            )
        self._commit(chapter, processed)
        return processed

    def _commit(self, chapter: Chapter, processed: ProcessedChapter) -> None:
        if self._chapter is None or self._chapter.id != chapter.id:
            self._last_progress = None
        self._chapter = chapter
        self.current = processed
        if self.surface is not None:
            self.surface.render(processed.document(self.style), processed)
        logger.debug(
            "Chapter ready",
            book_id=self.book_id,
            chapter_id=chapter.id,
            markers=len(processed.markers),
        )

    # ------------------------------------------------------------------
    # Surface events
    # ------------------------------------------------------------------
    def report_progress(self, progress: float) -> ProgressEvent | None:
        """Emit progress if it moved by at least one step or hit 0 or 100."""

        if self.current is None:
            return None
        value = max(0.0, min(100.0, float(progress)))
        last = self._last_progress
        if last is not None and value == last:
            return None
        boundary = value in (0.0, 100.0)
        if last is not None and not boundary and abs(value - last) < self.progress_step:
            return None
        self._last_progress = value
        event = ProgressEvent(chapter_id=self.current.chapter_id, progress=value)
        self.emit(event)
        return event

    def _marker_from(self, message: Mapping[str, Any]) -> WordMarker | None:
        if self.current is None:
            return None
        index = message.get("index")
        if index is not None:
            try:
                return self.current.marker(int(index))
            except (TypeError, ValueError):
                return None
        word_id = message.get("wordId") or message.get("word_id")
        return self.current.marker_for_word(str(word_id)) if word_id else None

    def handle_message(self, message: Mapping[str, Any]) -> ReaderEvent | None:
        """Translate a raw surface message into a typed event and dispatch it.

        Messages for a chapter other than the current one are dropped.
        """
        kind = message.get("type")
        chapter_id = message.get("chapterId") or message.get("chapter_id")
        if self.current is None or (chapter_id and chapter_id != self.current.chapter_id):
            logger.debug("Dropping stale surface message", type=kind, chapter_id=chapter_id)
            return None

        if kind in ("wordTap", "wordLongPress"):
            marker = self._marker_from(message)
            if marker is None:
                logger.warning("Surface referenced an unknown word marker", type=kind)
                return None
            event_cls = WordTapEvent if kind == "wordTap" else WordLongPressEvent
            event = event_cls.from_marker(self.current.chapter_id, marker)
            self.emit(event)
            return event
        if kind == "progress":
            return self.report_progress(message.get("progress", 0.0))
        if kind == "contentReady":
            event = ContentReadyEvent(
                chapter_id=self.current.chapter_id, marker_count=len(self.current.markers)
            )
            self.emit(event)
            return event
        raise ValidationError("Unknown surface message type", {"type": kind})
