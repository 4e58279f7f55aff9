"""Reader domain helpers."""

from xenolexia.core.reader.pipeline import (
    Chapter,
    ChapterContentPipeline,
    ProcessedChapter,
    WordMarker,
    extract_context,
    text_to_html,
)
from xenolexia.core.reader.session import (
    ContentReadyEvent,
    ProgressEvent,
    ReadingSession,
    RenderingSurface,
    WordLongPressEvent,
    WordTapEvent,
)
from xenolexia.core.reader.styles import THEME_COLORS, ReaderStyle, build_document

__all__ = [
    "THEME_COLORS",
    "Chapter",
    "ChapterContentPipeline",
    "ContentReadyEvent",
    "ProcessedChapter",
    "ProgressEvent",
    "ReaderStyle",
    "ReadingSession",
    "RenderingSurface",
    "WordLongPressEvent",
    "WordMarker",
    "WordTapEvent",
    "build_document",
    "extract_context",
    "text_to_html",
]
