"""Chapter processing endpoint."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from xenolexia.api import deps
from xenolexia.core.reader.pipeline import Chapter, ChapterContentPipeline
from xenolexia.core.reader.styles import ReaderStyle
from xenolexia.core.translation.types import ReplacementConfig
from xenolexia.schemas import (
    ChapterProcessRequest,
    ProcessedChapterRead,
    ReplacementStatsRead,
    WordMarkerRead,
)
from xenolexia.utils.exceptions import (
    ChapterProcessingError,
    ValidationError,
    handle_chapter_processing_error,
    handle_validation_error,
)

router = APIRouter(prefix="/chapters", tags=["chapters"])


@router.post("/process", response_model=ProcessedChapterRead)
async def process_chapter(
    payload: ChapterProcessRequest,
    pipeline: ChapterContentPipeline = Depends(deps.get_pipeline),
) -> ProcessedChapterRead:
    """Replace words of one chapter and return markup plus marker metadata."""

    try:
        config = ReplacementConfig.build(
            payload.config.source_language,
            payload.config.target_language,
            protected_words=payload.config.protected_words,
            proficiency_level=payload.config.proficiency_level,
            density=payload.config.density,
            min_word_spacing=payload.config.min_word_spacing,
        )
        style = ReaderStyle(**payload.style.model_dump()) if payload.style else None
    except ValidationError as exc:
        raise handle_validation_error(exc) from exc

    chapter = Chapter(**payload.chapter.model_dump())
    try:
        processed = await pipeline.process_chapter(chapter, config)
    except ChapterProcessingError as exc:
        raise handle_chapter_processing_error(exc) from exc

    return ProcessedChapterRead(
        chapter_id=processed.chapter_id,
        html=processed.html,
        document=processed.document(style) if style else None,
        markers=[WordMarkerRead.model_validate(marker) for marker in processed.markers],
        stats=ReplacementStatsRead.model_validate(processed.stats),
    )
