"""Shared API dependencies."""
from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from xenolexia.config import settings
from xenolexia.core.reader.pipeline import ChapterContentPipeline
from xenolexia.core.translation.replacer import WordReplacementEngine
from xenolexia.db.session import SessionLocal
from xenolexia.services.export import ExportService
from xenolexia.services.translation_index import TranslationIndex
from xenolexia.services.vocabulary import VocabularyService
from xenolexia.services.word_list import WordListRepository

_translation_index_singleton: TranslationIndex | None = None
_pipeline_singleton: ChapterContentPipeline | None = None


def get_db() -> Session:
    """Yield a database session for request lifetime."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_translation_index() -> TranslationIndex:
    """Return the process-wide translation index; its pair cache outlives requests."""

    global _translation_index_singleton
    if _translation_index_singleton is None:
        _translation_index_singleton = TranslationIndex(WordListRepository(SessionLocal))
    return _translation_index_singleton


def get_pipeline(
    index: TranslationIndex = Depends(get_translation_index),
) -> ChapterContentPipeline:
    global _pipeline_singleton
    if _pipeline_singleton is None or _pipeline_singleton.engine.lookup is not index:
        _pipeline_singleton = ChapterContentPipeline(WordReplacementEngine(index))
    return _pipeline_singleton


def get_vocabulary_service(db: Session = Depends(get_db)) -> VocabularyService:
    return VocabularyService(db)


def get_export_service() -> ExportService:
    return ExportService(settings.EXPORT_DIR)
