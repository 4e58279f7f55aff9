"""Pydantic schemas package."""

from xenolexia.schemas.chapter import (
    ChapterIn,
    ChapterProcessRequest,
    ProcessedChapterRead,
    ReplacementSettings,
    ReplacementStatsRead,
    StyleSettings,
    WordMarkerRead,
)
from xenolexia.schemas.vocabulary import (
    ReviewRequest,
    VocabularyItemCreate,
    VocabularyItemRead,
    VocabularyItemUpdate,
    VocabularyListResponse,
    VocabularyStatisticsRead,
)
from xenolexia.schemas.word_list import (
    ClearPairResponse,
    DictionaryImportRequest,
    DictionaryInstallRequest,
    DictionaryStatsRead,
    ImportResultRead,
    WordEntryCreate,
    WordEntryRead,
)

__all__ = [
    "ChapterIn",
    "ChapterProcessRequest",
    "ClearPairResponse",
    "DictionaryImportRequest",
    "DictionaryInstallRequest",
    "DictionaryStatsRead",
    "ImportResultRead",
    "ProcessedChapterRead",
    "ReplacementSettings",
    "ReplacementStatsRead",
    "ReviewRequest",
    "StyleSettings",
    "VocabularyItemCreate",
    "VocabularyItemRead",
    "VocabularyItemUpdate",
    "VocabularyListResponse",
    "VocabularyStatisticsRead",
    "WordEntryCreate",
    "WordEntryRead",
]
