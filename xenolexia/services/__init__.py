"""Service layer package."""

from xenolexia.services.export import ExportOptions, ExportResult, ExportService
from xenolexia.services.translation_index import IndexStats, TranslationIndex
from xenolexia.services.vocabulary import VocabularyNotFoundError, VocabularyService
from xenolexia.services.word_list import ImportResult, WordListRepository

__all__ = [
    "ExportOptions",
    "ExportResult",
    "ExportService",
    "ImportResult",
    "IndexStats",
    "TranslationIndex",
    "VocabularyNotFoundError",
    "VocabularyService",
    "WordListRepository",
]
