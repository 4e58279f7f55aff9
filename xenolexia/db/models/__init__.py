"""Database models package."""
from xenolexia.db.models.vocabulary import VocabularyItem
from xenolexia.db.models.word_list import WordListEntry

__all__ = [
    "VocabularyItem",
    "WordListEntry",
]
