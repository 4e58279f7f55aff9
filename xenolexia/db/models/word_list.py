"""Dictionary (word list) database models."""
from sqlalchemy import Column, Index, Integer, String, Text

from xenolexia.db.base import Base
from xenolexia.db.types import StringList


class WordListEntry(Base):
    """A single dictionary fact for one source/target language pair."""

    __tablename__ = "word_list"

    id = Column(String(255), primary_key=True)
    source_word = Column(String(255), nullable=False)
    target_word = Column(String(255), nullable=False)
    source_lang = Column(String(10), nullable=False)
    target_lang = Column(String(10), nullable=False)

    proficiency = Column(String(20), nullable=False, default="beginner", index=True)
    frequency_rank = Column(Integer, nullable=True)
    part_of_speech = Column(String(50), nullable=True)
    variants = Column(StringList, nullable=True)
    pronunciation = Column(Text, nullable=True)

    __table_args__ = (
        Index("ix_word_list_pair_word", "source_lang", "target_lang", "source_word"),
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return (
            f"<WordListEntry {self.source_lang}->{self.target_lang} "
            f"{self.source_word!r}={self.target_word!r}>"
        )
