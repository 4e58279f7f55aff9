"""Saved vocabulary database models."""
from datetime import datetime, timedelta, timezone

from sqlalchemy import Column, DateTime, Float, Integer, String, Text
from sqlalchemy.sql import func

from xenolexia.db.base import Base


class VocabularyItem(Base):
    """A word the reader saved from a book for spaced-repetition review."""

    __tablename__ = "vocabulary"

    id = Column(String(64), primary_key=True)
    source_word = Column(String(255), nullable=False)
    target_word = Column(String(255), nullable=False)
    source_lang = Column(String(10), nullable=False, index=True)
    target_lang = Column(String(10), nullable=False, index=True)

    context_sentence = Column(Text, nullable=True)
    book_id = Column(String(64), nullable=True, index=True)
    book_title = Column(String(512), nullable=True)

    added_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_reviewed_at = Column(DateTime(timezone=True), nullable=True)
    # last_reviewed_at + interval days, kept in sync for the due query
    due_at = Column(DateTime(timezone=True), nullable=True, index=True)

    review_count = Column(Integer, nullable=False, default=0)
    ease_factor = Column(Float, nullable=False, default=2.5)
    interval = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="new", index=True)

    def refresh_due_date(self) -> None:
        """Recompute ``due_at`` from the last review and the interval."""

        if self.last_reviewed_at is None:
            self.due_at = None
            return
        reviewed = self.last_reviewed_at
        if reviewed.tzinfo is None:
            reviewed = reviewed.replace(tzinfo=timezone.utc)
        self.due_at = reviewed + timedelta(days=self.interval or 0)

    def mark_review(
        self,
        review_date: datetime,
        *,
        ease_factor: float,
        interval: int,
        review_count: int,
        status: str,
    ) -> None:
        """Write a scheduler outcome back onto the row."""

        self.last_reviewed_at = review_date
        self.ease_factor = ease_factor
        self.interval = interval
        self.review_count = review_count
        self.status = status
        self.refresh_due_date()

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<VocabularyItem {self.source_word!r}->{self.target_word!r} status={self.status!r}>"
