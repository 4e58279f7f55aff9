"""Pydantic schemas for vocabulary endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

VocabularyStatus = Literal["new", "learning", "review", "learned"]


class VocabularyItemCreate(BaseModel):
    """A word the reader saved while reading."""

    source_word: str = Field(min_length=1, max_length=255)
    target_word: str = Field(min_length=1, max_length=255)
    source_lang: str = Field(min_length=2, max_length=10)
    target_lang: str = Field(min_length=2, max_length=10)
    context_sentence: Optional[str] = None
    book_id: Optional[str] = Field(default=None, max_length=64)
    book_title: Optional[str] = Field(default=None, max_length=512)


class VocabularyItemUpdate(BaseModel):
    """Partial update of the word text and where it was found.

    Scheduling fields are rejected; reviews go through ``/review``.
    """

    source_word: Optional[str] = Field(default=None, min_length=1, max_length=255)
    target_word: Optional[str] = Field(default=None, min_length=1, max_length=255)
    context_sentence: Optional[str] = None
    book_id: Optional[str] = Field(default=None, max_length=64)
    book_title: Optional[str] = Field(default=None, max_length=512)

    model_config = ConfigDict(extra="forbid")


class VocabularyItemRead(BaseModel):
    id: str
    source_word: str
    target_word: str
    source_lang: str
    target_lang: str
    context_sentence: Optional[str] = None
    book_id: Optional[str] = None
    book_title: Optional[str] = None
    added_at: datetime
    last_reviewed_at: Optional[datetime] = None
    due_at: Optional[datetime] = None
    review_count: int
    ease_factor: float
    interval: int
    status: VocabularyStatus

    model_config = ConfigDict(from_attributes=True)


class VocabularyListResponse(BaseModel):
    """Paginated vocabulary response payload."""

    total: int
    items: list[VocabularyItemRead]


class ReviewRequest(BaseModel):
    quality: int = Field(ge=0, le=5, description="Recall grade, 0 (blackout) to 5 (perfect)")


class VocabularyStatisticsRead(BaseModel):
    total: int
    new: int
    learning: int
    review: int
    learned: int
    due_today: int
    added_today: int

    model_config = ConfigDict(from_attributes=True)
