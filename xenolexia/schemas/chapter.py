"""Pydantic schemas for chapter processing."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from xenolexia.config import settings
from xenolexia.schemas.word_list import ProficiencyLevel


class ReplacementSettings(BaseModel):
    source_language: str = Field(min_length=2, max_length=10)
    target_language: str = Field(min_length=2, max_length=10)
    proficiency_level: ProficiencyLevel = Field(default_factory=lambda: settings.DEFAULT_PROFICIENCY)
    density: float = Field(default_factory=lambda: settings.DEFAULT_DENSITY, gt=0, lt=1)
    protected_words: list[str] = Field(default_factory=list)
    min_word_spacing: int = Field(default_factory=lambda: settings.MIN_WORD_SPACING, ge=0)


class StyleSettings(BaseModel):
    font_family: str = "Georgia, serif"
    font_size: int = Field(default=18, gt=0)
    line_height: float = Field(default=1.6, gt=0)
    text_align: Literal["left", "justify"] = "left"
    margin_horizontal: int = Field(default=24, ge=0)
    theme: Literal["light", "dark", "sepia"] = "light"
    foreign_word_color: Optional[str] = None


class ChapterIn(BaseModel):
    id: str
    index: int = Field(default=0, ge=0)
    title: str = ""
    content: str
    word_count: int = Field(default=0, ge=0)


class ChapterProcessRequest(BaseModel):
    chapter: ChapterIn
    config: ReplacementSettings
    style: Optional[StyleSettings] = None


class WordMarkerRead(BaseModel):
    index: int
    foreign_word: str
    original_word: str
    word_id: str
    pronunciation: Optional[str] = None
    part_of_speech: str
    position: int
    sentence: int
    block: int
    context: str

    model_config = ConfigDict(from_attributes=True)


class ReplacementStatsRead(BaseModel):
    total_words: int
    eligible_words: int
    replaced_words: int
    protected_words: int
    sentences: int

    model_config = ConfigDict(from_attributes=True)


class ProcessedChapterRead(BaseModel):
    chapter_id: str
    html: str
    document: Optional[str] = None
    markers: list[WordMarkerRead]
    stats: ReplacementStatsRead
