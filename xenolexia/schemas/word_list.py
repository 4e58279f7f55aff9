"""Pydantic schemas for dictionary endpoints."""
from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ProficiencyLevel = Literal["beginner", "intermediate", "advanced"]


class WordEntryBase(BaseModel):
    source_word: str = Field(min_length=1, max_length=255)
    target_word: str = Field(min_length=1, max_length=255)
    proficiency_level: ProficiencyLevel = "beginner"
    frequency_rank: int = Field(default=0, ge=0)
    part_of_speech: str = "other"
    variants: list[str] = Field(default_factory=list)
    pronunciation: Optional[str] = None

    @field_validator("source_word")
    @classmethod
    def _lowercase_source(cls, value: str) -> str:
        return value.strip().lower()


class WordEntryCreate(WordEntryBase):
    """An entry supplied to the install endpoint."""

    id: str = Field(min_length=1, max_length=255)


class WordEntryRead(WordEntryBase):
    id: str
    source_language: str
    target_language: str

    model_config = ConfigDict(from_attributes=True)


class DictionaryInstallRequest(BaseModel):
    source_language: str = Field(min_length=2, max_length=10)
    target_language: str = Field(min_length=2, max_length=10)
    entries: list[WordEntryCreate]


class DictionaryImportRequest(BaseModel):
    """Loose rows, as parsed from CSV/JSON files or frequency lists."""

    source_language: str = Field(min_length=2, max_length=10)
    target_language: str = Field(min_length=2, max_length=10)
    rows: list[dict[str, Any]]


class ImportResultRead(BaseModel):
    imported: int
    skipped: int
    errors: list[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class DictionaryStatsRead(BaseModel):
    source_language: str
    target_language: str
    total_words: int
    by_proficiency: dict[str, int]
    by_part_of_speech: dict[str, int]
    loaded: bool

    model_config = ConfigDict(from_attributes=True)


class ClearPairResponse(BaseModel):
    removed: int
