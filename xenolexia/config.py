"""Application configuration management."""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    PROJECT_NAME: str = "Xenolexia"
    API_V1_STR: str = "/api/v1"

    DATABASE_URL: str = Field(
        "sqlite:///./xenolexia.db",
        description="SQLAlchemy database URL",
    )
    DEBUG: bool = False

    BACKEND_CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost", "http://localhost:3000"],
        description="Allowed CORS origins",
    )

    # Word replacement defaults
    DEFAULT_DENSITY: float = Field(0.15, gt=0.0, lt=1.0, description="Target share of eligible words replaced")
    DEFAULT_PROFICIENCY: str = Field("beginner", description="Proficiency tier used when none is configured")
    MIN_WORD_SPACING: int = Field(3, ge=0, description="Minimum token distance between two replaced words")
    MAX_REPLACEMENTS_PER_SENTENCE: int = Field(5, ge=1)
    MIN_SENTENCE_WORDS: int = Field(
        3,
        ge=1,
        description="Sentences with fewer words than this never receive a replacement",
    )
    MIN_TOKEN_LENGTH: int = Field(2, ge=1)
    MAX_TOKEN_LENGTH: int = Field(25, ge=1)

    # Reader surface
    CONTEXT_WORDS: int = Field(10, ge=1, description="Words on each side of a tapped word in its context excerpt")
    PROGRESS_STEP: float = Field(0.5, gt=0.0, description="Minimum progress change reported to listeners")

    REVIEW_BATCH_SIZE: int = Field(20, ge=1, description="Default number of items returned by the due queue")
    EXPORT_DIR: Optional[Path] = Field(None, description="Directory export files are written to")

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parent.parent / ".env",
        env_file_encoding="utf-8",
        env_prefix="XENOLEXIA_",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


settings = get_settings()
