"""Value types shared by the translation index and the replacement engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Literal

from xenolexia.utils.exceptions import ValidationError

ProficiencyLevel = Literal["beginner", "intermediate", "advanced"]

PROFICIENCY_ORDER: tuple[str, ...] = ("beginner", "intermediate", "advanced")

# Frequency rank ceilings per tier; anything above the intermediate ceiling is advanced.
PROFICIENCY_RANKS = {
    "beginner": (1, 500),
    "intermediate": (501, 2000),
    "advanced": (2001, 5000),
}

PARTS_OF_SPEECH = frozenset(
    {
        "noun",
        "verb",
        "adjective",
        "adverb",
        "pronoun",
        "preposition",
        "conjunction",
        "interjection",
        "article",
        "other",
    }
)


def proficiency_from_rank(rank: int) -> str:
    """Map a frequency rank onto a proficiency tier."""

    if rank <= PROFICIENCY_RANKS["beginner"][1]:
        return "beginner"
    if rank <= PROFICIENCY_RANKS["intermediate"][1]:
        return "intermediate"
    return "advanced"


def is_within_proficiency(level: str, maximum: str) -> bool:
    """Return True when ``level`` is as easy as or easier than ``maximum``."""

    try:
        return PROFICIENCY_ORDER.index(level) <= PROFICIENCY_ORDER.index(maximum)
    except ValueError:
        return False


def pair_key(source_language: str, target_language: str) -> str:
    return f"{source_language}_{target_language}"


@dataclass(frozen=True, slots=True)
class WordEntry:
    """A single dictionary fact mapping a source word to its translation."""

    id: str
    source_word: str
    target_word: str
    source_language: str
    target_language: str
    proficiency_level: str = "beginner"
    frequency_rank: int = 0
    part_of_speech: str = "other"
    variants: tuple[str, ...] = ()
    pronunciation: str | None = None

    @property
    def normalized_word(self) -> str:
        return self.source_word.lower()


@dataclass(frozen=True, slots=True)
class ReplacementConfig:
    """Settings that drive which words of a passage get replaced."""

    source_language: str
    target_language: str
    proficiency_level: str = "beginner"
    density: float = 0.15
    protected_words: frozenset[str] = field(default_factory=frozenset)
    min_word_spacing: int = 3
    preferred_parts_of_speech: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not 0.0 < self.density < 1.0:
            raise ValidationError(
                "Density must be strictly between 0 and 1", {"density": self.density}
            )
        if self.proficiency_level not in PROFICIENCY_ORDER:
            raise ValidationError(
                "Unknown proficiency level", {"proficiency_level": self.proficiency_level}
            )
        if self.min_word_spacing < 0:
            raise ValidationError(
                "Minimum word spacing cannot be negative",
                {"min_word_spacing": self.min_word_spacing},
            )
        if not self.source_language or not self.target_language:
            raise ValidationError("Both source and target languages are required")
        # Normalise whatever iterable was supplied into a lowercase frozenset
        object.__setattr__(
            self, "protected_words", frozenset(w.strip().lower() for w in self.protected_words if w.strip())
        )

    @classmethod
    def build(
        cls,
        source_language: str,
        target_language: str,
        *,
        protected_words: Iterable[str] = (),
        **options,
    ) -> "ReplacementConfig":
        """Create a config from loose inputs such as API payloads."""

        return cls(
            source_language=source_language,
            target_language=target_language,
            protected_words=frozenset(protected_words),
            **options,
        )
