"""Word replacement domain helpers."""

from xenolexia.core.translation.replacer import (
    ReplacementResult,
    ReplacementStats,
    Selection,
    SubstitutionSpan,
    WordLookup,
    WordReplacementEngine,
    preserve_case,
    sentence_quota,
)
from xenolexia.core.translation.tokenizer import Sentence, Token, Tokenizer, TokenStream
from xenolexia.core.translation.types import (
    PROFICIENCY_ORDER,
    ReplacementConfig,
    WordEntry,
    is_within_proficiency,
    pair_key,
    proficiency_from_rank,
)

__all__ = [
    "PROFICIENCY_ORDER",
    "ReplacementConfig",
    "ReplacementResult",
    "ReplacementStats",
    "Selection",
    "Sentence",
    "SubstitutionSpan",
    "Token",
    "TokenStream",
    "Tokenizer",
    "WordEntry",
    "WordLookup",
    "WordReplacementEngine",
    "is_within_proficiency",
    "pair_key",
    "preserve_case",
    "proficiency_from_rank",
    "sentence_quota",
]
