"""Word replacement engine.

Selection is sentence by sentence, left to right. Each sentence gets a quota
derived from how many of its words are eligible and the configured density,
bounded to ``1..max_per_sentence``. A candidate closer than
``min_word_spacing`` token positions to the previously chosen one is skipped
in favour of the next. Nothing here reads the clock or a random source, so a
given passage, dictionary and configuration always yield the same spans.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping, Protocol, Sequence

from loguru import logger

from xenolexia.config import settings
from xenolexia.core.translation.tokenizer import Token, Tokenizer, TokenStream
from xenolexia.core.translation.types import (
    ReplacementConfig,
    WordEntry,
    is_within_proficiency,
)


class WordLookup(Protocol):
    """Anything able to resolve a batch of normalised words to entries."""

    async def lookup_words(
        self, words: Sequence[str], source_language: str, target_language: str
    ) -> dict[str, WordEntry | None]:  # pragma: no cover - interface definition
        """Return an entry (or ``None``) for each word, preserving order."""


@dataclass(slots=True)
class Selection:
    """A token chosen for replacement together with its dictionary entry."""

    token: Token
    entry: WordEntry
    foreign_word: str


@dataclass(slots=True)
class SubstitutionSpan:
    """One replaced word inside the processed text."""

    original_word: str
    foreign_word: str
    start_index: int
    end_index: int
    entry: WordEntry
    position: int
    sentence: int

    @property
    def word_id(self) -> str:
        return self.entry.id

    @property
    def pronunciation(self) -> str | None:
        return self.entry.pronunciation

    @property
    def part_of_speech(self) -> str:
        return self.entry.part_of_speech


@dataclass(slots=True)
class ReplacementStats:
    """Counters describing one replacement run."""

    total_words: int = 0
    eligible_words: int = 0
    replaced_words: int = 0
    protected_words: int = 0
    sentences: int = 0

    @property
    def replacement_ratio(self) -> float:
        if not self.eligible_words:
            return 0.0
        return self.replaced_words / self.eligible_words


@dataclass(slots=True)
class ReplacementResult:
    """Processed text plus the spans that were substituted into it."""

    text: str
    spans: list[SubstitutionSpan]
    stats: ReplacementStats


def sentence_quota(
    eligible_count: int,
    density: float,
    *,
    minimum: int = 1,
    maximum: int = 5,
) -> int:
    """Number of replacements a sentence may contribute.

    ``clamp(round(eligible_count * density), minimum, maximum)``, and zero
    when nothing in the sentence is eligible.
    """

    if eligible_count <= 0:
        return 0
    target = math.floor(eligible_count * density + 0.5)
    return min(eligible_count, max(minimum, min(maximum, target)))


def preserve_case(original: str, replacement: str) -> str:
    """Give ``replacement`` the casing pattern of ``original``."""

    if not original or not replacement:
        return replacement
    if len(original) > 1 and original.isupper():
        return replacement.upper()
    if original[0].isupper() and (original[1:] == original[1:].lower()):
        return replacement[0].upper() + replacement[1:].lower()
    return replacement.lower()


class WordReplacementEngine:
    """Choose and apply foreign-word substitutions for a passage."""

    def __init__(
        self,
        lookup: WordLookup | None = None,
        *,
        tokenizer: Tokenizer | None = None,
        max_per_sentence: int | None = None,
        min_sentence_words: int | None = None,
    ) -> None:
        self.lookup = lookup
        self.tokenizer = tokenizer or Tokenizer(
            min_word_length=settings.MIN_TOKEN_LENGTH,
            max_word_length=settings.MAX_TOKEN_LENGTH,
        )
        self.max_per_sentence = max_per_sentence or settings.MAX_REPLACEMENTS_PER_SENTENCE
        self.min_sentence_words = min_sentence_words or settings.MIN_SENTENCE_WORDS

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    async def process(self, text: str, config: ReplacementConfig) -> ReplacementResult:
        """Replace words of a plain-text passage using the configured lookup."""

        stream = self.tokenizer.tokenize(text, markup=False)
        entries = await self.resolve(stream, config)
        return self.apply(text, *self.select(stream, entries, config))

    def replace(
        self,
        text: str,
        entries: Mapping[str, WordEntry | None],
        config: ReplacementConfig,
    ) -> ReplacementResult:
        """Synchronous variant for callers that already resolved the entries."""

        stream = self.tokenizer.tokenize(text, markup=False)
        return self.apply(text, *self.select(stream, entries, config))

    async def resolve(
        self, stream: TokenStream, config: ReplacementConfig
    ) -> dict[str, WordEntry | None]:
        """Look up every distinct, non-protected word of ``stream``."""

        if self.lookup is None:
            raise RuntimeError("WordReplacementEngine has no lookup configured")
        words = [w for w in stream.unique_words() if w not in config.protected_words]
        if not words:
            return {}
        return await self.lookup.lookup_words(
            words, config.source_language, config.target_language
        )

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def eligible_entry(
        self,
        token: Token,
        entries: Mapping[str, WordEntry | None],
        config: ReplacementConfig,
    ) -> WordEntry | None:
        """Return the entry to use for ``token`` or ``None`` if it must stay."""

        if token.is_protected or token.word in config.protected_words:
            return None
        entry = entries.get(token.word)
        if entry is None:
            return None
        if not is_within_proficiency(entry.proficiency_level, config.proficiency_level):
            return None
        if entry.source_word.lower() in config.protected_words:
            return None
        return entry

    def select(
        self,
        stream: TokenStream,
        entries: Mapping[str, WordEntry | None],
        config: ReplacementConfig,
    ) -> tuple[list[Selection], ReplacementStats]:
        """Pick the tokens to replace, in token order."""

        stats = ReplacementStats(
            total_words=len(stream.tokens),
            protected_words=sum(
                1 for t in stream.tokens if t.is_protected or t.word in config.protected_words
            ),
            sentences=len(stream.sentences),
        )
        selections: list[Selection] = []
        last_position: int | None = None

        for sentence in stream.sentences:
            candidates: list[tuple[Token, WordEntry]] = []
            for token in sentence.tokens:
                entry = self.eligible_entry(token, entries, config)
                if entry is not None:
                    candidates.append((token, entry))
            stats.eligible_words += len(candidates)

            if sentence.word_count < self.min_sentence_words:
                continue
            quota = sentence_quota(
                len(candidates), config.density, maximum=self.max_per_sentence
            )
            if config.preferred_parts_of_speech:
                preferred = set(config.preferred_parts_of_speech)
                # Stable: preferred parts of speech first, token order otherwise
                candidates.sort(key=lambda pair: pair[1].part_of_speech not in preferred)

            chosen: list[Selection] = []
            for token, entry in candidates:
                if len(chosen) >= quota:
                    break
                if not self._spaced(token.position, last_position, chosen, config.min_word_spacing):
                    continue
                chosen.append(
                    Selection(
                        token=token,
                        entry=entry,
                        foreign_word=preserve_case(token.original, entry.target_word),
                    )
                )
                if last_position is None or token.position > last_position:
                    last_position = token.position
            chosen.sort(key=lambda selection: selection.token.position)
            selections.extend(chosen)

        stats.replaced_words = len(selections)
        logger.debug(
            "Selected replacements",
            total=stats.total_words,
            eligible=stats.eligible_words,
            replaced=stats.replaced_words,
        )
        return selections, stats

    @staticmethod
    def _spaced(
        position: int,
        last_position: int | None,
        chosen: Sequence[Selection],
        spacing: int,
    ) -> bool:
        if spacing <= 0:
            return True
        if last_position is not None and abs(position - last_position) < spacing:
            return False
        return all(abs(position - s.token.position) >= spacing for s in chosen)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    @staticmethod
    def apply(
        text: str, selections: Sequence[Selection], stats: ReplacementStats
    ) -> ReplacementResult:
        """Splice the selected foreign words into plain ``text``."""

        pieces: list[str] = []
        spans: list[SubstitutionSpan] = []
        cursor = 0
        length = 0
        for selection in selections:
            token = selection.token
            before = text[cursor:token.start]
            pieces.append(before)
            length += len(before)
            pieces.append(selection.foreign_word)
            spans.append(
                SubstitutionSpan(
                    original_word=token.original,
                    foreign_word=selection.foreign_word,
                    start_index=length,
                    end_index=length + len(selection.foreign_word),
                    entry=selection.entry,
                    position=token.position,
                    sentence=token.sentence,
                )
            )
            length += len(selection.foreign_word)
            cursor = token.end
        pieces.append(text[cursor:])
        return ReplacementResult(text="".join(pieces), spans=spans, stats=stats)
