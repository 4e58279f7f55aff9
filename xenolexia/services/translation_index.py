"""In-memory translation index backed by the word list store.

Each language pair is cached in one of three states: empty, loading (with a
shared task every concurrent caller awaits) and ready. A failed load leaves
the pair empty so the next caller simply retries. Writes to the store
invalidate the pair so the next batch lookup fetches fresh data.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, Sequence

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from xenolexia.core.translation.types import (
    PARTS_OF_SPEECH,
    PROFICIENCY_ORDER,
    WordEntry,
    pair_key,
    proficiency_from_rank,
)
from xenolexia.services.word_list import ImportResult
from xenolexia.utils.exceptions import DatabaseError, ValidationError

EMPTY = "empty"
LOADING = "loading"
READY = "ready"


class WordListStore(Protocol):
    """Synchronous backing store; calls are run on worker threads."""

    def get_entry(self, word: str, source_language: str, target_language: str) -> WordEntry | None: ...

    def get_entry_by_variant(
        self, word: str, source_language: str, target_language: str
    ) -> WordEntry | None: ...

    def get_by_langs(self, source_language: str, target_language: str) -> list[WordEntry]: ...

    def get_by_level(
        self, source_language: str, target_language: str, level: str, *, limit: int | None = None
    ) -> list[WordEntry]: ...

    def search(
        self, query: str, source_language: str, target_language: str, *, limit: int = 50
    ) -> list[WordEntry]: ...

    def count(self, source_language: str | None = None, target_language: str | None = None) -> int: ...

    def count_by_proficiency(self, source_language: str, target_language: str) -> dict[str, int]: ...

    def count_by_part_of_speech(self, source_language: str, target_language: str) -> dict[str, int]: ...

    def add_entry(self, entry: WordEntry) -> WordEntry: ...

    def run_transaction(self, entries: Sequence[WordEntry]) -> ImportResult: ...

    def delete_by_pair(self, source_language: str, target_language: str) -> int: ...


@dataclass(slots=True)
class _PairCache:
    status: str = EMPTY
    task: asyncio.Task | None = None
    words: dict[str, WordEntry] = field(default_factory=dict)
    variants: dict[str, WordEntry] = field(default_factory=dict)


@dataclass(slots=True)
class IndexStats:
    """Summary of one language pair."""

    source_language: str
    target_language: str
    total_words: int
    by_proficiency: dict[str, int]
    by_part_of_speech: dict[str, int]
    loaded: bool


def _split_variants(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        value = value.replace("|", ",").split(",")
    cleaned: dict[str, None] = {}
    for item in value:
        text = str(item).strip().lower()
        if text:
            cleaned.setdefault(text, None)
    return tuple(cleaned)


def _first(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = row.get(key)
        if value not in (None, ""):
            return value
    return None


class TranslationIndex:
    """Word to entry lookups keyed by language pair."""

    def __init__(self, store: WordListStore):
        self.store = store
        self._pairs: dict[str, _PairCache] = {}
        # Hits from single-word store queries made before a pair is loaded
        self._word_cache: dict[str, dict[str, WordEntry]] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def is_loaded(self, source_language: str, target_language: str) -> bool:
        state = self._pairs.get(pair_key(source_language, target_language))
        return state is not None and state.status == READY

    def pair_status(self, source_language: str, target_language: str) -> str:
        state = self._pairs.get(pair_key(source_language, target_language))
        return state.status if state else EMPTY

    async def load_language_pair(self, source_language: str, target_language: str) -> None:
        """Fetch every entry of the pair once; concurrent callers share the fetch."""

        key = pair_key(source_language, target_language)
        state = self._pairs.setdefault(key, _PairCache())
        if state.status == READY:
            return
        if state.task is None:
            state.status = LOADING
            state.task = asyncio.get_running_loop().create_task(
                self._load(state, source_language, target_language)
            )
        # A cancelled waiter must not cancel the shared load
        await asyncio.shield(state.task)

    async def _load(self, state: _PairCache, source_language: str, target_language: str) -> None:
        key = pair_key(source_language, target_language)
        try:
            entries = await asyncio.to_thread(
                self.store.get_by_langs, source_language, target_language
            )
        except SQLAlchemyError as exc:
            state.status = EMPTY
            state.task = None
            logger.error(f"Failed to load language pair {key}: {exc}")
            raise DatabaseError("Failed to load language pair", {"pair": key}) from exc
        except Exception:
            state.status = EMPTY
            state.task = None
            logger.exception(f"Failed to load language pair {key}")
            raise

        words: dict[str, WordEntry] = {}
        variants: dict[str, WordEntry] = {}
        for entry in entries:
            # Variants of a shadowed duplicate resolve to the entry holding the word
            owner = words.setdefault(entry.normalized_word, entry)
            for variant in entry.variants:
                variants.setdefault(variant.lower(), owner)

        state.words = words
        state.variants = variants
        state.status = READY
        state.task = None
        logger.info(f"Loaded {len(words)} words and {len(variants)} variants for {key}")

    def invalidate(self, source_language: str, target_language: str) -> None:
        """Forget cached data for the pair; an in-flight load finishes detached."""

        key = pair_key(source_language, target_language)
        self._pairs.pop(key, None)
        self._word_cache.pop(key, None)

    def clear_cache(self) -> None:
        self._pairs.clear()
        self._word_cache.clear()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    @staticmethod
    def _normalize(word: str, case_sensitive: bool) -> str:
        word = word.strip()
        return word if case_sensitive else word.lower()

    @staticmethod
    def _resolve(state: _PairCache, word: str, include_variants: bool) -> WordEntry | None:
        entry = state.words.get(word)
        if entry is None and include_variants:
            entry = state.variants.get(word)
        return entry

    async def lookup_word(
        self,
        word: str,
        source_language: str,
        target_language: str,
        *,
        case_sensitive: bool = False,
        include_variants: bool = True,
    ) -> WordEntry | None:
        """Return the entry for ``word`` or ``None``; absent words never raise."""

        normalized = self._normalize(word, case_sensitive)
        if not normalized:
            return None
        key = pair_key(source_language, target_language)
        state = self._pairs.get(key)
        if state is not None and state.status == LOADING and state.task is not None:
            await asyncio.shield(state.task)
        if state is not None and state.status == READY:
            return self._resolve(state, normalized, include_variants)

        cached = self._word_cache.get(key, {}).get(normalized)
        if cached is not None:
            return cached

        # Pair never loaded: one-off store query, no bulk load
        entry = await asyncio.to_thread(
            self.store.get_entry, normalized, source_language, target_language
        )
        if entry is None and include_variants:
            entry = await asyncio.to_thread(
                self.store.get_entry_by_variant, normalized, source_language, target_language
            )
            if entry is not None:
                owner = await asyncio.to_thread(
                    self.store.get_entry, entry.source_word, source_language, target_language
                )
                entry = owner or entry
        if entry is not None:
            self._word_cache.setdefault(key, {})[normalized] = entry
        return entry

    async def lookup_words(
        self,
        words: Sequence[str],
        source_language: str,
        target_language: str,
        *,
        case_sensitive: bool = False,
        include_variants: bool = True,
    ) -> dict[str, WordEntry | None]:
        """Resolve a batch after loading the pair; keys keep the input order."""

        await self.load_language_pair(source_language, target_language)
        state = self._pairs.get(pair_key(source_language, target_language))
        results: dict[str, WordEntry | None] = {}
        for word in words:
            if word in results:
                continue
            normalized = self._normalize(word, case_sensitive)
            if not normalized:
                results[word] = None
            elif state is not None and state.status == READY:
                results[word] = self._resolve(state, normalized, include_variants)
            else:
                # Invalidated while we were waiting; answer from the store instead
                results[word] = await self.lookup_word(
                    word,
                    source_language,
                    target_language,
                    case_sensitive=case_sensitive,
                    include_variants=include_variants,
                )
        return results

    async def get_words_by_proficiency(
        self,
        source_language: str,
        target_language: str,
        level: str,
        *,
        limit: int | None = None,
    ) -> list[WordEntry]:
        return await asyncio.to_thread(
            self.store.get_by_level, source_language, target_language, level, limit=limit
        )

    async def search_words(
        self, query: str, source_language: str, target_language: str, *, limit: int = 50
    ) -> list[WordEntry]:
        if not query.strip():
            return []
        return await asyncio.to_thread(
            self.store.search, query.strip(), source_language, target_language, limit=limit
        )

    async def get_stats(self, source_language: str, target_language: str) -> IndexStats:
        total = await asyncio.to_thread(self.store.count, source_language, target_language)
        by_level = await asyncio.to_thread(
            self.store.count_by_proficiency, source_language, target_language
        )
        by_pos = await asyncio.to_thread(
            self.store.count_by_part_of_speech, source_language, target_language
        )
        return IndexStats(
            source_language=source_language,
            target_language=target_language,
            total_words=total,
            by_proficiency={level: by_level.get(level, 0) for level in PROFICIENCY_ORDER},
            by_part_of_speech=by_pos,
            loaded=self.is_loaded(source_language, target_language),
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def install_dictionary(
        self,
        source_language: str,
        target_language: str,
        entries: Sequence[WordEntry],
    ) -> ImportResult:
        """Insert ready-made entries, skipping ids that are already stored."""

        valid: list[WordEntry] = []
        errors: list[str] = []
        for position, entry in enumerate(entries, start=1):
            problem = self._validate_entry(entry, source_language, target_language)
            if problem:
                errors.append(f"Entry {position}: {problem}")
            else:
                valid.append(entry)
        return await self._commit(source_language, target_language, valid, errors)

    async def bulk_import(
        self,
        rows: Sequence[Mapping[str, Any]],
        source_language: str,
        target_language: str,
    ) -> ImportResult:
        """Import loosely shaped rows such as parsed CSV or frequency lists.

        Missing ids become ``{source}_{target}_{n}``, a missing rank defaults
        to the row number and a missing proficiency is derived from the rank.
        """

        entries: list[WordEntry] = []
        errors: list[str] = []
        for position, row in enumerate(rows, start=1):
            source_word = _first(row, "source_word", "source", "word")
            target_word = _first(row, "target_word", "target", "translation")
            if not source_word or not target_word:
                errors.append(f"Row {position}: missing source or target word")
                continue
            try:
                rank = int(_first(row, "frequency_rank", "rank") or position)
            except (TypeError, ValueError):
                errors.append(f"Row {position}: invalid frequency rank")
                continue
            proficiency = str(_first(row, "proficiency_level", "proficiency") or proficiency_from_rank(rank)).lower()
            if proficiency not in PROFICIENCY_ORDER:
                errors.append(f"Row {position}: unknown proficiency level '{proficiency}'")
                continue
            part_of_speech = str(_first(row, "part_of_speech", "pos") or "other").lower()
            if part_of_speech not in PARTS_OF_SPEECH:
                part_of_speech = "other"
            entries.append(
                WordEntry(
                    id=str(_first(row, "id") or f"{source_language}_{target_language}_{position}"),
                    source_word=str(source_word).strip().lower(),
                    target_word=str(target_word).strip(),
                    source_language=source_language,
                    target_language=target_language,
                    proficiency_level=proficiency,
                    frequency_rank=rank,
                    part_of_speech=part_of_speech,
                    variants=_split_variants(row.get("variants")),
                    pronunciation=_first(row, "pronunciation"),
                )
            )
        return await self._commit(source_language, target_language, entries, errors)

    async def add_word(self, entry: WordEntry) -> WordEntry:
        problem = self._validate_entry(entry, entry.source_language, entry.target_language)
        if problem:
            raise ValidationError(problem, {"id": entry.id})
        await asyncio.to_thread(self.store.add_entry, entry)
        self.invalidate(entry.source_language, entry.target_language)
        return entry

    async def clear_language_pair(self, source_language: str, target_language: str) -> int:
        """Delete the pair from the store and the cache; return rows removed."""

        removed = await asyncio.to_thread(
            self.store.delete_by_pair, source_language, target_language
        )
        self.invalidate(source_language, target_language)
        logger.info(
            f"Cleared {removed} entries for {pair_key(source_language, target_language)}"
        )
        return removed

    async def _commit(
        self,
        source_language: str,
        target_language: str,
        entries: list[WordEntry],
        errors: list[str],
    ) -> ImportResult:
        result = await asyncio.to_thread(self.store.run_transaction, entries)
        result.errors = errors + result.errors
        self.invalidate(source_language, target_language)
        logger.info(
            f"Dictionary import for {pair_key(source_language, target_language)}: "
            f"{result.imported} imported, {result.skipped} skipped, {len(result.errors)} errors"
        )
        return result

    @staticmethod
    def _validate_entry(entry: WordEntry, source_language: str, target_language: str) -> str | None:
        if not entry.id:
            return "missing id"
        if not entry.source_word or not entry.source_word.strip():
            return "missing source word"
        if not entry.target_word or not entry.target_word.strip():
            return "missing target word"
        if (entry.source_language, entry.target_language) != (source_language, target_language):
            return (
                f"language pair {entry.source_language}-{entry.target_language} "
                f"does not match {source_language}-{target_language}"
            )
        if entry.proficiency_level not in PROFICIENCY_ORDER:
            return f"unknown proficiency level '{entry.proficiency_level}'"
        return None
