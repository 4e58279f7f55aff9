"""Persistence helpers for dictionary (word list) entries."""
from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Sequence

from loguru import logger
from sqlalchemy import Text, any_, case, cast, delete, func, literal, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from xenolexia.core.translation.types import WordEntry
from xenolexia.db.models.word_list import WordListEntry
from xenolexia.utils.exceptions import DatabaseError

# Keeps IN clauses under the SQLite bound-parameter limit
ID_CHUNK_SIZE = 500

# Ranked entries first, then by rank; unranked (0) rows go last
RANK_ORDER = (
    case((func.coalesce(WordListEntry.frequency_rank, 0) > 0, 0), else_=1),
    WordListEntry.frequency_rank,
    WordListEntry.id,
)


@dataclass(slots=True)
class ImportResult:
    """Outcome of a bulk dictionary insert."""

    imported: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


def to_entry(row: WordListEntry) -> WordEntry:
    """Convert an ORM row into the immutable value used by the engine."""

    return WordEntry(
        id=row.id,
        source_word=row.source_word,
        target_word=row.target_word,
        source_language=row.source_lang,
        target_language=row.target_lang,
        proficiency_level=row.proficiency or "beginner",
        frequency_rank=row.frequency_rank or 0,
        part_of_speech=row.part_of_speech or "other",
        variants=tuple(row.variants or ()),
        pronunciation=row.pronunciation,
    )


def to_row(entry: WordEntry) -> WordListEntry:
    return WordListEntry(
        id=entry.id,
        source_word=entry.source_word.lower(),
        target_word=entry.target_word,
        source_lang=entry.source_language,
        target_lang=entry.target_language,
        proficiency=entry.proficiency_level,
        frequency_rank=entry.frequency_rank,
        part_of_speech=entry.part_of_speech,
        variants=[v.lower() for v in entry.variants],
        pronunciation=entry.pronunciation,
    )


def _variant_clause(session: Session, value: str):
    """SQL filter for rows whose variant list contains ``value``."""

    if session.get_bind().dialect.name == "postgresql":
        return literal(value, Text) == any_(WordListEntry.variants)
    needle = json.dumps(value, ensure_ascii=False)
    for char in ("!", "%", "_"):
        needle = needle.replace(char, "!" + char)
    return cast(WordListEntry.variants, Text).like(f"%{needle}%", escape="!")


class WordListRepository:
    """Synchronous store access, one short-lived session per call.

    Every method opens its own session from ``session_factory`` so calls can
    be pushed onto worker threads without sharing a connection.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def _pair(self, stmt, source_language: str, target_language: str):
        return stmt.where(
            WordListEntry.source_lang == source_language,
            WordListEntry.target_lang == target_language,
        )

    def _all(self, stmt) -> list[WordEntry]:
        with self.session_factory() as session:
            return [to_entry(row) for row in session.scalars(stmt)]

    def get_entry(self, word: str, source_language: str, target_language: str) -> WordEntry | None:
        """Exact (case-insensitive) match on the source word."""

        stmt = self._pair(
            select(WordListEntry).where(func.lower(WordListEntry.source_word) == word.lower()),
            source_language,
            target_language,
        ).order_by(*RANK_ORDER)
        with self.session_factory() as session:
            row = session.scalars(stmt.limit(1)).first()
            return to_entry(row) if row else None

    def get_entry_by_variant(
        self, word: str, source_language: str, target_language: str
    ) -> WordEntry | None:
        """First entry of the pair listing ``word`` among its variants."""

        value = word.lower()
        with self.session_factory() as session:
            stmt = self._pair(
                select(WordListEntry).where(_variant_clause(session, value)),
                source_language,
                target_language,
            ).order_by(*RANK_ORDER)
            # LIKE can over-match escaped JSON text; confirm each hit
            for row in session.scalars(stmt):
                entry = to_entry(row)
                if value in entry.variants:
                    return entry
        return None

    def get_by_langs(self, source_language: str, target_language: str) -> list[WordEntry]:
        stmt = self._pair(select(WordListEntry), source_language, target_language).order_by(*RANK_ORDER)
        return self._all(stmt)

    def get_by_level(
        self, source_language: str, target_language: str, level: str, *, limit: int | None = None
    ) -> list[WordEntry]:
        stmt = self._pair(
            select(WordListEntry).where(WordListEntry.proficiency == level),
            source_language,
            target_language,
        ).order_by(*RANK_ORDER)
        if limit:
            stmt = stmt.limit(limit)
        return self._all(stmt)

    def search(
        self, query: str, source_language: str, target_language: str, *, limit: int = 50
    ) -> list[WordEntry]:
        """Substring search over both sides of the pair."""

        pattern = f"%{query.lower()}%"
        stmt = self._pair(
            select(WordListEntry).where(
                or_(
                    func.lower(WordListEntry.source_word).like(pattern),
                    func.lower(WordListEntry.target_word).like(pattern),
                )
            ),
            source_language,
            target_language,
        ).order_by(*RANK_ORDER)
        return self._all(stmt.limit(limit))

    def count(self, source_language: str | None = None, target_language: str | None = None) -> int:
        stmt = select(func.count()).select_from(WordListEntry)
        if source_language:
            stmt = stmt.where(WordListEntry.source_lang == source_language)
        if target_language:
            stmt = stmt.where(WordListEntry.target_lang == target_language)
        with self.session_factory() as session:
            return int(session.scalar(stmt) or 0)

    def count_by_proficiency(self, source_language: str, target_language: str) -> dict[str, int]:
        stmt = self._pair(
            select(WordListEntry.proficiency, func.count()).group_by(WordListEntry.proficiency),
            source_language,
            target_language,
        )
        with self.session_factory() as session:
            return {level: int(total) for level, total in session.execute(stmt)}

    def count_by_part_of_speech(self, source_language: str, target_language: str) -> dict[str, int]:
        stmt = self._pair(select(WordListEntry.part_of_speech), source_language, target_language)
        with self.session_factory() as session:
            return dict(Counter(pos or "other" for pos in session.scalars(stmt)))

    def add_entry(self, entry: WordEntry) -> WordEntry:
        """Insert or replace a single entry."""

        with self.session_factory() as session:
            try:
                session.merge(to_row(entry))
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.error(f"Failed to add word list entry {entry.id}: {exc}")
                raise DatabaseError("Failed to add word list entry", {"id": entry.id}) from exc
        return entry

    def run_transaction(self, entries: Sequence[WordEntry]) -> ImportResult:
        """Insert ``entries`` in one transaction, skipping ids already stored.

        Ids repeated within ``entries`` are skipped after their first
        occurrence as well.
        """

        result = ImportResult()
        if not entries:
            return result

        ids = sorted({entry.id for entry in entries})
        with self.session_factory() as session:
            try:
                existing: set[str] = set()
                for offset in range(0, len(ids), ID_CHUNK_SIZE):
                    chunk = ids[offset:offset + ID_CHUNK_SIZE]
                    existing.update(
                        session.scalars(select(WordListEntry.id).where(WordListEntry.id.in_(chunk)))
                    )
                for entry in entries:
                    if entry.id in existing:
                        result.skipped += 1
                        continue
                    session.add(to_row(entry))
                    existing.add(entry.id)
                    result.imported += 1
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                logger.error(f"Dictionary transaction failed: {exc}")
                raise DatabaseError("Dictionary import transaction failed") from exc
        return result

    def delete_by_pair(self, source_language: str, target_language: str) -> int:
        stmt = self._pair(delete(WordListEntry), source_language, target_language)
        with self.session_factory() as session:
            try:
                removed = session.execute(stmt).rowcount or 0
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                raise DatabaseError(
                    "Failed to clear language pair",
                    {"source": source_language, "target": target_language},
                ) from exc
        return int(removed)

