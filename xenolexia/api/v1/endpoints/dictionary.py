"""Dictionary (word list) management endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from xenolexia.api import deps
from xenolexia.core.translation.types import WordEntry
from xenolexia.schemas import (
    ClearPairResponse,
    DictionaryImportRequest,
    DictionaryInstallRequest,
    DictionaryStatsRead,
    ImportResultRead,
    WordEntryRead,
)
from xenolexia.services.translation_index import TranslationIndex
from xenolexia.utils.exceptions import DatabaseError, handle_database_error

router = APIRouter(prefix="/dictionary", tags=["dictionary"])


@router.post("/install", response_model=ImportResultRead, status_code=status.HTTP_201_CREATED)
async def install_dictionary(
    payload: DictionaryInstallRequest,
    index: TranslationIndex = Depends(deps.get_translation_index),
) -> ImportResultRead:
    """Insert ready-made entries; ids already stored are counted as skipped."""

    entries = [
        WordEntry(
            id=item.id,
            source_word=item.source_word,
            target_word=item.target_word,
            source_language=payload.source_language,
            target_language=payload.target_language,
            proficiency_level=item.proficiency_level,
            frequency_rank=item.frequency_rank,
            part_of_speech=item.part_of_speech,
            variants=tuple(v.lower() for v in item.variants),
            pronunciation=item.pronunciation,
        )
        for item in payload.entries
    ]
    try:
        result = await index.install_dictionary(payload.source_language, payload.target_language, entries)
    except DatabaseError as exc:
        raise handle_database_error(exc) from exc
    return ImportResultRead.model_validate(result)


@router.post("/import", response_model=ImportResultRead, status_code=status.HTTP_201_CREATED)
async def import_rows(
    payload: DictionaryImportRequest,
    index: TranslationIndex = Depends(deps.get_translation_index),
) -> ImportResultRead:
    """Import loosely shaped rows; bad rows are reported, the rest committed."""

    try:
        result = await index.bulk_import(payload.rows, payload.source_language, payload.target_language)
    except DatabaseError as exc:
        raise handle_database_error(exc) from exc
    return ImportResultRead.model_validate(result)


@router.get("/lookup", response_model=WordEntryRead)
async def lookup_word(
    word: str = Query(..., min_length=1, description="Surface form to look up"),
    source: str = Query(..., min_length=2, max_length=10),
    target: str = Query(..., min_length=2, max_length=10),
    include_variants: bool = Query(default=True),
    index: TranslationIndex = Depends(deps.get_translation_index),
) -> WordEntryRead:
    entry = await index.lookup_word(word, source, target, include_variants=include_variants)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Word not found")
    return WordEntryRead.model_validate(entry)


@router.get("/search", response_model=list[WordEntryRead])
async def search_words(
    q: str = Query(..., min_length=1),
    source: str = Query(..., min_length=2, max_length=10),
    target: str = Query(..., min_length=2, max_length=10),
    limit: int = Query(default=50, ge=1, le=200),
    index: TranslationIndex = Depends(deps.get_translation_index),
) -> list[WordEntryRead]:
    entries = await index.search_words(q, source, target, limit=limit)
    return [WordEntryRead.model_validate(entry) for entry in entries]


@router.get("/stats", response_model=DictionaryStatsRead)
async def dictionary_stats(
    source: str = Query(..., min_length=2, max_length=10),
    target: str = Query(..., min_length=2, max_length=10),
    index: TranslationIndex = Depends(deps.get_translation_index),
) -> DictionaryStatsRead:
    return DictionaryStatsRead.model_validate(await index.get_stats(source, target))


@router.delete("/{source}/{target}", response_model=ClearPairResponse)
async def clear_language_pair(
    source: str,
    target: str,
    index: TranslationIndex = Depends(deps.get_translation_index),
) -> ClearPairResponse:
    try:
        removed = await index.clear_language_pair(source, target)
    except DatabaseError as exc:
        raise handle_database_error(exc) from exc
    return ClearPairResponse(removed=removed)
