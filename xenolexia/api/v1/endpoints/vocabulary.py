"""Saved vocabulary, review and export endpoints."""
from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from xenolexia.api import deps
from xenolexia.config import settings
from xenolexia.schemas import (
    ReviewRequest,
    VocabularyItemCreate,
    VocabularyItemRead,
    VocabularyItemUpdate,
    VocabularyListResponse,
    VocabularyStatisticsRead,
)
from xenolexia.services.export import ExportOptions, ExportService
from xenolexia.services.vocabulary import VocabularyNotFoundError, VocabularyService
from xenolexia.utils.exceptions import (
    NoItemsToExportError,
    SchedulerIntegrityError,
    ValidationError,
    handle_export_error,
    handle_scheduler_error,
    handle_validation_error,
)

router = APIRouter(prefix="/vocabulary", tags=["vocabulary"])


def _not_found(exc: VocabularyNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("/", response_model=VocabularyListResponse)
def list_vocabulary(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    book_id: Optional[str] = Query(default=None),
    source_lang: Optional[str] = Query(default=None, max_length=10),
    target_lang: Optional[str] = Query(default=None, max_length=10),
    q: Optional[str] = Query(default=None, description="Substring of either word"),
    sort_by: str = Query(default="added_at"),
    descending: bool = Query(default=True),
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    service: VocabularyService = Depends(deps.get_vocabulary_service),
) -> VocabularyListResponse:
    """Return saved words with optional filters, sorting and pagination."""

    filters = dict(
        status=status_filter,
        book_id=book_id,
        source_lang=source_lang,
        target_lang=target_lang,
        query=q,
    )
    try:
        items = service.list_items(
            **filters, sort_by=sort_by, descending=descending, limit=limit, offset=offset
        )
    except ValidationError as exc:
        raise handle_validation_error(exc) from exc
    return VocabularyListResponse(total=service.count_items(**filters), items=items)


@router.post("/", response_model=VocabularyItemRead, status_code=status.HTTP_201_CREATED)
def create_vocabulary_item(
    payload: VocabularyItemCreate,
    service: VocabularyService = Depends(deps.get_vocabulary_service),
) -> VocabularyItemRead:
    return service.add_item(payload.model_dump())


@router.get("/due", response_model=list[VocabularyItemRead])
def due_for_review(
    limit: int = Query(default=settings.REVIEW_BATCH_SIZE, ge=1, le=500),
    service: VocabularyService = Depends(deps.get_vocabulary_service),
) -> list[VocabularyItemRead]:
    return service.get_due_for_review(limit=limit)


@router.get("/statistics", response_model=VocabularyStatisticsRead)
def vocabulary_statistics(
    service: VocabularyService = Depends(deps.get_vocabulary_service),
) -> VocabularyStatisticsRead:
    return VocabularyStatisticsRead.model_validate(service.get_statistics())


@router.get("/export")
def export_vocabulary(
    export_format: Literal["csv", "anki", "json"] = Query(default="csv", alias="format"),
    statuses: Optional[list[str]] = Query(default=None, alias="status"),
    source_lang: Optional[str] = Query(default=None, max_length=10),
    target_lang: Optional[str] = Query(default=None, max_length=10),
    include_context: bool = Query(default=True),
    include_book_info: bool = Query(default=True),
    include_srs_data: bool = Query(default=False),
    service: VocabularyService = Depends(deps.get_vocabulary_service),
    exporter: ExportService = Depends(deps.get_export_service),
) -> Response:
    """Download the filtered vocabulary as CSV, Anki TSV or JSON."""

    options = ExportOptions(
        format=export_format,
        include_context=include_context,
        include_book_info=include_book_info,
        include_srs_data=include_srs_data,
        statuses=tuple(statuses or ()),
        source_lang=source_lang,
        target_lang=target_lang,
    )
    try:
        result = exporter.export(service.list_items(sort_by="added_at", descending=False), options)
    except NoItemsToExportError as exc:
        raise handle_export_error(exc) from exc
    return Response(
        content=result.content,
        media_type=result.mime_type,
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"',
            "X-Item-Count": str(result.item_count),
        },
    )


@router.get("/{item_id}", response_model=VocabularyItemRead)
def get_vocabulary_item(
    item_id: str,
    service: VocabularyService = Depends(deps.get_vocabulary_service),
) -> VocabularyItemRead:
    try:
        return service.get_item(item_id)
    except VocabularyNotFoundError as exc:
        raise _not_found(exc) from exc


@router.patch("/{item_id}", response_model=VocabularyItemRead)
def update_vocabulary_item(
    item_id: str,
    payload: VocabularyItemUpdate,
    service: VocabularyService = Depends(deps.get_vocabulary_service),
) -> VocabularyItemRead:
    try:
        return service.update_item(item_id, payload.model_dump(exclude_unset=True, exclude_none=True))
    except VocabularyNotFoundError as exc:
        raise _not_found(exc) from exc
    except ValidationError as exc:
        raise handle_validation_error(exc) from exc


@router.post("/{item_id}/review", response_model=VocabularyItemRead)
def review_vocabulary_item(
    item_id: str,
    payload: ReviewRequest,
    service: VocabularyService = Depends(deps.get_vocabulary_service),
) -> VocabularyItemRead:
    """Grade a recall attempt and reschedule the item."""

    try:
        return service.record_review(item_id, payload.quality)
    except VocabularyNotFoundError as exc:
        raise _not_found(exc) from exc
    except SchedulerIntegrityError as exc:
        raise handle_scheduler_error(exc) from exc


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_vocabulary_item(
    item_id: str,
    service: VocabularyService = Depends(deps.get_vocabulary_service),
) -> Response:
    if not service.delete_item(item_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vocabulary item not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
