"""Service helpers for the saved vocabulary store."""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from loguru import logger
from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from xenolexia.core.srs.sm2 import STATUSES, ensure_timezone, next_state
from xenolexia.db.models.vocabulary import VocabularyItem
from xenolexia.utils.exceptions import ValidationError

SORTABLE_FIELDS = {
    "added_at": VocabularyItem.added_at,
    "source_word": VocabularyItem.source_word,
    "target_word": VocabularyItem.target_word,
    "last_reviewed_at": VocabularyItem.last_reviewed_at,
    "review_count": VocabularyItem.review_count,
    "status": VocabularyItem.status,
}

# Scheduling fields only change through record_review
UPDATABLE_FIELDS = frozenset({"source_word", "target_word", "context_sentence", "book_id", "book_title"})


class VocabularyNotFoundError(ValueError):
    """Raised when a vocabulary item cannot be located."""


@dataclass(slots=True)
class VocabularyStatistics:
    total: int
    new: int
    learning: int
    review: int
    learned: int
    due_today: int
    added_today: int


class VocabularyService:
    """CRUD, filtering and review scheduling for saved words."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_by_id(self, item_id: str) -> VocabularyItem | None:
        return self.db.get(VocabularyItem, item_id)

    def get_item(self, item_id: str) -> VocabularyItem:
        item = self.get_by_id(item_id)
        if not item:
            raise VocabularyNotFoundError("Vocabulary item not found")
        return item

    def _filtered(
        self,
        stmt,
        *,
        status: str | None = None,
        book_id: str | None = None,
        source_lang: str | None = None,
        target_lang: str | None = None,
        query: str | None = None,
    ):
        if status:
            stmt = stmt.where(VocabularyItem.status == status)
        if book_id:
            stmt = stmt.where(VocabularyItem.book_id == book_id)
        if source_lang:
            stmt = stmt.where(VocabularyItem.source_lang == source_lang)
        if target_lang:
            stmt = stmt.where(VocabularyItem.target_lang == target_lang)
        if query and query.strip():
            pattern = f"%{query.strip().lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(VocabularyItem.source_word).like(pattern),
                    func.lower(VocabularyItem.target_word).like(pattern),
                )
            )
        return stmt

    def list_items(
        self,
        *,
        status: str | None = None,
        book_id: str | None = None,
        source_lang: str | None = None,
        target_lang: str | None = None,
        query: str | None = None,
        sort_by: str = "added_at",
        descending: bool = True,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[VocabularyItem]:
        """Return saved words matching every supplied filter."""

        column = SORTABLE_FIELDS.get(sort_by)
        if column is None:
            raise ValidationError("Unsupported sort field", {"sort_by": sort_by})
        stmt = self._filtered(
            select(VocabularyItem),
            status=status,
            book_id=book_id,
            source_lang=source_lang,
            target_lang=target_lang,
            query=query,
        )
        order = column.desc() if descending else column.asc()
        stmt = stmt.order_by(order, VocabularyItem.id).offset(offset)
        if limit:
            stmt = stmt.limit(limit)
        return list(self.db.scalars(stmt))

    def count_items(self, **filters: Any) -> int:
        stmt = self._filtered(select(func.count()).select_from(VocabularyItem), **filters)
        return int(self.db.scalar(stmt) or 0)

    def search(self, query: str, *, limit: int = 50) -> list[VocabularyItem]:
        """Case-insensitive substring search over both sides of the pair."""

        if not query.strip():
            return []
        return self.list_items(query=query, sort_by="source_word", descending=False, limit=limit)

    def is_word_saved(self, source_word: str, source_lang: str, target_lang: str) -> bool:
        stmt = select(VocabularyItem.id).where(
            func.lower(VocabularyItem.source_word) == source_word.strip().lower(),
            VocabularyItem.source_lang == source_lang,
            VocabularyItem.target_lang == target_lang,
        )
        return self.db.scalars(stmt.limit(1)).first() is not None

    def get_due_for_review(self, now: datetime | None = None, limit: int = 20) -> list[VocabularyItem]:
        """Items not yet learned that were never reviewed or whose interval has elapsed."""

        now = ensure_timezone(now) if now is not None else datetime.now(timezone.utc)
        stmt = (
            self._due_query(select(VocabularyItem), now)
            .order_by(VocabularyItem.due_at.is_not(None), VocabularyItem.due_at, VocabularyItem.added_at)
        )
        if limit:
            stmt = stmt.limit(limit)
        return list(self.db.scalars(stmt))

    @staticmethod
    def _due_query(stmt, now: datetime):
        return stmt.where(
            VocabularyItem.status != "learned",
            or_(VocabularyItem.last_reviewed_at.is_(None), VocabularyItem.due_at <= now),
        )

    def count_by_status(self) -> dict[str, int]:
        stmt = select(VocabularyItem.status, func.count()).group_by(VocabularyItem.status)
        counts = {status: 0 for status in STATUSES}
        for status, total in self.db.execute(stmt):
            counts[status] = int(total)
        return counts

    def get_statistics(self, now: datetime | None = None) -> VocabularyStatistics:
        now = ensure_timezone(now) if now is not None else datetime.now(timezone.utc)
        counts = self.count_by_status()
        due = self.db.scalar(self._due_query(select(func.count()).select_from(VocabularyItem), now))
        return VocabularyStatistics(
            total=sum(counts.values()),
            new=counts["new"],
            learning=counts["learning"],
            review=counts["review"],
            learned=counts["learned"],
            due_today=int(due or 0),
            added_today=len(self.get_added_today(now)),
        )

    def get_added_today(self, now: datetime | None = None) -> list[VocabularyItem]:
        now = ensure_timezone(now) if now is not None else datetime.now(timezone.utc)
        start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        stmt = select(VocabularyItem).where(VocabularyItem.added_at >= start).order_by(
            VocabularyItem.added_at.desc()
        )
        return list(self.db.scalars(stmt))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def add_item(self, data: Mapping[str, Any]) -> VocabularyItem:
        """Save a new word; ``id`` and ``added_at`` are generated when absent."""

        for required in ("source_word", "target_word", "source_lang", "target_lang"):
            if not data.get(required):
                raise ValidationError(f"Missing required field: {required}", {"field": required})

        item = VocabularyItem(
            id=data.get("id") or uuid.uuid4().hex,
            source_word=data["source_word"],
            target_word=data["target_word"],
            source_lang=data["source_lang"],
            target_lang=data["target_lang"],
            context_sentence=data.get("context_sentence"),
            book_id=data.get("book_id"),
            book_title=data.get("book_title"),
            added_at=ensure_timezone(data["added_at"]) if data.get("added_at") else datetime.now(timezone.utc),
            review_count=0,
            ease_factor=2.5,
            interval=0,
            status="new",
        )
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        logger.info("Saved vocabulary item", item_id=item.id, word=item.source_word)
        return item

    def update_item(self, item_id: str, fields: Mapping[str, Any]) -> VocabularyItem:
        """Edit the word text, context or book of a saved item."""

        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError("Field cannot be edited directly", {"fields": sorted(unknown)})
        for required in ("source_word", "target_word"):
            if required in fields and not fields[required]:
                raise ValidationError(f"{required} cannot be empty", {"field": required})

        item = self.get_item(item_id)
        for key, value in fields.items():
            setattr(item, key, value)
        self.db.commit()
        self.db.refresh(item)
        return item

    def record_review(self, item_id: str, quality: int, now: datetime | None = None) -> VocabularyItem:
        """Grade a review and persist the scheduler's outcome."""

        item = self.get_item(item_id)
        outcome = next_state(item, quality, now)
        item.mark_review(
            outcome.last_reviewed_at,
            ease_factor=outcome.ease_factor,
            interval=outcome.interval,
            review_count=outcome.review_count,
            status=outcome.status,
        )
        self.db.commit()
        self.db.refresh(item)
        logger.info(
            "Recorded review",
            item_id=item.id,
            quality=quality,
            interval=item.interval,
            status=item.status,
        )
        return item

    def delete_item(self, item_id: str) -> bool:
        item = self.get_by_id(item_id)
        if not item:
            return False
        self.db.delete(item)
        self.db.commit()
        return True

    def delete_all(self) -> int:
        removed = self.db.execute(delete(VocabularyItem)).rowcount or 0
        self.db.commit()
        logger.warning("Deleted all vocabulary items", count=removed)
        return int(removed)
