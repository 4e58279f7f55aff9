"""SM-2 spaced repetition scheduler for saved vocabulary."""
from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from typing import Protocol

from xenolexia.utils.exceptions import SchedulerIntegrityError

MIN_EASE_FACTOR = 1.3
DEFAULT_EASE_FACTOR = 2.5

PASSING_QUALITY = 3
MIN_QUALITY = 0
MAX_QUALITY = 5

# Graduation to "learned"
LEARNED_MIN_REVIEWS = 5
LEARNED_MIN_QUALITY = 4
REVIEW_MIN_REVIEWS = 2

STATUSES = ("new", "learning", "review", "learned")

TZ = dt.timezone.utc


class Reviewable(Protocol):
    """Scheduling fields of a vocabulary item."""

    ease_factor: float
    interval: int
    review_count: int
    status: str


@dataclass(slots=True, frozen=True)
class SchedulerState:
    """Immutable snapshot of an item's scheduling fields."""

    ease_factor: float = DEFAULT_EASE_FACTOR
    interval: int = 0
    review_count: int = 0
    status: str = "new"


@dataclass(slots=True, frozen=True)
class ReviewOutcome:
    """Fields the caller writes back after a review."""

    ease_factor: float
    interval: int
    review_count: int
    status: str
    last_reviewed_at: dt.datetime

    @property
    def next_review_at(self) -> dt.datetime:
        return next_review_at(self.last_reviewed_at, self.interval)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def ensure_timezone(moment: dt.datetime) -> dt.datetime:
    """Treat naive datetimes as UTC (SQLite drops the offset)."""

    if moment.tzinfo is None:
        return moment.replace(tzinfo=TZ)
    return moment.astimezone(TZ)


def update_ease_factor(ease_factor: float, quality: int) -> float:
    """EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), floored at 1.3."""

    miss = MAX_QUALITY - quality
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - miss * (0.08 + miss * 0.02)))


def next_interval(interval: int, ease_factor: float) -> int:
    """Interval in days after a passing review."""

    if interval <= 0:
        return 1
    if interval == 1:
        return 6
    return _round_half_up(interval * ease_factor)


def next_status(review_count: int, quality: int) -> str:
    """Status after a passing review; ``review_count`` already includes it."""

    if review_count >= LEARNED_MIN_REVIEWS and quality >= LEARNED_MIN_QUALITY:
        return "learned"
    if review_count >= REVIEW_MIN_REVIEWS:
        return "review"
    return "learning"


def check_state(item: Reviewable) -> None:
    """Reject stored scheduling values no valid review could have produced."""

    if item.ease_factor is None or item.ease_factor < MIN_EASE_FACTOR:
        raise SchedulerIntegrityError(
            "Stored ease factor is below the SM-2 floor",
            {"ease_factor": item.ease_factor, "minimum": MIN_EASE_FACTOR},
        )
    if item.interval is None or item.interval < 0:
        raise SchedulerIntegrityError("Stored interval is negative", {"interval": item.interval})
    if item.review_count is None or item.review_count < 0:
        raise SchedulerIntegrityError(
            "Stored review count is negative", {"review_count": item.review_count}
        )


def next_state(item: Reviewable, quality: int, now: dt.datetime | None = None) -> ReviewOutcome:
    """Compute the scheduling fields that follow a review graded ``quality``.

    Args:
        item: Current state; any object with ``ease_factor``, ``interval``,
            ``review_count`` and ``status``. It is never modified.
        quality: Recall grade, 0 (blackout) to 5 (perfect).
        now: Review time, defaults to the current UTC time.

    Returns:
        The new state. A failing grade (below 3) resets the interval to 0 and
        leaves the ease factor untouched.

    Raises:
        SchedulerIntegrityError: if ``quality`` is out of range or ``item``
            carries values below the scheduler's floors.
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise SchedulerIntegrityError("Quality must be an integer", {"quality": quality})
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise SchedulerIntegrityError(
            f"Quality must be between {MIN_QUALITY} and {MAX_QUALITY}", {"quality": quality}
        )
    check_state(item)

    reviewed_at = ensure_timezone(now) if now is not None else dt.datetime.now(TZ)
    review_count = item.review_count + 1

    if quality < PASSING_QUALITY:
        return ReviewOutcome(
            ease_factor=item.ease_factor,
            interval=0,
            review_count=review_count,
            status="learning",
            last_reviewed_at=reviewed_at,
        )

    return ReviewOutcome(
        ease_factor=update_ease_factor(item.ease_factor, quality),
        interval=next_interval(item.interval, item.ease_factor),
        review_count=review_count,
        status=next_status(review_count, quality),
        last_reviewed_at=reviewed_at,
    )


def next_review_at(last_reviewed_at: dt.datetime | None, interval: int) -> dt.datetime | None:
    if last_reviewed_at is None:
        return None
    return ensure_timezone(last_reviewed_at) + dt.timedelta(days=interval or 0)


def is_due(item, now: dt.datetime | None = None) -> bool:
    """Due when not learned and never reviewed or the interval has elapsed."""

    if item.status == "learned":
        return False
    due = next_review_at(item.last_reviewed_at, item.interval)
    if due is None:
        return True
    return due <= (ensure_timezone(now) if now is not None else dt.datetime.now(TZ))
