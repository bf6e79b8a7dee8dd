"""In-memory review store.

Reviews live in a dict keyed by id. Records are immutable, so an upsert
replaces the whole record and readers never see a half-written one. The lock
is held only for a single map operation or a snapshot copy.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter, defaultdict
from typing import Callable, Iterable, Optional, Sequence

from reviewapp.core.dates import date_part, month_key, time_part, to_iso
from reviewapp.schemas.filters import FilterSpec
from reviewapp.schemas.review import Review
from reviewapp.services.query_engine import (
    ReviewQueryEngine,
    check_batch,
    normalize_keywords,
    page_window,
)

logger = logging.getLogger(__name__)

Predicate = Callable[[Review], bool]


def _contains(criterion: str | None, getter: Callable[[Review], str | None]) -> Predicate | None:
    if not criterion:
        return None
    needle = criterion.lower()

    def predicate(review: Review) -> bool:
        value = getter(review)
        return value is not None and needle in value.lower()

    return predicate


def build_predicates(spec: Optional[FilterSpec]) -> list[Predicate]:
    """Translate a FilterSpec into a list of predicates that must all hold."""
    if spec is None:
        return []

    predicates: list[Predicate] = []

    if spec.rating is not None:
        predicates.append(lambda r: r.rating is not None and r.rating == spec.rating)
    if spec.min_rating is not None:
        predicates.append(lambda r: r.rating is not None and r.rating >= spec.min_rating)
    if spec.max_rating is not None:
        predicates.append(lambda r: r.rating is not None and r.rating <= spec.max_rating)

    if spec.review_date is not None:
        predicates.append(lambda r: date_part(r.reviewed_date) == spec.review_date)
    if spec.start_date is not None:
        predicates.append(
            lambda r: r.reviewed_date is not None and date_part(r.reviewed_date) >= spec.start_date
        )
    if spec.end_date is not None:
        predicates.append(
            lambda r: r.reviewed_date is not None and date_part(r.reviewed_date) <= spec.end_date
        )

    # Reviews without a time of day never satisfy a time bound.
    if spec.start_time is not None:
        predicates.append(
            lambda r: time_part(r.reviewed_date) is not None and time_part(r.reviewed_date) >= spec.start_time
        )
    if spec.end_time is not None:
        predicates.append(
            lambda r: time_part(r.reviewed_date) is not None and time_part(r.reviewed_date) <= spec.end_time
        )

    for criterion, getter in (
        (spec.author_name, lambda r: r.author_name),
        (spec.review_title, lambda r: r.review_title),
        (spec.product_name, lambda r: r.product_name),
        (spec.store_name, lambda r: r.review_source),
    ):
        predicate = _contains(criterion, getter)
        if predicate is not None:
            predicates.append(predicate)

    return predicates


def _desc_nulls_last(reviews: list[Review], key: Callable[[Review], object]) -> None:
    # Stable in-place sort; equal keys keep their current relative order.
    reviews.sort(key=lambda r: (key(r) is not None, key(r) if key(r) is not None else 0), reverse=True)


def sort_reviews(reviews: Iterable[Review], spec: Optional[FilterSpec]) -> list[Review]:
    """Order reviews by the filter's sort flags, breaking ties by id ascending."""
    ordered = sorted(reviews, key=lambda r: r.id)
    if spec is None or not spec.is_sorted:
        return ordered
    if spec.sort_by_date:
        _desc_nulls_last(ordered, lambda r: to_iso(r.reviewed_date))
    if spec.sort_by_rating:
        _desc_nulls_last(ordered, lambda r: r.rating)
    return ordered


def _slice(reviews: list[Review], page: int, page_size: int) -> list[Review]:
    window = page_window(page, page_size)
    if window is None:
        return []
    offset, limit = window
    return reviews[offset:offset + limit]


def _mean(total: int, count: int) -> float:
    return total / count if count else 0.0


class InMemoryQueryEngine(ReviewQueryEngine):
    """Review store backed by a process-local dict."""

    def __init__(self, reviews: Optional[Sequence[Review]] = None) -> None:
        self._store: dict[int, Review] = {}
        self._lock = threading.Lock()
        if reviews:
            self.save(reviews)

    def _snapshot(self) -> list[Review]:
        with self._lock:
            return list(self._store.values())

    def _matching(self, spec: Optional[FilterSpec]) -> list[Review]:
        predicates = build_predicates(spec)
        return [review for review in self._snapshot() if all(p(review) for p in predicates)]

    def save(self, reviews: Optional[Sequence[Review]]) -> None:
        accepted = check_batch(reviews)
        for review in accepted:
            with self._lock:
                self._store[review.id] = review
        if reviews:
            logger.info("Saved %d reviews (%d skipped)", len(accepted), len(reviews) - len(accepted))

    def get_page(self, page: int, page_size: int) -> list[Review]:
        return _slice(sort_reviews(self._snapshot(), None), page, page_size)

    def get_filtered_page(self, spec: Optional[FilterSpec], page: int, page_size: int) -> list[Review]:
        logger.debug("Filtering reviews with %s (page=%s, page_size=%s)", spec, page, page_size)
        return _slice(sort_reviews(self._matching(spec), spec), page, page_size)

    def get_filtered_count(self, spec: Optional[FilterSpec]) -> int:
        return len(self._matching(spec))

    def get_by_keywords(self, keywords: Optional[Iterable[Optional[str]]]) -> list[Review]:
        needles = normalize_keywords(keywords)
        if not needles:
            return []

        def matches(review: Review) -> bool:
            content = f"{review.review_title or ''} {review.review_text or ''}".lower()
            return any(needle in content for needle in needles)

        return sort_reviews((r for r in self._snapshot() if matches(r)), None)

    def get_by_id(self, review_id: Optional[int]) -> Optional[Review]:
        if review_id is None or review_id <= 0:
            return None
        with self._lock:
            return self._store.get(review_id)

    def get_all(self) -> list[Review]:
        return sort_reviews(self._snapshot(), None)

    def total_count(self) -> int:
        with self._lock:
            return len(self._store)

    def average_rating(self) -> float:
        ratings = [r.rating for r in self._snapshot() if r.rating is not None]
        return _mean(sum(ratings), len(ratings))

    def rating_distribution(self) -> dict[int, int]:
        counts = Counter(r.rating for r in self._snapshot() if r.rating is not None)
        return dict(sorted(counts.items()))

    def monthly_average(self) -> dict[str, float]:
        buckets: dict[str, list[int]] = defaultdict(list)
        for review in self._snapshot():
            if review.rating is not None:
                buckets[month_key(review.reviewed_date)].append(review.rating)
        return {month: _mean(sum(ratings), len(ratings)) for month, ratings in sorted(buckets.items())}
