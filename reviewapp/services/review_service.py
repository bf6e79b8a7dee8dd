"""Review queries as the presentation layers use them."""

from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence

from reviewapp.schemas.filters import FilterSpec
from reviewapp.schemas.review import Review, ReviewPage
from reviewapp.services.query_engine import ReviewQueryEngine


def total_pages(total_count: int, page_size: int) -> int:
    if page_size <= 0:
        return 0
    return math.ceil(total_count / page_size)


class ReviewService:
    """Thin facade over a ReviewQueryEngine that also builds page results."""

    def __init__(self, engine: ReviewQueryEngine) -> None:
        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    @property
    def engine(self) -> ReviewQueryEngine:
        return self._engine

    def get_review_by_id(self, review_id: Optional[int]) -> Optional[Review]:
        return self._engine.get_by_id(review_id)

    def get_reviews_by_keywords(self, keywords: Optional[Iterable[Optional[str]]]) -> list[Review]:
        return self._engine.get_by_keywords(keywords)

    def get_all_reviews(self) -> list[Review]:
        return self._engine.get_all()

    def get_reviews_page(self, page: int, page_size: int) -> ReviewPage:
        items = self._engine.get_page(page, page_size)
        return self._page(items, page, page_size, self._engine.total_count())

    def get_filtered_reviews_page(self, spec: Optional[FilterSpec], page: int, page_size: int) -> ReviewPage:
        items = self._engine.get_filtered_page(spec, page, page_size)
        return self._page(items, page, page_size, self._engine.get_filtered_count(spec))

    def get_filtered_review_count(self, spec: Optional[FilterSpec]) -> int:
        return self._engine.get_filtered_count(spec)

    def save_reviews(self, reviews: Optional[Sequence[Review]]) -> None:
        self._engine.save(reviews)

    @staticmethod
    def _page(items: list[Review], page: int, page_size: int, total_count: int) -> ReviewPage:
        return ReviewPage(
            items=items,
            page=max(page, 1),
            page_size=page_size,
            total_count=total_count,
            total_pages=total_pages(total_count, page_size),
        )
