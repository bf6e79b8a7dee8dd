"""Query engine interface shared by the in-memory and relational backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional, Sequence

from reviewapp.schemas.filters import FilterSpec
from reviewapp.schemas.review import Review

# Largest OFFSET/LIMIT a 64-bit SQL integer can carry.
MAX_ROW_INDEX = 2**63 - 1


def page_window(page: int, page_size: int) -> tuple[int, int] | None:
    """Return ``(offset, limit)`` for a 1-based page, or None for an empty page.

    Pages below 1 are treated as page 1; a non-positive page size yields
    nothing. Pages starting past ``MAX_ROW_INDEX`` are empty, and the limit is
    clamped so ``offset + limit`` stays within it.
    """
    if page_size <= 0:
        return None
    page = max(page, 1)
    offset = (page - 1) * page_size
    if offset >= MAX_ROW_INDEX:
        return None
    return offset, min(page_size, MAX_ROW_INDEX - offset)


def normalize_keywords(keywords: Optional[Iterable[Optional[str]]]) -> list[str]:
    """Lower-case the usable keywords, dropping None and empty entries."""
    if not keywords:
        return []
    return [keyword.lower() for keyword in keywords if keyword]


def check_batch(reviews: Optional[Sequence[Review]]) -> list[Review]:
    """Return the records of a save batch that carry a usable id.

    A None entry is a caller bug and fails the whole batch before anything is
    written; records without a positive id are skipped.
    """
    if not reviews:
        return []
    for index, review in enumerate(reviews):
        if review is None:
            raise TypeError(f"unexpected None at position {index} in reviews batch")
        if not isinstance(review, Review):
            raise TypeError(f"expected Review at position {index}, got {type(review).__name__}")
    return [review for review in reviews if review.has_valid_id]


class ReviewQueryEngine(ABC):
    """Contract implemented by every review store backend.

    Both implementations must return the same records in the same order for
    the same data and inputs. Out-of-range pages and unknown ids produce empty
    results, never errors.
    """

    @abstractmethod
    def save(self, reviews: Optional[Sequence[Review]]) -> None:
        """Upsert reviews by id."""

    @abstractmethod
    def get_page(self, page: int, page_size: int) -> list[Review]:
        """Unfiltered page ordered by id ascending."""

    @abstractmethod
    def get_filtered_page(self, spec: Optional[FilterSpec], page: int, page_size: int) -> list[Review]:
        """Filter, sort, then paginate."""

    @abstractmethod
    def get_filtered_count(self, spec: Optional[FilterSpec]) -> int:
        """Number of reviews matching ``spec``."""

    @abstractmethod
    def get_by_keywords(self, keywords: Optional[Iterable[Optional[str]]]) -> list[Review]:
        """Reviews whose title or text contains any keyword (case-insensitive)."""

    @abstractmethod
    def get_by_id(self, review_id: Optional[int]) -> Optional[Review]:
        """Single review, or None."""

    @abstractmethod
    def get_all(self) -> list[Review]:
        """Every stored review."""

    @abstractmethod
    def total_count(self) -> int:
        """Number of stored reviews."""

    @abstractmethod
    def average_rating(self) -> float:
        """Mean of present ratings, 0.0 when there are none."""

    @abstractmethod
    def rating_distribution(self) -> dict[int, int]:
        """Count per rating value present in the store."""

    @abstractmethod
    def monthly_average(self) -> dict[str, float]:
        """Mean rating per YYYY-MM month, with undated reviews under "unknown"."""
