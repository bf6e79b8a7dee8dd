"""Relational review store.

FilterSpec criteria are translated into SQLAlchemy expressions so the
database does the filtering, sorting and paging. Every expression here has a
twin predicate in ``memory_engine``; the two must agree row for row.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import ColumnElement, Select, String, and_, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from reviewapp.core.dates import (
    DATE_TEXT_LENGTH,
    MONTH_TEXT_LENGTH,
    UNKNOWN_MONTH,
    parse_iso,
    time_text,
    to_iso,
)
from reviewapp.core.exceptions import BackingStoreError
from reviewapp.db.init_db import init_db
from reviewapp.db.session import build_engine, build_session_factory
from reviewapp.models.review import ReviewRow
from reviewapp.schemas.filters import FilterSpec
from reviewapp.schemas.review import Review
from reviewapp.services.query_engine import (
    ReviewQueryEngine,
    check_batch,
    normalize_keywords,
    page_window,
)

logger = logging.getLogger(__name__)

# Offset of HH:MM:SS inside YYYY-MM-DDTHH:MM:SS (SQL substr is 1-based).
TIME_TEXT_START = DATE_TEXT_LENGTH + 2
TIME_TEXT_LENGTH = 8


def _date_text():
    return func.substr(ReviewRow.reviewed_date, 1, DATE_TEXT_LENGTH, type_=String)


def _time_text():
    return func.substr(ReviewRow.reviewed_date, TIME_TEXT_START, TIME_TEXT_LENGTH, type_=String)


def _has_time():
    return func.length(ReviewRow.reviewed_date) > DATE_TEXT_LENGTH


def _contains(column, criterion: str | None) -> ColumnElement | None:
    if not criterion:
        return None
    # NULL columns make the LIKE unknown, which filters the row out.
    return func.lower(column, type_=String).contains(criterion.lower(), autoescape=True)


def build_conditions(spec: Optional[FilterSpec]) -> list[ColumnElement]:
    """Translate a FilterSpec into WHERE conditions that must all hold."""
    if spec is None:
        return []

    conditions: list[ColumnElement] = []

    # Comparisons against NULL ratings/dates are unknown, so absent values
    # never satisfy a bound.
    if spec.rating is not None:
        conditions.append(ReviewRow.rating == spec.rating)
    if spec.min_rating is not None:
        conditions.append(ReviewRow.rating >= spec.min_rating)
    if spec.max_rating is not None:
        conditions.append(ReviewRow.rating <= spec.max_rating)

    if spec.review_date is not None:
        conditions.append(_date_text() == spec.review_date.isoformat())
    if spec.start_date is not None:
        conditions.append(_date_text() >= spec.start_date.isoformat())
    if spec.end_date is not None:
        conditions.append(_date_text() <= spec.end_date.isoformat())

    if spec.start_time is not None:
        conditions.append(and_(_has_time(), _time_text() >= time_text(spec.start_time)))
    if spec.end_time is not None:
        conditions.append(and_(_has_time(), _time_text() <= time_text(spec.end_time)))

    for column, criterion in (
        (ReviewRow.author_name, spec.author_name),
        (ReviewRow.review_title, spec.review_title),
        (ReviewRow.product_name, spec.product_name),
        (ReviewRow.review_source, spec.store_name),
    ):
        condition = _contains(column, criterion)
        if condition is not None:
            conditions.append(condition)

    return conditions


def build_ordering(spec: Optional[FilterSpec]) -> list[ColumnElement]:
    """ORDER BY clauses: rating, then date (both desc, nulls last), then id."""
    ordering: list[ColumnElement] = []
    if spec is not None and spec.sort_by_rating:
        ordering.append(ReviewRow.rating.desc().nulls_last())
    if spec is not None and spec.sort_by_date:
        ordering.append(ReviewRow.reviewed_date.desc().nulls_last())
    ordering.append(ReviewRow.id.asc())
    return ordering


def _paginate(stmt: Select, page: int, page_size: int) -> Select | None:
    window = page_window(page, page_size)
    if window is None:
        return None
    offset, limit = window
    return stmt.limit(limit).offset(offset)


def row_to_review(row: ReviewRow) -> Review:
    return Review(
        id=row.id,
        author_name=row.author_name,
        review_title=row.review_title,
        review_text=row.review_text,
        product_name=row.product_name,
        review_source=row.review_source,
        rating=row.rating,
        reviewed_date=parse_iso(row.reviewed_date),
    )


def review_to_row(review: Review) -> ReviewRow:
    return ReviewRow(
        id=review.id,
        author_name=review.author_name,
        review_title=review.review_title,
        review_text=review.review_text,
        product_name=review.product_name,
        review_source=review.review_source,
        rating=review.rating,
        reviewed_date=to_iso(review.reviewed_date),
    )


def _mean(total, count) -> float:
    return int(total) / int(count) if count else 0.0


class RelationalQueryEngine(ReviewQueryEngine):
    """Review store backed by a SQLAlchemy database (SQLite by default)."""

    def __init__(self, database_url: str) -> None:
        try:
            self._engine = build_engine(database_url)
            init_db(self._engine)
        except (SQLAlchemyError, ImportError) as exc:
            raise BackingStoreError("connecting to review store", exc) from exc
        self._session_factory = build_session_factory(self._engine)

    @property
    def engine(self):
        return self._engine

    def dispose(self) -> None:
        """Close pooled connections."""
        self._engine.dispose()

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        """Session scoped to one operation; SQL failures become BackingStoreError."""
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as exc:
            db.rollback()
            raise BackingStoreError(operation, exc) from exc
        except PydanticValidationError as exc:
            # A stored row that no longer satisfies the Review schema.
            db.rollback()
            raise BackingStoreError(operation, exc) from exc
        finally:
            db.close()

    def _fetch(self, stmt: Select, operation: str) -> list[Review]:
        with self._session(operation) as db:
            logger.debug("%s: %s", operation, stmt)
            rows = db.execute(stmt).scalars().all()
            return [row_to_review(row) for row in rows]

    def save(self, reviews: Optional[Sequence[Review]]) -> None:
        accepted = check_batch(reviews)
        if not accepted:
            return
        # Pending rows are not in the identity map, so repeated ids are
        # collapsed here; the last occurrence wins.
        latest = {review.id: review for review in accepted}
        with self._session("saving reviews batch") as db:
            for review in latest.values():
                db.merge(review_to_row(review))
            db.commit()
        logger.info("Saved %d reviews (%d skipped)", len(accepted), len(reviews) - len(accepted))

    def get_page(self, page: int, page_size: int) -> list[Review]:
        stmt = _paginate(select(ReviewRow).order_by(ReviewRow.id.asc()), page, page_size)
        if stmt is None:
            return []
        return self._fetch(stmt, "loading paged reviews")

    def get_filtered_page(self, spec: Optional[FilterSpec], page: int, page_size: int) -> list[Review]:
        stmt = select(ReviewRow).where(*build_conditions(spec)).order_by(*build_ordering(spec))
        stmt = _paginate(stmt, page, page_size)
        if stmt is None:
            return []
        return self._fetch(stmt, "loading filtered reviews")

    def get_filtered_count(self, spec: Optional[FilterSpec]) -> int:
        stmt = select(func.count(ReviewRow.id)).where(*build_conditions(spec))
        with self._session("counting filtered reviews") as db:
            return db.execute(stmt).scalar_one()

    def get_by_keywords(self, keywords: Optional[Iterable[Optional[str]]]) -> list[Review]:
        needles = normalize_keywords(keywords)
        if not needles:
            return []
        content = func.lower(
            func.coalesce(ReviewRow.review_title, "") + " " + func.coalesce(ReviewRow.review_text, ""),
            type_=String,
        )
        stmt = (
            select(ReviewRow)
            .where(or_(*(content.contains(needle, autoescape=True) for needle in needles)))
            .order_by(ReviewRow.id.asc())
        )
        return self._fetch(stmt, "searching reviews by keywords")

    def get_by_id(self, review_id: Optional[int]) -> Optional[Review]:
        if review_id is None or review_id <= 0:
            return None
        with self._session(f"fetching review by id {review_id}") as db:
            row = db.get(ReviewRow, review_id)
            return row_to_review(row) if row is not None else None

    def get_all(self) -> list[Review]:
        return self._fetch(select(ReviewRow).order_by(ReviewRow.id.asc()), "loading all reviews")

    def total_count(self) -> int:
        with self._session("counting reviews") as db:
            return db.execute(select(func.count(ReviewRow.id))).scalar_one()

    # Averages are computed from exact integer SUM/COUNT so they match the
    # in-memory engine bit for bit.

    def average_rating(self) -> float:
        stmt = select(func.sum(ReviewRow.rating), func.count(ReviewRow.rating))
        with self._session("calculating average rating") as db:
            total, count = db.execute(stmt).one()
        return _mean(total, count)

    def rating_distribution(self) -> dict[int, int]:
        stmt = (
            select(ReviewRow.rating, func.count(ReviewRow.id))
            .where(ReviewRow.rating.is_not(None))
            .group_by(ReviewRow.rating)
            .order_by(ReviewRow.rating)
        )
        with self._session("getting rating distribution") as db:
            return {int(rating): int(count) for rating, count in db.execute(stmt).all()}

    def monthly_average(self) -> dict[str, float]:
        month = func.coalesce(
            func.substr(ReviewRow.reviewed_date, 1, MONTH_TEXT_LENGTH), UNKNOWN_MONTH
        ).label("month")
        stmt = (
            select(month, func.sum(ReviewRow.rating), func.count(ReviewRow.rating))
            .where(ReviewRow.rating.is_not(None))
            .group_by(month)
            .order_by(month)
        )
        with self._session("getting monthly rating average") as db:
            rows = db.execute(stmt).all()
        return {key: _mean(total, count) for key, total, count in rows}
