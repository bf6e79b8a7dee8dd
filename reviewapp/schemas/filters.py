"""Filter criteria for review queries.

``FilterSpec`` is an immutable value object; equal criteria compare equal.
Build one directly from keyword arguments, through ``FilterSpecBuilder``, or
from textual parameters with ``parse_filter_params``:

    spec = (
        FilterSpecBuilder()
        .set_min_rating(3)
        .set_author_name("john")
        .set_start_date(date(2023, 1, 1))
        .set_sort_by_rating(True)
        .build()
    )
"""

from __future__ import annotations

import logging
from datetime import date, time
from typing import Any, Mapping, Optional

from pydantic import BaseModel, field_validator, model_validator

from reviewapp.core.exceptions import IllegalStateError, ValidationError

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


class FilterSpec(BaseModel):
    """Validated, immutable review filter criteria.

    Text criteria are case-insensitive substring matches; ``None`` and ``""``
    both mean "don't care". Date bounds are inclusive calendar days, time
    bounds are inclusive times of day in whole seconds.
    """

    rating: Optional[int] = None
    min_rating: Optional[int] = None
    max_rating: Optional[int] = None

    author_name: Optional[str] = None
    review_title: Optional[str] = None
    product_name: Optional[str] = None
    store_name: Optional[str] = None

    review_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None

    sort_by_date: bool = False
    sort_by_rating: bool = False

    model_config = {"frozen": True}

    @field_validator("start_time", "end_time")
    @classmethod
    def _naive_whole_seconds(cls, value: time | None) -> time | None:
        if value is None:
            return None
        return value.replace(microsecond=0, tzinfo=None)

    @model_validator(mode="after")
    def _check_invariants(self) -> "FilterSpec":
        _check_rating("Rating", self.rating)
        _check_rating("Min rating", self.min_rating)
        _check_rating("Max rating", self.max_rating)

        if self.min_rating is not None and self.max_rating is not None and self.min_rating > self.max_rating:
            raise ValidationError("Min rating cannot be greater than max rating.")
        if self.start_date is not None and self.end_date is not None and self.start_date > self.end_date:
            raise ValidationError("Start date cannot be after end date.")
        if self.start_time is not None and self.end_time is not None and self.start_time > self.end_time:
            raise ValidationError("Start time cannot be after end time.")
        return self

    @property
    def is_sorted(self) -> bool:
        return self.sort_by_date or self.sort_by_rating


def _check_rating(field_name: str, value: int | None) -> None:
    if value is not None and not (MIN_RATING <= value <= MAX_RATING):
        raise ValidationError(f"{field_name} must be between {MIN_RATING} and {MAX_RATING}.")


class FilterSpecBuilder:
    """Fluent builder for :class:`FilterSpec`.

    Setters only stash values; ``build()`` validates everything at once and
    freezes the builder, after which every call raises ``IllegalStateError``.
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._built = False

    def _set(self, field: str, value: Any) -> "FilterSpecBuilder":
        self._assert_not_built()
        self._values[field] = value
        return self

    def _assert_not_built(self) -> None:
        if self._built:
            raise IllegalStateError("This builder has already been used to build a FilterSpec.")

    def set_rating(self, rating: int | None) -> "FilterSpecBuilder":
        return self._set("rating", rating)

    def set_min_rating(self, min_rating: int | None) -> "FilterSpecBuilder":
        return self._set("min_rating", min_rating)

    def set_max_rating(self, max_rating: int | None) -> "FilterSpecBuilder":
        return self._set("max_rating", max_rating)

    def set_author_name(self, author_name: str | None) -> "FilterSpecBuilder":
        return self._set("author_name", author_name)

    def set_review_title(self, review_title: str | None) -> "FilterSpecBuilder":
        return self._set("review_title", review_title)

    def set_product_name(self, product_name: str | None) -> "FilterSpecBuilder":
        return self._set("product_name", product_name)

    def set_store_name(self, store_name: str | None) -> "FilterSpecBuilder":
        return self._set("store_name", store_name)

    def set_review_date(self, review_date: date | None) -> "FilterSpecBuilder":
        return self._set("review_date", review_date)

    def set_start_date(self, start_date: date | None) -> "FilterSpecBuilder":
        return self._set("start_date", start_date)

    def set_end_date(self, end_date: date | None) -> "FilterSpecBuilder":
        return self._set("end_date", end_date)

    def set_start_time(self, start_time: time | None) -> "FilterSpecBuilder":
        return self._set("start_time", start_time)

    def set_end_time(self, end_time: time | None) -> "FilterSpecBuilder":
        return self._set("end_time", end_time)

    def set_sort_by_date(self, sort_by_date: bool) -> "FilterSpecBuilder":
        return self._set("sort_by_date", sort_by_date)

    def set_sort_by_rating(self, sort_by_rating: bool) -> "FilterSpecBuilder":
        return self._set("sort_by_rating", sort_by_rating)

    def build(self) -> FilterSpec:
        """Validate the stashed criteria and freeze the builder."""
        self._assert_not_built()
        spec = FilterSpec(**self._values)
        self._built = True
        return spec


# Textual filter keys, as typed by users of the API and scripts.
RATING = "rating"
MIN_RATING_KEY = "minrating"
MAX_RATING_KEY = "maxrating"
AUTHOR = "author"
TITLE = "title"
PRODUCT = "productname"
DATE = "date"
STORE = "store"
START_DATE = "startdate"
END_DATE = "enddate"
START_TIME = "starttime"
END_TIME = "endtime"
SORT_DATE = "sortbydate"
SORT_RATING = "sortbyratings"

FILTER_KEYS = (
    RATING, MIN_RATING_KEY, MAX_RATING_KEY, AUTHOR, TITLE, PRODUCT, DATE, STORE,
    START_DATE, END_DATE, START_TIME, END_TIME, SORT_DATE, SORT_RATING,
)


def parse_rating(value: str, field_name: str) -> int:
    try:
        rating = int(value.strip())
    except ValueError:
        raise ValidationError(f"{field_name} must be an integer") from None
    if not (MIN_RATING <= rating <= MAX_RATING):
        raise ValidationError(f"{field_name} must be between {MIN_RATING} and {MAX_RATING}")
    return rating


def parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValidationError("date must be in YYYY-MM-DD (ISO) format") from None


def parse_time(value: str) -> time:
    """Accept HH:MM or HH:MM:SS."""
    text = value.strip()
    colons = text.count(":")
    if colons not in (1, 2):
        raise ValidationError("time must be HH:MM or HH:MM:SS")
    if colons == 1:
        text += ":00"
    try:
        return time.fromisoformat(text)
    except ValueError:
        raise ValidationError("time must be HH:MM or HH:MM:SS") from None


def parse_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def parse_filter_params(params: Mapping[str, str | None]) -> FilterSpec:
    """Build a FilterSpec from ``key=value`` text parameters.

    Keys are case-insensitive. Empty values are skipped, unknown keys are
    logged and ignored. Bad values raise ``ValidationError`` naming the key.
    """
    builder = FilterSpecBuilder()
    for raw_key, raw_value in params.items():
        if raw_value is None:
            continue
        key = raw_key.strip().lower()
        if key not in FILTER_KEYS:
            logger.warning("Ignoring unknown filter key: %s", key)
            continue
        value = raw_value.strip()
        if not value:
            continue
        try:
            if key == RATING:
                builder.set_rating(parse_rating(value, RATING))
            elif key == MIN_RATING_KEY:
                builder.set_min_rating(parse_rating(value, MIN_RATING_KEY))
            elif key == MAX_RATING_KEY:
                builder.set_max_rating(parse_rating(value, MAX_RATING_KEY))
            elif key == AUTHOR:
                builder.set_author_name(value)
            elif key == TITLE:
                builder.set_review_title(value)
            elif key == PRODUCT:
                builder.set_product_name(value)
            elif key == STORE:
                builder.set_store_name(value)
            elif key == DATE:
                builder.set_review_date(parse_date(value))
            elif key == START_DATE:
                builder.set_start_date(parse_date(value))
            elif key == END_DATE:
                builder.set_end_date(parse_date(value))
            elif key == START_TIME:
                builder.set_start_time(parse_time(value))
            elif key == END_TIME:
                builder.set_end_time(parse_time(value))
            elif key == SORT_DATE:
                builder.set_sort_by_date(parse_bool(value))
            elif key == SORT_RATING:
                builder.set_sort_by_rating(parse_bool(value))
        except ValidationError as exc:
            raise ValidationError(f"Invalid value for '{key}': {exc}") from exc
    return builder.build()


def parse_filter_string(criteria: str | None) -> FilterSpec:
    """Parse ``"author=John,minrating=3"`` into a FilterSpec."""
    params: dict[str, str] = {}
    for part in (criteria or "").split(","):
        key, sep, value = part.partition("=")
        if sep and key.strip():
            params[key] = value
    return parse_filter_params(params)
