"""Pydantic schemas for reviews and pages of reviews."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Review(BaseModel):
    """A single product review.

    ``id`` is the primary key. Engines skip records whose id is missing or
    not positive. ``reviewed_date`` is a ``date`` when only the day is known
    and a ``datetime`` when the time of day was recorded.
    """

    id: Optional[int] = Field(None, description="Unique review identifier")
    author_name: Optional[str] = None
    review_title: Optional[str] = None
    review_text: Optional[str] = None
    product_name: Optional[str] = None
    review_source: Optional[str] = Field(None, description="Store the review came from")
    rating: Optional[int] = Field(None, ge=1, le=5)
    reviewed_date: Optional[datetime | date] = None

    model_config = {"from_attributes": True, "frozen": True}

    @field_validator("reviewed_date")
    @classmethod
    def _whole_seconds(cls, value: date | datetime | None) -> date | datetime | None:
        if isinstance(value, datetime):
            return value.replace(microsecond=0)
        return value

    @property
    def has_valid_id(self) -> bool:
        return self.id is not None and self.id > 0


class ReviewPage(BaseModel):
    """One page of an ordered review result plus pagination metadata."""

    items: list[Review]
    page: int
    page_size: int
    total_count: int
    total_pages: int
