"""Read review datasets from JSON or JSON-lines files."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterator

from pydantic import ValidationError as PydanticValidationError

from reviewapp.core.dates import DATE_TEXT_LENGTH
from reviewapp.core.exceptions import IngestError
from reviewapp.schemas.review import Review

logger = logging.getLogger(__name__)

# Field names used by the dataset files.
ID = "id"
REVIEW = "review"
AUTHOR = "author"
SOURCE = "review_source"
TITLE = "title"
PRODUCT_NAME = "product_name"
REVIEWED_DATE = "reviewed_date"
RATING = "rating"


def parse_reviewed_date(value: Any) -> date | datetime | None:
    """Parse YYYY-MM-DD or an ISO datetime; anything else becomes None."""
    if not isinstance(value, str) or len(value) < DATE_TEXT_LENGTH:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        if len(text) > DATE_TEXT_LENGTH:
            return datetime.fromisoformat(text)
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:DATE_TEXT_LENGTH])
    except ValueError:
        return None


def _text(record: dict, key: str) -> str | None:
    value = record.get(key)
    return None if value is None else str(value)


def record_to_review(record: Any) -> Review:
    """Convert one dataset entry; raises ValueError for unusable entries."""
    if not isinstance(record, dict):
        raise ValueError(f"expected an object, got {type(record).__name__}")

    raw_id = record.get(ID)
    if isinstance(raw_id, bool) or not isinstance(raw_id, (int, str)):
        raise ValueError("missing or non-integer id")
    try:
        review_id = int(raw_id)
    except ValueError:
        raise ValueError(f"non-integer id: {raw_id!r}") from None
    if review_id <= 0:
        raise ValueError(f"id must be positive, got {review_id}")

    rating = record.get(RATING)
    if isinstance(rating, bool) or not isinstance(rating, int) or not (1 <= rating <= 5):
        raise ValueError("invalid rating; must be between 1 and 5")

    try:
        return Review(
            id=review_id,
            review_text=_text(record, REVIEW),
            author_name=_text(record, AUTHOR),
            review_source=_text(record, SOURCE),
            review_title=_text(record, TITLE),
            product_name=_text(record, PRODUCT_NAME),
            reviewed_date=parse_reviewed_date(record.get(REVIEWED_DATE)),
            rating=rating,
        )
    except PydanticValidationError as exc:
        raise ValueError(str(exc)) from exc


def iter_jsonl(content: str) -> Iterator[tuple[int, Any]]:
    """Yield (line number, decoded object) for each non-blank line."""
    for line_number, line in enumerate(content.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            yield line_number, json.loads(line)
        except json.JSONDecodeError as exc:
            logger.warning("Skipping bad JSON at line %d: %s", line_number, exc)


def parse_reviews(content: str) -> list[Review]:
    """Parse a JSON array or JSON-lines document, skipping bad entries."""
    text = content.strip()
    if not text:
        return []

    if text.startswith("["):
        try:
            entries = list(enumerate(json.loads(text), start=1))
        except json.JSONDecodeError as exc:
            raise IngestError(f"Malformed JSON array: {exc}") from exc
        where = "element"
    else:
        entries = list(iter_jsonl(text))
        where = "line"

    reviews: list[Review] = []
    for position, record in entries:
        try:
            reviews.append(record_to_review(record))
        except ValueError as exc:
            logger.warning("Skipping bad review at %s %d: %s", where, position, exc)
    return reviews


def load_reviews_file(path: str | Path) -> list[Review]:
    """Read and parse a dataset file."""
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise IngestError(f"Failed to read JSON file: {path}") from exc
    reviews = parse_reviews(content)
    logger.info("Parsed %d reviews from %s", len(reviews), path)
    return reviews
