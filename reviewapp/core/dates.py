"""Conversions between review dates and their stored text form.

A review date is either a ``date`` (no time of day) or a ``datetime``. The
relational store keeps it as ISO text and both engines sort on that text, so
the two forms below must stay in lockstep with the SQL expressions in
``reviewapp.services.sql_engine``.
"""

from __future__ import annotations

from datetime import date, datetime, time

DATE_TEXT_LENGTH = 10  # YYYY-MM-DD
MONTH_TEXT_LENGTH = 7  # YYYY-MM
UNKNOWN_MONTH = "unknown"


def to_iso(value: date | datetime | None) -> str | None:
    """Return the stored text form of a review date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat(sep="T", timespec="seconds")
    return value.isoformat()


def parse_iso(text: str | None) -> date | datetime | None:
    """Inverse of :func:`to_iso`; returns None for empty or unparseable text."""
    if not text:
        return None
    try:
        if len(text) > DATE_TEXT_LENGTH:
            return datetime.fromisoformat(text)
        return date.fromisoformat(text)
    except ValueError:
        return None


def date_part(value: date | datetime | None) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    return value


def time_part(value: date | datetime | None) -> time | None:
    """Time of day in whole seconds, or None for date-only values."""
    if isinstance(value, datetime):
        return value.time().replace(microsecond=0)
    return None


def month_key(value: date | datetime | None) -> str:
    if value is None:
        return UNKNOWN_MONTH
    return to_iso(value)[:MONTH_TEXT_LENGTH]


def time_text(value: time) -> str:
    """HH:MM:SS text used for time-of-day comparisons in SQL."""
    return value.replace(microsecond=0).strftime("%H:%M:%S")
