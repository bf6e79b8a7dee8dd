"""Exception hierarchy shared by the query engines and services."""

from __future__ import annotations


class ReviewAppError(Exception):
    """Base class for every error raised by reviewapp."""


class ValidationError(ReviewAppError):
    """Filter criteria violate an invariant or cannot be parsed."""


class IllegalStateError(ValidationError):
    """A builder was used after it produced its result."""


class BackingStoreError(ReviewAppError):
    """A statement against the relational store failed.

    ``operation`` names the phase that failed (e.g. "counting filtered
    reviews") so callers can tell loading, counting and saving apart.
    """

    def __init__(self, operation: str, cause: BaseException | None = None) -> None:
        self.operation = operation
        message = f"Review store error while {operation}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class IngestError(ReviewAppError):
    """A review dataset file could not be read."""
