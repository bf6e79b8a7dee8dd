"""ORM models."""

from reviewapp.models.review import ReviewRow  # noqa: F401
