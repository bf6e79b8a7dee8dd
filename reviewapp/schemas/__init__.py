"""Expose schemas for easier import."""

from reviewapp.schemas.review import Review, ReviewPage  # noqa: F401
from reviewapp.schemas.filters import FilterSpec, FilterSpecBuilder  # noqa: F401
from reviewapp.schemas.statistics import ReviewStatistics  # noqa: F401
