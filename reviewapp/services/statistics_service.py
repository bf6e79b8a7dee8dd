"""Statistics snapshots over the whole review store."""

from __future__ import annotations

from reviewapp.schemas.statistics import ReviewStatistics
from reviewapp.services.query_engine import ReviewQueryEngine


class StatisticsService:
    """Builds a fresh ReviewStatistics on every call; nothing is cached."""

    def __init__(self, engine: ReviewQueryEngine) -> None:
        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def get_review_statistics(self) -> ReviewStatistics:
        return ReviewStatistics(
            total_reviews=self._engine.total_count(),
            average_rating=self._engine.average_rating(),
            rating_distribution=self._engine.rating_distribution(),
            monthly_average=self._engine.monthly_average(),
        )
