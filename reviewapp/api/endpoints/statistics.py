"""Statistics endpoint."""

from fastapi import APIRouter, Depends

from reviewapp.api.deps import get_statistics_service
from reviewapp.schemas.statistics import ReviewStatistics
from reviewapp.services.statistics_service import StatisticsService

router = APIRouter(prefix="/stats", tags=["statistics"])


@router.get("", response_model=ReviewStatistics)
def review_statistics(service: StatisticsService = Depends(get_statistics_service)) -> ReviewStatistics:
    """Totals, average, rating distribution and monthly averages."""
    return service.get_review_statistics()
