"""Request-scoped dependencies."""

from fastapi import Request

from reviewapp.services.review_service import ReviewService
from reviewapp.services.statistics_service import StatisticsService


def get_review_service(request: Request) -> ReviewService:
    return request.app.state.review_service


def get_statistics_service(request: Request) -> StatisticsService:
    return request.app.state.statistics_service
