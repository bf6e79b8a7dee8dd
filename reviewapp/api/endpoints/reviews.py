"""Review browsing endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from reviewapp.api.deps import get_review_service
from reviewapp.core.config import settings
from reviewapp.core.exceptions import ValidationError
from reviewapp.schemas.filters import parse_filter_params
from reviewapp.schemas.review import Review, ReviewPage
from reviewapp.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"])

PAGINATION_PARAMS = ("page", "page_size")


@router.get("", response_model=ReviewPage)
def list_reviews(
    page: int = Query(1, description="1-based page; values below 1 mean page 1"),
    page_size: int = Query(settings.default_page_size, le=settings.max_page_size),
    service: ReviewService = Depends(get_review_service),
) -> ReviewPage:
    """Unfiltered reviews ordered by id."""
    return service.get_reviews_page(page, page_size)


@router.get("/filter", response_model=ReviewPage)
def filter_reviews(
    request: Request,
    page: int = Query(1),
    page_size: int = Query(settings.default_page_size, le=settings.max_page_size),
    service: ReviewService = Depends(get_review_service),
) -> ReviewPage:
    """Filter with query parameters such as ``minrating=3&author=john&sortbydate=true``."""
    params = {
        key: value for key, value in request.query_params.items() if key not in PAGINATION_PARAMS
    }
    try:
        spec = parse_filter_params(params)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return service.get_filtered_reviews_page(spec, page, page_size)


@router.get("/search", response_model=list[Review])
def search_reviews(
    keywords: str = Query("", description="Comma-separated keywords"),
    service: ReviewService = Depends(get_review_service),
) -> list[Review]:
    """Reviews whose title or text contains any keyword."""
    return service.get_reviews_by_keywords(keywords.split(","))


@router.get("/{review_id}", response_model=Review)
def get_review(review_id: int, service: ReviewService = Depends(get_review_service)) -> Review:
    review = service.get_review_by_id(review_id)
    if review is None:
        raise HTTPException(status_code=404, detail=f"Review {review_id} not found")
    return review
