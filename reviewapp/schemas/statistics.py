"""Statistics snapshot schema."""

from pydantic import BaseModel, Field


class ReviewStatistics(BaseModel):
    total_reviews: int
    average_rating: float
    rating_distribution: dict[int, int] = Field(default_factory=dict)
    monthly_average: dict[str, float] = Field(
        default_factory=dict, description="YYYY-MM (or 'unknown') -> mean rating"
    )
