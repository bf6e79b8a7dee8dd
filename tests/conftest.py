"""Shared fixtures: a mixed review dataset and both engine backends."""

from datetime import date, datetime

import pytest

from reviewapp.schemas.review import Review
from reviewapp.services.memory_engine import InMemoryQueryEngine
from reviewapp.services.sql_engine import RelationalQueryEngine


def make_review(review_id, **fields) -> Review:
    return Review(id=review_id, **fields)


SAMPLE_REVIEWS = [
    make_review(1, author_name="John Doe", review_title="Superb", review_text="Fantastic phone",
                product_name="iPhone 13", review_source="Amazon", rating=5,
                reviewed_date=date(2024, 1, 1)),
    make_review(2, author_name="jane roe", review_title="Mediocre", review_text="Average",
                product_name="Galaxy S22", review_source="BestBuy", rating=3,
                reviewed_date=date(2024, 1, 20)),
    make_review(3, author_name="Johnny", review_title="Great value", review_text="Battery lasts",
                product_name="iPhone 13 Mini", review_source="amazon.com", rating=5,
                reviewed_date=datetime(2024, 2, 1, 9, 30, 0)),
    make_review(4, author_name=None, review_title="No author", review_text="Works fine",
                product_name="Pixel 7", review_source="Google Store", rating=4,
                reviewed_date=datetime(2024, 2, 1, 18, 45, 10)),
    make_review(5, author_name="Ann", review_title=None, review_text=None,
                product_name=None, review_source=None, rating=None,
                reviewed_date=date(2024, 3, 5)),
    make_review(6, author_name="Bob", review_title="Undated", review_text="No date given",
                product_name="Pixel 7", review_source="Amazon", rating=2,
                reviewed_date=None),
    make_review(7, author_name="Zoë", review_title="ÉCRAN superbe", review_text="Très bon",
                product_name="Galaxy S22", review_source="Fnac", rating=4,
                reviewed_date=datetime(2024, 1, 20, 23, 59, 59)),
    make_review(8, author_name="Carl", review_title="100% happy", review_text="under_score",
                product_name="iPhone 13", review_source="Amazon", rating=1,
                reviewed_date=date(2024, 2, 1)),
    make_review(9, author_name="", review_title="", review_text="",
                product_name="", review_source="", rating=3,
                reviewed_date=None),
    make_review(10, author_name="Dana", review_title="Late night", review_text="Bought at midnight",
                product_name="Pixel 7", review_source="Google Store", rating=None,
                reviewed_date=datetime(2024, 3, 5, 0, 0, 0)),
]


@pytest.fixture
def sample_reviews() -> list[Review]:
    return list(SAMPLE_REVIEWS)


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'reviews.db'}"


@pytest.fixture
def memory_engine() -> InMemoryQueryEngine:
    return InMemoryQueryEngine()


@pytest.fixture
def sql_engine(sqlite_url):
    engine = RelationalQueryEngine(sqlite_url)
    yield engine
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def engine(request, memory_engine, sql_engine):
    """Each contract test runs once per backend."""
    if request.param == "memory":
        return memory_engine
    return sql_engine


@pytest.fixture
def loaded_engine(engine, sample_reviews):
    engine.save(sample_reviews)
    return engine


@pytest.fixture
def loaded_engines(memory_engine, sql_engine, sample_reviews):
    memory_engine.save(sample_reviews)
    sql_engine.save(sample_reviews)
    return memory_engine, sql_engine
