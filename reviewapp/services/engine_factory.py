"""Pick a query engine backend once at startup."""

from __future__ import annotations

import logging

from reviewapp.core.config import Settings, settings as default_settings
from reviewapp.services.memory_engine import InMemoryQueryEngine
from reviewapp.services.query_engine import ReviewQueryEngine
from reviewapp.services.sql_engine import RelationalQueryEngine

logger = logging.getLogger(__name__)

MEMORY_BACKEND = "memory"
SQL_BACKEND = "sql"
BACKENDS = (MEMORY_BACKEND, SQL_BACKEND)


def build_query_engine(backend: str, database_url: str | None = None) -> ReviewQueryEngine:
    """Return a fresh engine for ``backend`` ("memory" or "sql")."""
    selector = (backend or "").strip().lower()
    if selector == MEMORY_BACKEND:
        logger.info("Using in-memory review store")
        return InMemoryQueryEngine()
    if selector == SQL_BACKEND:
        if not database_url:
            raise ValueError("database_url is required for the sql backend")
        logger.info("Using relational review store")
        return RelationalQueryEngine(database_url)
    raise ValueError(f"Unsupported review backend: {backend!r} (expected one of {', '.join(BACKENDS)})")


def query_engine_from_settings(settings: Settings | None = None) -> ReviewQueryEngine:
    settings = settings or default_settings
    return build_query_engine(settings.review_backend, settings.database_url)
