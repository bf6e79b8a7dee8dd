"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment variables from .env file before settings are read
load_dotenv()

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402

from reviewapp.api.routes import router  # noqa: E402
from reviewapp.core.config import settings  # noqa: E402
from reviewapp.core.exceptions import BackingStoreError  # noqa: E402
from reviewapp.core.logging import configure_logging  # noqa: E402
from reviewapp.services.engine_factory import query_engine_from_settings  # noqa: E402
from reviewapp.services.ingest import load_reviews_file  # noqa: E402
from reviewapp.services.query_engine import ReviewQueryEngine  # noqa: E402
from reviewapp.services.review_service import ReviewService  # noqa: E402
from reviewapp.services.statistics_service import StatisticsService  # noqa: E402

logger = logging.getLogger(__name__)


def _attach_engine(app: FastAPI, engine: ReviewQueryEngine) -> None:
    app.state.engine = engine
    app.state.review_service = ReviewService(engine)
    app.state.statistics_service = StatisticsService(engine)


def create_app(engine: ReviewQueryEngine | None = None) -> FastAPI:
    """Build the API; without an engine one is created from settings on startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if engine is None:
            configure_logging(settings.log_level)
            store = query_engine_from_settings(settings)
            if settings.review_data_file:
                store.save(load_reviews_file(settings.review_data_file))
            _attach_engine(app, store)
        yield

    app = FastAPI(title=settings.project_name, lifespan=lifespan)
    if engine is not None:
        _attach_engine(app, engine)
    app.include_router(router, prefix=settings.api_v1_prefix)

    @app.exception_handler(BackingStoreError)
    async def backing_store_error_handler(request: Request, exc: BackingStoreError) -> JSONResponse:
        logger.error("Review store failure on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": str(exc), "operation": exc.operation})

    @app.get("/", tags=["root"])
    async def root() -> dict[str, str]:
        """Basic sanity endpoint."""
        return {"message": f"{settings.project_name} is running"}

    return app


app = create_app()
