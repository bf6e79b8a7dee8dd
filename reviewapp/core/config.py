"""Application configuration."""

from functools import lru_cache
import os

from pydantic import BaseModel


class Settings(BaseModel):
    """Application settings (env values win over defaults)."""

    project_name: str = os.getenv("PROJECT_NAME", "Review Explorer API")
    api_v1_prefix: str = os.getenv("API_V1_PREFIX", "/api/v1")

    # "memory" keeps reviews in process, "sql" uses database_url
    review_backend: str = os.getenv("REVIEW_BACKEND", "sql")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///reviews.db")
    review_data_file: str | None = os.getenv("REVIEW_DATA_FILE")

    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
    max_page_size: int = int(os.getenv("MAX_PAGE_SIZE", "100"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
