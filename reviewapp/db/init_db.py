"""Database initialization utilities."""

import logging

from sqlalchemy import Engine

from reviewapp.db.base import Base
from reviewapp import models  # noqa: F401

logger = logging.getLogger(__name__)


def init_db(engine: Engine) -> None:
    """Create the reviews table if it does not exist yet."""
    Base.metadata.create_all(bind=engine)
    logger.info("Review schema ready on %s", engine.url.render_as_string(hide_password=True))
