"""Query engines and application services."""

from reviewapp.services.engine_factory import build_query_engine, query_engine_from_settings  # noqa: F401
from reviewapp.services.memory_engine import InMemoryQueryEngine  # noqa: F401
from reviewapp.services.query_engine import ReviewQueryEngine  # noqa: F401
from reviewapp.services.sql_engine import RelationalQueryEngine  # noqa: F401
