"""Engine and session factories."""

from __future__ import annotations

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


def _unicode_lower(value):
    # Python's str.lower, so LIKE comparisons fold case the same way the
    # in-memory engine does (SQLite's builtin lower() is ASCII only).
    if isinstance(value, str):
        return value.lower()
    return value


def build_engine(database_url: str) -> Engine:
    """Create an Engine; in-memory SQLite shares one connection."""
    url = make_url(database_url)
    kwargs: dict = {"future": True}
    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **kwargs)

    if url.get_backend_name() == "sqlite":
        @event.listens_for(engine, "connect")
        def _register_functions(dbapi_connection, _connection_record) -> None:
            dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)

    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
