"""
Database schema initialization
------------------------------
Creates the reviews table on DATABASE_URL if it does not exist.
"""

import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import inspect  # noqa: E402

from reviewapp.core.config import settings  # noqa: E402
from reviewapp.core.exceptions import BackingStoreError  # noqa: E402
from reviewapp.services.sql_engine import RelationalQueryEngine  # noqa: E402


def init_db_schema(database_url: str) -> list[str]:
    """Create the schema and return the table names now present."""
    engine = RelationalQueryEngine(database_url)
    try:
        return sorted(inspect(engine.engine).get_table_names())
    finally:
        engine.dispose()


def main() -> int:
    print("Initializing review schema...")
    try:
        tables = init_db_schema(settings.database_url)
    except BackingStoreError as exc:
        print(f"Schema initialization failed: {exc}", file=sys.stderr)
        return 1
    print("Tables:")
    for table in tables:
        print(f"  - {table}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
