"""
Review dataset loader
---------------------
Reads a JSON array or JSON-lines review file and upserts it into the
configured review store.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")

# Allow running from a checkout without installing the package
sys.path.insert(0, str(PROJECT_ROOT))

from reviewapp.core.config import settings  # noqa: E402
from reviewapp.core.exceptions import ReviewAppError  # noqa: E402
from reviewapp.core.logging import configure_logging  # noqa: E402
from reviewapp.services.engine_factory import BACKENDS, build_query_engine  # noqa: E402
from reviewapp.services.ingest import load_reviews_file  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Load reviews.json / reviews.jsonl into the review store")
    parser.add_argument(
        "--file",
        type=Path,
        default=Path("reviews.json"),
        help="Review dataset path (default: ./reviews.json)",
    )
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        default=settings.review_backend,
        help="Review store backend (default: REVIEW_BACKEND)",
    )
    parser.add_argument(
        "--database-url",
        default=settings.database_url,
        help="Connection string for the sql backend (default: DATABASE_URL)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(settings.log_level)

    if not args.file.exists():
        print(f"File not found: {args.file}", file=sys.stderr)
        return 1

    try:
        reviews = load_reviews_file(args.file)
        engine = build_query_engine(args.backend, args.database_url)
        engine.save(reviews)
        stored = engine.total_count()
    except ReviewAppError as exc:
        print(f"Load failed: {exc}", file=sys.stderr)
        return 1

    print("=" * 60)
    print("Review load complete")
    print("=" * 60)
    print(f"  parsed: {len(reviews)}")
    print(f"  stored: {stored}")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
