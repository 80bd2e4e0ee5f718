#!/usr/bin/env python3
"""
Curriculum Loader: course-plan CSV → PostgreSQL

Reads a course-plan sheet exported as CSV (columns Module, Topic, Sub Topic,
Lecture Number, or their snake_case equivalents) and replaces a subject's
curriculum with it. Planned dates are recomputed from the subject's current
timetable in the same transaction.

Usage:
    python scripts/load_curriculum.py --subject-id=<uuid> --path=plan.csv
    python scripts/load_curriculum.py --subject-id=<uuid> --path=plan.csv --dry-run
"""

import argparse
import asyncio
import csv
import sys
from pathlib import Path
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cprtrack.config import settings
from cprtrack.curriculum import CurriculumStore, parse_rows


def read_rows(path: Path) -> list[dict[str, Any]]:
    """Read every CSV row as a header → value mapping."""
    if not path.exists():
        raise FileNotFoundError(f"Curriculum sheet not found: {path}")

    with open(path, encoding="utf-8-sig", newline="") as f:
        return list(csv.DictReader(f))


async def load(db_url: str, subject_id: UUID, rows: list[dict[str, Any]]) -> None:
    engine = create_async_engine(db_url, echo=False)
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    try:
        async with session_maker() as session:
            store = CurriculumStore(session, tz=settings.timezone)
            result = await store.replace(subject_id, rows)

        print(f"✅ Modules: {result.modules}")
        print(f"✅ Topics: {result.topics}")
        print(f"✅ Sub-topics: {result.sub_topics}")
        print(f"✅ Lectures with planned dates: {result.planned_lectures}")
        if result.skipped_rows:
            print(f"⚠️  Skipped rows: {result.skipped_rows}")
    finally:
        await engine.dispose()


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Load a subject curriculum from CSV")
    parser.add_argument("--subject-id", type=UUID, required=True, help="Subject to replace")
    parser.add_argument("--path", type=Path, required=True, help="Path to the CSV sheet")
    parser.add_argument(
        "--db-url",
        type=str,
        help="Custom database URL (default from settings)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse and report without writing to the database",
    )
    args = parser.parse_args()

    db_url = args.db_url or settings.DATABASE_URL

    print("🚀 CPRTrack Curriculum Loader")
    print(f"📁 Sheet: {args.path}")
    print(f"🗄️  Database: {db_url.split('@')[1] if '@' in db_url else db_url}\n")

    rows = read_rows(args.path)

    if args.dry_run:
        parsed = parse_rows(rows)
        print(f"📊 Rows: {len(rows)} ({parsed.skipped_rows} skipped)")
        print(f"📊 Modules: {len(parsed.modules)}")
        print(f"📊 Sub-topics: {parsed.sub_topic_count}")
        return

    try:
        await load(db_url, args.subject_id, rows)
        print("\n✅ Load complete!")
    except Exception as e:
        print(f"\n❌ Error: {e}")
        raise


if __name__ == "__main__":
    asyncio.run(main())
