"""SQLite access for the ingested route dataset."""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

DEFAULT_DB_PATH = "data/routes.db"

# Tables written by DatasetLoader, in load order
DATASET_TABLES = ("routes", "route_stops")


def get_db_path() -> Path:
    """Database path from BUS_DB_PATH, else data/routes.db."""
    return Path(os.environ.get("BUS_DB_PATH", DEFAULT_DB_PATH))


@asynccontextmanager
async def get_db(db_path: Path | None = None) -> AsyncIterator[aiosqlite.Connection]:
    """Open the route database with rows addressable by column name.

    Raises:
        FileNotFoundError: If nothing has been ingested at the path yet.
    """
    db_path = Path(db_path) if db_path is not None else get_db_path()
    if not db_path.exists():
        raise FileNotFoundError(
            f"No route database at {db_path}. "
            "Create one with 'bus-planner ingest <routes.json>'."
        )

    async with aiosqlite.connect(db_path) as db:
        db.row_factory = aiosqlite.Row
        yield db


async def get_table_counts(db_path: Path) -> dict[str, int]:
    """Row counts for each dataset table."""
    counts: dict[str, int] = {}
    async with get_db(db_path) as db:
        for table in DATASET_TABLES:
            async with db.execute(f"SELECT COUNT(*) FROM {table}") as cursor:
                row = await cursor.fetchone()
                counts[table] = row[0] if row else 0
    return counts
