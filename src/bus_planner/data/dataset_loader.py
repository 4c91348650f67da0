"""Route dataset loader: JSON files in, SQLite database out."""

import json
import logging
from pathlib import Path

import aiosqlite

from bus_planner.models.network import Dataset, Route, Stop

logger = logging.getLogger(__name__)

# Ids are stored without a declared type so integer and text ids round-trip as given
SCHEMA_SQL = """
-- routes
CREATE TABLE routes (
    route_id NOT NULL PRIMARY KEY,
    route_order INTEGER NOT NULL,
    route_name TEXT NOT NULL,
    route_number TEXT NOT NULL,
    route_color TEXT,
    route_description TEXT
);

-- route_stops (ordered stop list per route, name as labelled on that route)
CREATE TABLE route_stops (
    route_id NOT NULL,
    stop_sequence INTEGER NOT NULL,
    stop_id NOT NULL,
    stop_name TEXT NOT NULL,
    PRIMARY KEY (route_id, stop_sequence)
);
"""


def load_dataset(path: Path) -> list[Route]:
    """Read and validate a route dataset from a JSON file.

    Accepts either ``{"routes": [...]}`` or a bare list of routes.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        pydantic.ValidationError: If the content doesn't match the route schema.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset not found: {path}")

    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    if isinstance(raw, list):
        raw = {"routes": raw}

    dataset = Dataset.model_validate(raw)
    logger.info(f"Loaded {len(dataset.routes)} routes from {path}")
    return dataset.routes


class DatasetLoader:
    """Loader for ingesting a route dataset into SQLite."""

    def __init__(self, db_path: Path):
        """Initialize the loader.

        Args:
            db_path: Path where the SQLite database will be created.
        """
        self.db_path = Path(db_path)

    async def ingest(self, json_path: Path) -> dict[str, int]:
        """Ingest a JSON route dataset into SQLite.

        Uses atomic swap: loads into temp DB, then replaces the target DB.

        Returns:
            Dictionary with row counts per table.

        Raises:
            FileNotFoundError: If the JSON file doesn't exist.
            ValueError: If the dataset has no routes.
        """
        routes = load_dataset(json_path)
        if not routes:
            raise ValueError(f"No routes in {json_path}")

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        temp_db = self.db_path.with_suffix(".tmp.db")

        try:
            temp_db.unlink(missing_ok=True)

            async with aiosqlite.connect(temp_db) as db:
                await db.executescript(SCHEMA_SQL)
                row_counts = await self._load_routes(db, routes)
                await db.commit()

            # atomic swap
            if self.db_path.exists():
                self.db_path.unlink()
            temp_db.rename(self.db_path)

            logger.info(f"Dataset ingestion complete: {self.db_path}")
            return row_counts

        except Exception:
            temp_db.unlink(missing_ok=True)
            raise

    async def _load_routes(self, db: aiosqlite.Connection, routes: list[Route]) -> dict[str, int]:
        route_rows = []
        route_stop_rows = []

        for order, route in enumerate(routes):
            route_rows.append(
                (route.id, order, route.name, route.number, route.color, route.description)
            )
            for sequence, stop in enumerate(route.stops):
                route_stop_rows.append((route.id, sequence, stop.id, stop.name))

        await db.executemany(
            "INSERT INTO routes (route_id, route_order, route_name, route_number, "
            "route_color, route_description) VALUES (?, ?, ?, ?, ?, ?)",
            route_rows,
        )
        await db.executemany(
            "INSERT INTO route_stops (route_id, stop_sequence, stop_id, stop_name) "
            "VALUES (?, ?, ?, ?)",
            route_stop_rows,
        )

        logger.info(f"  Loaded {len(route_rows):,} routes, {len(route_stop_rows):,} route stops")
        return {
            "routes": len(route_rows),
            "route_stops": len(route_stop_rows),
        }


async def read_routes(db: aiosqlite.Connection) -> list[Route]:
    """Rebuild routes from the database in dataset order."""
    stops_by_route: dict = {}
    sql = "SELECT route_id, stop_id, stop_name FROM route_stops ORDER BY route_id, stop_sequence"
    async with db.execute(sql) as cursor:
        async for row in cursor:
            stops_by_route.setdefault(row["route_id"], []).append(
                Stop(id=row["stop_id"], name=row["stop_name"])
            )

    routes: list[Route] = []
    sql = """
        SELECT route_id, route_name, route_number, route_color, route_description
        FROM routes
        ORDER BY route_order
    """
    async with db.execute(sql) as cursor:
        async for row in cursor:
            routes.append(
                Route(
                    id=row["route_id"],
                    name=row["route_name"],
                    number=row["route_number"],
                    stops=stops_by_route.get(row["route_id"], []),
                    color=row["route_color"],
                    description=row["route_description"],
                )
            )
    return routes
