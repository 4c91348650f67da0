import argparse
import asyncio
import logging
import os
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel

from bus_planner.app import mcp


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str


@mcp.tool()
def health() -> HealthResponse:
    """Check if the bus planner MCP server is running and healthy.

    Returns the server status, version, and current timestamp.
    """
    from bus_planner import __version__

    return HealthResponse(
        status="ok",
        version=__version__,
        timestamp=datetime.now(UTC).isoformat(),
    )


def _register_tools() -> None:
    # Importing the tool modules registers their tools on `mcp`
    from bus_planner.tools import stop_tools, trip_tools  # noqa: F401


async def run_ingest(json_path: Path, db_path: Path) -> None:
    """Run dataset ingestion."""
    from bus_planner.data.dataset_loader import DatasetLoader
    from bus_planner.services.network_service import NetworkProvider

    loader = DatasetLoader(db_path)
    row_counts = await loader.ingest(json_path)
    await NetworkProvider.invalidate()

    print("\nIngestion complete. Row counts:")
    for table, count in row_counts.items():
        print(f"  {table}: {count:,}")


async def run_plan(origin: str, destination: str, data_path: Path | None, db_path: Path) -> None:
    """Plan one trip and print the ranked options."""
    from bus_planner.data.dataset_loader import load_dataset
    from bus_planner.services.network_index import build_network
    from bus_planner.services.network_service import NetworkProvider
    from bus_planner.services.trip_planner import find_routes

    if data_path is not None:
        index = build_network(load_dataset(data_path))
    else:
        index = await NetworkProvider.get_instance(db_path)

    plan = await asyncio.to_thread(find_routes, index, origin, destination)

    print(f"\n{plan.from_} -> {plan.to}: {plan.total_options} options in {plan.search_time_ms}ms")
    if plan.truncated:
        print("  (search limit reached, results may be incomplete)")
    for rank, option in enumerate(plan.options, start=1):
        score = option.score.total_score if option.score else "-"
        print(
            f"\n{rank}. [{score}] {option.route_type.value}, {option.total_time} min, "
            f"{option.total_distance} km, {option.transfers} transfers"
        )
        for leg in option.legs:
            print(
                f"   {leg.route_number:>9}  {leg.from_stop.name} -> {leg.to_stop.name} "
                f"({len(leg.stops) - 1} stops, {leg.estimated_time} min)"
            )


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="bus-planner",
        description="Bus Trip Planner MCP Server",
    )
    subparsers = parser.add_subparsers(dest="command")
    default_db = Path(os.environ.get("BUS_DB_PATH", "data/routes.db"))

    # ingest command
    ingest_parser = subparsers.add_parser(
        "ingest",
        help="Ingest a JSON route dataset into SQLite database",
    )
    ingest_parser.add_argument(
        "json_path",
        type=Path,
        help="Path to route dataset JSON file",
    )
    ingest_parser.add_argument(
        "--db",
        type=Path,
        default=default_db,
        help="SQLite database path (default: data/routes.db or BUS_DB_PATH env var)",
    )

    # plan command
    plan_parser = subparsers.add_parser(
        "plan",
        help="Plan a trip from the command line",
    )
    plan_parser.add_argument("origin", help="Origin stop name")
    plan_parser.add_argument("destination", help="Destination stop name")
    plan_parser.add_argument(
        "--data",
        type=Path,
        default=None,
        help="Plan directly from a JSON dataset instead of the database",
    )
    plan_parser.add_argument(
        "--db",
        type=Path,
        default=default_db,
        help="SQLite database path (default: data/routes.db or BUS_DB_PATH env var)",
    )

    for sub in (ingest_parser, plan_parser):
        sub.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            help="Enable verbose logging",
        )

    args = parser.parse_args()

    if args.command in ("ingest", "plan"):
        # Configure logging
        log_level = logging.DEBUG if args.verbose else logging.INFO
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    if args.command == "ingest":
        asyncio.run(run_ingest(args.json_path, args.db))
    elif args.command == "plan":
        asyncio.run(run_plan(args.origin, args.destination, args.data, args.db))
    else:
        # Default: run MCP server
        _register_tools()
        mcp.run()


if __name__ == "__main__":
    main()
