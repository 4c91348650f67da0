"""Process-wide network index for the MCP server, loaded lazily from SQLite."""

import asyncio
import logging
from pathlib import Path

from bus_planner.data.database import get_db, get_db_path
from bus_planner.data.dataset_loader import read_routes
from bus_planner.services.network_index import NetworkIndex, build_network

logger = logging.getLogger(__name__)


class NetworkProvider:
    """Lazy-loaded singleton holding the NetworkIndex for the ingested dataset.

    Usage:
        index = await NetworkProvider.get_instance()

    After dataset ingestion:
        await NetworkProvider.invalidate()  # Clear cached instance
    """

    _instance: NetworkIndex | None = None
    _db_path: Path | None = None
    _lock: asyncio.Lock = asyncio.Lock()

    @classmethod
    async def get_instance(cls, db_path: Path | None = None) -> NetworkIndex:
        """Get or build the network index.

        Args:
            db_path: Optional database path. Uses default if not provided.
                     A different path than the cached one triggers a rebuild.

        Raises:
            FileNotFoundError: If the database doesn't exist.
        """
        db_path = Path(db_path) if db_path is not None else get_db_path()

        async with cls._lock:
            if cls._instance is None or cls._db_path != db_path:
                async with get_db(db_path) as db:
                    routes = await read_routes(db)
                cls._instance = build_network(routes)
                cls._db_path = db_path
                logger.info(f"Network loaded from {db_path}")
            return cls._instance

    @classmethod
    async def invalidate(cls) -> None:
        """Invalidate the cached index. Call after dataset ingestion."""
        async with cls._lock:
            cls._instance = None
            cls._db_path = None
            logger.info("NetworkProvider invalidated")

    @classmethod
    async def reload(cls, db_path: Path | None = None) -> NetworkIndex:
        """Force reload the index from database."""
        await cls.invalidate()
        return await cls.get_instance(db_path)
