from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PlannerConfig(BaseSettings):
    """Search bounds for the trip planner.

    Automatically loads from environment variables and .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    # Overall wall-clock budget for one query, across all stop pairs
    max_search_seconds: float = Field(default=5.0, alias="BUS_MAX_SEARCH_SECONDS")

    # Breadth-first transfer exploration
    transfer_search_seconds: float = Field(default=2.0, alias="BUS_TRANSFER_SEARCH_SECONDS")
    max_queue_size: int = Field(default=1000, alias="BUS_MAX_QUEUE_SIZE")
    max_transfers: int = Field(default=3, alias="BUS_MAX_TRANSFERS")

    # Origin x destination candidate pairs explored per query
    max_stop_pairs: int = Field(default=10, alias="BUS_MAX_STOP_PAIRS")

    # Paths produced by the k-alternatives search
    alternative_paths: int = Field(default=3, alias="BUS_ALTERNATIVE_PATHS")

    # Hard timeout applied by the MCP tools around a whole query; keep above max_search_seconds
    query_timeout_seconds: float = Field(default=10.0, alias="BUS_QUERY_TIMEOUT")


@lru_cache
def get_planner_config() -> PlannerConfig:
    """Get planner configuration (cached singleton).

    Returns:
        PlannerConfig with values from .env file or environment variables.
    """
    return PlannerConfig()
