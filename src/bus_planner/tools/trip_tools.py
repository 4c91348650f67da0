"""MCP tools for trip planning."""

import asyncio
import logging
from collections.abc import Callable

from bus_planner.app import mcp
from bus_planner.data.config import get_planner_config
from bus_planner.models.responses import RouteAnalysisResponse, RoutePlan, RoutePriority
from bus_planner.services.network_service import NetworkProvider
from bus_planner.services.trip_planner import analyze_route as _analyze_route
from bus_planner.services.trip_planner import find_routes
from bus_planner.services.trip_planner import recommend_routes as _recommend_routes

logger = logging.getLogger(__name__)


async def _run_planner(
    planner: Callable[..., RoutePlan], origin: str, destination: str, *args
) -> RoutePlan:
    """Run a synchronous planner on a worker thread under the query timeout."""
    config = get_planner_config()
    index = await NetworkProvider.get_instance()
    # wait_for cannot stop the worker thread; a timed-out query keeps running until
    # max_search_seconds expires, so keep that below query_timeout_seconds
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(planner, index, origin, destination, *args, config),
            timeout=config.query_timeout_seconds,
        )
    except TimeoutError:
        logger.warning(
            f"Planning '{origin}' -> '{destination}' timed out after "
            f"{config.query_timeout_seconds}s"
        )
        return RoutePlan(
            from_=origin,
            to=destination,
            options=[],
            best_option=None,
            total_options=0,
            search_time_ms=int(config.query_timeout_seconds * 1000),
            truncated=True,
        )


def _limit_plan(plan: RoutePlan, limit: int) -> RoutePlan:
    return plan.model_copy(update={"options": plan.options[:limit]})


@mcp.tool()
async def plan_trip(
    origin: str,
    destination: str,
    limit: int = 5,
) -> RoutePlan:
    """Plan a bus trip between two places.

    Finds direct rides, rides with one transfer and rides with two or three
    transfers, then ranks them by a 0-100 score combining travel time,
    transfers, distance, reliability, comfort and accessibility.

    Examples:
        plan_trip("GEC", "New Market")
        plan_trip("Bahaddarhat", "Tiger Pass", limit=3)

    Args:
        origin: Origin stop name (case-insensitive, partial names accepted)
        destination: Destination stop name, same format as origin
        limit: Maximum options to return (1-20, default: 5)

    Returns:
        RoutePlan with options best first. total_options counts every option
        found; truncated is true if a search limit cut the search short.
    """
    # Clamp limit
    if limit < 1:
        limit = 1
    elif limit > 20:
        limit = 20

    plan = await _run_planner(find_routes, origin, destination)
    return _limit_plan(plan, limit)


@mcp.tool()
async def recommend_routes(
    origin: str,
    destination: str,
    priority: RoutePriority = RoutePriority.BALANCED,
    limit: int = 5,
) -> RoutePlan:
    """Plan a bus trip and order the options by what matters most to the rider.

    Priorities:
    - fastest: shortest travel time
    - comfortable: least walking between buses
    - reliable: highest reliability estimate
    - direct: fewest changes
    - balanced: overall score (same order as plan_trip)

    Args:
        origin: Origin stop name
        destination: Destination stop name
        priority: One of fastest, comfortable, reliable, direct, balanced
        limit: Maximum options to return (1-20, default: 5)
    """
    if limit < 1:
        limit = 1
    elif limit > 20:
        limit = 20

    plan = await _run_planner(_recommend_routes, origin, destination, RoutePriority(priority))
    return _limit_plan(plan, limit)


@mcp.tool()
async def analyze_route(
    origin: str,
    destination: str,
    rank: int = 1,
) -> RouteAnalysisResponse:
    """Explain the strengths and weaknesses of one planned option.

    Args:
        origin: Origin stop name
        destination: Destination stop name
        rank: 1-based position of the option in plan_trip's ranking (default: 1)

    Returns:
        RouteAnalysisResponse with the option, its strengths, weaknesses,
        practical recommendations and score breakdown, or an error if the
        plan has no option at that rank.
    """
    if rank < 1:
        rank = 1

    plan = await _run_planner(find_routes, origin, destination)
    if rank > len(plan.options):
        error = (
            "No routes found"
            if not plan.options
            else f"Only {len(plan.options)} options found, no option at rank {rank}"
        )
        return RouteAnalysisResponse(origin=origin, destination=destination, rank=rank, error=error)

    option = plan.options[rank - 1]
    return RouteAnalysisResponse(
        origin=origin,
        destination=destination,
        rank=rank,
        option=option,
        analysis=_analyze_route(option),
    )
