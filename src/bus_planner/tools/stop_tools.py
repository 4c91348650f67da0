"""MCP tools for looking up stops and routes."""

from bus_planner.app import mcp
from bus_planner.matching.models import (
    RouteSearchResponse,
    StopResolutionResponse,
    StopSuggestionResponse,
)
from bus_planner.matching.route_matcher import search_routes as _search_routes
from bus_planner.matching.stop_matcher import resolve_stop_query
from bus_planner.matching.stop_matcher import suggest_stops as _suggest_stops
from bus_planner.models.responses import RouteListResponse, RouteSummary
from bus_planner.services.network_service import NetworkProvider
from bus_planner.services.trip_planner import popular_routes as _popular_routes


@mcp.tool()
async def resolve_stop(query: str) -> StopResolutionResponse:
    """Resolve a place name to the stops the trip planner would use.

    Exact stop names (case-insensitive) win; otherwise every stop whose name
    contains the query, or is contained in it, is returned.

    Examples:
        resolve_stop("GEC")  # Exact name -> one stop, every route serving it
        resolve_stop("market")  # Partial -> "New Market"

    Args:
        query: Stop name or part of one.

    Returns:
        StopResolutionResponse with matched stops and the routes serving them.
    """
    index = await NetworkProvider.get_instance()
    return resolve_stop_query(index, query)


@mcp.tool()
async def suggest_stops(
    query: str,
    limit: int = 5,
) -> StopSuggestionResponse:
    """Suggest stop names for partial or misspelled input using fuzzy matching.

    Examples:
        suggest_stops("chawkbazr")  # Typo for "Chawkbazar"
        suggest_stops("bahadar")  # -> "Bahaddarhat"

    Args:
        query: Partial or approximate stop name.
        limit: Maximum number of suggestions (default 5, max 20).
    """
    if limit < 1:
        limit = 1
    elif limit > 20:
        limit = 20

    index = await NetworkProvider.get_instance()
    return _suggest_stops(index, query, limit=limit)


@mcp.tool()
async def search_routes(
    query: str,
    limit: int = 5,
    min_score: float = 60.0,
) -> RouteSearchResponse:
    """Search bus routes by number, name, or a stop they serve.

    Resolution strategy (priority order):
    1. Exact route number (e.g., "3", "route 3", "Leguna 2") -> confidence=EXACT
    2. Fuzzy matching on route name, number and stop names -> confidence based on score

    Args:
        query: Route number, route name, or stop name (at least 2 characters
               unless it is a number).
        limit: Maximum number of matches to return (default 5, max 20).
        min_score: Minimum match score 0-100 (default 60).
    """
    if limit < 1:
        limit = 1
    elif limit > 20:
        limit = 20

    if min_score < 0:
        min_score = 0
    elif min_score > 100:
        min_score = 100

    index = await NetworkProvider.get_instance()
    return _search_routes(index, query, limit=limit, min_score=min_score)


@mcp.tool()
async def popular_routes(limit: int = 5) -> RouteListResponse:
    """List the routes covering the most stops.

    Args:
        limit: Maximum number of routes (default 5, max 50).
    """
    if limit < 1:
        limit = 1
    elif limit > 50:
        limit = 50

    index = await NetworkProvider.get_instance()
    routes = [
        RouteSummary(
            route_id=route.id,
            route_number=route.number,
            route_name=route.name,
            description=route.description,
            stop_count=len(route.stops),
            first_stop=route.stops[0].name,
            last_stop=route.stops[-1].name,
        )
        for route in _popular_routes(index, limit)
    ]
    return RouteListResponse(routes=routes, count=len(routes))
