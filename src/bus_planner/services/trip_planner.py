import logging

from bus_planner.data.config import PlannerConfig, get_planner_config
from bus_planner.matching.stop_matcher import resolve_stops, unique_stops
from bus_planner.models.network import Route, Stop
from bus_planner.models.responses import (
    RouteAnalysis,
    RouteOption,
    RoutePlan,
    RoutePriority,
)
from bus_planner.services.alternative_paths import find_alternative_paths
from bus_planner.services.deduplicator import deduplicate_options
from bus_planner.services.direct_routes import find_direct_routes
from bus_planner.services.multi_transfer_routes import find_multi_transfer_routes
from bus_planner.services.network_index import NetworkIndex
from bus_planner.services.route_scorer import (
    rank_by_priority,
    rank_options,
    score_route,
    with_score,
)
from bus_planner.services.search_budget import SearchBudget
from bus_planner.services.transfer_routes import find_transfer_routes

logger = logging.getLogger(__name__)

# Per-pair thresholds below which the more expensive searches run
MULTI_TRANSFER_THRESHOLD = 5
ALTERNATIVES_THRESHOLD = 3


def _stop_pairs(origins: list[Stop], destinations: list[Stop]) -> list[tuple[Stop, Stop]]:
    return [
        (origin, destination)
        for origin in origins
        for destination in destinations
        if origin.id != destination.id
    ]


def _search_pair(
    index: NetworkIndex,
    origin: Stop,
    destination: Stop,
    config: PlannerConfig,
    budget: SearchBudget,
) -> list[RouteOption]:
    """Run the finders for one (origin, destination) stop pair."""
    options = find_direct_routes(index, origin, destination)
    options += find_transfer_routes(index, origin, destination)

    if len(options) < MULTI_TRANSFER_THRESHOLD:
        bfs_budget = budget.child(config.transfer_search_seconds)
        options += find_multi_transfer_routes(
            index, origin, destination, bfs_budget, max_transfers=config.max_transfers
        )
        budget.absorb(bfs_budget)

    if len(options) < ALTERNATIVES_THRESHOLD:
        options += find_alternative_paths(
            index, origin, destination, config.alternative_paths, budget
        )

    return options


def find_routes(
    index: NetworkIndex,
    origin: str,
    destination: str,
    config: PlannerConfig | None = None,
) -> RoutePlan:
    """Plan journeys between two places given as stop names.

    Both texts are resolved to candidate stops; every (origin, destination)
    stop pair, up to `max_stop_pairs`, is searched for direct, one-transfer,
    multi-transfer and alternative itineraries. The merged options are
    deduplicated, scored and sorted best first.

    Unknown places and unreachable pairs give an empty plan. If a search bound
    is hit the plan holds what was found and `truncated` is set.

    Raises:
        ValueError: If no network index is given.
        TypeError: If origin or destination is not a string.
    """
    if index is None:
        raise ValueError("A network index is required; build one with build_network()")
    if not isinstance(origin, str) or not isinstance(destination, str):
        raise TypeError("origin and destination must be strings")

    config = config or get_planner_config()
    budget = SearchBudget(seconds=config.max_search_seconds, max_queue_size=config.max_queue_size)

    origins = unique_stops(resolve_stops(index, origin))
    destinations = unique_stops(resolve_stops(index, destination))
    pairs = _stop_pairs(origins, destinations)

    if len(pairs) > config.max_stop_pairs:
        logger.warning(
            f"'{origin}' -> '{destination}': {len(pairs)} stop pairs, "
            f"searching the first {config.max_stop_pairs}"
        )
        pairs = pairs[: config.max_stop_pairs]
        budget.truncated = True

    candidates: list[RouteOption] = []
    for from_stop, to_stop in pairs:
        if budget.expired():
            logger.warning(f"'{origin}' -> '{destination}': search time limit reached")
            budget.truncated = True
            break
        found = _search_pair(index, from_stop, to_stop, config, budget)
        logger.debug(f"Pair {from_stop.id}->{to_stop.id}: {len(found)} candidates")
        candidates += found

    options = rank_options([with_score(o) for o in deduplicate_options(index, candidates)])

    plan = RoutePlan(
        from_=origin,
        to=destination,
        options=options,
        best_option=options[0] if options else None,
        total_options=len(options),
        search_time_ms=budget.elapsed_ms(),
        truncated=budget.truncated,
    )
    logger.info(
        f"Planned '{origin}' -> '{destination}': {plan.total_options} options "
        f"from {len(pairs)} stop pairs in {plan.search_time_ms}ms"
        + (" (truncated)" if plan.truncated else "")
    )
    return plan


def recommend_routes(
    index: NetworkIndex,
    origin: str,
    destination: str,
    priority: RoutePriority = RoutePriority.BALANCED,
    config: PlannerConfig | None = None,
) -> RoutePlan:
    """Plan a trip and order the options by the sub-score a priority favours.

    fastest -> time, comfortable -> comfort, reliable -> reliability,
    direct -> accessibility, balanced -> total.
    """
    plan = find_routes(index, origin, destination, config)
    options = rank_by_priority(plan.options, RoutePriority(priority))
    return plan.model_copy(
        update={"options": options, "best_option": options[0] if options else None}
    )


def analyze_route(option: RouteOption) -> RouteAnalysis:
    """Describe an itinerary's strengths, weaknesses and practical advice."""
    score = option.score or score_route(option)
    strengths: list[str] = []
    weaknesses: list[str] = []
    recommendations: list[str] = []

    if score.time_score >= 20:
        strengths.append("Fast travel time")
    if score.transfer_score >= 20:
        strengths.append("Minimal transfers")
    if score.comfort_score >= 8:
        strengths.append("Comfortable journey")
    if score.reliability_score >= 12:
        strengths.append("High reliability")
    if score.accessibility_score >= 4:
        strengths.append("Easy access")

    if score.time_score < 10:
        weaknesses.append("Long travel time")
    if score.transfer_score < 10:
        weaknesses.append("Multiple transfers required")
    if score.comfort_score < 5:
        weaknesses.append("Significant walking required")
    if score.reliability_score < 8:
        weaknesses.append("Lower reliability")
    if score.accessibility_score < 2:
        weaknesses.append("Complex route")

    if option.transfers > 2:
        recommendations.append("Consider alternative routes with fewer transfers")
    if option.walking_time > 10:
        recommendations.append("Prepare for significant walking between transfers")
    if option.total_time > 60:
        recommendations.append("Allow extra time for this journey")
    if score.total_score < 50:
        recommendations.append("This route may not be optimal, consider alternatives")

    return RouteAnalysis(
        strengths=strengths,
        weaknesses=weaknesses,
        recommendations=recommendations,
        score_breakdown=score,
    )


def popular_routes(index: NetworkIndex, limit: int = 5) -> list[Route]:
    """Routes covering the most stops first; dataset order on ties."""
    return sorted(index.routes, key=lambda r: -len(r.stops))[:limit]
