from rapidfuzz import fuzz

from bus_planner.matching.models import (
    MatchType,
    RouteMatch,
    RouteSearchResponse,
    confidence_from_score,
)
from bus_planner.matching.normalizers import (
    canonical_route_number,
    extract_route_number,
    fuzzy_text,
    get_meaningful_tokens,
)
from bus_planner.models.network import Route
from bus_planner.services.network_index import NetworkIndex

# Weights for the three searchable route fields
NAME_WEIGHT = 0.3
NUMBER_WEIGHT = 0.2
STOPS_WEIGHT = 0.2

# Queries shorter than this return nothing
MIN_QUERY_LENGTH = 2


def _route_to_match(route: Route, score: float, match_type: MatchType) -> RouteMatch:
    return RouteMatch(
        route_id=route.id,
        route_number=route.number,
        route_name=route.name,
        score=round(score, 1),
        confidence=confidence_from_score(score, match_type),
        match_type=match_type,
    )


def _score_route(query_normalized: str, query_tokens: set[str], route: Route) -> float:
    """Weighted fuzzy score over route name, number and stop names (0-100)."""
    name_score = fuzz.token_set_ratio(query_normalized, fuzzy_text(route.name))
    number_score = fuzz.ratio(query_normalized, fuzzy_text(route.number))

    stop_score = 0.0
    for stop in route.stops:
        stop_normalized = fuzzy_text(stop.name)
        score = fuzz.token_set_ratio(query_normalized, stop_normalized)
        # Whole-token hits on a stop name count fully
        if query_tokens and query_tokens <= get_meaningful_tokens(stop.name):
            score = 100.0
        stop_score = max(stop_score, score)

    # Best single field dominates, weights only break near-ties between fields
    weighted = (
        name_score * NAME_WEIGHT + number_score * NUMBER_WEIGHT + stop_score * STOPS_WEIGHT
    ) / (NAME_WEIGHT + NUMBER_WEIGHT + STOPS_WEIGHT)
    return max(name_score, stop_score, weighted)


def search_routes(
    index: NetworkIndex,
    query: str,
    limit: int = 5,
    min_score: float = 60.0,
) -> RouteSearchResponse:
    """Search routes by number, name, or a stop they serve.

    Resolution strategy (priority order):
    1. Exact route number ("3", "route 3", "leguna 2") -> score=100, confidence=EXACT
    2. Fuzzy match over route name, number and stop names -> score from rapidfuzz

    Args:
        index: Network to search
        query: Search query
        limit: Maximum number of results to return
        min_score: Minimum score threshold (0-100)
    """
    query = query.strip()
    if len(query) < MIN_QUERY_LENGTH and not query.isdigit():
        return RouteSearchResponse(query=query, matches=[], best_match=None)

    matches: list[RouteMatch] = []
    matched_ids: set = set()

    # 1. Exact route number match
    route_number = extract_route_number(query)
    if route_number:
        for route in index.routes:
            if canonical_route_number(route.number) == route_number:
                matches.append(_route_to_match(route, 100.0, MatchType.NUMBER_EXACT))
                matched_ids.add(route.id)

    # 2. Fuzzy match on name, number and stops
    query_normalized = fuzzy_text(query)
    query_tokens = get_meaningful_tokens(query)
    fuzzy_matches: list[RouteMatch] = []
    for route in index.routes:
        if route.id in matched_ids:
            continue
        score = _score_route(query_normalized, query_tokens, route)
        if score >= min_score:
            fuzzy_matches.append(_route_to_match(route, score, MatchType.FUZZY_NAME))

    fuzzy_matches.sort(key=lambda m: -m.score)
    matches = (matches + fuzzy_matches)[:limit]

    return RouteSearchResponse(
        query=query,
        matches=matches,
        best_match=matches[0] if matches else None,
    )
