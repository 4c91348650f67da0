from dataclasses import dataclass

from rapidfuzz import fuzz

from bus_planner.matching.models import (
    MatchType,
    StopMatch,
    StopResolutionResponse,
    StopSuggestion,
    StopSuggestionResponse,
    confidence_from_score,
)
from bus_planner.matching.normalizers import fuzzy_text, normalize_text
from bus_planner.models.network import Route, Stop
from bus_planner.services.network_index import NetworkIndex


@dataclass(frozen=True)
class StopCandidate:
    """A stop a location string may refer to, paired with one route serving it."""

    stop: Stop
    route: Route
    match_type: MatchType


def resolve_stops(index: NetworkIndex, text: str) -> list[StopCandidate]:
    """Map a free-text location to candidate (stop, route) pairs.

    Resolution strategy:
    1. Exact (case-insensitive) stop name via the name index -> every route
       serving each matching stop id
    2. Otherwise containment in either direction over every route's stops,
       so partial ("market") and over-specified ("new market area") input both hit

    Results follow network order. Returns [] when nothing matches.
    """
    search = normalize_text(text)
    if not search:
        return []

    candidates: list[StopCandidate] = []
    for stop_id in index.name_index.get(search, []):
        stop = index.stops_by_id[stop_id]
        for route in index.routes_for_stop(stop_id):
            candidates.append(
                StopCandidate(stop=stop, route=route, match_type=MatchType.NAME_EXACT)
            )

    if candidates:
        return candidates

    for route in index.routes:
        for stop in route.stops:
            name = normalize_text(stop.name)
            if search in name or name in search:
                candidates.append(
                    StopCandidate(stop=stop, route=route, match_type=MatchType.CONTAINS)
                )

    return candidates


def unique_stops(candidates: list[StopCandidate]) -> list[Stop]:
    """Distinct stops (by id) from a candidate list, first occurrence order."""
    seen = set()
    stops: list[Stop] = []
    for candidate in candidates:
        if candidate.stop.id not in seen:
            seen.add(candidate.stop.id)
            stops.append(candidate.stop)
    return stops


def resolve_stop_query(index: NetworkIndex, query: str) -> StopResolutionResponse:
    """Resolve a query and group the candidates by stop id."""
    query = query.strip()
    grouped: dict = {}
    for candidate in resolve_stops(index, query):
        match = grouped.get(candidate.stop.id)
        if match is None:
            grouped[candidate.stop.id] = StopMatch(
                stop_id=candidate.stop.id,
                stop_name=candidate.stop.name,
                route_ids=[candidate.route.id],
                match_type=candidate.match_type,
            )
        elif candidate.route.id not in match.route_ids:
            match.route_ids.append(candidate.route.id)

    matches = list(grouped.values())
    return StopResolutionResponse(query=query, matches=matches, resolved=bool(matches))


def _compute_fuzzy_score(query_normalized: str, target_normalized: str) -> float:
    """Blend of token_set_ratio (word order) and partial_ratio (substrings)."""
    token_score = fuzz.token_set_ratio(query_normalized, target_normalized)
    partial_score = fuzz.partial_ratio(query_normalized, target_normalized)
    return token_score * 0.7 + partial_score * 0.3


def suggest_stops(
    index: NetworkIndex,
    query: str,
    limit: int = 5,
    min_score: float = 60.0,
) -> StopSuggestionResponse:
    """Suggest stop names for partial or misspelled input.

    Scores every distinct stop name with rapidfuzz and returns the best
    `limit` names at or above `min_score`, ties broken alphabetically.
    """
    query = query.strip()
    if not query:
        return StopSuggestionResponse(query=query, suggestions=[])

    query_normalized = fuzzy_text(query)
    names = sorted({stop.name for route in index.routes for stop in route.stops})

    scored: list[tuple[str, float]] = []
    for name in names:
        score = _compute_fuzzy_score(query_normalized, fuzzy_text(name))
        if normalize_text(name) == normalize_text(query):
            score = 100.0
        if score >= min_score:
            scored.append((name, score))

    scored.sort(key=lambda item: (-item[1], item[0]))
    suggestions = [
        StopSuggestion(
            stop_name=name,
            score=round(score, 1),
            confidence=confidence_from_score(score, MatchType.FUZZY_NAME),
        )
        for name, score in scored[:limit]
    ]
    return StopSuggestionResponse(query=query, suggestions=suggestions)
