from enum import Enum

from pydantic import BaseModel, Field

from bus_planner.models.network import RouteId, StopId


class MatchConfidence(str, Enum):
    """Confidence level for a match.

    - EXACT: exact match type (stop name, route number)
    - HIGH: score >= 85 (fuzzy matches only)
    - MEDIUM: score >= 70
    - LOW: anything below
    """

    EXACT = "exact"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MatchType(str, Enum):
    """Type of match found."""

    # Exact matches (result in EXACT confidence)
    NAME_EXACT = "name_exact"  # Whole stop name, case-insensitive
    NUMBER_EXACT = "number_exact"  # Route number

    # Other matches
    CONTAINS = "contains"  # Query inside stop name or stop name inside query
    FUZZY_NAME = "fuzzy_name"  # Fuzzy name match


def confidence_from_score(score: float, match_type: MatchType) -> MatchConfidence:
    """Determine confidence level from score and match type."""
    if match_type in (MatchType.NAME_EXACT, MatchType.NUMBER_EXACT):
        return MatchConfidence.EXACT

    if score >= 85:
        return MatchConfidence.HIGH
    if score >= 70:
        return MatchConfidence.MEDIUM
    return MatchConfidence.LOW


class StopMatch(BaseModel):
    """A resolved stop and the routes it was matched on."""

    stop_id: StopId
    stop_name: str
    route_ids: list[RouteId] = Field(description="Routes serving this stop that matched")
    match_type: MatchType


class StopResolutionResponse(BaseModel):
    """Response from resolve_stop tool."""

    query: str = Field(description="Original query string")
    matches: list[StopMatch] = Field(description="Matched stops, in network order")
    resolved: bool = Field(description="True if at least one stop matched")


class StopSuggestion(BaseModel):
    stop_name: str
    score: float = Field(description="Match score (0-100)")
    confidence: MatchConfidence


class StopSuggestionResponse(BaseModel):
    """Response from suggest_stops tool."""

    query: str
    suggestions: list[StopSuggestion] = Field(description="Stop names, ordered by score")


class RouteMatch(BaseModel):
    """A matched route with confidence information."""

    route_id: RouteId
    route_number: str
    route_name: str
    score: float = Field(description="Match score (0-100)")
    confidence: MatchConfidence
    match_type: MatchType


class RouteSearchResponse(BaseModel):
    """Response from search_routes tool."""

    query: str
    matches: list[RouteMatch] = Field(description="Matched routes, ordered by score")
    best_match: RouteMatch | None = None
