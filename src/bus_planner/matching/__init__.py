"""Text matching for stops and routes.

The matchers themselves (stop_matcher, route_matcher) depend on the network
index and are imported from their modules directly.
"""

from bus_planner.matching.models import (
    MatchConfidence,
    MatchType,
    RouteMatch,
    RouteSearchResponse,
    StopMatch,
    StopResolutionResponse,
    StopSuggestion,
    StopSuggestionResponse,
)
from bus_planner.matching.normalizers import (
    canonical_route_number,
    extract_route_number,
    fuzzy_text,
    normalize_text,
    remove_accents,
)

__all__ = [
    # Models
    "MatchConfidence",
    "MatchType",
    "StopMatch",
    "StopResolutionResponse",
    "StopSuggestion",
    "StopSuggestionResponse",
    "RouteMatch",
    "RouteSearchResponse",
    # Normalizers
    "normalize_text",
    "fuzzy_text",
    "remove_accents",
    "extract_route_number",
    "canonical_route_number",
]
