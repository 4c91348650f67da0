"""Multi-factor itinerary scoring and the ordering built on it."""

import math
from functools import cmp_to_key

from bus_planner.models.responses import (
    RouteOption,
    RoutePriority,
    RouteScore,
    RouteType,
    ScoreFactors,
)

# Sub-score caps
MAX_TIME_SCORE = 25
MAX_TRANSFER_SCORE = 25
MAX_DISTANCE_SCORE = 20
MAX_RELIABILITY_SCORE = 15
MAX_COMFORT_SCORE = 10
MAX_ACCESSIBILITY_SCORE = 5


def round_half_up(value: float) -> int:
    """Round .5 upward (Python's round() rounds half to even)."""
    return math.floor(value + 0.5)


def score_route(option: RouteOption) -> RouteScore:
    """Compute the six sub-scores and their total for an itinerary.

    - time: 25 minus a point per 4 minutes
    - transfers: 25 minus 8 per transfer
    - distance: 20 minus 2 per km
    - reliability: confidence scaled to 15
    - comfort: 10 minus a point per 2 minutes walking
    - accessibility: 5 for direct rides, else 5 minus the transfer count
    """
    time_score = max(0.0, MAX_TIME_SCORE - option.total_time / 4)
    transfer_score = max(0, MAX_TRANSFER_SCORE - option.transfers * 8)
    distance_score = max(0.0, MAX_DISTANCE_SCORE - option.total_distance * 2)
    reliability_score = option.confidence * MAX_RELIABILITY_SCORE
    comfort_score = max(0.0, MAX_COMFORT_SCORE - option.walking_time / 2)
    if option.route_type == RouteType.DIRECT:
        accessibility_score = MAX_ACCESSIBILITY_SCORE
    else:
        accessibility_score = max(0, MAX_ACCESSIBILITY_SCORE - option.transfers)

    total = (
        time_score
        + transfer_score
        + distance_score
        + reliability_score
        + comfort_score
        + accessibility_score
    )

    return RouteScore(
        total_score=round_half_up(total),
        time_score=round_half_up(time_score),
        transfer_score=round_half_up(transfer_score),
        distance_score=round_half_up(distance_score),
        reliability_score=round_half_up(reliability_score),
        comfort_score=round_half_up(comfort_score),
        accessibility_score=round_half_up(accessibility_score),
        factors=ScoreFactors(
            time=option.total_time,
            transfers=option.transfers,
            distance=option.total_distance,
            walking_time=option.walking_time,
            route_count=len(option.legs),
            confidence=option.confidence,
        ),
    )


def with_score(option: RouteOption) -> RouteOption:
    """Copy of an option carrying its score."""
    return option.model_copy(update={"score": score_route(option)})


def _score_of(option: RouteOption) -> RouteScore:
    return option.score if option.score is not None else score_route(option)


def sort_key(option: RouteOption) -> tuple[int, ...]:
    """Ascending sort key putting the best option first."""
    score = _score_of(option)
    return (
        -score.total_score,
        -score.time_score,
        -score.transfer_score,
        -score.reliability_score,
        -score.comfort_score,
        -score.accessibility_score,
    )


def compare_routes(a: RouteOption, b: RouteOption) -> int:
    """Negative if `a` ranks before `b`, positive if after, 0 if tied."""
    key_a, key_b = sort_key(a), sort_key(b)
    return (key_a > key_b) - (key_a < key_b)


def rank_options(options: list[RouteOption]) -> list[RouteOption]:
    """Stable sort, best first; ties keep their discovery order."""
    return sorted(options, key=cmp_to_key(compare_routes))


# Sub-score each recommendation priority sorts by
PRIORITY_SCORES = {
    RoutePriority.FASTEST: "time_score",
    RoutePriority.COMFORTABLE: "comfort_score",
    RoutePriority.RELIABLE: "reliability_score",
    RoutePriority.DIRECT: "accessibility_score",
    RoutePriority.BALANCED: "total_score",
}


def rank_by_priority(options: list[RouteOption], priority: RoutePriority) -> list[RouteOption]:
    """Re-order ranked options by one sub-score, keeping rank order on ties."""
    field = PRIORITY_SCORES[priority]
    return sorted(options, key=lambda o: -getattr(_score_of(o), field))
