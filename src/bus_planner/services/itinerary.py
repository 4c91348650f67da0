"""Legs, itineraries and the fixed travel constants they are built from."""

from collections.abc import Iterator, Mapping, Sequence

from bus_planner.models.network import Route, RouteId, Stop, StopId
from bus_planner.models.responses import RouteLeg, RouteOption, RouteType

# Per-hop constants stand in for real geodata
HOP_DISTANCE_KM = 0.8
HOP_TIME_MINUTES = round(2.5 + HOP_DISTANCE_KM * 1.5)  # 2.5 min per stop + 1.5 min per km

TRANSFER_PENALTY_MINUTES = 5
WALK_MINUTES_PER_TRANSFER = 2

# Max backward span, as a fraction of the route's stop count
DIRECT_BACKWARD_LIMIT = 2 / 3
TRANSFER_BACKWARD_LIMIT = 1 / 2


def ride_time(hops: int) -> int:
    return hops * HOP_TIME_MINUTES


def ride_distance(hops: int) -> float:
    return round(hops * HOP_DISTANCE_KM, 1)


def stop_positions(route: Route, stop_id: StopId) -> list[int]:
    """All indices of a stop id in a route (routes may loop back through a stop)."""
    return [i for i, stop in enumerate(route.stops) if stop.id == stop_id]


def iter_route_slices(
    route: Route, from_id: StopId, to_id: StopId, backward_limit: float
) -> Iterator[list[Stop]]:
    """Yield every permitted stop slice riding `route` from one stop id to another.

    Forward slices are always permitted. Backward slices are permitted only when
    the span is shorter than `backward_limit` times the route length; anything
    longer is an unrealistic ride most of the way round the route.
    """
    if from_id == to_id:
        return
    to_positions = stop_positions(route, to_id)
    for i in stop_positions(route, from_id):
        for j in to_positions:
            if i < j:
                yield list(route.stops[i : j + 1])
            elif i > j and i - j < len(route.stops) * backward_limit:
                yield list(reversed(route.stops[j : i + 1]))


def build_leg(route: Route, stops: Sequence[Stop]) -> RouteLeg:
    hops = len(stops) - 1
    return RouteLeg(
        route_id=route.id,
        route_number=route.number,
        route_name=route.name,
        from_stop=stops[0],
        to_stop=stops[-1],
        stops=list(stops),
        estimated_time=ride_time(hops),
        distance=ride_distance(hops),
    )


def leg_between(
    route: Route,
    from_id: StopId,
    to_id: StopId,
    backward_limit: float = TRANSFER_BACKWARD_LIMIT,
) -> RouteLeg | None:
    """Shortest permitted leg on `route` between two stops, or None."""
    slices = list(iter_route_slices(route, from_id, to_id, backward_limit))
    if not slices:
        return None
    return build_leg(route, min(slices, key=len))


def legs_from_hops(
    routes: Mapping[RouteId, Route],
    origin_id: StopId,
    hops: Sequence[tuple[StopId, RouteId]],
) -> list[RouteLeg] | None:
    """Collapse a hop-by-hop graph path into legs, one per consecutive route run.

    Each run is re-sliced from its route so emitted legs obey the same direction
    rules as legs built by slicing. Returns None if any run is not a permitted slice.
    """
    runs: list[list] = []
    current = origin_id
    for stop_id, route_id in hops:
        if runs and runs[-1][0] == route_id:
            runs[-1][2] = stop_id
        else:
            runs.append([route_id, current, stop_id])
        current = stop_id

    if not runs:
        return None

    backward_limit = DIRECT_BACKWARD_LIMIT if len(runs) == 1 else TRANSFER_BACKWARD_LIMIT
    legs: list[RouteLeg] = []
    for route_id, from_id, to_id in runs:
        leg = leg_between(routes[route_id], from_id, to_id, backward_limit)
        if leg is None:
            return None
        legs.append(leg)
    return legs


def has_distinct_routes(legs: Sequence[RouteLeg]) -> bool:
    """True unless some route is boarded twice in the same itinerary."""
    route_ids = [leg.route_id for leg in legs]
    return len(set(route_ids)) == len(route_ids)


def compute_confidence(first_leg: RouteLeg, transfers: int) -> float:
    """Heuristic reliability estimate in [0.1, 1.0]."""
    confidence = 1.0

    if transfers == 1:
        confidence -= 0.15
    elif transfers == 2:
        confidence -= 0.3
    elif transfers >= 3:
        confidence -= 0.5

    if first_leg.estimated_time > 60:
        confidence -= 0.1

    # Very short first rides before a transfer are likely inefficient
    if transfers > 0 and first_leg.estimated_time < 10:
        confidence -= 0.2

    if transfers > 0 and first_leg.estimated_time > 15:
        confidence += 0.05

    return round(max(0.1, min(1.0, confidence)), 2)


def option_key(option: RouteOption) -> tuple:
    """Identity used for deduplication: route sequence plus endpoints."""
    return (option.route_ids, option.origin.id, option.destination.id)


def make_option(legs: Sequence[RouteLeg], source: str) -> RouteOption:
    """Assemble an itinerary from legs.

    Args:
        legs: One or more legs, in travel order.
        source: Short tag for the strategy that produced it, used in the id.
    """
    transfers = len(legs) - 1
    total_time = sum(leg.estimated_time for leg in legs) + transfers * TRANSFER_PENALTY_MINUTES
    total_distance = round(sum(leg.distance for leg in legs), 1)
    path = "|".join(f"{leg.route_id}:{leg.from_stop.id}>{leg.to_stop.id}" for leg in legs)

    return RouteOption(
        id=f"{source}:{path}",
        legs=list(legs),
        total_time=total_time,
        total_distance=total_distance,
        transfers=transfers,
        walking_time=transfers * WALK_MINUTES_PER_TRANSFER,
        confidence=compute_confidence(legs[0], transfers),
        route_type=RouteType.from_transfers(transfers),
    )
