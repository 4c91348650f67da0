"""Itineraries with two or more transfers.

Two strategies are merged:
- a bounded breadth-first search over the stop adjacency list, and
- enumeration of up to three intermediate routes bridging an origin route and
  a destination route that do not meet directly.
"""

import logging
from collections import deque
from dataclasses import dataclass

from bus_planner.models.network import Route, RouteId, Stop, StopId
from bus_planner.models.responses import RouteLeg, RouteOption
from bus_planner.services.itinerary import (
    TRANSFER_PENALTY_MINUTES,
    has_distinct_routes,
    leg_between,
    legs_from_hops,
    make_option,
    option_key,
)
from bus_planner.services.network_index import NetworkIndex
from bus_planner.services.search_budget import SearchBudget

logger = logging.getLogger(__name__)

MAX_INTERMEDIATE_ROUTES = 3
MAX_MULTI_TRANSFER_OPTIONS = 5
MIN_TRANSFERS = 2


@dataclass
class _SearchState:
    stop_id: StopId
    route_id: RouteId | None
    transfers: int
    hops: tuple[tuple[StopId, RouteId], ...]
    visited: frozenset[StopId]
    used_routes: frozenset[RouteId]


def _bfs_itineraries(
    index: NetworkIndex,
    from_stop: Stop,
    to_stop: Stop,
    max_transfers: int,
    budget: SearchBudget,
) -> list[RouteOption]:
    options: list[RouteOption] = []
    seen: set[tuple] = set()
    queue: deque[_SearchState] = deque([
        _SearchState(
            stop_id=from_stop.id,
            route_id=None,
            transfers=0,
            hops=(),
            visited=frozenset({from_stop.id}),
            used_routes=frozenset(),
        )
    ])

    while queue:
        if budget.expired() or len(queue) > budget.max_queue_size:
            budget.truncated = True
            logger.warning(
                f"Transfer search {from_stop.id}->{to_stop.id} stopped early "
                f"(queue={len(queue)}, found={len(options)})"
            )
            break

        state = queue.popleft()
        key = (state.stop_id, state.transfers, state.route_id)
        if key in seen:
            continue
        seen.add(key)

        if state.stop_id == to_stop.id:
            if state.transfers >= MIN_TRANSFERS:
                legs = legs_from_hops(index.routes_by_id, from_stop.id, state.hops)
                if legs is not None and has_distinct_routes(legs):
                    options.append(make_option(legs, "multi"))
            continue

        for neighbor in index.adjacency.get(state.stop_id, ()):
            if neighbor.stop_id in state.visited:
                continue

            changes_route = state.route_id is not None and neighbor.route_id != state.route_id
            if changes_route and neighbor.route_id in state.used_routes:
                continue
            transfers = state.transfers + (1 if changes_route else 0)
            if transfers > max_transfers:
                continue

            queue.append(
                _SearchState(
                    stop_id=neighbor.stop_id,
                    route_id=neighbor.route_id,
                    transfers=transfers,
                    hops=state.hops + ((neighbor.stop_id, neighbor.route_id),),
                    visited=state.visited | {neighbor.stop_id},
                    used_routes=state.used_routes | {neighbor.route_id},
                )
            )

    return options


def _intermediate_routes(index: NetworkIndex, first: Route, last: Route) -> list[Route]:
    """Routes meeting both `first` and `last`, in dataset order, at most three."""
    found: list[Route] = []
    for route in index.routes:
        if route.id in (first.id, last.id):
            continue
        if index.are_transfer_connected(first.id, route.id) and index.are_transfer_connected(
            route.id, last.id
        ):
            found.append(route)
            if len(found) == MAX_INTERMEDIATE_ROUTES:
                break
    return found


def _bridge_legs(
    index: NetworkIndex,
    from_stop: Stop,
    to_stop: Stop,
    first: Route,
    middle: Route,
    last: Route,
) -> list[RouteLeg] | None:
    best: list[RouteLeg] | None = None
    best_time = 0

    for first_transfer in index.shared_stops(first.id, middle.id):
        leg1 = leg_between(first, from_stop.id, first_transfer.id)
        if leg1 is None:
            continue
        for second_transfer in index.shared_stops(middle.id, last.id):
            if second_transfer.id == first_transfer.id:
                continue
            leg2 = leg_between(middle, first_transfer.id, second_transfer.id)
            leg3 = leg_between(last, second_transfer.id, to_stop.id)
            if leg2 is None or leg3 is None:
                continue

            total = (
                leg1.estimated_time
                + leg2.estimated_time
                + leg3.estimated_time
                + 2 * TRANSFER_PENALTY_MINUTES
            )
            if best is None or total < best_time:
                best = [leg1, leg2, leg3]
                best_time = total

    return best


def _bridged_itineraries(
    index: NetworkIndex, from_stop: Stop, to_stop: Stop, budget: SearchBudget
) -> list[RouteOption]:
    options: list[RouteOption] = []
    for first in index.routes_for_stop(from_stop.id):
        for last in index.routes_for_stop(to_stop.id):
            if first.id == last.id or index.are_transfer_connected(first.id, last.id):
                continue
            if budget.expired():
                budget.truncated = True
                return options

            for middle in _intermediate_routes(index, first, last):
                legs = _bridge_legs(index, from_stop, to_stop, first, middle, last)
                if legs is not None:
                    options.append(make_option(legs, "bridge"))
    return options


def find_multi_transfer_routes(
    index: NetworkIndex,
    from_stop: Stop,
    to_stop: Stop,
    budget: SearchBudget,
    max_transfers: int = 3,
) -> list[RouteOption]:
    """Itineraries with 2 to `max_transfers` transfers, fewest transfers first.

    Args:
        index: Network to search
        from_stop: Boarding stop
        to_stop: Alighting stop
        budget: Bounds for this search; `truncated` is set if one is hit
        max_transfers: Upper bound on transfers for the breadth-first search

    Returns:
        At most five options sorted by (transfers, total_time).
    """
    if from_stop.id == to_stop.id:
        return []

    candidates = _bfs_itineraries(index, from_stop, to_stop, max_transfers, budget)
    candidates.extend(_bridged_itineraries(index, from_stop, to_stop, budget))

    unique: dict[tuple, RouteOption] = {}
    for option in candidates:
        unique.setdefault(option_key(option), option)

    options = sorted(unique.values(), key=lambda o: (o.transfers, o.total_time))
    logger.debug(
        f"Multi-transfer {from_stop.id}->{to_stop.id}: "
        f"{len(candidates)} candidates, {len(options)} unique"
    )
    return options[:MAX_MULTI_TRANSFER_OPTIONS]
