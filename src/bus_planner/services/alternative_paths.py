"""Informed single-pair search and k-alternative paths.

A* runs over the stop adjacency list, charging the hop weight plus a transfer
penalty whenever the route changes. Alternatives follow Yen's algorithm: each
stop of the last accepted path is tried as a spur, with the edges used by
accepted paths sharing the same root excluded and the root's stops blocked.
Exclusions are passed to the search; the index itself is never modified.
"""

import heapq
import logging
from collections.abc import Collection, Sequence
from dataclasses import dataclass

from bus_planner.models.network import RouteId, Stop, StopId
from bus_planner.models.responses import RouteOption
from bus_planner.services.itinerary import (
    HOP_TIME_MINUTES,
    TRANSFER_PENALTY_MINUTES,
    has_distinct_routes,
    legs_from_hops,
    make_option,
    option_key,
)
from bus_planner.services.network_index import NetworkIndex
from bus_planner.services.search_budget import SearchBudget

logger = logging.getLogger(__name__)

MAX_ASTAR_TRANSFERS = 5

Hop = tuple[StopId, RouteId]
Edge = tuple[StopId, StopId, RouteId]


@dataclass(frozen=True)
class GraphPath:
    """A hop-by-hop path from `origin`; each hop is (stop reached, route ridden)."""

    origin: StopId
    hops: tuple[Hop, ...]
    cost: float

    @property
    def stop_ids(self) -> list[StopId]:
        return [self.origin] + [stop_id for stop_id, _ in self.hops]


def path_cost(hops: Sequence[Hop], initial_route: RouteId | None = None) -> float:
    """Hop weights plus a transfer penalty for each change of route."""
    cost = 0
    route = initial_route
    for _, route_id in hops:
        cost += HOP_TIME_MINUTES
        if route is not None and route_id != route:
            cost += TRANSFER_PENALTY_MINUTES
        route = route_id
    return cost


def astar_path(
    index: NetworkIndex,
    start: StopId,
    goal: StopId,
    *,
    initial_route: RouteId | None = None,
    excluded_edges: Collection[Edge] = (),
    blocked_stops: Collection[StopId] = (),
    max_transfers: int = MAX_ASTAR_TRANSFERS,
) -> GraphPath | None:
    """Cheapest path from `start` to `goal` found by A*.

    The heuristic is not admissible, so the result is good rather than
    guaranteed optimal.

    Args:
        index: Network to search
        start: Start stop id
        goal: Goal stop id
        initial_route: Route already being ridden at `start` (for spur searches)
        excluded_edges: (from_stop, to_stop, route) hops that may not be used
        blocked_stops: Stops that may not be entered
        max_transfers: Paths needing more route changes are not expanded

    Returns:
        The path, or None if the goal is unreachable.
    """
    if start == goal:
        return None

    counter = 0
    open_heap: list[tuple[float, int, StopId]] = [(index.heuristic(start, goal), counter, start)]
    g_score: dict[StopId, float] = {start: 0}
    came_from: dict[StopId, Hop | None] = {start: None}
    parent: dict[StopId, StopId] = {}
    route_at: dict[StopId, RouteId | None] = {start: initial_route}
    transfers_at: dict[StopId, int] = {start: 0}
    closed: set[StopId] = set()

    while open_heap:
        _, _, current = heapq.heappop(open_heap)
        if current in closed:
            continue
        if current == goal:
            break
        closed.add(current)

        current_route = route_at[current]
        for neighbor in index.adjacency.get(current, ()):
            if neighbor.stop_id in closed or neighbor.stop_id in blocked_stops:
                continue
            if (current, neighbor.stop_id, neighbor.route_id) in excluded_edges:
                continue

            changes_route = current_route is not None and neighbor.route_id != current_route
            transfers = transfers_at[current] + (1 if changes_route else 0)
            if transfers > max_transfers:
                continue

            tentative = g_score[current] + neighbor.weight
            if changes_route:
                tentative += TRANSFER_PENALTY_MINUTES

            if neighbor.stop_id not in g_score or tentative < g_score[neighbor.stop_id]:
                g_score[neighbor.stop_id] = tentative
                came_from[neighbor.stop_id] = (neighbor.stop_id, neighbor.route_id)
                parent[neighbor.stop_id] = current
                route_at[neighbor.stop_id] = neighbor.route_id
                transfers_at[neighbor.stop_id] = transfers
                counter += 1
                f_score = tentative + index.heuristic(neighbor.stop_id, goal)
                heapq.heappush(open_heap, (f_score, counter, neighbor.stop_id))

    if goal not in g_score:
        return None

    hops: list[Hop] = []
    node = goal
    while node != start:
        hops.append(came_from[node])
        node = parent[node]
    hops.reverse()
    return GraphPath(origin=start, hops=tuple(hops), cost=g_score[goal])


def _to_option(index: NetworkIndex, path: GraphPath) -> RouteOption | None:
    legs = legs_from_hops(index.routes_by_id, path.origin, path.hops)
    if legs is None or not has_distinct_routes(legs):
        return None
    return make_option(legs, "astar")


def _spur_candidates(
    index: NetworkIndex,
    last: GraphPath,
    accepted: list[GraphPath],
    goal: StopId,
    budget: SearchBudget,
) -> list[GraphPath]:
    candidates: list[GraphPath] = []
    stops = last.stop_ids

    for i in range(len(last.hops)):
        if budget.expired():
            budget.truncated = True
            break

        spur = stops[i]
        root = last.hops[:i]

        excluded: set[Edge] = set()
        for path in accepted:
            if path.hops[:i] == root and len(path.hops) > i:
                next_stop, route_id = path.hops[i]
                excluded.add((spur, next_stop, route_id))

        spur_path = astar_path(
            index,
            spur,
            goal,
            initial_route=root[-1][1] if root else None,
            excluded_edges=excluded,
            blocked_stops=set(stops[:i]),
        )
        if spur_path is None:
            continue

        hops = root + spur_path.hops
        candidates.append(GraphPath(origin=last.origin, hops=hops, cost=path_cost(hops)))

    return candidates


def find_alternative_paths(
    index: NetworkIndex,
    from_stop: Stop,
    to_stop: Stop,
    k: int,
    budget: SearchBudget,
) -> list[RouteOption]:
    """Up to `k` itineraries: the A* path followed by Yen-style alternatives.

    Graph paths whose legs break the slicing rules or reuse a route are
    skipped; they still seed further alternatives.
    """
    if from_stop.id == to_stop.id or k <= 0:
        return []

    first = astar_path(index, from_stop.id, to_stop.id)
    if first is None:
        logger.debug(f"A* {from_stop.id}->{to_stop.id}: no path")
        return []

    accepted: list[GraphPath] = [first]
    pool: list[GraphPath] = []
    options: list[RouteOption] = []
    seen_keys: set[tuple] = set()

    def emit(path: GraphPath) -> None:
        option = _to_option(index, path)
        if option is not None and option_key(option) not in seen_keys:
            seen_keys.add(option_key(option))
            options.append(option)

    emit(first)

    # Invalid paths do not count towards k, so allow a few extra rounds
    for _ in range(2 * k):
        if len(options) >= k:
            break

        known = {path.hops for path in accepted} | {path.hops for path in pool}
        for candidate in _spur_candidates(index, accepted[-1], accepted, to_stop.id, budget):
            if candidate.hops not in known:
                known.add(candidate.hops)
                pool.append(candidate)

        if not pool:
            break

        best = min(range(len(pool)), key=lambda i: pool[i].cost)
        accepted.append(pool.pop(best))
        emit(accepted[-1])

    logger.debug(
        f"Alternatives {from_stop.id}->{to_stop.id}: {len(accepted)} paths, {len(options)} valid"
    )
    return options[:k]
