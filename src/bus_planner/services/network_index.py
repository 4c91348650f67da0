"""Precomputed lookup structures over a route dataset."""

import heapq
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from bus_planner.matching.normalizers import normalize_text
from bus_planner.models.network import Route, RouteId, Stop, StopId
from bus_planner.services.itinerary import HOP_TIME_MINUTES, TRANSFER_PENALTY_MINUTES

logger = logging.getLogger(__name__)

# Heuristic for stops served by a common route
SHARED_ROUTE_HEURISTIC = 0.5

# Heuristic weights for stops with no common route
ROUTE_MEMBERSHIP_WEIGHT = 1.5
DISCONNECTED_MIN_TRANSFERS = 3


@dataclass(frozen=True)
class Neighbor:
    """One hop out of a stop along a route, in either direction."""

    stop_id: StopId
    route_id: RouteId
    weight: int


class NetworkIndex:
    """Read-only indices built once per dataset and shared across queries.

    Holds stop/route membership, the stop-name index, the stop adjacency list,
    the route-transfer graph and the stop-pair heuristic table used by informed
    search. Nothing here is mutated after construction.

    Usage:
        index = build_network(routes)
        index.routes_for_stop(stop_id)
        index.shortest_route_path(route_a, route_b)
    """

    def __init__(self, routes: Iterable[Route]) -> None:
        """Build all indices. Use build_network() instead."""
        self.routes: tuple[Route, ...] = tuple(routes)
        self.routes_by_id: dict[RouteId, Route] = {}
        self.stops_by_id: dict[StopId, Stop] = {}  # first occurrence wins for the display name

        self.stop_routes: dict[StopId, tuple[RouteId, ...]] = {}  # dataset order
        self.route_stops: dict[RouteId, frozenset[StopId]] = {}
        self.name_index: dict[str, list[StopId]] = {}  # lowercase name -> stop ids

        self.adjacency: dict[StopId, list[Neighbor]] = {}
        self.route_graph: dict[RouteId, dict[RouteId, int]] = {}
        self.heuristics: dict[StopId, dict[StopId, float]] = {}

        self._route_distances: dict[RouteId, dict[RouteId, int]] = {}
        self._route_previous: dict[RouteId, dict[RouteId, RouteId]] = {}

        self._index_membership()
        self._build_adjacency()
        self._build_route_graph()
        self._precompute_route_paths()
        self._precompute_heuristics()

        logger.info(
            f"NetworkIndex built: {len(self.routes)} routes, {len(self.stops_by_id)} stops, "
            f"{sum(len(n) for n in self.route_graph.values()) // 2} route transfers"
        )

    def _index_membership(self) -> None:
        stop_routes: dict[StopId, list[RouteId]] = {}

        for route in self.routes:
            self.routes_by_id[route.id] = route
            self.route_stops[route.id] = frozenset(route.stop_ids)

            for stop in route.stops:
                self.stops_by_id.setdefault(stop.id, stop)

                members = stop_routes.setdefault(stop.id, [])
                if route.id not in members:
                    members.append(route.id)

                ids = self.name_index.setdefault(normalize_text(stop.name), [])
                if stop.id not in ids:
                    ids.append(stop.id)

        self.stop_routes = {stop_id: tuple(ids) for stop_id, ids in stop_routes.items()}

    def _build_adjacency(self) -> None:
        # Single hops are allowed both ways along every route
        for route in self.routes:
            for a, b in zip(route.stops, route.stops[1:]):
                self.adjacency.setdefault(a.id, []).append(
                    Neighbor(stop_id=b.id, route_id=route.id, weight=HOP_TIME_MINUTES)
                )
                self.adjacency.setdefault(b.id, []).append(
                    Neighbor(stop_id=a.id, route_id=route.id, weight=HOP_TIME_MINUTES)
                )

    def _build_route_graph(self) -> None:
        for route in self.routes:
            self.route_graph[route.id] = {}

        # Every pair of routes meeting at a stop is one transfer apart
        for route_ids in self.stop_routes.values():
            for i, a in enumerate(route_ids):
                for b in route_ids[i + 1 :]:
                    self.route_graph[a].setdefault(b, TRANSFER_PENALTY_MINUTES)
                    self.route_graph[b].setdefault(a, TRANSFER_PENALTY_MINUTES)

    def _precompute_route_paths(self) -> None:
        for route_id in self.route_graph:
            distances, previous = self._dijkstra(route_id)
            self._route_distances[route_id] = distances
            self._route_previous[route_id] = previous

    def _dijkstra(self, source: RouteId) -> tuple[dict[RouteId, int], dict[RouteId, RouteId]]:
        """Single-source shortest paths over the route-transfer graph."""
        distances: dict[RouteId, int] = {source: 0}
        previous: dict[RouteId, RouteId] = {}
        visited: set[RouteId] = set()
        counter = 0
        heap: list[tuple[int, int, RouteId]] = [(0, counter, source)]

        while heap:
            dist, _, current = heapq.heappop(heap)
            if current in visited:
                continue
            visited.add(current)

            for neighbor, weight in self.route_graph[current].items():
                alt = dist + weight
                if neighbor not in distances or alt < distances[neighbor]:
                    distances[neighbor] = alt
                    previous[neighbor] = current
                    counter += 1
                    heapq.heappush(heap, (alt, counter, neighbor))

        return distances, previous

    def _precompute_heuristics(self) -> None:
        stop_ids = list(self.stop_routes)
        for a in stop_ids:
            row: dict[StopId, float] = {}
            for b in stop_ids:
                if a != b:
                    row[b] = self._estimate(a, b)
            self.heuristics[a] = row

    def _estimate(self, a: StopId, b: StopId) -> float:
        """Rough cost-to-go between two stops. Not a lower bound."""
        if self.shares_route(a, b):
            return SHARED_ROUTE_HEURISTIC

        base = min(len(self.stop_routes[a]), len(self.stop_routes[b])) * ROUTE_MEMBERSHIP_WEIGHT
        return base + self.min_transfers(a, b) * TRANSFER_PENALTY_MINUTES

    # Lookups

    def stop(self, stop_id: StopId) -> Stop | None:
        return self.stops_by_id.get(stop_id)

    def route(self, route_id: RouteId) -> Route | None:
        return self.routes_by_id.get(route_id)

    def routes_for_stop(self, stop_id: StopId) -> list[Route]:
        """Routes serving a stop, in dataset order."""
        return [self.routes_by_id[r] for r in self.stop_routes.get(stop_id, ())]

    def shares_route(self, a: StopId, b: StopId) -> bool:
        routes_b = self.stop_routes.get(b, ())
        return any(r in routes_b for r in self.stop_routes.get(a, ()))

    def common_routes(self, a: StopId, b: StopId) -> list[Route]:
        """Routes serving both stops, in dataset order."""
        routes_b = set(self.stop_routes.get(b, ()))
        return [self.routes_by_id[r] for r in self.stop_routes.get(a, ()) if r in routes_b]

    def shared_stops(self, route_a: RouteId, route_b: RouteId) -> list[Stop]:
        """Intersection points of two routes, in route A's order, each id once."""
        other = self.route_stops.get(route_b, frozenset())
        seen: set[StopId] = set()
        shared: list[Stop] = []
        for stop in self.routes_by_id[route_a].stops:
            if stop.id in other and stop.id not in seen:
                seen.add(stop.id)
                shared.append(stop)
        return shared

    def are_transfer_connected(self, route_a: RouteId, route_b: RouteId) -> bool:
        return route_b in self.route_graph.get(route_a, {})

    def heuristic(self, a: StopId, b: StopId) -> float:
        return self.heuristics.get(a, {}).get(b, 0.0)

    def shortest_route_path(self, route_a: RouteId, route_b: RouteId) -> list[RouteId] | None:
        """Route sequence with the fewest transfers from route A to route B.

        Returns [route_a] for the same route and None when unreachable.
        """
        if route_a == route_b:
            return [route_a]

        distances = self._route_distances.get(route_a, {})
        if route_b not in distances:
            return None

        previous = self._route_previous[route_a]
        path = [route_b]
        while path[-1] != route_a:
            path.append(previous[path[-1]])
        path.reverse()
        return path

    def route_hops(self, route_a: RouteId, route_b: RouteId) -> int | None:
        """Transfers needed to get from route A to route B, None if unreachable."""
        distance = self._route_distances.get(route_a, {}).get(route_b)
        if distance is None:
            return None
        return distance // TRANSFER_PENALTY_MINUTES

    def min_transfers(self, a: StopId, b: StopId) -> int:
        """Fewest transfers between any route of stop A and any route of stop B."""
        best: int | None = None
        for route_a in self.stop_routes.get(a, ()):
            for route_b in self.stop_routes.get(b, ()):
                hops = self.route_hops(route_a, route_b)
                if hops is not None and (best is None or hops < best):
                    best = hops
        return DISCONNECTED_MIN_TRANSFERS if best is None else best


def build_network(routes: Iterable[Route] | None) -> NetworkIndex:
    """Build the network index for a dataset.

    Args:
        routes: The dataset's routes. An empty dataset gives empty indices.

    Raises:
        ValueError: If no dataset is given.
    """
    if routes is None:
        raise ValueError("A route dataset is required to build the network index")
    return NetworkIndex(routes)
