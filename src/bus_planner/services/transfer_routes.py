import logging

from bus_planner.models.network import Route, Stop
from bus_planner.models.responses import RouteLeg, RouteOption
from bus_planner.services.itinerary import TRANSFER_PENALTY_MINUTES, leg_between, make_option
from bus_planner.services.network_index import NetworkIndex

logger = logging.getLogger(__name__)


def _best_transfer(
    index: NetworkIndex, from_stop: Stop, to_stop: Stop, first: Route, second: Route
) -> list[RouteLeg] | None:
    """Cheapest pair of sub-legs changing from `first` to `second` at a shared stop."""
    best: list[RouteLeg] | None = None
    best_time = 0

    for transfer in index.shared_stops(first.id, second.id):
        leg1 = leg_between(first, from_stop.id, transfer.id)
        if leg1 is None:
            continue
        leg2 = leg_between(second, transfer.id, to_stop.id)
        if leg2 is None:
            continue

        total = leg1.estimated_time + leg2.estimated_time + TRANSFER_PENALTY_MINUTES
        if best is None or total < best_time:
            best = [leg1, leg2]
            best_time = total

    return best


def find_transfer_routes(index: NetworkIndex, from_stop: Stop, to_stop: Stop) -> list[RouteOption]:
    """Two-leg itineraries between routes that meet at a stop.

    One option per (origin route, destination route) pair whose shortest route
    path is a single transfer, using the transfer stop with the lowest total time.
    """
    if from_stop.id == to_stop.id:
        return []

    options: list[RouteOption] = []
    for first in index.routes_for_stop(from_stop.id):
        for second in index.routes_for_stop(to_stop.id):
            if first.id == second.id:
                continue

            path = index.shortest_route_path(first.id, second.id)
            if path is None or len(path) != 2:
                continue

            legs = _best_transfer(index, from_stop, to_stop, first, second)
            if legs is not None:
                options.append(make_option(legs, "transfer"))

    logger.debug(f"Transfer {from_stop.id}->{to_stop.id}: {len(options)} options")
    return options
