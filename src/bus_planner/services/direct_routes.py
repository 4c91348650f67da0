import logging

from bus_planner.models.network import Stop
from bus_planner.models.responses import RouteOption
from bus_planner.services.itinerary import (
    DIRECT_BACKWARD_LIMIT,
    build_leg,
    iter_route_slices,
    make_option,
)
from bus_planner.services.network_index import NetworkIndex

logger = logging.getLogger(__name__)


def find_direct_routes(index: NetworkIndex, from_stop: Stop, to_stop: Stop) -> list[RouteOption]:
    """Single-leg itineraries on any route serving both stops.

    Every permitted slice is returned, so a route passing through a stop twice
    can contribute more than one option. Slices on one route come shortest
    first, since deduplication keeps the first option per route and endpoints.
    """
    if from_stop.id == to_stop.id:
        return []

    options: list[RouteOption] = []
    for route in index.common_routes(from_stop.id, to_stop.id):
        slices = iter_route_slices(route, from_stop.id, to_stop.id, DIRECT_BACKWARD_LIMIT)
        for stops in sorted(slices, key=len):
            options.append(make_option([build_leg(route, stops)], "direct"))

    logger.debug(f"Direct {from_stop.id}->{to_stop.id}: {len(options)} options")
    return options
