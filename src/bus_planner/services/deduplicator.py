from bus_planner.models.network import StopId
from bus_planner.models.responses import RouteOption
from bus_planner.services.direct_routes import find_direct_routes
from bus_planner.services.itinerary import option_key
from bus_planner.services.network_index import NetworkIndex


def deduplicate_options(index: NetworkIndex, options: list[RouteOption]) -> list[RouteOption]:
    """Drop redundant itineraries, keeping the first of each.

    A multi-leg option is dropped when its endpoints are joined by a valid
    direct ride. Remaining options are unique by (route sequence, origin id,
    destination id).
    """
    has_direct: dict[tuple[StopId, StopId], bool] = {}
    seen: set[tuple] = set()
    unique: list[RouteOption] = []

    for option in options:
        origin, destination = option.origin, option.destination

        if len(option.legs) > 1:
            pair = (origin.id, destination.id)
            if pair not in has_direct:
                has_direct[pair] = bool(find_direct_routes(index, origin, destination))
            if has_direct[pair]:
                continue

        key = option_key(option)
        if key in seen:
            continue
        seen.add(key)
        unique.append(option)

    return unique
