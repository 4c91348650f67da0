"""Shared test networks."""

import json
from pathlib import Path

import pytest

from bus_planner.models.network import Route, Stop
from bus_planner.services.network_index import NetworkIndex, build_network

SAMPLE_DATASET = Path(__file__).parent.parent / "data" / "chittagong_routes.json"


def make_route(route_id, number: str, stops: list[tuple]) -> Route:
    """Build a route from (stop_id, stop_name) pairs."""
    return Route(
        id=route_id,
        name=f"{number} no Bus",
        number=number,
        stops=[Stop(id=stop_id, name=name) for stop_id, name in stops],
    )


# Red:    Alpha - Bravo - Central - Delta - Echo
# Blue:   Central - Foxtrot - Golf - Hotel
# Green:  Hotel - India - Juliet
# Island: Kilo - Lima - Mike (no link to the others)
CITY_ROUTES = [
    make_route(1, "1", [(1, "Alpha"), (2, "Bravo"), (3, "Central"), (4, "Delta"), (5, "Echo")]),
    make_route(2, "2", [(3, "Central"), (6, "Foxtrot"), (7, "Golf"), (8, "Hotel")]),
    make_route(3, "3", [(8, "Hotel"), (9, "India"), (10, "Juliet")]),
    make_route(4, "4", [(20, "Kilo"), (21, "Lima"), (22, "Mike")]),
]

# Two direct routes between Start and End: a long one and a short one
PARALLEL_ROUTES = [
    make_route(1, "1", [(1, "Start"), (2, "Upper"), (3, "Middle"), (4, "End")]),
    make_route(2, "2", [(1, "Start"), (5, "Lower"), (4, "End")]),
]


@pytest.fixture
def city_routes() -> list[Route]:
    return list(CITY_ROUTES)


@pytest.fixture
def city(city_routes: list[Route]) -> NetworkIndex:
    """Three linked routes plus one disconnected island route."""
    return build_network(city_routes)


@pytest.fixture
def parallel() -> NetworkIndex:
    """Two routes joining the same pair of stops."""
    return build_network(PARALLEL_ROUTES)


@pytest.fixture
def sample_json(tmp_path: Path) -> Path:
    """Write the city network as a JSON dataset file."""
    path = tmp_path / "routes.json"
    path.write_text(
        json.dumps({"routes": [route.model_dump() for route in CITY_ROUTES]}),
        encoding="utf-8",
    )
    return path
