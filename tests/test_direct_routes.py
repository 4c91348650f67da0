"""Tests for single-leg itinerary search."""

from bus_planner.models.responses import RouteType
from bus_planner.services.direct_routes import find_direct_routes
from bus_planner.services.network_index import NetworkIndex, build_network
from conftest import make_route


class TestFindDirectRoutes:
    """Tests for direct rides on one route."""

    def test_forward_ride(self, city: NetworkIndex) -> None:
        """Alpha to Delta rides three stops forward on route 1."""
        options = find_direct_routes(city, city.stop(1), city.stop(4))

        assert len(options) == 1
        option = options[0]
        assert option.route_type == RouteType.DIRECT
        assert option.transfers == 0
        assert option.route_ids == (1,)
        assert [s.name for s in option.legs[0].stops] == ["Alpha", "Bravo", "Central", "Delta"]
        assert option.total_time == 12
        assert option.total_distance == 2.4
        assert option.confidence == 1.0

    def test_short_backward_ride(self, city: NetworkIndex) -> None:
        """Riding back three of five stops is allowed."""
        options = find_direct_routes(city, city.stop(4), city.stop(1))

        assert len(options) == 1
        assert [s.id for s in options[0].legs[0].stops] == [4, 3, 2, 1]

    def test_long_backward_ride_rejected(self, city: NetworkIndex) -> None:
        """Echo to Alpha would ride back most of the route."""
        assert find_direct_routes(city, city.stop(5), city.stop(1)) == []

    def test_no_common_route(self, city: NetworkIndex) -> None:
        assert find_direct_routes(city, city.stop(1), city.stop(6)) == []

    def test_same_stop(self, city: NetworkIndex) -> None:
        assert find_direct_routes(city, city.stop(3), city.stop(3)) == []

    def test_every_serving_route_in_dataset_order(self, parallel: NetworkIndex) -> None:
        """Both routes joining Start and End give an option."""
        options = find_direct_routes(parallel, parallel.stop(1), parallel.stop(4))

        assert [o.route_ids for o in options] == [(1,), (2,)]
        assert [o.total_time for o in options] == [12, 8]

    def test_loop_route_shortest_slice_first(self) -> None:
        """On a route passing Alpha twice, the forward ride to the second Alpha comes first."""
        loop = make_route(
            1,
            "1",
            [(1, "Alpha"), (2, "Xray"), (3, "Yankee"), (4, "Bravo"), (5, "Zulu"), (1, "Alpha")],
        )
        index = build_network([loop])

        options = find_direct_routes(index, index.stop(4), index.stop(1))

        assert [[s.id for s in o.legs[0].stops] for o in options] == [[4, 5, 1], [4, 3, 2, 1]]
        assert [o.total_time for o in options] == [8, 12]

    def test_long_ride_loses_confidence(self) -> None:
        """Rides over an hour drop to 0.9 confidence."""
        long_route = make_route(1, "1", [(i, f"Stop {i}") for i in range(20)])
        index = build_network([long_route])

        options = find_direct_routes(index, index.stop(0), index.stop(16))

        assert options[0].total_time == 64
        assert options[0].confidence == 0.9
