"""Tests for multi-transfer itinerary search."""

from bus_planner.models.responses import RouteType
from bus_planner.services.multi_transfer_routes import (
    _bridged_itineraries,
    find_multi_transfer_routes,
)
from bus_planner.services.network_index import NetworkIndex, build_network
from bus_planner.services.search_budget import SearchBudget
from conftest import make_route


def _budget(**kwargs) -> SearchBudget:
    return SearchBudget(seconds=kwargs.pop("seconds", 10.0), **kwargs)


class TestFindMultiTransferRoutes:
    """Tests for rides with two or more transfers."""

    def test_two_transfers(self, city: NetworkIndex) -> None:
        """Alpha to Juliet rides routes 1, 2 and 3."""
        budget = _budget()
        options = find_multi_transfer_routes(city, city.stop(1), city.stop(10), budget)

        assert len(options) == 1
        option = options[0]
        assert option.route_ids == (1, 2, 3)
        assert option.transfers == 2
        assert option.route_type == RouteType.MULTI_TRANSFER
        assert [leg.to_stop.name for leg in option.legs] == ["Central", "Hotel", "Juliet"]
        # 8 + 12 + 8 minutes riding, 2 x 5 minutes changing
        assert option.total_time == 38
        assert option.walking_time == 4
        assert option.total_distance == 5.6
        assert budget.truncated is False

    def test_single_transfer_not_returned(self, city: NetworkIndex) -> None:
        """Itineraries with fewer than two transfers belong to other finders."""
        assert find_multi_transfer_routes(city, city.stop(1), city.stop(6), _budget()) == []

    def test_disconnected(self, city: NetworkIndex) -> None:
        assert find_multi_transfer_routes(city, city.stop(1), city.stop(21), _budget()) == []

    def test_same_stop(self, city: NetworkIndex) -> None:
        assert find_multi_transfer_routes(city, city.stop(1), city.stop(1), _budget()) == []

    def test_routes_not_reused(self) -> None:
        """Leaving a route and boarding it again is never an itinerary."""
        index = build_network([
            make_route("A", "A", [(1, "One"), (2, "Two"), (3, "Three"), (4, "Four")]),
            make_route("B", "B", [(2, "Two"), (5, "Five"), (3, "Three")]),
        ])

        options = find_multi_transfer_routes(index, index.stop(1), index.stop(4), _budget())

        for option in options:
            assert len(set(option.route_ids)) == len(option.route_ids)

    def test_max_transfers_respected(self, city: NetworkIndex) -> None:
        options = find_multi_transfer_routes(
            city, city.stop(1), city.stop(10), _budget(), max_transfers=1
        )
        # Only the bridged enumeration can still produce the 2-transfer ride
        assert all(o.id.startswith("bridge:") for o in options)


class TestSearchBounds:
    """Tests for the time and queue limits."""

    def test_expired_budget_truncates(self, city: NetworkIndex) -> None:
        """An exhausted budget returns no options and flags truncation."""
        budget = _budget(seconds=-1.0)

        options = find_multi_transfer_routes(city, city.stop(1), city.stop(10), budget)

        assert options == []
        assert budget.truncated is True

    def test_queue_cap_truncates(self, city: NetworkIndex) -> None:
        budget = _budget(max_queue_size=0)

        find_multi_transfer_routes(city, city.stop(1), city.stop(10), budget)

        assert budget.truncated is True


class TestBridgedItineraries:
    """Tests for intermediate-route enumeration."""

    def test_intermediate_route_bridges_gap(self, city: NetworkIndex) -> None:
        """Route 2 bridges routes 1 and 3, changing at Central and Hotel."""
        options = _bridged_itineraries(city, city.stop(1), city.stop(10), _budget())

        assert len(options) == 1
        assert options[0].id.startswith("bridge:")
        assert options[0].route_ids == (1, 2, 3)
        assert options[0].total_time == 38

    def test_connected_routes_not_bridged(self, city: NetworkIndex) -> None:
        """Routes that already meet need no intermediate."""
        assert _bridged_itineraries(city, city.stop(1), city.stop(6), _budget()) == []
