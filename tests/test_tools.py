"""Tests for the MCP tool functions against an ingested database."""

from pathlib import Path

import pytest

from bus_planner.data.config import get_planner_config
from bus_planner.data.dataset_loader import DatasetLoader
from bus_planner.matching.models import MatchType
from bus_planner.models.responses import RouteType
from bus_planner.services.network_service import NetworkProvider
from bus_planner.tools.stop_tools import popular_routes, resolve_stop, search_routes, suggest_stops
from bus_planner.tools.trip_tools import analyze_route, plan_trip, recommend_routes


@pytest.fixture
async def city_db(sample_json: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Ingest the city network and point the provider at it."""
    db_path = tmp_path / "routes.db"
    await DatasetLoader(db_path).ingest(sample_json)
    monkeypatch.setenv("BUS_DB_PATH", str(db_path))
    get_planner_config.cache_clear()
    await NetworkProvider.invalidate()
    yield db_path
    await NetworkProvider.invalidate()
    get_planner_config.cache_clear()


class TestNetworkProvider:
    """Tests for the cached network index."""

    async def test_cached(self, city_db: Path) -> None:
        first = await NetworkProvider.get_instance()
        second = await NetworkProvider.get_instance()
        assert first is second

    async def test_reload(self, city_db: Path) -> None:
        first = await NetworkProvider.get_instance()
        reloaded = await NetworkProvider.reload()
        assert reloaded is not first
        assert [r.id for r in reloaded.routes] == [1, 2, 3, 4]

    async def test_missing_database(self, tmp_path: Path) -> None:
        await NetworkProvider.invalidate()
        with pytest.raises(FileNotFoundError):
            await NetworkProvider.get_instance(tmp_path / "missing.db")


class TestTripTools:
    """Tests for plan_trip, recommend_routes and analyze_route."""

    async def test_plan_trip(self, city_db: Path) -> None:
        plan = await plan_trip("Alpha", "Foxtrot")

        assert plan.total_options == 1
        assert plan.best_option.route_type == RouteType.TRANSFER

    async def test_plan_trip_limit(self, city_db: Path) -> None:
        """A limit below 1 is clamped to 1."""
        plan = await plan_trip("Alpha", "Delta", limit=0)

        assert len(plan.options) == 1
        assert plan.total_options == 1

    async def test_plan_trip_unknown_place(self, city_db: Path) -> None:
        plan = await plan_trip("Nowhere", "Delta")

        assert plan.options == []
        assert plan.best_option is None

    async def test_recommend_routes(self, city_db: Path) -> None:
        plan = await recommend_routes("Alpha", "Juliet", priority="fastest")
        assert plan.best_option.route_ids == (1, 2, 3)

    async def test_analyze_route(self, city_db: Path) -> None:
        result = await analyze_route("Alpha", "Delta")

        assert result.error is None
        assert result.option.route_ids == (1,)
        assert "Fast travel time" in result.analysis.strengths

    async def test_analyze_route_rank_out_of_range(self, city_db: Path) -> None:
        result = await analyze_route("Alpha", "Delta", rank=3)

        assert result.option is None
        assert result.error == "Only 1 options found, no option at rank 3"

    async def test_analyze_route_no_routes(self, city_db: Path) -> None:
        result = await analyze_route("Alpha", "Kilo")
        assert result.error == "No routes found"

    async def test_timeout_returns_truncated_plan(
        self, city_db: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("BUS_QUERY_TIMEOUT", "0")
        get_planner_config.cache_clear()

        plan = await plan_trip("Alpha", "Juliet")

        assert plan.truncated is True
        assert plan.options == []


class TestStopTools:
    """Tests for stop and route lookup tools."""

    async def test_resolve_stop(self, city_db: Path) -> None:
        result = await resolve_stop("central")

        assert result.resolved is True
        assert result.matches[0].route_ids == [1, 2]
        assert result.matches[0].match_type == MatchType.NAME_EXACT

    async def test_suggest_stops(self, city_db: Path) -> None:
        result = await suggest_stops("Julet", limit=50)

        assert result.suggestions[0].stop_name == "Juliet"
        assert len(result.suggestions) <= 20

    async def test_search_routes(self, city_db: Path) -> None:
        result = await search_routes("route 3")
        assert result.best_match.route_id == 3

    async def test_popular_routes(self, city_db: Path) -> None:
        result = await popular_routes(limit=2)

        assert result.count == 2
        first = result.routes[0]
        assert first.route_id == 1
        assert first.stop_count == 5
        assert first.first_stop == "Alpha"
        assert first.last_stop == "Echo"
