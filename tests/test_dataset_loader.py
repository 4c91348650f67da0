import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from bus_planner.data.database import get_db, get_table_counts
from bus_planner.data.dataset_loader import DatasetLoader, load_dataset, read_routes
from conftest import CITY_ROUTES, SAMPLE_DATASET


class TestLoadDataset:
    """Tests for reading JSON datasets."""

    def test_wrapped_routes(self, sample_json: Path) -> None:
        routes = load_dataset(sample_json)

        assert [r.id for r in routes] == [1, 2, 3, 4]
        assert routes[0].stops[2].name == "Central"

    def test_bare_list(self, tmp_path: Path) -> None:
        """A top-level list of routes is accepted too."""
        path = tmp_path / "routes.json"
        path.write_text(json.dumps([CITY_ROUTES[0].model_dump()]), encoding="utf-8")

        routes = load_dataset(path)
        assert [r.id for r in routes] == [1]

    def test_bundled_dataset(self) -> None:
        routes = load_dataset(SAMPLE_DATASET)

        assert len(routes) == 14
        assert routes[0].number == "1"
        assert routes[0].stops[-1].name == "New Market"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_dataset(tmp_path / "nope.json")

    def test_duplicate_route_ids(self, tmp_path: Path) -> None:
        path = tmp_path / "routes.json"
        route = CITY_ROUTES[0].model_dump()
        path.write_text(json.dumps({"routes": [route, route]}), encoding="utf-8")

        with pytest.raises(ValidationError):
            load_dataset(path)

    def test_route_without_stops(self, tmp_path: Path) -> None:
        path = tmp_path / "routes.json"
        path.write_text(
            json.dumps({"routes": [{"id": 1, "name": "1 no Bus", "number": "1", "stops": []}]}),
            encoding="utf-8",
        )

        with pytest.raises(ValidationError):
            load_dataset(path)


class TestDatasetLoader:
    """Tests for DatasetLoader."""

    async def test_ingest(self, sample_json: Path, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        loader = DatasetLoader(db_path)

        row_counts = await loader.ingest(sample_json)

        assert db_path.exists()
        assert row_counts["routes"] == 4
        assert row_counts["route_stops"] == 15

    async def test_atomic_swap_replaces_existing(self, sample_json: Path, tmp_path: Path) -> None:
        """Ingesting twice leaves one database and no temp file behind."""
        db_path = tmp_path / "test.db"
        loader = DatasetLoader(db_path)

        await loader.ingest(sample_json)
        await loader.ingest(sample_json)

        assert db_path.exists()
        assert not db_path.with_suffix(".tmp.db").exists()
        counts = await get_table_counts(db_path)
        assert counts == {"routes": 4, "route_stops": 15}

    async def test_rollback_on_failure(self, tmp_path: Path) -> None:
        db_path = tmp_path / "test.db"
        loader = DatasetLoader(db_path)

        with pytest.raises(FileNotFoundError):
            await loader.ingest(tmp_path / "missing.json")

        assert not db_path.exists()
        assert not db_path.with_suffix(".tmp.db").exists()

    async def test_empty_dataset(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.json"
        path.write_text(json.dumps({"routes": []}), encoding="utf-8")

        with pytest.raises(ValueError):
            await DatasetLoader(tmp_path / "test.db").ingest(path)

    async def test_creates_parent_directories(self, sample_json: Path, tmp_path: Path) -> None:
        db_path = tmp_path / "subdir" / "nested" / "test.db"

        await DatasetLoader(db_path).ingest(sample_json)

        assert db_path.exists()


class TestReadRoutes:
    """Tests for rebuilding routes from SQLite."""

    async def test_round_trip(self, sample_json: Path, tmp_path: Path) -> None:
        """Routes come back in dataset order with their stops in sequence."""
        db_path = tmp_path / "test.db"
        await DatasetLoader(db_path).ingest(sample_json)

        async with get_db(db_path) as db:
            routes = await read_routes(db)

        assert routes == CITY_ROUTES

    async def test_per_route_stop_names(self, tmp_path: Path) -> None:
        """A stop labelled differently on two routes keeps each label."""
        path = tmp_path / "routes.json"
        path.write_text(
            json.dumps({
                "routes": [
                    {"id": "a", "name": "A", "number": "1",
                     "stops": [{"id": 1, "name": "GEC"}, {"id": 2, "name": "Wasa"}]},
                    {"id": "b", "name": "B", "number": "2",
                     "stops": [{"id": 1, "name": "GEC Circle"}, {"id": 3, "name": "Lalkhan"}]},
                ]
            }),
            encoding="utf-8",
        )
        db_path = tmp_path / "test.db"
        await DatasetLoader(db_path).ingest(path)

        async with get_db(db_path) as db:
            routes = await read_routes(db)

        assert [r.id for r in routes] == ["a", "b"]
        assert routes[1].stops[0].name == "GEC Circle"

    async def test_missing_database(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            async with get_db(tmp_path / "missing.db"):
                pass
