"""Tests for the MCP server, health tool and command line."""

import sys
from pathlib import Path

from bus_planner import __version__
from bus_planner.server import health, main, run_ingest


def test_health_returns_ok_status():
    """Health check should return status ok."""
    response = health()
    assert response.status == "ok"


def test_health_returns_version():
    """Health check should return the current version."""
    response = health()
    assert response.version == __version__


def test_health_returns_timestamp():
    """Health check should return a valid ISO timestamp."""
    response = health()
    assert response.timestamp is not None
    # Should be parseable as ISO format
    assert "T" in response.timestamp


async def test_run_ingest_prints_counts(sample_json: Path, tmp_path: Path, capsys):
    db_path = tmp_path / "routes.db"

    await run_ingest(sample_json, db_path)

    assert db_path.exists()
    out = capsys.readouterr().out
    assert "routes: 4" in out
    assert "route_stops: 15" in out


def test_plan_command_from_json(sample_json: Path, monkeypatch, capsys):
    """`bus-planner plan --data` prints ranked options without a database."""
    monkeypatch.setattr(
        sys, "argv", ["bus-planner", "plan", "Alpha", "Delta", "--data", str(sample_json)]
    )

    main()

    out = capsys.readouterr().out
    assert "Alpha -> Delta: 1 options" in out
    assert "1. [92] direct, 12 min" in out
