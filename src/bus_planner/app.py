"""Shared FastMCP instance.

Tool modules register against `mcp` from here; server.py imports them lazily
so that `python -m bus_planner.server` does not import itself twice.
"""

from mcp.server.fastmcp import FastMCP

mcp = FastMCP(
    "Bus Planner",
    instructions=(
        "City bus trip planner. Resolve stop names with resolve_stop or suggest_stops, "
        "then call plan_trip or recommend_routes; analyze_route explains one option."
    ),
)
