"""Pydantic models for the static route dataset."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Stop and route ids come from the dataset as-is (integers in the bundled data)
StopId = int | str
RouteId = int | str


class Stop(BaseModel):
    """A bus stop. Names are not unique; ids are."""

    model_config = ConfigDict(frozen=True)

    id: StopId
    name: str


class Route(BaseModel):
    """A fixed bus route, stops listed in its canonical travel direction."""

    model_config = ConfigDict(frozen=True)

    id: RouteId
    name: str
    number: str
    stops: tuple[Stop, ...] = Field(min_length=1)
    color: str | None = None
    description: str | None = None

    @property
    def stop_ids(self) -> tuple[StopId, ...]:
        return tuple(stop.id for stop in self.stops)


class Dataset(BaseModel):
    """All routes for one planning session."""

    routes: list[Route]

    @model_validator(mode="after")
    def _unique_route_ids(self) -> "Dataset":
        seen: set[RouteId] = set()
        for route in self.routes:
            if route.id in seen:
                raise ValueError(f"Duplicate route id: {route.id!r}")
            seen.add(route.id)
        return self
