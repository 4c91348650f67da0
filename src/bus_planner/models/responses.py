from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from bus_planner.models.network import RouteId, Stop


class RouteType(str, Enum):
    """Itinerary shape, derived from the number of transfers."""

    DIRECT = "direct"
    TRANSFER = "transfer"
    MULTI_TRANSFER = "multi_transfer"

    @classmethod
    def from_transfers(cls, transfers: int) -> "RouteType":
        if transfers == 0:
            return cls.DIRECT
        if transfers == 1:
            return cls.TRANSFER
        return cls.MULTI_TRANSFER


class RoutePriority(str, Enum):
    """Ordering preference for route recommendations."""

    FASTEST = "fastest"
    COMFORTABLE = "comfortable"
    RELIABLE = "reliable"
    DIRECT = "direct"
    BALANCED = "balanced"


class RouteLeg(BaseModel):
    """One uninterrupted ride on a single route."""

    route_id: RouteId
    route_number: str
    route_name: str
    from_stop: Stop
    to_stop: Stop
    stops: list[Stop] = Field(description="Stops visited, boarding and alighting included")
    estimated_time: int = Field(description="Ride time in minutes")
    distance: float = Field(description="Ride distance in km")


class ScoreFactors(BaseModel):
    """Raw inputs the route score was computed from."""

    time: int = Field(description="Travel time in minutes")
    transfers: int
    distance: float = Field(description="Total distance in km")
    walking_time: int = Field(description="Walking time in minutes")
    route_count: int = Field(description="Number of legs")
    confidence: float


class RouteScore(BaseModel):
    """Multi-factor quality score (0-100)."""

    total_score: int
    time_score: int = Field(description="0-25, lower travel time scores higher")
    transfer_score: int = Field(description="0-25, fewer transfers score higher")
    distance_score: int = Field(description="0-20, shorter distance scores higher")
    reliability_score: int = Field(description="0-15, from confidence")
    comfort_score: int = Field(description="0-10, less walking scores higher")
    accessibility_score: int = Field(description="0-5, direct routes score highest")
    factors: ScoreFactors


class RouteOption(BaseModel):
    """A complete journey made of one or more legs."""

    id: str
    legs: list[RouteLeg]
    total_time: int = Field(description="Ride time plus transfer penalties, in minutes")
    total_distance: float = Field(description="Total distance in km")
    transfers: int
    walking_time: int = Field(description="Walking time at transfers, in minutes")
    confidence: float = Field(ge=0.1, le=1.0, description="Heuristic reliability estimate")
    route_type: RouteType
    score: RouteScore | None = None

    @property
    def origin(self) -> Stop:
        return self.legs[0].from_stop

    @property
    def destination(self) -> Stop:
        return self.legs[-1].to_stop

    @property
    def route_ids(self) -> tuple[RouteId, ...]:
        return tuple(leg.route_id for leg in self.legs)


class RoutePlan(BaseModel):
    """Result of a trip planning query."""

    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from", description="Origin text as queried")
    to: str = Field(description="Destination text as queried")
    options: list[RouteOption] = Field(description="Itineraries, best first")
    best_option: RouteOption | None = None
    total_options: int
    search_time_ms: int
    truncated: bool = Field(
        default=False,
        description="True if a search bound was hit; options may be incomplete",
    )


class RouteAnalysis(BaseModel):
    """Plain-language breakdown of a scored itinerary."""

    strengths: list[str]
    weaknesses: list[str]
    recommendations: list[str]
    score_breakdown: RouteScore


class RouteAnalysisResponse(BaseModel):
    """Response from analyze_route tool."""

    origin: str
    destination: str
    rank: int = Field(description="1-based position of the analysed option in the plan")
    option: RouteOption | None = None
    analysis: RouteAnalysis | None = None
    error: str | None = None


class RouteSummary(BaseModel):
    route_id: RouteId
    route_number: str
    route_name: str
    description: str | None = None
    stop_count: int
    first_stop: str
    last_stop: str


class RouteListResponse(BaseModel):
    routes: list[RouteSummary]
    count: int
