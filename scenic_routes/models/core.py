"""Core data models for Scenic Routes.

Pydantic models for coordinates, points of interest (POIs), user
preferences, walking routes and sightseeing schedules.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RouteShape(str, Enum):
    """Shape of a short scenic walk."""

    LOOP = "loop"
    ONE_WAY = "one_way"
    POINT_TO_POINT = "point_to_point"


class POICategory(str, Enum):
    """Fixed set of POI categories used for preferences and heuristics."""

    # Visual & photo spots
    LANDMARK = "landmark"
    PARK = "park"
    STREET_ART = "street_art"
    VIEWPOINT = "viewpoint"
    FOUNTAIN = "fountain"
    SCULPTURE = "sculpture"

    # Cultural
    HISTORIC_SITE = "historic_site"
    CHURCH = "church"
    THEATER = "theater"

    # Urban
    SHOPPING = "shopping"
    CITY_SQUARE = "city_square"

    # Food & drink
    CAFE = "cafe"
    RESTAURANT = "restaurant"

    # Sightseeing
    MUSEUM = "museum"
    AQUARIUM = "aquarium"
    ZOO = "zoo"
    OBSERVATION_DECK = "observation_deck"

    # Popularity-based
    HIDDEN_GEM = "hidden_gem"
    TRENDING = "trending"


class PolylineShape(str, Enum):
    """How a polyline request is laid out; part of the cache key."""

    LOOP = "loop"
    WAYPOINTS = "waypoints"
    POINT_TO_POINT = "point_to_point"


class Coordinates(BaseModel):
    """Geographic coordinates with validation.

    Latitude must be between -90 and 90 degrees.
    Longitude must be between -180 and 180 degrees.
    """

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    lng: float = Field(..., ge=-180, le=180, description="Longitude in degrees")


class POI(BaseModel):
    """Point of Interest model.

    Identity is the name plus the coordinates rounded to 1e-6 degrees, so two
    lookups of the same place compare equal even if the provider returns
    slightly different tags or scores. Instances are immutable; preference
    rescoring goes through :meth:`with_score`.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Display name of the place")
    coordinates: Coordinates = Field(..., description="Geographic location")
    score: float = Field(..., description="Provider-derived desirability score")
    types: tuple[str, ...] = Field(default=(), description="Raw provider category tags")
    review_count: int = Field(default=0, ge=0, description="Number of user reviews")
    rating: float = Field(default=0.0, ge=0, le=5, description="Average rating (0-5)")
    photo_reference: Optional[str] = Field(None, description="Opaque provider photo reference")

    @property
    def lat(self) -> float:
        return self.coordinates.lat

    @property
    def lng(self) -> float:
        return self.coordinates.lng

    @property
    def key(self) -> tuple[str, int, int]:
        return (self.name, round(self.lat * 1e6), round(self.lng * 1e6))

    def has_type(self, tag: str) -> bool:
        return tag in self.types

    def with_score(self, score: float) -> "POI":
        """Return a copy carrying a new score; everything else is kept."""
        return self.model_copy(update={"score": score})

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, POI):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)


class UserPreferences(BaseModel):
    """Route shape, optional end point and per-category weights.

    Every category weighs 1.0 unless overridden: 0 excludes the category,
    anything above 1 boosts it.
    """

    route_shape: RouteShape = RouteShape.LOOP
    end_lat: Optional[float] = None
    end_lng: Optional[float] = None
    category_weights: dict[POICategory, float] = Field(default_factory=dict)

    def weight(self, category: POICategory) -> float:
        return self.category_weights.get(category, 1.0)

    def has_end_point(self) -> bool:
        return self.end_lat is not None and self.end_lng is not None

    def has_custom_preferences(self) -> bool:
        return any(w != 1.0 for w in self.category_weights.values())

    def boosted_categories(self) -> dict[POICategory, float]:
        return {c: w for c, w in self.category_weights.items() if w > 1.0}


class Route(BaseModel):
    """An ordered walk through POIs.

    ``total_score`` and ``total_time`` always describe exactly the POIs in
    ``points``; an empty route has score 0, time 0 and no geometry.
    """

    points: list[POI] = Field(default_factory=list, description="POIs in visit order")
    total_score: float = Field(default=0.0, description="Sum of included POI scores")
    total_time: int = Field(default=0, ge=0, description="Total walking + dwell minutes")
    polyline: str = Field(default="", description="Encoded path geometry (may be empty)")
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> "Route":
        return cls()

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)


class SightseeingAttraction(BaseModel):
    """A POI plus the sightseeing-specific values derived from it.

    Built by the importance heuristics; the POI itself is not copied.
    """

    model_config = ConfigDict(frozen=True)

    poi: POI
    importance: int = 0
    primary_category: POICategory
    visit_minutes: int

    @property
    def name(self) -> str:
        return self.poi.name

    @property
    def coordinates(self) -> Coordinates:
        return self.poi.coordinates

    @property
    def lat(self) -> float:
        return self.poi.lat

    @property
    def lng(self) -> float:
        return self.poi.lng

    @property
    def score(self) -> float:
        return self.poi.score

    @property
    def types(self) -> tuple[str, ...]:
        return self.poi.types

    @property
    def review_count(self) -> int:
        return self.poi.review_count

    @property
    def rating(self) -> float:
        return self.poi.rating

    @property
    def photo_reference(self) -> Optional[str]:
        return self.poi.photo_reference

    def with_importance(self, importance: int) -> "SightseeingAttraction":
        return self.model_copy(update={"importance": importance})


class BreakKind(str, Enum):
    LUNCH = "LUNCH"


class ScheduledStop(BaseModel):
    """A timed visit within a sightseeing day."""

    attraction: SightseeingAttraction
    arrival_time: str = Field(..., description="Clock time HH:MM")
    departure_time: str = Field(..., description="Clock time HH:MM")
    visit_minutes: int = Field(..., ge=0)
    travel_minutes: int = Field(..., ge=0, description="Walk from the previous stop")


class Break(BaseModel):
    """A pause in the schedule, e.g. lunch."""

    start_time: str = Field(..., description="Clock time HH:MM")
    duration_minutes: int = Field(..., ge=0)
    kind: BreakKind = BreakKind.LUNCH
    suggestion: str = ""


class SightseeingSchedule(BaseModel):
    """A full sightseeing day: timed stops, breaks and path geometry."""

    stops: list[ScheduledStop] = Field(default_factory=list)
    breaks: list[Break] = Field(default_factory=list)
    total_minutes: int = Field(default=0, description="Minutes from start to the final cursor time")
    polyline: Optional[str] = None
