"""Shared fixtures: in-memory travel and places providers plus POI builders."""

import math
from typing import Sequence

import pytest

from scenic_routes.models import (
    POI,
    Coordinates,
    ExternalServiceUnavailableError,
    PolylineShape,
)
from scenic_routes.services.metrics import MetricsService
from scenic_routes.services.places import PlacesProvider
from scenic_routes.services.travel import TravelProvider, route_points
from scenic_routes.services.travel_cache import TravelCostCache
from scenic_routes.utils import encode_polyline, haversine_meters

START = Coordinates(lat=40.7128, lng=-74.0060)

# Meters per degree of latitude for the haversine earth radius
METERS_PER_DEGREE_LAT = 6371000 * math.pi / 180


def offset(origin: Coordinates, north_m: float = 0.0, east_m: float = 0.0) -> Coordinates:
    """Point ``north_m``/``east_m`` meters away from ``origin``."""
    lat = origin.lat + north_m / METERS_PER_DEGREE_LAT
    lng = origin.lng + east_m / (METERS_PER_DEGREE_LAT * math.cos(math.radians(origin.lat)))
    return Coordinates(lat=lat, lng=lng)


def make_poi(
    name: str,
    north_m: float = 0.0,
    east_m: float = 0.0,
    score: float = 10.0,
    types: Sequence[str] = (),
    review_count: int = 0,
    rating: float = 4.0,
    origin: Coordinates = START,
) -> POI:
    return POI(
        name=name,
        coordinates=offset(origin, north_m, east_m),
        score=score,
        types=tuple(types),
        review_count=review_count,
        rating=rating,
    )


def walk_minutes(a: Coordinates, b: Coordinates) -> int:
    return math.ceil(haversine_meters(a.lat, a.lng, b.lat, b.lng) / 83)


class FakeTravelProvider(TravelProvider):
    """Walking minutes = ceil(haversine meters / 83); polylines encode the points."""

    def __init__(self, fail_polyline: bool = False, blocked: Sequence[Coordinates] = ()) -> None:
        self.fail_polyline = fail_polyline
        self.blocked = {(round(c.lat, 6), round(c.lng, 6)) for c in blocked}
        self.time_calls = 0
        self.polyline_calls = 0

    def _is_blocked(self, point: Coordinates) -> bool:
        return (round(point.lat, 6), round(point.lng, 6)) in self.blocked

    def walk_minutes(self, origin: Coordinates, destination: Coordinates) -> float:
        self.time_calls += 1
        if self._is_blocked(origin) or self._is_blocked(destination):
            return math.inf
        return walk_minutes(origin, destination)

    def polyline(
        self,
        origin: Coordinates,
        waypoints: Sequence[Coordinates],
        shape: PolylineShape,
        destination: Coordinates | None = None,
    ) -> str:
        self.polyline_calls += 1
        if self.fail_polyline:
            raise ExternalServiceUnavailableError("routing service down")
        points = route_points(origin, waypoints, shape, destination)
        return encode_polyline([(p.lat, p.lng) for p in points])


class FakePlacesProvider(PlacesProvider):
    """Returns a fixed POI list, dropping museum-tagged POIs like the real provider."""

    def __init__(self, pois: Sequence[POI] = (), error: Exception | None = None) -> None:
        self.pois = list(pois)
        self.error = error
        self.calls: list[tuple[float, float, bool]] = []

    def nearby_pois(self, lat: float, lng: float, include_museums: bool = False) -> list[POI]:
        self.calls.append((lat, lng, include_museums))
        if self.error is not None:
            raise self.error
        return [p for p in self.pois if include_museums or not p.has_type("museum")]


@pytest.fixture
def travel_provider() -> FakeTravelProvider:
    return FakeTravelProvider()


@pytest.fixture
def cache(travel_provider: FakeTravelProvider) -> TravelCostCache:
    return TravelCostCache(travel_provider)


@pytest.fixture
def metrics() -> MetricsService:
    return MetricsService()
