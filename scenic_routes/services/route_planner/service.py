"""Route planning orchestrator.

Validates a request, looks up nearby POIs, applies preference scoring and
dispatches to the planner for the requested shape. Every request is counted
in the metrics sink; failures are recorded by error code.
"""

import logging
import time

from scenic_routes.models import (
    Coordinates,
    InvalidCoordinateError,
    MissingEndPointError,
    NoSuitablePOIsError,
    Route,
    RouteGenerationError,
    RouteShape,
    SightseeingSchedule,
    TimeLimitOutOfRangeError,
    UnexpectedRouteError,
    UserPreferences,
)
from scenic_routes.services.categories import apply_preference_scoring
from scenic_routes.services.loop_builder import LoopPlanner
from scenic_routes.services.metrics import MetricsService
from scenic_routes.services.one_way import OneWayPlanner
from scenic_routes.services.places import PlacesProvider
from scenic_routes.services.point_to_point import PointToPointPlanner
from scenic_routes.services.scheduler import SightseeingScheduler, parse_time_window
from scenic_routes.services.travel_cache import TravelCostCache

logger = logging.getLogger(__name__)

MIN_MINUTES = 10
MAX_MINUTES = 480

ALGORITHM_BY_SHAPE = {
    RouteShape.LOOP: "TWO_POINT_LOOP",
    RouteShape.POINT_TO_POINT: "ASTAR_P2P",
    RouteShape.ONE_WAY: "GREEDY_ONE_WAY",
}
SIGHTSEEING_ALGORITHM = "SIGHTSEEING_SCHEDULER"
SIGHTSEEING_ROUTE_TYPE = "SIGHTSEEING"

EMPTY_ROUTE_WARNING = "No points of interest fit within the time limit"
NO_GEOMETRY_WARNING = "Route geometry is unavailable; showing stops only"


def validate_coordinates(lat: float, lng: float, label: str = "Start") -> Coordinates:
    if lat is None or not -90 <= lat <= 90:
        raise InvalidCoordinateError(f"{label} latitude must be between -90 and 90, got {lat}")
    if lng is None or not -180 <= lng <= 180:
        raise InvalidCoordinateError(f"{label} longitude must be between -180 and 180, got {lng}")
    return Coordinates(lat=lat, lng=lng)


def validate_time_limit(minutes: int) -> None:
    if minutes < MIN_MINUTES:
        raise TimeLimitOutOfRangeError(f"Time limit must be at least {MIN_MINUTES} minutes")
    if minutes > MAX_MINUTES:
        raise TimeLimitOutOfRangeError(f"Time limit cannot exceed {MAX_MINUTES} minutes")


class RoutePlanner:
    """Entry point for short walks and sightseeing days."""

    def __init__(
        self,
        places: PlacesProvider,
        cache: TravelCostCache,
        metrics: MetricsService,
    ) -> None:
        self._places = places
        self._cache = cache
        self._metrics = metrics
        self._loop = LoopPlanner(cache)
        self._point_to_point = PointToPointPlanner(cache)
        self._one_way = OneWayPlanner(cache)
        self._scheduler = SightseeingScheduler(cache)

    @property
    def cache(self) -> TravelCostCache:
        return self._cache

    @property
    def metrics(self) -> MetricsService:
        return self._metrics

    def plan_route(
        self,
        start_lat: float,
        start_lng: float,
        minutes: int,
        preferences: UserPreferences,
    ) -> Route:
        """Plan a loop, one-way or point-to-point walk within ``minutes``."""
        started = time.perf_counter()
        self._metrics.record_request()

        try:
            start = validate_coordinates(start_lat, start_lng, "Start")
            validate_time_limit(minutes)

            end = None
            if preferences.route_shape == RouteShape.POINT_TO_POINT:
                if not preferences.has_end_point():
                    raise MissingEndPointError("End point required for point-to-point routes")
                end = validate_coordinates(preferences.end_lat, preferences.end_lng, "End")

            for category in preferences.boosted_categories():
                self._metrics.record_category_boost(category.name)

            pois = self._places.nearby_pois(start.lat, start.lng, include_museums=False)
            scored = apply_preference_scoring(pois, preferences)
            if not scored:
                raise NoSuitablePOIsError("No suitable points of interest found with your preferences")

            shape = preferences.route_shape
            logger.info(f"[ROUTE] Planning {shape.value} walk: {minutes} min, {len(scored)} POIs")

            if shape == RouteShape.LOOP:
                route = self._loop.plan(start, scored, minutes, preferences)
            elif shape == RouteShape.POINT_TO_POINT:
                route = self._point_to_point.plan(start, end, scored, minutes, preferences, guaranteed=[])
            else:
                route = self._one_way.plan(start, scored, minutes)

            if not route.points:
                route.add_warning(EMPTY_ROUTE_WARNING)
            elif not route.polyline:
                route.add_warning(NO_GEOMETRY_WARNING)

            duration_ms = int((time.perf_counter() - started) * 1000)
            self._metrics.record_success()
            self._metrics.record_route_generation(
                shape.name, ALGORITHM_BY_SHAPE[shape], duration_ms, len(route.points)
            )
            logger.info(
                f"[ROUTE] {shape.value}: {len(route.points)} stops, "
                f"{route.total_time} min, {duration_ms} ms"
            )
            return route

        except RouteGenerationError as e:
            self._metrics.record_failure(e.code.value)
            logger.info(f"[ROUTE] Failed with {e.code.value}: {e.message}")
            raise
        except Exception as e:
            self._metrics.record_failure(UnexpectedRouteError.code.value)
            logger.exception("[ROUTE] Unexpected error generating route")
            raise UnexpectedRouteError(f"Unexpected error generating route: {e}") from e

    def plan_sightseeing_day(
        self,
        start_lat: float,
        start_lng: float,
        start_time: str,
        end_time: str,
        preferences: UserPreferences,
        include_lunch: bool = True,
    ) -> SightseeingSchedule:
        """Plan a timed sightseeing day between two "HH:MM" clock times."""
        started = time.perf_counter()
        self._metrics.record_request()

        try:
            start = validate_coordinates(start_lat, start_lng, "Start")
            parse_time_window(start_time, end_time)

            for category in preferences.boosted_categories():
                self._metrics.record_category_boost(category.name)

            pois = self._places.nearby_pois(start.lat, start.lng, include_museums=True)
            logger.info(f"[SCHEDULE] Planning day {start_time}-{end_time} from {len(pois)} POIs")

            schedule = self._scheduler.plan(
                start, pois, start_time, end_time, preferences, include_lunch
            )

            duration_ms = int((time.perf_counter() - started) * 1000)
            self._metrics.record_success()
            self._metrics.record_route_generation(
                SIGHTSEEING_ROUTE_TYPE, SIGHTSEEING_ALGORITHM, duration_ms, len(schedule.stops)
            )
            return schedule

        except RouteGenerationError as e:
            self._metrics.record_failure(e.code.value)
            logger.info(f"[SCHEDULE] Failed with {e.code.value}: {e.message}")
            raise
        except Exception as e:
            self._metrics.record_failure(UnexpectedRouteError.code.value)
            logger.exception("[SCHEDULE] Unexpected error generating schedule")
            raise UnexpectedRouteError(f"Unexpected error generating schedule: {e}") from e
