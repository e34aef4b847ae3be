"""API routes for Scenic Routes.

Thin HTTP layer over the route planner:
- Short walks: loop, one-way or point-to-point within a time budget
- Sightseeing days: timed stops between two clock times
- Cache and metrics inspection

Endpoints are plain functions so FastAPI runs them in its thread pool;
concurrent requests share one travel-cost cache and one metrics service.
Domain errors propagate to the exception handlers in ``main``.
"""

import logging
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from scenic_routes.config import get_settings
from scenic_routes.models import (
    AppError,
    POICategory,
    Route,
    RouteShape,
    SightseeingSchedule,
    UserPreferences,
)
from scenic_routes.services import (
    CacheStats,
    GooglePlacesProvider,
    MetricsService,
    MetricsSummary,
    OSRMTravelProvider,
    RoutePlanner,
    TravelCostCache,
    build_travel_cache,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# Request/Response models
class RouteRequest(BaseModel):
    """Request model for a short scenic walk."""
    start_lat: float
    start_lng: float
    minutes: int = Field(..., description="Time budget in minutes (10-480)")
    route_shape: Optional[str] = Field(None, description="loop, one_way or point_to_point")
    end_lat: Optional[float] = None
    end_lng: Optional[float] = None
    preferences: Optional[dict[str, float]] = Field(
        None, description='Category weights, e.g. {"park": 1.5, "museum": 0}'
    )


class SightseeingRequest(BaseModel):
    """Request model for a sightseeing day."""
    start_lat: float
    start_lng: float
    start_time: str = Field("09:00", description="Clock time HH:MM")
    end_time: str = Field("17:00", description="Clock time HH:MM")
    preferences: Optional[dict[str, float]] = None
    include_lunch_break: bool = True


class RouteResponse(BaseModel):
    """Response model for short walks."""
    success: bool
    route: Optional[Route] = None
    error: Optional[AppError] = None


class SightseeingResponse(BaseModel):
    """Response model for sightseeing days."""
    success: bool
    schedule: Optional[SightseeingSchedule] = None
    error: Optional[AppError] = None


class DashboardResponse(BaseModel):
    application_metrics: MetricsSummary
    cache_metrics: CacheStats


def parse_route_shape(value: str | None) -> RouteShape:
    """Map a client-supplied shape name onto a RouteShape; unknown names mean LOOP."""
    if not value:
        return RouteShape.LOOP
    normalized = value.strip().upper().replace("-", "_")
    try:
        return RouteShape[normalized]
    except KeyError:
        logger.info(f"[ROUTE] Unknown route shape {value!r}, using loop")
        return RouteShape.LOOP


def parse_category_weights(raw: dict[str, float] | None) -> dict[POICategory, float]:
    """Map category names to weights, skipping names that aren't categories."""
    weights: dict[POICategory, float] = {}
    for name, weight in (raw or {}).items():
        try:
            category = POICategory[name.strip().upper()]
        except KeyError:
            logger.debug(f"[ROUTE] Skipping unknown category {name!r}")
            continue
        weights[category] = weight
    return weights


# Service instances
_travel_cache: TravelCostCache | None = None
_metrics_service: MetricsService | None = None
_route_planner: RoutePlanner | None = None


def get_travel_cache() -> TravelCostCache:
    global _travel_cache
    if _travel_cache is None:
        settings = get_settings()
        provider = OSRMTravelProvider(settings.osrm_url, timeout=settings.http_timeout_seconds)
        _travel_cache = build_travel_cache(
            provider, settings.travel_cache_redis_url, settings.travel_cache_ttl_seconds
        )
    return _travel_cache


def get_metrics_service() -> MetricsService:
    global _metrics_service
    if _metrics_service is None:
        _metrics_service = MetricsService()
    return _metrics_service


def get_route_planner() -> RoutePlanner:
    global _route_planner
    if _route_planner is None:
        settings = get_settings()
        if not settings.google_places_api_key:
            logger.warning("[PLACES] GOOGLE_PLACES_API_KEY is not set; nearby searches will fail")
        places = GooglePlacesProvider(
            settings.google_places_api_key or "",
            radius_m=settings.places_search_radius_m,
            max_pages=settings.places_max_pages,
            timeout=settings.http_timeout_seconds,
        )
        _route_planner = RoutePlanner(places, get_travel_cache(), get_metrics_service())
    return _route_planner


@router.post("/routes/optimized", response_model=RouteResponse)
def create_optimized_route(request: RouteRequest) -> RouteResponse:
    """Plan a short walk through the best nearby POIs."""
    preferences = UserPreferences(
        route_shape=parse_route_shape(request.route_shape),
        end_lat=request.end_lat,
        end_lng=request.end_lng,
        category_weights=parse_category_weights(request.preferences),
    )
    route = get_route_planner().plan_route(
        request.start_lat, request.start_lng, request.minutes, preferences
    )
    return RouteResponse(success=True, route=route)


@router.post("/routes/sightseeing", response_model=SightseeingResponse)
def create_sightseeing_day(request: SightseeingRequest) -> SightseeingResponse:
    """Plan a timed sightseeing day with an optional lunch break."""
    preferences = UserPreferences(category_weights=parse_category_weights(request.preferences))
    schedule = get_route_planner().plan_sightseeing_day(
        request.start_lat,
        request.start_lng,
        request.start_time,
        request.end_time,
        preferences,
        include_lunch=request.include_lunch_break,
    )
    return SightseeingResponse(success=True, schedule=schedule)


@router.get("/cache/stats", response_model=CacheStats)
def get_cache_stats() -> CacheStats:
    return get_route_planner().cache.stats()


@router.get("/metrics", response_model=MetricsSummary)
def get_metrics() -> MetricsSummary:
    return get_route_planner().metrics.summary()


@router.get("/metrics/cache", response_model=CacheStats)
def get_metrics_cache() -> CacheStats:
    return get_route_planner().cache.stats()


@router.get("/metrics/dashboard", response_model=DashboardResponse)
def get_dashboard() -> DashboardResponse:
    planner = get_route_planner()
    return DashboardResponse(
        application_metrics=planner.metrics.summary(),
        cache_metrics=planner.cache.stats(),
    )


@router.post("/metrics/reset")
def reset_metrics() -> dict:
    get_route_planner().metrics.reset()
    logger.info("[ROUTE] Metrics reset")
    return {"status": "Metrics reset successfully"}
