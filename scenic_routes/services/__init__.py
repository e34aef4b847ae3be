"""Scenic Routes services.

Service layer components:
- Categories: POI categorization and preference scoring
- Heuristics: attraction importance and visit durations
- Travel: OSRM walking times and path geometry
- Travel cache: memoizing cache in front of the travel provider
- Places: Google Places nearby search
- Point to point / Loop builder / One way: short walk planners
- Scheduler: time-window sightseeing days
- Metrics: request and generation counters
- Route planner: validation and dispatch to the planners
"""

from .travel import OSRMTravelProvider, TravelProvider
from .travel_cache import (
    CacheStats,
    InMemoryTravelCostStore,
    RedisTravelCostStore,
    TravelCostCache,
    TravelCostStore,
    build_travel_cache,
)
from .places import GooglePlacesProvider, PlacesProvider
from .point_to_point import PointToPointPlanner
from .loop_builder import LoopPlanner
from .one_way import OneWayPlanner
from .scheduler import SightseeingScheduler
from .metrics import MetricsService, MetricsSummary
from .route_planner import RoutePlanner

__all__ = [
    # Travel
    "OSRMTravelProvider",
    "TravelProvider",
    # Travel cache
    "CacheStats",
    "InMemoryTravelCostStore",
    "RedisTravelCostStore",
    "TravelCostCache",
    "TravelCostStore",
    "build_travel_cache",
    # Places
    "GooglePlacesProvider",
    "PlacesProvider",
    # Planners
    "PointToPointPlanner",
    "LoopPlanner",
    "OneWayPlanner",
    "SightseeingScheduler",
    # Metrics
    "MetricsService",
    "MetricsSummary",
    # Orchestrator
    "RoutePlanner",
]
