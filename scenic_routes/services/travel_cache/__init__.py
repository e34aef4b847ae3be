"""Memoizing travel-cost cache and its backing stores."""

from .service import (
    CacheStats,
    InMemoryTravelCostStore,
    RedisTravelCostStore,
    TravelCostCache,
    TravelCostStore,
    build_travel_cache,
    polyline_key,
    time_key,
)

__all__ = [
    "CacheStats",
    "InMemoryTravelCostStore",
    "RedisTravelCostStore",
    "TravelCostCache",
    "TravelCostStore",
    "build_travel_cache",
    "polyline_key",
    "time_key",
]
