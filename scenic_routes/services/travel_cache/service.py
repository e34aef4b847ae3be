"""Memoizing travel-cost cache.

Sits between the planners and a :class:`TravelProvider`. Walking times are
keyed by the coordinate pair rounded to 6 decimals; polylines by the shape
tag plus the full ordered waypoint list, so reordered waypoints are distinct
entries. There is no retry, expiry policy beyond the optional store TTL, or
de-duplication of concurrent misses for the same key: two callers missing at
once each hit the provider.
"""

import logging
import math
import threading
from abc import ABC, abstractmethod
from typing import Protocol, Sequence

import redis
from pydantic import BaseModel

from scenic_routes.models import Coordinates, PolylineShape
from scenic_routes.services.travel import TravelProvider

logger = logging.getLogger(__name__)

STATS_LOG_INTERVAL = 50


class HasLocation(Protocol):
    @property
    def lat(self) -> float: ...

    @property
    def lng(self) -> float: ...


class TravelCostStore(ABC):
    """Abstract key/value store backing one of the cache maps."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def size(self) -> int:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass


class InMemoryTravelCostStore(TravelCostStore):
    """Process-local dict guarded by a lock."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def size(self) -> int:
        with self._lock:
            return len(self._data)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


class RedisTravelCostStore(TravelCostStore):
    """Redis-backed store, shared between processes.

    Keys are namespaced with ``prefix`` so ``size`` and ``clear`` only touch
    this store's entries.

    Attributes:
        _client: The Redis client instance.
        _prefix: Namespace prepended to every key.
        _ttl: Optional expiry in seconds; None keeps entries forever.
    """

    def __init__(self, client: redis.Redis, prefix: str, ttl_seconds: int | None = None) -> None:
        self._client = client
        self._prefix = prefix
        self._ttl = ttl_seconds

    @classmethod
    def from_url(cls, redis_url: str, prefix: str, ttl_seconds: int | None = None) -> "RedisTravelCostStore":
        client = redis.Redis.from_url(redis_url, encoding="utf-8", decode_responses=True)
        return cls(client, prefix, ttl_seconds)

    def get(self, key: str) -> str | None:
        return self._client.get(self._prefix + key)

    def set(self, key: str, value: str) -> None:
        if self._ttl:
            self._client.setex(self._prefix + key, self._ttl, value)
        else:
            self._client.set(self._prefix + key, value)

    def size(self) -> int:
        return sum(1 for _ in self._client.scan_iter(match=f"{self._prefix}*"))

    def clear(self) -> None:
        keys = list(self._client.scan_iter(match=f"{self._prefix}*"))
        if keys:
            self._client.delete(*keys)


class CacheStats(BaseModel):
    """Snapshot of cache counters."""

    total_requests: int
    hits: int
    misses: int
    time_entries: int
    polyline_entries: int
    hit_rate: float
    total_size: int


def _point_key(lat: float, lng: float) -> str:
    return f"{lat:.6f},{lng:.6f}"


def time_key(from_lat: float, from_lng: float, to_lat: float, to_lng: float) -> str:
    return f"{_point_key(from_lat, from_lng)}->{_point_key(to_lat, to_lng)}"


def polyline_key(
    origin: HasLocation,
    waypoints: Sequence[HasLocation],
    shape: PolylineShape,
    destination: HasLocation | None = None,
) -> str:
    points = "".join(f"{_point_key(p.lat, p.lng)};" for p in waypoints)
    start = _point_key(origin.lat, origin.lng)
    if shape == PolylineShape.POINT_TO_POINT:
        end = _point_key(destination.lat, destination.lng) if destination is not None else ""
        return f"{start}->{end}|P2P|{points}"
    if shape == PolylineShape.LOOP:
        return f"{start}|LOOP|{points}"
    return f"{start}|WAYPOINTS|{points}"


def _to_coordinates(point: HasLocation) -> Coordinates:
    if isinstance(point, Coordinates):
        return point
    return Coordinates(lat=point.lat, lng=point.lng)


class TravelCostCache:
    """Memoizes walking minutes and polylines from a travel provider."""

    def __init__(
        self,
        provider: TravelProvider,
        time_store: TravelCostStore | None = None,
        polyline_store: TravelCostStore | None = None,
    ) -> None:
        self._provider = provider
        self._times = time_store or InMemoryTravelCostStore()
        self._polylines = polyline_store or InMemoryTravelCostStore()
        self._lock = threading.Lock()
        self._total = 0
        self._hits = 0
        self._misses = 0
        self._time_requests = 0

    @property
    def provider(self) -> TravelProvider:
        return self._provider

    def _count(self, hit: bool, is_time: bool) -> bool:
        """Update counters; returns True when stats are due for logging."""
        with self._lock:
            self._total += 1
            if hit:
                self._hits += 1
            else:
                self._misses += 1
            if is_time:
                self._time_requests += 1
                return self._time_requests % STATS_LOG_INTERVAL == 0
            return False

    def time(self, from_lat: float, from_lng: float, to_lat: float, to_lng: float) -> float:
        """Walking minutes between two coordinates; ``math.inf`` when unreachable."""
        key = time_key(from_lat, from_lng, to_lat, to_lng)
        cached = self._times.get(key)

        if cached is not None:
            minutes = float(cached)
            due = self._count(hit=True, is_time=True)
        else:
            minutes = self._provider.walk_minutes(
                Coordinates(lat=from_lat, lng=from_lng),
                Coordinates(lat=to_lat, lng=to_lng),
            )
            self._times.set(key, repr(float(minutes)))
            due = self._count(hit=False, is_time=True)

        if due:
            stats = self.stats()
            logger.debug(
                f"[CACHE] {stats.total_requests} requests, hit rate {stats.hit_rate:.1f}%, "
                f"{stats.time_entries} times / {stats.polyline_entries} polylines cached"
            )

        if math.isinf(minutes):
            return math.inf
        return int(minutes)

    def time_between(self, origin: HasLocation, destination: HasLocation) -> float:
        return self.time(origin.lat, origin.lng, destination.lat, destination.lng)

    def polyline(
        self,
        origin: HasLocation,
        waypoints: Sequence[HasLocation],
        shape: PolylineShape,
        destination: HasLocation | None = None,
    ) -> str:
        """Encoded path for the ordered waypoints, cached per shape and order."""
        key = polyline_key(origin, waypoints, shape, destination)
        cached = self._polylines.get(key)
        if cached is not None:
            self._count(hit=True, is_time=False)
            return cached

        encoded = self._provider.polyline(
            _to_coordinates(origin),
            [_to_coordinates(p) for p in waypoints],
            shape,
            _to_coordinates(destination) if destination is not None else None,
        )
        self._polylines.set(key, encoded)
        self._count(hit=False, is_time=False)
        return encoded

    def stats(self) -> CacheStats:
        with self._lock:
            total, hits, misses = self._total, self._hits, self._misses
        time_entries = self._times.size()
        polyline_entries = self._polylines.size()
        return CacheStats(
            total_requests=total,
            hits=hits,
            misses=misses,
            time_entries=time_entries,
            polyline_entries=polyline_entries,
            hit_rate=(hits * 100.0 / total) if total else 0.0,
            total_size=time_entries + polyline_entries,
        )

    def clear(self) -> None:
        self._times.clear()
        self._polylines.clear()
        with self._lock:
            self._total = 0
            self._hits = 0
            self._misses = 0
            self._time_requests = 0
        logger.info("[CACHE] Cleared")


def build_travel_cache(
    provider: TravelProvider,
    redis_url: str | None = None,
    ttl_seconds: int | None = None,
) -> TravelCostCache:
    """Create a cache with Redis-backed stores when ``redis_url`` is given."""
    if not redis_url:
        return TravelCostCache(provider)

    logger.info("[CACHE] Using Redis-backed travel cost stores")
    return TravelCostCache(
        provider,
        time_store=RedisTravelCostStore.from_url(redis_url, "travel:time:", ttl_seconds),
        polyline_store=RedisTravelCostStore.from_url(redis_url, "travel:polyline:", ttl_seconds),
    )
