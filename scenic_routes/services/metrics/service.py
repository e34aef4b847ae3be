"""In-process request and route-generation metrics.

Planners only write here; the HTTP layer reads summaries for the metrics
endpoints. All counters share one lock.
"""

import math
import threading
from collections import Counter, deque
from datetime import datetime, timezone

from pydantic import BaseModel, Field

ROUTE_TYPES = ("LOOP", "ONE_WAY", "POINT_TO_POINT", "SIGHTSEEING")
ALGORITHMS = ("TWO_POINT_LOOP", "GREEDY_ONE_WAY", "ASTAR_P2P", "SIGHTSEEING_SCHEDULER")
MAX_RECENT_DURATIONS = 100


class MetricsSummary(BaseModel):
    """Point-in-time view of the metrics counters."""

    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    success_rate: float = Field(0.0, description="Percent of requests that succeeded")

    total_routes_generated: int = 0
    total_pois_returned: int = 0
    avg_pois_per_route: float = 0.0

    avg_generation_time_ms: int = 0
    recent_avg_generation_time_ms: float = 0.0
    p95_generation_time_ms: int = 0
    p99_generation_time_ms: int = 0

    route_type_breakdown: dict[str, int] = Field(default_factory=dict)
    popular_categories: dict[str, int] = Field(default_factory=dict)
    algorithm_usage: dict[str, int] = Field(default_factory=dict)
    algorithm_avg_time_ms: dict[str, int] = Field(default_factory=dict)
    error_breakdown: dict[str, int] = Field(default_factory=dict)

    timestamp: datetime


def percentile(values: list[int], pct: int) -> int:
    """Nearest-rank percentile of ``values`` (must be non-empty)."""
    ordered = sorted(values)
    index = math.ceil(pct / 100.0 * len(ordered)) - 1
    return ordered[max(0, min(index, len(ordered) - 1))]


class MetricsService:
    """Thread-safe counters for route planning requests."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._reset_unlocked()

    def _reset_unlocked(self) -> None:
        self._total = 0
        self._successful = 0
        self._failed = 0
        self._routes = 0
        self._pois_returned = 0
        self._total_duration_ms = 0
        self._recent_durations: deque[int] = deque(maxlen=MAX_RECENT_DURATIONS)
        self._route_types: Counter[str] = Counter({t: 0 for t in ROUTE_TYPES})
        self._algorithm_usage: Counter[str] = Counter({a: 0 for a in ALGORITHMS})
        self._algorithm_time_ms: Counter[str] = Counter({a: 0 for a in ALGORITHMS})
        self._category_boosts: Counter[str] = Counter()
        self._errors: Counter[str] = Counter()

    def record_request(self) -> None:
        with self._lock:
            self._total += 1

    def record_success(self) -> None:
        with self._lock:
            self._successful += 1

    def record_failure(self, error_code: str) -> None:
        with self._lock:
            self._failed += 1
            self._errors[error_code] += 1

    def record_category_boost(self, category: str) -> None:
        with self._lock:
            self._category_boosts[category] += 1

    def record_route_generation(
        self, route_type: str, algorithm: str, duration_ms: int, poi_count: int
    ) -> None:
        with self._lock:
            self._routes += 1
            self._pois_returned += poi_count
            self._route_types[route_type] += 1
            self._total_duration_ms += duration_ms
            self._recent_durations.append(duration_ms)
            self._algorithm_usage[algorithm] += 1
            self._algorithm_time_ms[algorithm] += duration_ms

    def summary(self) -> MetricsSummary:
        with self._lock:
            recent = list(self._recent_durations)
            return MetricsSummary(
                total_requests=self._total,
                successful_requests=self._successful,
                failed_requests=self._failed,
                success_rate=(self._successful * 100.0 / self._total) if self._total else 0.0,
                total_routes_generated=self._routes,
                total_pois_returned=self._pois_returned,
                avg_pois_per_route=(self._pois_returned / self._routes) if self._routes else 0.0,
                avg_generation_time_ms=(self._total_duration_ms // self._routes) if self._routes else 0,
                recent_avg_generation_time_ms=(sum(recent) / len(recent)) if recent else 0.0,
                p95_generation_time_ms=percentile(recent, 95) if recent else 0,
                p99_generation_time_ms=percentile(recent, 99) if recent else 0,
                route_type_breakdown=dict(self._route_types),
                popular_categories=dict(self._category_boosts),
                algorithm_usage=dict(self._algorithm_usage),
                algorithm_avg_time_ms={
                    algo: self._algorithm_time_ms[algo] // count
                    for algo, count in self._algorithm_usage.items()
                    if count > 0
                },
                error_breakdown=dict(self._errors),
                timestamp=datetime.now(timezone.utc),
            )

    def reset(self) -> None:
        with self._lock:
            self._reset_unlocked()
