"""Request and route-generation metrics."""

from .service import ALGORITHMS, ROUTE_TYPES, MetricsService, MetricsSummary, percentile

__all__ = ["ALGORITHMS", "ROUTE_TYPES", "MetricsService", "MetricsSummary", "percentile"]
