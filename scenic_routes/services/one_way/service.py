"""Density-aware greedy planner for one-way walks.

Selection favours high-scoring POIs surrounded by other good POIs, plus a
head start for the first few picks close to the starting point. The picks are
then ordered nearest-neighbour from the start and trimmed to the longest
prefix that fits the time budget.
"""

import logging
from typing import Sequence

import numpy as np

from scenic_routes.models import POI, Coordinates, PolylineShape, Route
from scenic_routes.services.travel_cache import TravelCostCache
from scenic_routes.utils import haversine_from, haversine_matrix

logger = logging.getLogger(__name__)

MINUTES_PER_POI = 8
BASE_POI_COUNT = 3
MAX_POIS = 20
DENSITY_RADIUS_M = 300
DENSITY_FACTOR = 0.5
PROXIMITY_RADIUS_M = 1000
PROXIMITY_BONUS = 200
PROXIMITY_PICKS = 3
DWELL_MINUTES = 5


def selection_cap(minutes: int) -> int:
    return min(minutes // MINUTES_PER_POI + BASE_POI_COUNT, MAX_POIS)


class OneWayPlanner:
    """Plans an open-ended walk from a start point."""

    def __init__(self, cache: TravelCostCache) -> None:
        self._cache = cache

    def plan(self, start: Coordinates, pois: Sequence[POI], minutes: int) -> Route:
        pool = list(dict.fromkeys(pois))
        selected = self.select(start, pool, minutes)
        ordered = self.order_nearest_neighbor(start, selected)
        trimmed = self.trim_to_budget(start, ordered, minutes)

        walking = 0
        current: Coordinates | POI = start
        for poi in trimmed:
            walking += self._cache.time_between(current, poi)
            current = poi
        total_time = int(walking) + DWELL_MINUTES * len(trimmed)

        polyline = ""
        if trimmed:
            polyline = self._cache.polyline(start, trimmed, PolylineShape.WAYPOINTS)

        logger.info(
            f"[ROUTE] One-way: {len(selected)} selected, {len(trimmed)} kept, time={total_time}min"
        )
        return Route(
            points=trimmed,
            total_score=sum(p.score for p in trimmed),
            total_time=total_time,
            polyline=polyline,
        )

    def select(self, start: Coordinates, pois: list[POI], minutes: int) -> list[POI]:
        """Greedy pick by score + density bonus + proximity bonus."""
        n = len(pois)
        if n == 0:
            return []

        lats = np.array([p.lat for p in pois], dtype=np.float64)
        lngs = np.array([p.lng for p in pois], dtype=np.float64)
        scores = np.array([p.score for p in pois], dtype=np.float64)

        nearby = haversine_matrix(lats, lngs) < DENSITY_RADIUS_M
        np.fill_diagonal(nearby, False)
        near_start = haversine_from(start.lat, start.lng, lats, lngs) < PROXIMITY_RADIUS_M

        unused = np.ones(n, dtype=bool)
        selected: list[POI] = []

        for i in range(selection_cap(minutes)):
            if not unused.any():
                break

            density = DENSITY_FACTOR * (nearby & unused[None, :]).astype(np.float64) @ scores
            value = scores + density
            if i < PROXIMITY_PICKS:
                value = value + np.where(near_start, PROXIMITY_BONUS, 0.0)
            value = np.where(unused, value, -np.inf)

            # argmax returns the first maximum
            best = int(np.argmax(value))
            selected.append(pois[best])
            unused[best] = False

        return selected

    def order_nearest_neighbor(self, start: Coordinates, pois: list[POI]) -> list[POI]:
        """Visit order by repeatedly walking to the closest remaining POI."""
        if not pois:
            return []

        lats = np.array([p.lat for p in pois], dtype=np.float64)
        lngs = np.array([p.lng for p in pois], dtype=np.float64)
        remaining = np.ones(len(pois), dtype=bool)

        ordered = []
        current_lat, current_lng = start.lat, start.lng
        while remaining.any():
            distances = haversine_from(current_lat, current_lng, lats, lngs)
            distances = np.where(remaining, distances, np.inf)
            nearest = int(np.argmin(distances))

            ordered.append(pois[nearest])
            remaining[nearest] = False
            current_lat, current_lng = lats[nearest], lngs[nearest]

        return ordered

    def trim_to_budget(self, start: Coordinates, ordered: list[POI], minutes: int) -> list[POI]:
        """Longest prefix of ``ordered`` whose walking + dwell time fits ``minutes``."""
        kept = []
        used = 0
        current: Coordinates | POI = start
        for poi in ordered:
            needed = used + self._cache.time_between(current, poi) + DWELL_MINUTES
            if needed > minutes:
                break
            kept.append(poi)
            used = needed
            current = poi
        return kept
