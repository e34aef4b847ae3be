"""Two-phase greedy loop builder.

Grows an outward leg one POI at a time, picking the best quality-per-minute
stop within reach. After each outward step a second greedy search plans the
walk back to the origin, favouring stops that make progress toward home.
The last outward step whose full loop fits the budget wins; the first step
that doesn't fit is rolled back and growth stops.
"""

import logging
import math
from typing import Sequence

from scenic_routes.models import POI, Coordinates, PolylineShape, Route, UserPreferences
from scenic_routes.services.categories import boost_multiplier
from scenic_routes.services.travel_cache import TravelCostCache

logger = logging.getLogger(__name__)

MAX_OUTWARD_TRAVEL_MINUTES = 30
OUTWARD_DWELL_MINUTES = 5
RETURN_DWELL_MINUTES = 10
RETURN_SAFETY_BUFFER_MINUTES = 15
HOME_PROGRESS_FACTOR = 2


class LoopPlanner:
    """Plans a walk that starts and ends at the same point."""

    def __init__(self, cache: TravelCostCache) -> None:
        self._cache = cache

    def plan(
        self,
        start: Coordinates,
        pois: Sequence[POI],
        minutes: int,
        preferences: UserPreferences,
    ) -> Route:
        pool = list(dict.fromkeys(pois))

        outward: list[POI] = []
        used: set[POI] = set()
        current: Coordinates | POI = start
        outward_time = 0
        best_loop: Route | None = None

        while True:
            candidate = self._best_outward(current, pool, used, preferences)
            if candidate is None:
                break

            travel = self._cache.time_between(current, candidate)
            outward.append(candidate)
            used.add(candidate)
            new_outward_time = outward_time + travel + OUTWARD_DWELL_MINUTES

            return_leg = self._return_leg(
                candidate, start, pool, used, minutes - new_outward_time, preferences
            )
            if return_leg is not None:
                return_pois, return_time = return_leg
                total_time = new_outward_time + return_time
            else:
                return_pois, total_time = [], math.inf

            if total_time > minutes:
                outward.pop()
                used.discard(candidate)
                logger.debug(f"[LOOP] Rolled back {candidate.name}; loop would take {total_time} min")
                break

            full_route = outward + return_pois
            best_loop = Route(
                points=full_route,
                total_score=sum(p.score for p in full_route),
                total_time=int(total_time),
                polyline=self._safe_polyline(start, full_route),
            )
            current = candidate
            outward_time = new_outward_time

        if best_loop is None:
            logger.info(f"[LOOP] No loop fits in {minutes} min ({len(pool)} candidates)")
            return Route.empty()

        logger.info(
            f"[LOOP] {len(best_loop.points)} stops ({len(outward)} outward), "
            f"score={best_loop.total_score:.1f}, time={best_loop.total_time}min"
        )
        return best_loop

    def _best_outward(
        self,
        current: Coordinates | POI,
        pool: list[POI],
        used: set[POI],
        preferences: UserPreferences,
    ) -> POI | None:
        best = None
        best_efficiency = -math.inf

        for poi in pool:
            if poi in used:
                continue
            travel = self._cache.time_between(current, poi)
            if travel > MAX_OUTWARD_TRAVEL_MINUTES:
                continue

            quality = poi.score * boost_multiplier(poi, preferences)
            efficiency = quality / max(1, travel)
            if efficiency > best_efficiency:
                best_efficiency = efficiency
                best = poi

        return best

    def _return_leg(
        self,
        origin: POI,
        home: Coordinates,
        pool: list[POI],
        used_outward: set[POI],
        time_limit: float,
        preferences: UserPreferences,
    ) -> tuple[list[POI], int] | None:
        """Greedy walk back home from ``origin``.

        Returns the return stops and the leg's walking + dwell minutes, or
        None when even the direct walk home doesn't fit ``time_limit``.
        """
        direct_home = self._cache.time_between(origin, home)
        if direct_home > time_limit:
            return None

        stops: list[POI] = []
        used = set(used_outward)
        current: POI = origin
        remaining = time_limit

        while remaining > direct_home + RETURN_SAFETY_BUFFER_MINUTES:
            current_to_home = self._cache.time_between(current, home)
            best = None
            best_value = -math.inf
            best_travel = 0

            for poi in pool:
                if poi in used:
                    continue
                travel = self._cache.time_between(current, poi)
                if math.isinf(travel):
                    continue
                to_home = self._cache.time_between(poi, home)
                if travel + RETURN_DWELL_MINUTES + to_home > remaining:
                    continue

                quality = poi.score * boost_multiplier(poi, preferences)
                bonus = 0.0
                if to_home < current_to_home:
                    bonus = (current_to_home - to_home) * HOME_PROGRESS_FACTOR

                value = (quality + bonus) / max(1, travel)
                if value > best_value:
                    best_value = value
                    best = poi
                    best_travel = travel

            if best is None:
                break

            stops.append(best)
            used.add(best)
            remaining -= best_travel + RETURN_DWELL_MINUTES
            current = best

        return stops, self._leg_time(origin, stops, home)

    def _leg_time(self, origin: POI, stops: list[POI], home: Coordinates) -> int:
        time = 0
        current: Coordinates | POI = origin
        for poi in stops:
            time += self._cache.time_between(current, poi) + RETURN_DWELL_MINUTES
            current = poi
        time += self._cache.time_between(current, home)
        return time

    def _safe_polyline(self, start: Coordinates, points: list[POI]) -> str:
        if not points:
            return ""
        try:
            return self._cache.polyline(start, points, PolylineShape.LOOP)
        except Exception as e:
            logger.warning(f"[LOOP] Polyline generation failed, returning loop without geometry: {e}")
            return ""
