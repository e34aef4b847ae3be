"""Best-first point-to-point route search.

Explores walks from START to END through a reduced POI pool, preferring
states that look closest to finishing, then states with more stops, then
higher score. Edge costs are straight-line estimates, so the final route's
walking time is recomputed once through the travel-cost cache.
"""

import heapq
import itertools
import logging
import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from scenic_routes.models import POI, Coordinates, PolylineShape, Route, UserPreferences
from scenic_routes.services.categories import primary_category
from scenic_routes.services.travel_cache import TravelCostCache
from scenic_routes.utils import flat_distance_meters, haversine_meters

logger = logging.getLogger(__name__)

MAX_POOL_SIZE = 20
MAX_EXPANSIONS = 100000
WALK_METERS_PER_MINUTE = 83.0
# Street routing detour over the straight line, for edge costs
EDGE_DETOUR_FACTOR = 1.5
# Detour applied to the remaining-distance estimate to END
ESTIMATE_DETOUR_FACTOR = 1.3
DWELL_MINUTES = 5
SCORE_TIE_EPSILON = 0.01


@dataclass(frozen=True)
class SearchNode:
    index: int
    lat: float
    lng: float
    weight: float
    poi: POI | None = None


@dataclass(frozen=True)
class SearchState:
    node: SearchNode
    total_time: int
    total_score: float
    path: tuple[int, ...]
    visited: frozenset[int]

    @property
    def poi_count(self) -> int:
        return len(self.visited)


def edge_minutes(a: SearchNode, b: SearchNode) -> int:
    meters = haversine_meters(a.lat, a.lng, b.lat, b.lng)
    return math.ceil(meters / WALK_METERS_PER_MINUTE * EDGE_DETOUR_FACTOR)


def remaining_estimate(node: SearchNode, end: SearchNode) -> int:
    meters = flat_distance_meters(node.lat, node.lng, end.lat, end.lng)
    return int(meters / WALK_METERS_PER_MINUTE * ESTIMATE_DETOUR_FACTOR)


def search_priority(state: SearchState, end: SearchNode) -> tuple[int, int, float]:
    """Min-heap key: estimated total time, then more stops, then higher score."""
    return (
        state.total_time + remaining_estimate(state.node, end),
        -state.poi_count,
        -state.total_score,
    )


def is_better_end_state(candidate: SearchState, best: SearchState) -> bool:
    """More stops wins; then a clearly higher score; then less time."""
    if candidate.poi_count != best.poi_count:
        return candidate.poi_count > best.poi_count
    if abs(candidate.total_score - best.total_score) > SCORE_TIE_EPSILON:
        return candidate.total_score > best.total_score
    return candidate.total_time < best.total_time


def reduce_pool(pois: Iterable[POI], guaranteed: Sequence[POI] = ()) -> list[POI]:
    """Guaranteed POIs plus the best-scoring others, at most :data:`MAX_POOL_SIZE`."""
    pool = list(dict.fromkeys(guaranteed))
    taken = set(pool)
    others = [p for p in dict.fromkeys(pois) if p not in taken]
    others.sort(key=lambda p: p.score, reverse=True)
    return pool + others[:max(0, MAX_POOL_SIZE - len(pool))]


class PointToPointPlanner:
    """Plans a walk that starts and ends at given coordinates."""

    def __init__(self, cache: TravelCostCache) -> None:
        self._cache = cache

    def plan(
        self,
        start: Coordinates,
        end: Coordinates,
        pois: Sequence[POI],
        minutes: int,
        preferences: UserPreferences,
        guaranteed: Sequence[POI] = (),
    ) -> Route:
        pool = reduce_pool(pois, guaranteed)

        nodes = [SearchNode(0, start.lat, start.lng, 0.0)]
        for i, poi in enumerate(pool, start=1):
            weight = poi.score * preferences.weight(primary_category(poi))
            nodes.append(SearchNode(i, poi.lat, poi.lng, weight, poi))
        end_node = SearchNode(len(nodes), end.lat, end.lng, 0.0)
        nodes.append(end_node)

        best = self._search(nodes, end_node, minutes)
        if best is None or not best.visited:
            logger.info(f"[P2P] No route with stops fits in {minutes} min ({len(pool)} candidates)")
            return Route.empty()

        route_pois = [nodes[i].poi for i in best.path]

        actual_time = self._walking_time(start, end, route_pois)
        warnings = []
        if math.isinf(actual_time):
            warnings.append("Walking time could not be confirmed for every leg; showing an estimate")
            actual_time = best.total_time
        elif actual_time > minutes:
            searched = len(route_pois)
            route_pois, actual_time = self._trim_to_budget(start, end, route_pois, minutes)
            if not route_pois:
                logger.info(f"[P2P] No stop fits in {minutes} min on actual walking times")
                route = Route.empty()
                route.add_warning(f"No stops fit within the {minutes} min limit on actual walking times")
                return route
            warnings.append(
                f"Dropped {searched - len(route_pois)} stop(s) to stay within the {minutes} min limit"
            )

        total_score = sum(p.score for p in route_pois)
        polyline = self._cache.polyline(start, route_pois, PolylineShape.POINT_TO_POINT, destination=end)

        logger.info(
            f"[P2P] {len(route_pois)} stops, score={total_score:.1f}, "
            f"search={best.total_time}min, actual={actual_time}min"
        )
        return Route(
            points=route_pois,
            total_score=total_score,
            total_time=int(actual_time),
            polyline=polyline,
            warnings=warnings,
        )

    def _search(self, nodes: list[SearchNode], end: SearchNode, minutes: int) -> SearchState | None:
        counter = itertools.count()
        start_state = SearchState(nodes[0], 0, 0.0, (), frozenset())
        open_set = [(search_priority(start_state, end), next(counter), start_state)]

        # First state to reach a (node, stop count) key wins; later ones are dropped
        seen: set[tuple[int, int]] = set()
        best: SearchState | None = None
        expansions = 0

        while open_set and expansions < MAX_EXPANSIONS:
            expansions += 1
            _, _, current = heapq.heappop(open_set)

            if current.node is end:
                if current.total_time <= minutes and (best is None or is_better_end_state(current, best)):
                    best = current
                continue

            key = (current.node.index, current.poi_count)
            if key in seen:
                continue
            seen.add(key)

            for neighbor in nodes[1:]:
                if neighbor is current.node:
                    continue
                is_end = neighbor is end
                if not is_end and neighbor.index in current.visited:
                    continue

                dwell = 0 if is_end else DWELL_MINUTES
                new_time = current.total_time + edge_minutes(current.node, neighbor) + dwell
                if new_time + remaining_estimate(neighbor, end) > minutes:
                    continue

                if is_end:
                    new_state = SearchState(
                        neighbor, new_time, current.total_score, current.path, current.visited
                    )
                else:
                    new_state = SearchState(
                        neighbor,
                        new_time,
                        current.total_score + neighbor.weight,
                        current.path + (neighbor.index,),
                        current.visited | {neighbor.index},
                    )

                if (neighbor.index, new_state.poi_count) not in seen:
                    heapq.heappush(
                        open_set, (search_priority(new_state, end), next(counter), new_state)
                    )

        logger.debug(f"[P2P] Search finished after {expansions} expansions")
        return best

    def _walking_time(self, start: Coordinates, end: Coordinates, pois: list[POI]) -> float:
        total = 0.0
        current: Coordinates | POI = start
        for poi in pois:
            total += self._cache.time_between(current, poi) + DWELL_MINUTES
            current = poi
        total += self._cache.time_between(current, end)
        return total if math.isinf(total) else int(total)

    def _trim_to_budget(
        self, start: Coordinates, end: Coordinates, pois: list[POI], minutes: int
    ) -> tuple[list[POI], float]:
        """Drop stops from the tail until the actual walking time fits."""
        while len(pois) > 1:
            pois = pois[:-1]
            actual_time = self._walking_time(start, end, pois)
            if actual_time <= minutes:
                return pois, actual_time
        return [], 0
