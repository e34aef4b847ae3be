"""Walking time and path geometry provider using OSRM (free, open-source routing).

The public OSRM foot profile returns unrealistic durations, so walking
minutes are derived from the routed distance at an average 5 km/h.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Sequence

import httpx

from scenic_routes.models import Coordinates, ExternalServiceUnavailableError, PolylineShape
from scenic_routes.utils import combine_polylines

logger = logging.getLogger(__name__)

WALKING_SPEED_KMH = 5.0


class TravelProvider(ABC):
    """Abstract source of walking times and encoded path geometry."""

    @abstractmethod
    def walk_minutes(self, origin: Coordinates, destination: Coordinates) -> float:
        """Walking minutes between two points; ``math.inf`` when unreachable."""
        pass

    @abstractmethod
    def polyline(
        self,
        origin: Coordinates,
        waypoints: Sequence[Coordinates],
        shape: PolylineShape,
        destination: Coordinates | None = None,
    ) -> str:
        """Encoded path through the waypoints; empty string when no path exists."""
        pass


def route_points(
    origin: Coordinates,
    waypoints: Sequence[Coordinates],
    shape: PolylineShape,
    destination: Coordinates | None = None,
) -> list[Coordinates]:
    """Full ordered point list a path request covers for the given shape."""
    points = [origin, *waypoints]
    if shape == PolylineShape.LOOP:
        points.append(origin)
    elif shape == PolylineShape.POINT_TO_POINT and destination is not None:
        points.append(destination)
    return points


class OSRMTravelProvider(TravelProvider):
    """OSRM-backed travel provider (foot profile)."""

    OSRM_URL = "https://router.project-osrm.org"
    PROFILE = "foot"
    MAX_WAYPOINTS_PER_REQUEST = 25

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 15.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = (base_url or self.OSRM_URL).rstrip("/")
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def _route(self, points: Sequence[Coordinates]) -> dict | None:
        """Fetch the first OSRM route through ``points``, or None if there is none."""
        coords = ";".join(f"{p.lng},{p.lat}" for p in points)
        url = f"{self._base_url}/route/v1/{self.PROFILE}/{coords}"

        try:
            response = self._client.get(url, params={
                "overview": "full",
                "geometries": "polyline",
                "steps": "false",
            })
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.warning(f"[ROUTE] OSRM request failed: {e}")
            raise ExternalServiceUnavailableError(f"OSRM request failed: {e}") from e

        if data.get("code") != "Ok" or not data.get("routes"):
            logger.info(f"[ROUTE] OSRM returned no route: {data.get('code')}")
            return None
        return data["routes"][0]

    def walk_minutes(self, origin: Coordinates, destination: Coordinates) -> float:
        route = self._route([origin, destination])
        if route is None:
            return math.inf
        distance = float(route.get("distance", 0))
        return int((distance / 1000) / WALKING_SPEED_KMH * 60)

    def polyline(
        self,
        origin: Coordinates,
        waypoints: Sequence[Coordinates],
        shape: PolylineShape,
        destination: Coordinates | None = None,
    ) -> str:
        points = route_points(origin, waypoints, shape, destination)
        if len(points) < 2:
            return ""

        logger.info(f"[ROUTE] OSRM path request: {len(points)} points, shape={shape.value}")

        if len(points) <= self.MAX_WAYPOINTS_PER_REQUEST:
            route = self._route(points)
            return route.get("geometry", "") if route else ""

        # Overlapping batches (overlap by 1 so the segments connect)
        polylines = []
        i = 0
        while i < len(points):
            end = min(i + self.MAX_WAYPOINTS_PER_REQUEST, len(points))
            batch = points[i:end]
            if len(batch) < 2:
                break

            route = self._route(batch)
            if route is None:
                logger.info(f"[ROUTE] Batch {i}-{end} has no route")
                return ""
            polylines.append(route.get("geometry", ""))

            i = end - 1 if end < len(points) else end

        return combine_polylines(polylines)
