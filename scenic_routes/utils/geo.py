"""Distance helpers shared by the planners."""

import math

import numpy as np
from numpy.typing import NDArray

EARTH_RADIUS_M = 6371000
# Rough meters per degree, used where a cheap flat-earth estimate is enough
METERS_PER_DEGREE = 111000


def haversine_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in meters."""
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def flat_distance_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Euclidean distance in degree space scaled to meters."""
    return math.sqrt((lat2 - lat1) ** 2 + (lng2 - lng1) ** 2) * METERS_PER_DEGREE


def haversine_matrix(lats: NDArray[np.float64], lngs: NDArray[np.float64]) -> NDArray[np.float64]:
    """Pairwise great-circle distances (meters) for N points as an N x N matrix."""
    lat_rad = np.radians(lats)
    lng_rad = np.radians(lngs)
    d_lat = lat_rad[:, None] - lat_rad[None, :]
    d_lng = lng_rad[:, None] - lng_rad[None, :]

    a = (
        np.sin(d_lat / 2) ** 2
        + np.cos(lat_rad)[:, None] * np.cos(lat_rad)[None, :] * np.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_M * 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))


def haversine_from(
    lat: float, lng: float, lats: NDArray[np.float64], lngs: NDArray[np.float64]
) -> NDArray[np.float64]:
    """Great-circle distances (meters) from one point to each of N points."""
    lat_rad = math.radians(lat)
    lats_rad = np.radians(lats)
    d_lat = lats_rad - lat_rad
    d_lng = np.radians(lngs) - math.radians(lng)

    a = np.sin(d_lat / 2) ** 2 + math.cos(lat_rad) * np.cos(lats_rad) * np.sin(d_lng / 2) ** 2
    return EARTH_RADIUS_M * 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
