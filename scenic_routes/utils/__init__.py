"""Shared helpers: geodesic distances and encoded polylines."""

from .geo import (
    flat_distance_meters,
    haversine_from,
    haversine_matrix,
    haversine_meters,
)
from .polyline import combine_polylines, decode_polyline, encode_polyline

__all__ = [
    "flat_distance_meters",
    "haversine_from",
    "haversine_matrix",
    "haversine_meters",
    "combine_polylines",
    "decode_polyline",
    "encode_polyline",
]
