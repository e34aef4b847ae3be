"""Nearby POI discovery."""

from .service import GooglePlacesProvider, PlacesProvider, score_place

__all__ = ["GooglePlacesProvider", "PlacesProvider", "score_place"]
