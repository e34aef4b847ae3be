"""Walking time and path geometry providers."""

from .service import OSRMTravelProvider, TravelProvider, route_points

__all__ = ["OSRMTravelProvider", "TravelProvider", "route_points"]
