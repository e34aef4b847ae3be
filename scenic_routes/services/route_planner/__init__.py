"""Route planning orchestrator."""

from .service import RoutePlanner, validate_coordinates, validate_time_limit

__all__ = ["RoutePlanner", "validate_coordinates", "validate_time_limit"]
