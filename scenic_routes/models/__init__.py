"""Data models for Scenic Routes."""

from .core import (
    POI,
    Break,
    BreakKind,
    Coordinates,
    POICategory,
    PolylineShape,
    Route,
    RouteShape,
    ScheduledStop,
    SightseeingAttraction,
    SightseeingSchedule,
    UserPreferences,
)
from .errors import (
    AppError,
    ErrorCode,
    ExternalServiceUnavailableError,
    InvalidCoordinateError,
    InvalidTimeWindowError,
    MissingEndPointError,
    NoPathFoundError,
    NoSuitablePOIsError,
    RecoveryOption,
    RouteGenerationError,
    TimeLimitOutOfRangeError,
    UnexpectedRouteError,
)

__all__ = [
    # Core
    "POI",
    "Break",
    "BreakKind",
    "Coordinates",
    "POICategory",
    "PolylineShape",
    "Route",
    "RouteShape",
    "ScheduledStop",
    "SightseeingAttraction",
    "SightseeingSchedule",
    "UserPreferences",
    # Errors
    "AppError",
    "ErrorCode",
    "ExternalServiceUnavailableError",
    "InvalidCoordinateError",
    "InvalidTimeWindowError",
    "MissingEndPointError",
    "NoPathFoundError",
    "NoSuitablePOIsError",
    "RecoveryOption",
    "RouteGenerationError",
    "TimeLimitOutOfRangeError",
    "UnexpectedRouteError",
]
