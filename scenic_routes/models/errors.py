"""Error codes, error payloads and the domain exception hierarchy."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Machine-readable error codes returned to callers."""

    INVALID_COORDINATE = "INVALID_COORDINATE"
    MISSING_END_POINT = "MISSING_END_POINT"
    TIME_LIMIT_OUT_OF_RANGE = "TIME_LIMIT_OUT_OF_RANGE"
    INVALID_TIME_WINDOW = "INVALID_TIME_WINDOW"
    NO_SUITABLE_POIS = "NO_SUITABLE_POIS"
    NO_PATH_FOUND = "NO_PATH_FOUND"
    EXTERNAL_SERVICE_UNAVAILABLE = "EXTERNAL_SERVICE_UNAVAILABLE"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class RecoveryOption(BaseModel):
    """A suggested next step the client can offer the user."""

    label: str
    action: str
    params: Optional[dict[str, Any]] = None


class AppError(BaseModel):
    """Error payload sent to HTTP callers."""

    code: ErrorCode
    message: str = Field(..., description="Developer-facing description")
    user_message: str = Field(..., description="Message safe to show to end users")
    recovery_options: list[RecoveryOption] = Field(default_factory=list)


class RouteGenerationError(Exception):
    """Base class for every error the planners report to callers."""

    code: ErrorCode = ErrorCode.UNEXPECTED_ERROR
    user_message: str = "Unable to generate a route with the given parameters."

    def __init__(self, message: str, user_message: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if user_message is not None:
            self.user_message = user_message

    def to_app_error(self) -> AppError:
        return AppError(code=self.code, message=self.message, user_message=self.user_message)


class InvalidCoordinateError(RouteGenerationError):
    code = ErrorCode.INVALID_COORDINATE
    user_message = "The location is not a valid latitude/longitude."


class MissingEndPointError(RouteGenerationError):
    code = ErrorCode.MISSING_END_POINT
    user_message = "Point-to-point routes need an end location."


class TimeLimitOutOfRangeError(RouteGenerationError):
    code = ErrorCode.TIME_LIMIT_OUT_OF_RANGE
    user_message = "Pick a walk between 10 minutes and 8 hours."


class InvalidTimeWindowError(RouteGenerationError):
    code = ErrorCode.INVALID_TIME_WINDOW
    user_message = "Start and end times must be HH:MM with the end after the start."


class NoSuitablePOIsError(RouteGenerationError):
    code = ErrorCode.NO_SUITABLE_POIS
    user_message = "No places nearby match your preferences. Try relaxing them."


class NoPathFoundError(RouteGenerationError):
    code = ErrorCode.NO_PATH_FOUND
    user_message = "No route fits within the requested time."


class ExternalServiceUnavailableError(RouteGenerationError):
    code = ErrorCode.EXTERNAL_SERVICE_UNAVAILABLE
    user_message = "A map service is temporarily unavailable. Please try again shortly."


class UnexpectedRouteError(RouteGenerationError):
    code = ErrorCode.UNEXPECTED_ERROR
    user_message = "Something went wrong. Please try again later."
