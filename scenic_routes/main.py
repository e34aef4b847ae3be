"""Scenic Routes FastAPI Application.

Main entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from scenic_routes.api import router
from scenic_routes.config import get_settings
from scenic_routes.models import ErrorCode, RouteGenerationError

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)

CLIENT_ERROR_CODES = frozenset({
    ErrorCode.INVALID_COORDINATE,
    ErrorCode.MISSING_END_POINT,
    ErrorCode.TIME_LIMIT_OUT_OF_RANGE,
    ErrorCode.INVALID_TIME_WINDOW,
    ErrorCode.NO_SUITABLE_POIS,
    ErrorCode.NO_PATH_FOUND,
    ErrorCode.VALIDATION_ERROR,
})


def status_for(code: ErrorCode) -> int:
    if code in CLIENT_ERROR_CODES:
        return 400
    if code == ErrorCode.EXTERNAL_SERVICE_UNAVAILABLE:
        return 503
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    yield


app = FastAPI(
    title="Scenic Routes API",
    description="Walking route and sightseeing day planner",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _validation_response(exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": {
                "code": ErrorCode.VALIDATION_ERROR.value,
                "message": str(exc),
                "user_message": "Invalid request format. Please check your input.",
            },
        },
    )


# Global exception handlers
@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request body validation errors."""
    return _validation_response(exc)


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    """Handle Pydantic validation errors."""
    return _validation_response(exc)


@app.exception_handler(RouteGenerationError)
async def route_generation_exception_handler(request: Request, exc: RouteGenerationError):
    """Handle planner errors with their machine-readable code."""
    return JSONResponse(
        status_code=status_for(exc.code),
        content={"success": False, "error": exc.to_app_error().model_dump(mode="json")},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors."""
    logger.exception("Unhandled error")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {
                "code": ErrorCode.UNEXPECTED_ERROR.value,
                "message": str(exc),
                "user_message": "Something went wrong. Please try again.",
            },
        },
    )


# Include API routes
app.include_router(router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
