"""API routes for Scenic Routes."""

from .routes import router

__all__ = ["router"]
