"""Importance and visit-duration heuristics."""

from .service import (
    MAX_ATTRACTIONS,
    MIN_IMPORTANCE,
    build_attraction,
    calculate_importance,
    is_major_attraction,
    select_top_attractions,
    visit_bounds,
    visit_minutes,
)

__all__ = [
    "MAX_ATTRACTIONS",
    "MIN_IMPORTANCE",
    "build_attraction",
    "calculate_importance",
    "is_major_attraction",
    "select_top_attractions",
    "visit_bounds",
    "visit_minutes",
]
